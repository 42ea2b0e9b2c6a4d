import os
from pathlib import Path
from typing import Any
from typing import Dict

import dotenv
import pytest

# Must be set before bloxcore.main is imported anywhere: it skips the remote
# store on startup.
os.environ.setdefault("TESTING", "1")
dotenv.load_dotenv()

from bloxcore.bootstrap import bootstrap  # noqa: E402
from bloxcore.config import Settings  # noqa: E402
from bloxcore.database import initialize_database  # noqa: E402
from bloxcore.database import make_engine  # noqa: E402
from bloxcore.persistence.storage import MemoryStorage  # noqa: E402
from bloxcore.runtime.context import CoreContext  # noqa: E402

from tests.helpers.doubles import RecordingLogger  # noqa: E402
from tests.helpers.doubles import SequentialIds  # noqa: E402


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        testing=True,
        environment="test",
        validate_state=True,
        storage_dir=tmp_path / "storage",
        database_url="sqlite:///:memory:",
        log_level="DEBUG",
        max_log_entries=200,
    )


@pytest.fixture
def recorder() -> RecordingLogger:
    return RecordingLogger()


@pytest.fixture
def context(settings, recorder) -> CoreContext:
    """A fresh runtime with built-ins only; nothing shared between tests."""
    return CoreContext(settings=settings, framework_logger=recorder, id_factory=SequentialIds())


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def counter_view() -> Dict[str, Any]:
    return {"id": "counter", "title": "Counter", "icon": "plus", "defaultContext": {"count": 0}}


@pytest.fixture
def workspace(settings, recorder, storage, counter_view):
    return bootstrap(
        [counter_view],
        settings=settings,
        logger=recorder,
        storage=storage,
        id_factory=SequentialIds(),
    )


@pytest.fixture
def sqlite_engine():
    """Fresh in-memory database per test (StaticPool shares it across threads)."""
    engine = make_engine("sqlite:///:memory:")
    initialize_database(engine)
    try:
        yield engine
    finally:
        engine.dispose()
