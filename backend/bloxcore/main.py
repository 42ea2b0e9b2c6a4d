"""FastAPI entry point: `uvicorn bloxcore.main:app`."""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from bloxcore.bootstrap import bootstrap
from bloxcore.config import get_settings
from bloxcore.constants import API_PREFIX
from bloxcore.database import initialize_database
from bloxcore.database import make_engine
from bloxcore.persistence.remote import SQLAlchemyRemoteStore
from bloxcore.routers.actions import router as actions_router

_settings = get_settings()

# --------------------------------------------------------------------------
# LOGGING CONFIGURATION:
# --------------------------------------------------------------------------
#
# - Default log level: INFO
# - Can be set at runtime with BLOX_LOG_LEVEL (e.g. WARNING for CI)
#
_log_level_name = _settings.log_level.upper()
_log_level = getattr(logging, _log_level_name, logging.INFO)
logging.basicConfig(level=_log_level, format="%(levelname)s - %(message)s", handlers=[logging.StreamHandler()])

# Suppress per-message WebSocket chatter unless explicitly debugging.
logging.getLogger("bloxcore.routers.actions").setLevel(max(_log_level, logging.WARNING))

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# FastAPI application instance
# ---------------------------------------------------------------------------

app = FastAPI(redirect_slashes=True)
app.state.workspace = None

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(actions_router, prefix=API_PREFIX)


@app.on_event("startup")
async def startup_event():
    """Create the workspace unless one was installed beforehand (tests do)."""
    if app.state.workspace is not None:
        return

    settings = get_settings()
    workspace = bootstrap([], settings=settings)
    app.state.workspace = workspace
    await workspace.settled()
    logger.info(f"Workspace ready (storage: {settings.storage_dir})")

    if settings.testing:
        return

    try:
        engine = make_engine(settings.database_url)
        initialize_database(engine)
        await workspace.connect_remote(SQLAlchemyRemoteStore(), handle=engine)
        logger.info("Remote preset store connected")
    except Exception as e:
        # Presets keep working locally without the remote replica.
        logger.error(f"Error connecting remote preset store: {e}")


@app.on_event("shutdown")
async def shutdown_event():
    workspace = app.state.workspace
    if workspace is None:
        return
    try:
        await workspace.close()
        logger.info("Workspace closed")
    except Exception as e:
        logger.error(f"Error closing workspace: {e}")


@app.get("/")
async def read_root():
    """Return a simple message to indicate the API is working."""
    return {"message": "bloxcore API is running"}
