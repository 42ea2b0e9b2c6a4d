from sqlalchemy import JSON
from sqlalchemy import Column
from sqlalchemy import DateTime
from sqlalchemy import Integer
from sqlalchemy import String
from sqlalchemy import UniqueConstraint
from sqlalchemy.sql import func

from bloxcore.constants import PRESETS_TABLE
from bloxcore.database import Base


class LayoutPresetRecord(Base):
    """Remote replica of one named layout preset.

    Rows with ``user_id`` NULL are shared *system* presets visible to every
    user.  SQL treats NULLs as distinct inside a UNIQUE constraint, so the
    constraint only protects per-user rows; the store upserts by explicit
    lookup instead of relying on ``ON CONFLICT``.
    """

    __tablename__ = PRESETS_TABLE

    __table_args__ = (UniqueConstraint("user_id", "name", name="uix_user_preset_name"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=True, index=True)
    name = Column(String, nullable=False)
    data = Column(JSON, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
