"""
SQLModel Database Models

One row per authoring session, plus the latest progression snapshot for it.
"""

from datetime import datetime
from typing import Optional
from sqlmodel import SQLModel, Field

from coach.utils.id_generator import generate_session_id


class AuthoringSession(SQLModel, table=True):
    """A teacher's authoring conversation for one curriculum document."""
    __tablename__ = "authoring_sessions"

    id: str = Field(default_factory=generate_session_id, primary_key=True)
    audience_descriptor: str = Field(default="", max_length=255)
    audience_tier: str = Field(default="LOW", max_length=20)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
    is_complete: bool = Field(default=False)


class ProgressionSnapshotRecord(SQLModel, table=True):
    """
    Latest SessionSnapshot for a session, stored as JSON.

    The current stage/step columns are denormalized for listing; the engine
    always re-derives them from the steps on load.
    """
    __tablename__ = "progression_snapshots"

    session_id: str = Field(foreign_key="authoring_sessions.id", primary_key=True)
    snapshot_json: str
    current_stage_id: Optional[str] = Field(default=None, max_length=50)
    current_step_id: Optional[str] = Field(default=None, max_length=50)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
