"""
Database Persistence Layer

Async helpers that save and load progression snapshots. Storage never blocks
the conversation: when DATABASE_URL is unset, or the database fails, the
helpers print the problem and return None.
"""

from datetime import datetime
from typing import Optional

from coach.database import async_session_maker
from coach.models import AuthoringSession, ProgressionSnapshotRecord
from coach.progression.schemas import SessionSnapshot
from coach.progression import audience


async def save_snapshot(snapshot: SessionSnapshot) -> Optional[str]:
    """Upsert the session row and its snapshot. Returns the session ID."""
    if not snapshot.session_id or not async_session_maker:
        return None
    try:
        async with async_session_maker() as db:
            now = datetime.utcnow()
            document_complete = snapshot.current_stage_id is None

            session = await db.get(AuthoringSession, snapshot.session_id)
            if session is None:
                session = AuthoringSession(id=snapshot.session_id, created_at=now)
            session.audience_descriptor = snapshot.audience_descriptor
            session.audience_tier = audience.resolve(snapshot.audience_descriptor).abstraction_tier.value
            session.is_complete = document_complete
            session.updated_at = now
            db.add(session)

            record = await db.get(ProgressionSnapshotRecord, snapshot.session_id)
            if record is None:
                record = ProgressionSnapshotRecord(session_id=snapshot.session_id, snapshot_json="{}")
            record.snapshot_json = snapshot.model_dump_json()
            record.current_stage_id = snapshot.current_stage_id
            record.current_step_id = snapshot.current_step_id
            record.updated_at = now
            db.add(record)

            await db.commit()
            return snapshot.session_id
    except Exception as e:
        print(f"Failed to save snapshot: {e}")
        return None


async def load_snapshot(session_id: str) -> Optional[SessionSnapshot]:
    """Load the latest snapshot for a session, or None if there is none."""
    if not session_id or not async_session_maker:
        return None
    try:
        async with async_session_maker() as db:
            record = await db.get(ProgressionSnapshotRecord, session_id)
            if record is None:
                return None
            return SessionSnapshot.model_validate_json(record.snapshot_json)
    except Exception as e:
        print(f"Failed to load snapshot: {e}")
        return None
