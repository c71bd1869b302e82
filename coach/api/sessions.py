"""
Sessions REST API

HTTP surface over the progression engine:
- create a session from an audience descriptor
- route one interaction for one step
- reopen a completed step
- fulfil a content request through the Suggestion Agent
- change the audience

Engines live in the SessionRegistry on app.state. Every mutation also saves a
snapshot (a no-op without DATABASE_URL), and unknown sessions are restored
from the latest snapshot when one exists.
"""

import asyncio
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field, RootModel

from coach.agents.suggester import SuggestionAgent
from coach.errors import StepLockedError, UnknownSessionError, UnknownStepError
from coach.persistence import load_snapshot, save_snapshot
from coach.progression.engine import ProgressionEngine
from coach.progression.registry import SessionRegistry
from coach.progression.schemas import (
    AudienceProfile,
    ContentCategory,
    Interaction,
    MessageTemplate,
    RoutingResult,
)
from coach.progression.templates import render


router = APIRouter(prefix="/api/sessions", tags=["sessions"])


# --- Pydantic Schemas ---

class SessionCreate(BaseModel):
    audience_descriptor: str = Field("", description="Free-text audience, e.g. '7th graders' or 'undergraduates'")


class AudienceUpdate(BaseModel):
    audience_descriptor: str


class InteractionBody(RootModel[Interaction]):
    pass


class SuggestionBody(BaseModel):
    category: ContentCategory


class SessionResponse(BaseModel):
    session_id: str
    audience_descriptor: str
    audience_profile: AudienceProfile
    progress: Dict[str, Any]


class InteractionResponse(BaseModel):
    result: RoutingResult
    message_text: str
    hint_keys: List[str] = Field(default_factory=list)


class SuggestionResponse(BaseModel):
    step_id: str
    category: ContentCategory
    text: Optional[str]
    message: MessageTemplate
    message_text: str


# --- Dependencies ---

def get_registry(request: Request) -> SessionRegistry:
    return request.app.state.registry


def get_suggester(request: Request) -> SuggestionAgent:
    return request.app.state.suggester


async def get_engine(session_id: str, registry: SessionRegistry = Depends(get_registry)) -> ProgressionEngine:
    """Look the session up in memory, falling back to its stored snapshot."""
    engine = registry.find(session_id)
    if engine is not None:
        return engine

    snapshot = await load_snapshot(session_id)
    if snapshot is not None:
        print(f"🔄 Restored session {session_id} from snapshot")
        return registry.restore(snapshot)

    raise HTTPException(status_code=404, detail=str(UnknownSessionError(session_id)))


def _session_response(engine: ProgressionEngine) -> SessionResponse:
    return SessionResponse(
        session_id=engine.session_id,
        audience_descriptor=engine.audience_descriptor,
        audience_profile=engine.profile,
        progress=engine.progress(),
    )


# --- Endpoints ---

@router.post("", response_model=SessionResponse)
async def create_session(body: SessionCreate, registry: SessionRegistry = Depends(get_registry)):
    """Create a new authoring session."""
    engine = registry.create(body.audience_descriptor)
    await save_snapshot(engine.snapshot())
    return _session_response(engine)


@router.get("/{session_id}", response_model=SessionResponse)
async def get_session_progress(engine: ProgressionEngine = Depends(get_engine)):
    """Stage-by-stage progress with answers."""
    return _session_response(engine)


@router.post("/{session_id}/steps/{step_id}/interactions", response_model=InteractionResponse)
async def route_interaction(
    step_id: str,
    body: InteractionBody,
    engine: ProgressionEngine = Depends(get_engine),
):
    """Route one interaction (text, selectSuggestion, requestHelp, confirm)."""
    try:
        result = engine.route_interaction(step_id, body.root)
    except UnknownStepError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StepLockedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    await save_snapshot(engine.snapshot())
    return InteractionResponse(
        result=result,
        message_text=render(result.message),
        hint_keys=result.assessment.hints if result.assessment else [],
    )


@router.post("/{session_id}/steps/{step_id}/reopen", response_model=SessionResponse)
async def reopen_step(step_id: str, engine: ProgressionEngine = Depends(get_engine)):
    """Explicitly reopen a completed step for editing."""
    try:
        engine.reopen_step(step_id)
    except UnknownStepError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except StepLockedError as e:
        raise HTTPException(status_code=409, detail=str(e))

    await save_snapshot(engine.snapshot())
    return _session_response(engine)


@router.post("/{session_id}/steps/{step_id}/suggestions", response_model=SuggestionResponse)
async def request_suggestion(
    step_id: str,
    body: SuggestionBody,
    engine: ProgressionEngine = Depends(get_engine),
    suggester: SuggestionAgent = Depends(get_suggester),
):
    """
    Fulfil a content request for a step.

    Generation runs in a worker thread; a failed generation still returns 200
    with text=None so the author can keep typing.
    """
    try:
        content_request = engine.content_request(step_id, body.category)
    except UnknownStepError as e:
        raise HTTPException(status_code=404, detail=str(e))

    step = engine.step(step_id)
    hints = step.last_assessment.hints if step.last_assessment else []
    text = await asyncio.to_thread(suggester.generate, content_request, step.current_answer, hints)

    message = engine.ingest_suggestion(step_id, text)
    await save_snapshot(engine.snapshot())
    return SuggestionResponse(
        step_id=step_id,
        category=body.category,
        text=text,
        message=message,
        message_text=render(message),
    )


@router.put("/{session_id}/audience", response_model=SessionResponse)
async def change_audience(body: AudienceUpdate, engine: ProgressionEngine = Depends(get_engine)):
    """Re-resolve the audience profile for this session."""
    engine.change_audience(body.audience_descriptor)
    await save_snapshot(engine.snapshot())
    return _session_response(engine)
