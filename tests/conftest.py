"""
Shared fixtures for the progression engine tests.

The environment is pinned before anything from coach is imported so a local
.env cannot switch on the database or change the ceilings under the tests.
"""

import os

os.environ["DATABASE_URL"] = ""
os.environ["COACHING_CEILING"] = "3"
os.environ["REFINEMENT_CEILING"] = "2"
os.environ["HELP_CEILING"] = "2"
os.environ["TOTAL_CEILING"] = "8"

import pytest
from fastapi.testclient import TestClient
from langchain_core.language_models import FakeListChatModel

from coach.agents.suggester import SuggestionAgent
from coach.progression.audience import resolve
from coach.progression.engine import ProgressionEngine
from coach.progression.schemas import CeilingConfig


THEORY_TEXT = (
    "A theoretical framework for understanding how communities and ecosystems change over time"
)
STRONG_LOW_TEXT = (
    "Students explore how animals and plants depend on each other in their local habitat"
)


@pytest.fixture
def low_profile():
    return resolve("2nd graders")


@pytest.fixture
def medium_profile():
    return resolve("7th grade")


@pytest.fixture
def medium_high_profile():
    return resolve("ages 15-16")


@pytest.fixture
def high_profile():
    return resolve("undergraduate seminar")


@pytest.fixture
def make_engine():
    """Build an engine for an audience, optionally with custom ceilings."""
    def _make(descriptor: str = "2nd graders", **ceilings) -> ProgressionEngine:
        return ProgressionEngine(audience_descriptor=descriptor, ceilings=CeilingConfig(**ceilings))
    return _make


@pytest.fixture
def low_engine(make_engine):
    return make_engine("2nd graders")


@pytest.fixture
def high_engine(make_engine):
    return make_engine("university juniors")


@pytest.fixture
def fake_suggester():
    return SuggestionAgent(llm=FakeListChatModel(responses=["Idea one\nIdea two"]))


@pytest.fixture
def client(fake_suggester):
    from coach.main import app
    from coach.api.sessions import get_suggester

    app.dependency_overrides[get_suggester] = lambda: fake_suggester
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def complete_with_suggestion(engine: ProgressionEngine, step_id: str, text: str = "A chosen suggestion"):
    """Select a suggestion for a step and confirm it."""
    engine.route_interaction(step_id, {"kind": "selectSuggestion", "value": text})
    return engine.route_interaction(step_id, {"kind": "confirm"})
