"""
Tests for the sessions HTTP API.

The app runs through FastAPI's TestClient with its lifespan; the Suggestion
Agent is overridden with a fake chat model and the database is disabled.
"""

from langchain_core.runnables import RunnableLambda

from coach.agents.suggester import SuggestionAgent
from coach.api.sessions import get_suggester

from tests.conftest import STRONG_LOW_TEXT, THEORY_TEXT


def _offline(_):
    raise RuntimeError("offline")


def create_session(client, descriptor="2nd graders") -> str:
    response = client.post("/api/sessions", json={"audience_descriptor": descriptor})
    assert response.status_code == 200
    return response.json()["session_id"]


def interact(client, session_id, step_id, body):
    return client.post(f"/api/sessions/{session_id}/steps/{step_id}/interactions", json=body)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
        assert response.json()["database"] is False


class TestSessions:
    def test_create_session(self, client):
        response = client.post("/api/sessions", json={"audience_descriptor": "2nd graders"})
        data = response.json()

        assert response.status_code == 200
        assert data["session_id"].startswith("SES_")
        assert data["audience_profile"]["abstraction_tier"] == "LOW"
        assert data["progress"]["current_step_id"] == "central_concept"

    def test_get_progress(self, client):
        session_id = create_session(client)

        response = client.get(f"/api/sessions/{session_id}")

        assert response.status_code == 200
        stages = response.json()["progress"]["stages"]
        assert [stage["stage_id"] for stage in stages] == ["framing", "journey", "deliverables"]

    def test_unknown_session(self, client):
        assert client.get("/api/sessions/SES_missing").status_code == 404
        assert interact(client, "SES_missing", "central_concept", {"kind": "confirm"}).status_code == 404

    def test_change_audience(self, client):
        session_id = create_session(client)

        response = client.put(f"/api/sessions/{session_id}/audience", json={"audience_descriptor": "PhD students"})

        assert response.status_code == 200
        assert response.json()["audience_profile"]["abstraction_tier"] == "HIGH"


class TestInteractions:
    def test_short_text_is_coached(self, client):
        session_id = create_session(client)

        response = interact(client, session_id, "central_concept", {"kind": "text", "value": "Help"})
        data = response.json()

        assert response.status_code == 200
        assert data["result"]["behavior"] == "refine"
        assert data["result"]["step_state"] == "COACHING"
        assert "needs_more_detail" in data["hint_keys"]
        assert data["message_text"]

    def test_review_and_confirm(self, client):
        session_id = create_session(client, "undergraduate seminar")

        reviewed = interact(client, session_id, "central_concept", {"kind": "text", "value": THEORY_TEXT})
        confirmed = interact(client, session_id, "central_concept", {"kind": "confirm"})

        assert reviewed.json()["result"]["behavior"] == "review"
        assert confirmed.json()["result"]["behavior"] == "accept"
        assert confirmed.json()["result"]["current_step_id"] == "driving_question"

    def test_force_advance_is_serialized(self, client):
        session_id = create_session(client)

        for _ in range(3):
            interact(client, session_id, "central_concept", {"kind": "text", "value": "Help"})
        response = interact(client, session_id, "central_concept", {"kind": "text", "value": "Help"})

        assert response.json()["result"]["behavior"] == "forceAdvance"
        assert response.json()["message_text"] == "Maximum attempts reached. Moving forward with current progress."

    def test_unknown_step(self, client):
        session_id = create_session(client)
        response = interact(client, session_id, "nope", {"kind": "confirm"})
        assert response.status_code == 404

    def test_locked_step(self, client):
        session_id = create_session(client)
        response = interact(client, session_id, "phases", {"kind": "text", "value": STRONG_LOW_TEXT})
        assert response.status_code == 409

    def test_malformed_interactions(self, client):
        session_id = create_session(client)

        assert interact(client, session_id, "central_concept", {"kind": "dance"}).status_code == 422
        assert interact(client, session_id, "central_concept", {"kind": "selectSuggestion", "value": ""}).status_code == 422
        assert interact(client, session_id, "central_concept", {"kind": "requestHelp", "category": "magic"}).status_code == 422

    def test_reopen(self, client):
        session_id = create_session(client)
        interact(client, session_id, "central_concept", {"kind": "selectSuggestion", "value": "Animals need homes"})
        interact(client, session_id, "central_concept", {"kind": "confirm"})

        response = client.post(f"/api/sessions/{session_id}/steps/central_concept/reopen")

        assert response.status_code == 200
        steps = response.json()["progress"]["stages"][0]["steps"]
        assert steps[0]["state"] == "AWAITING_INPUT"
        assert steps[0]["answer"] == "Animals need homes"


class TestSuggestions:
    def test_suggestion_is_ingested(self, client):
        session_id = create_session(client)

        response = client.post(
            f"/api/sessions/{session_id}/steps/central_concept/suggestions", json={"category": "ideas"}
        )
        data = response.json()

        assert response.status_code == 200
        assert data["text"] == "Idea one\nIdea two"
        assert data["message"]["key"] == "suggestion.ready"

    def test_generator_failure_is_not_an_error(self, client):
        from coach.main import app

        app.dependency_overrides[get_suggester] = lambda: SuggestionAgent(
            llm=RunnableLambda(_offline)
        )
        session_id = create_session(client)

        response = client.post(
            f"/api/sessions/{session_id}/steps/central_concept/suggestions", json={"category": "examples"}
        )

        assert response.status_code == 200
        assert response.json()["text"] is None
        assert response.json()["message"]["key"] == "suggestion.unavailable"

    def test_unknown_category(self, client):
        session_id = create_session(client)
        response = client.post(
            f"/api/sessions/{session_id}/steps/central_concept/suggestions", json={"category": "poems"}
        )
        assert response.status_code == 422
