"""
Tests for the Suggestion Agent.

The Gemini model is replaced by langchain-core fakes: FakeListChatModel for
canned replies and a RunnableLambda that raises for failures.
"""

from langchain_core.language_models import FakeListChatModel
from langchain_core.runnables import RunnableLambda

from coach.agents.suggester import SuggestionAgent
from coach.agents.suggester.agent import strip_code_fences
from coach.progression.schemas import ContentCategory, ContentRequest


def make_request(profile, category=ContentCategory.IDEAS, step_id="central_concept") -> ContentRequest:
    return ContentRequest(step_id=step_id, category=category, audience_profile=profile)


def _explode(_):
    raise RuntimeError("quota exceeded")


class TestGenerate:
    def test_returns_model_text(self, low_profile):
        agent = SuggestionAgent(llm=FakeListChatModel(responses=["Seasons change\nAnimals need homes"]))

        text = agent.generate(make_request(low_profile))

        assert text == "Seasons change\nAnimals need homes"

    def test_strips_code_fences(self, low_profile):
        agent = SuggestionAgent(llm=FakeListChatModel(responses=["```\nSeasons change\n```"]))
        assert agent.generate(make_request(low_profile)) == "Seasons change"

    def test_failure_returns_none(self, low_profile):
        agent = SuggestionAgent(llm=RunnableLambda(_explode))
        assert agent.generate(make_request(low_profile)) is None

    def test_blank_reply_returns_none(self, low_profile):
        agent = SuggestionAgent(llm=FakeListChatModel(responses=["   "]))
        assert agent.generate(make_request(low_profile)) is None


class TestPromptInputs:
    def test_audience_envelope(self, low_profile, high_profile):
        agent = SuggestionAgent(llm=FakeListChatModel(responses=["ok"]))

        low = agent.build_inputs(make_request(low_profile))
        high = agent.build_inputs(make_request(high_profile))

        assert low["theory_policy"] == "avoid"
        assert low["min_word_count"] == 10
        assert high["theory_policy"] == "welcome"
        assert high["abstraction_tier"] == "HIGH"

    def test_step_and_category(self, low_profile):
        agent = SuggestionAgent(llm=FakeListChatModel(responses=["ok"]))

        inputs = agent.build_inputs(
            make_request(low_profile, ContentCategory.COACHING, "driving_question"),
            current_answer="Why rain?",
            hints=["make_open_ended"],
        )

        assert inputs["step_label"] == "Essential Question"
        assert inputs["stage_label"] == "Framing"
        assert inputs["current_answer"] == "Why rain?"
        assert "yes or no" in inputs["hints"]
        assert "not there yet" in inputs["category_instructions"]

    def test_missing_answer_placeholder(self, low_profile):
        agent = SuggestionAgent(llm=FakeListChatModel(responses=["ok"]))
        inputs = agent.build_inputs(make_request(low_profile))

        assert inputs["current_answer"] == "Not yet written"
        assert inputs["hints"] == "- Nothing specific"


class TestStripCodeFences:
    def test_plain_text_untouched(self):
        assert strip_code_fences("  hello  ") == "hello"

    def test_language_tagged_fence(self):
        assert strip_code_fences("```text\nhello\n```") == "hello"
