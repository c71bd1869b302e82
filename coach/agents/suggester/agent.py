"""
Suggestion Agent - the text-generation collaborator.

The progression engine only says WHAT kind of content it wants (a
ContentRequest). This agent turns that request into text with Gemini and hands
back an opaque string, or None when generation fails.
"""

import re
from typing import Iterable, Optional

from langchain_google_genai import ChatGoogleGenerativeAI
from langchain_core.language_models import BaseChatModel
from langchain_core.prompts import ChatPromptTemplate
from langchain_core.output_parsers import StrOutputParser

from coach.settings import settings
from coach.progression.catalog import DEFAULT_CATALOG, CurriculumCatalog
from coach.progression.schemas import ContentRequest
from coach.progression.templates import hint_texts

from coach.agents.suggester.prompts import (
    CATEGORY_INSTRUCTIONS,
    SUGGESTION_SYSTEM_PROMPT,
    SUGGESTION_USER_PROMPT,
)


def strip_code_fences(content: str) -> str:
    """LLMs sometimes wrap plain text in ``` fences; drop them."""
    if not content:
        return content
    match = re.match(r"^```(?:\w+)?\s*\n(.*?)\n```\s*$", content.strip(), re.DOTALL)
    if match:
        return match.group(1).strip()
    return content.strip()


class SuggestionAgent:
    """
    Generates ideas, examples, guidance, coaching and refinements for one step.

    Failure is never raised to the caller: any error is printed and reported
    as "no suggestion" (None), so the author can keep typing.
    """

    def __init__(
        self,
        model: str = settings.SUGGESTION_MODEL,
        temperature: float = 0.7,
        llm: Optional[BaseChatModel] = None,
        catalog: CurriculumCatalog = DEFAULT_CATALOG,
    ):
        """
        Initialize the Suggestion Agent.

        Args:
            model: Gemini model name
            temperature: Higher temperature for varied suggestions
            llm: Pre-built chat model (tests pass a fake one)
            catalog: Where step labels and context come from
        """
        self.model = model
        self.temperature = temperature
        self.catalog = catalog
        self._llm = llm

        self.prompt = ChatPromptTemplate.from_messages([
            ("system", SUGGESTION_SYSTEM_PROMPT),
            ("user", SUGGESTION_USER_PROMPT),
        ])

    @property
    def llm(self) -> BaseChatModel:
        # Built on first use so the app can start without a Gemini key
        if self._llm is None:
            self._llm = ChatGoogleGenerativeAI(
                model=self.model,
                temperature=self.temperature,
                google_api_key=settings.GEMINI_API_KEY,
            )
        return self._llm

    def build_inputs(
        self,
        request: ContentRequest,
        current_answer: Optional[str] = None,
        hints: Iterable[str] = (),
    ) -> dict:
        step = self.catalog.step(request.step_id)
        stage = self.catalog.stage_of(request.step_id)
        profile = request.audience_profile
        hint_lines = hint_texts(hints)

        return {
            "stage_label": stage.label,
            "step_label": step.label,
            "step_context": step.context,
            "abstraction_tier": profile.abstraction_tier.value,
            "theory_policy": "welcome" if profile.allows_theory else "avoid",
            "meta_policy": "welcome" if profile.allows_meta_reasoning else "avoid",
            "min_word_count": profile.min_word_count,
            "category_instructions": CATEGORY_INSTRUCTIONS[request.category.value],
            "current_answer": current_answer or "Not yet written",
            "hints": "\n".join(f"- {line}" for line in hint_lines) if hint_lines else "- Nothing specific",
        }

    def generate(
        self,
        request: ContentRequest,
        current_answer: Optional[str] = None,
        hints: Iterable[str] = (),
    ) -> Optional[str]:
        inputs = self.build_inputs(request, current_answer, hints)
        print(f"--- GENERATING {request.category.value.upper()} FOR {request.step_id} ---")

        try:
            chain = self.prompt | self.llm | StrOutputParser()
            response = chain.invoke(inputs)
        except Exception as e:
            print(f"⚠️ Suggestion generation failed: {e}")
            return None

        text = strip_code_fences(response or "")
        return text or None
