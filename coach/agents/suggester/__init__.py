"""
Suggestion Agent Module

Fulfils the engine's content requests (ideas, examples, guidance, coaching,
refinements) with Gemini, returning None on failure.
"""

from coach.agents.suggester.agent import SuggestionAgent

__all__ = ["SuggestionAgent"]
