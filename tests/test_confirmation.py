"""
Tests for the Confirmation Strategy Selector.
"""

import pytest

from coach.progression.confirmation import ConfirmationStrategySelector
from coach.progression.schemas import (
    AttemptCounters,
    AttemptState,
    Behavior,
    CeilingConfig,
    Chip,
    Provenance,
    QualityAssessment,
    QualityTier,
)


@pytest.fixture
def selector():
    return ConfirmationStrategySelector()


def assessment(tier: QualityTier, hints=None) -> QualityAssessment:
    return QualityAssessment(tier=tier, is_valid=tier != QualityTier.LOW, hints=hints or [])


def budget(total: int = 1) -> AttemptState:
    return AttemptState(counters=AttemptCounters(total=total), ceilings=CeilingConfig())


class TestSelectionOrder:
    def test_total_reached_forces_advance(self, selector):
        """The total ceiling wins over everything else."""
        outcome = selector.select(assessment(QualityTier.HIGH), budget(total=8), Provenance.SELECTED)

        assert outcome.behavior == Behavior.FORCE_ADVANCE
        assert outcome.message.key == "progress.force_advance"

    @pytest.mark.parametrize("tier", list(QualityTier))
    def test_selected_suggestion_is_reviewed(self, selector, tier):
        """A chosen suggestion is never auto-accepted and never refined."""
        outcome = selector.select(assessment(tier), budget(), Provenance.SELECTED)

        assert outcome.behavior == Behavior.REVIEW
        assert outcome.message.key == "confirm.suggestion"
        assert Chip.WRITE_OWN in outcome.offer_chips

    def test_high_is_reviewed_with_refine_option(self, selector):
        outcome = selector.select(assessment(QualityTier.HIGH), budget(), Provenance.TYPED)

        assert outcome.behavior == Behavior.REVIEW
        assert Chip.REFINE in outcome.offer_chips
        assert Chip.KEEP_AND_CONTINUE in outcome.offer_chips

    def test_medium_carries_enhancement_hint(self, selector):
        outcome = selector.select(
            assessment(QualityTier.MEDIUM, ["make_open_ended"]), budget(), Provenance.TYPED
        )

        assert outcome.behavior == Behavior.REVIEW
        assert outcome.message.key == "confirm.medium_quality"
        assert outcome.message.params == {"hint": "make_open_ended"}

    def test_medium_without_hints_uses_default(self, selector):
        outcome = selector.select(assessment(QualityTier.MEDIUM), budget(), Provenance.TYPED)
        assert outcome.message.params["hint"] == "add_specific_detail"

    def test_low_is_refined(self, selector):
        outcome = selector.select(
            assessment(QualityTier.LOW, ["too_abstract"]), budget(), Provenance.TYPED
        )

        assert outcome.behavior == Behavior.REFINE
        assert outcome.message.key == "coach.refine"
        assert outcome.message.params == {"hint": "too_abstract"}


class TestPurity:
    def test_select_does_not_mutate_attempt_state(self, selector):
        state = budget(total=3)
        before = state.model_dump()

        selector.select(assessment(QualityTier.LOW), state, Provenance.TYPED)

        assert state.model_dump() == before
