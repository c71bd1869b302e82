"""
Tests for the Attempt Governor.
"""

import pytest

from coach.errors import ConfigurationError
from coach.progression.governor import AttemptGovernor
from coach.progression.schemas import (
    AttemptCategory,
    Behavior,
    CeilingConfig,
    InteractionKind,
    InteractionRecord,
    QualityTier,
    StepRecord,
)


def make_step(**kwargs) -> StepRecord:
    return StepRecord(step_id="central_concept", stage_id="framing", **kwargs)


def high_record() -> InteractionRecord:
    return InteractionRecord(kind=InteractionKind.TEXT, tier=QualityTier.HIGH, behavior=Behavior.REVIEW)


class TestRecordAttempt:
    def test_increments_only_one_category(self, low_profile):
        governor = AttemptGovernor(CeilingConfig(), low_profile)
        step = make_step()

        governor.record_attempt(step, AttemptCategory.COACHING)

        assert step.attempts.coaching == 1
        assert step.attempts.refinement == 0
        assert step.attempts.help == 0
        assert step.attempts.total == 0

    def test_returns_new_value(self, low_profile):
        governor = AttemptGovernor(CeilingConfig(), low_profile)
        step = make_step()
        governor.record_attempt(step, AttemptCategory.TOTAL)
        assert governor.record_attempt(step, AttemptCategory.TOTAL) == 2

    def test_reset_clears_counters_and_depth(self, low_profile):
        governor = AttemptGovernor(CeilingConfig(), low_profile)
        step = make_step(exploration_depth=2)
        governor.record_attempt(step, AttemptCategory.HELP)

        governor.reset(step)

        assert step.attempts.help == 0
        assert step.exploration_depth == 0


class TestForceAdvance:
    @pytest.mark.parametrize("category, ceiling", [
        (AttemptCategory.COACHING, 3),
        (AttemptCategory.REFINEMENT, 2),
        (AttemptCategory.HELP, 2),
        (AttemptCategory.TOTAL, 8),
    ])
    def test_any_ceiling_forces_advance(self, low_profile, category, ceiling):
        """Each category ceiling on its own triggers force-advance."""
        governor = AttemptGovernor(CeilingConfig(), low_profile)
        step = make_step()

        for _ in range(ceiling - 1):
            governor.record_attempt(step, category)
        assert governor.should_force_advance(step) is False

        governor.record_attempt(step, category)
        assert governor.should_force_advance(step) is True

    def test_attempt_state_reports_total(self, low_profile):
        governor = AttemptGovernor(CeilingConfig(total=1), low_profile)
        step = make_step()
        governor.record_attempt(step, AttemptCategory.TOTAL)

        assert governor.attempt_state(step).total_reached is True


class TestCanIterate:
    def test_false_once_forced(self, low_profile):
        governor = AttemptGovernor(CeilingConfig(), low_profile)
        step = make_step()
        for _ in range(3):
            governor.record_attempt(step, AttemptCategory.COACHING)

        assert governor.can_iterate(step, AttemptCategory.REFINEMENT) is False

    def test_depth_limits_exploration_categories(self, low_profile):
        """At max depth coaching and help stop, refinement does not."""
        governor = AttemptGovernor(CeilingConfig(), low_profile)
        step = make_step(exploration_depth=low_profile.max_exploration_depth)

        assert governor.can_iterate(step, AttemptCategory.COACHING) is False
        assert governor.can_iterate(step, AttemptCategory.HELP) is False
        assert governor.can_iterate(step, AttemptCategory.REFINEMENT) is True

    def test_below_depth_allows_exploration(self, low_profile):
        governor = AttemptGovernor(CeilingConfig(), low_profile)
        step = make_step(exploration_depth=1)
        assert governor.can_iterate(step, AttemptCategory.COACHING) is True


class TestDepthBonus:
    def test_bonus_after_exactly_two_high_responses(self, high_profile):
        """Two HIGH answers under a HIGH profile add exactly one level, not before."""
        governor = AttemptGovernor(CeilingConfig(), high_profile)
        step = make_step()
        base = high_profile.max_exploration_depth

        assert governor.depth_ceiling(step) == base
        step.history.append(high_record())
        assert governor.depth_ceiling(step) == base

        step.history.append(high_record())
        assert governor.depth_ceiling(step) == base + 1

        step.history.append(high_record())
        assert governor.depth_ceiling(step) == base + 1

    def test_no_bonus_below_high_tier(self, medium_high_profile):
        governor = AttemptGovernor(CeilingConfig(), medium_high_profile)
        step = make_step(history=[high_record(), high_record()])

        assert governor.depth_ceiling(step) == medium_high_profile.max_exploration_depth

    def test_bonus_lets_exploration_continue(self, high_profile):
        governor = AttemptGovernor(CeilingConfig(), high_profile)
        step = make_step(exploration_depth=high_profile.max_exploration_depth)
        assert governor.can_iterate(step, AttemptCategory.COACHING) is False

        step.history.extend([high_record(), high_record()])
        assert governor.can_iterate(step, AttemptCategory.COACHING) is True


class TestCeilingValidation:
    @pytest.mark.parametrize("ceilings", [
        {"coaching": -1},
        {"refinement": -2},
        {"help": -1},
        {"total": 0},
    ])
    def test_invalid_ceilings_raise(self, ceilings):
        with pytest.raises(ConfigurationError):
            AttemptGovernor(CeilingConfig(**ceilings))

    def test_zero_category_ceiling_is_allowed(self):
        """A zero category ceiling is valid; it forces on the first interaction."""
        governor = AttemptGovernor(CeilingConfig(help=0))
        assert governor.should_force_advance(make_step()) is True
