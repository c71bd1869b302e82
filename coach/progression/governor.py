"""
Attempt Governor.

Counts interactions per step by category and decides when iteration must stop.
The governor is the termination guarantee: whatever the author types, a step
concludes once any ceiling is reached.
"""

from typing import Optional

from coach.progression.schemas import (
    AbstractionTier,
    AttemptCategory,
    AttemptCounters,
    AttemptState,
    AudienceProfile,
    CeilingConfig,
    StepRecord,
)


# A HIGH-tier audience that has produced this many HIGH answers in a step
# earns one extra exploration round.
BONUS_HIGH_RESPONSES = 2
BONUS_DEPTH = 1

EXPLORATION_CATEGORIES = (AttemptCategory.COACHING, AttemptCategory.HELP)


class AttemptGovernor:
    def __init__(self, ceilings: Optional[CeilingConfig] = None, profile: Optional[AudienceProfile] = None):
        self.ceilings = ceilings or CeilingConfig()
        self.ceilings.validate_ceilings()
        self.profile = profile

    def record_attempt(self, step: StepRecord, category: AttemptCategory) -> int:
        """Increment one counter of the step and return its new value."""
        value = step.attempts.value_of(category) + 1
        setattr(step.attempts, category.value, value)
        return value

    def ceiling_reached(self, step: StepRecord, category: AttemptCategory) -> bool:
        return step.attempts.value_of(category) >= self.ceilings.value_of(category)

    def should_force_advance(self, step: StepRecord) -> bool:
        """True once any category ceiling (or the total ceiling) is reached."""
        return any(self.ceiling_reached(step, category) for category in AttemptCategory)

    def depth_ceiling(self, step: StepRecord) -> int:
        """
        Effective exploration ceiling for this step.

        Recomputed from the step history on every call so the bonus can never
        drift from what actually happened.
        """
        if self.profile is None:
            return 0
        ceiling = self.profile.max_exploration_depth
        if (
            self.profile.abstraction_tier == AbstractionTier.HIGH
            and step.high_quality_count >= BONUS_HIGH_RESPONSES
        ):
            ceiling += BONUS_DEPTH
        return ceiling

    def can_iterate(self, step: StepRecord, category: AttemptCategory) -> bool:
        if self.should_force_advance(step) or self.ceiling_reached(step, category):
            return False
        if category in EXPLORATION_CATEGORIES:
            return step.exploration_depth < self.depth_ceiling(step)
        return True

    def attempt_state(self, step: StepRecord) -> AttemptState:
        return AttemptState(counters=step.attempts.model_copy(), ceilings=self.ceilings)

    def reset(self, step: StepRecord) -> None:
        """Clear counters and depth when the engine moves past a step."""
        step.attempts = AttemptCounters()
        step.exploration_depth = 0
