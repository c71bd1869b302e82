"""
Confirmation Strategy Selector.

Turns (tier, attempt budget, provenance) into one behavior. First match wins:
1. total ceiling reached     → forceAdvance
2. chosen from a suggestion  → review
3. HIGH                      → review, refinement offered as an option
4. MEDIUM                    → review with an enhancement hint
5. LOW                       → refine with a coaching hint

The selector is pure: it reads the attempt state, it never mutates a step.
"""

from typing import Optional

from coach.progression.schemas import (
    AttemptState,
    Behavior,
    Chip,
    ConfirmationOutcome,
    MessageTemplate,
    Provenance,
    QualityAssessment,
    QualityTier,
)


DEFAULT_ENHANCEMENT_HINT = "add_specific_detail"
DEFAULT_COACHING_HINT = "needs_more_detail"

EXPLORATION_CHIPS = [Chip.IDEAS, Chip.EXAMPLES, Chip.HELP]


class ConfirmationStrategySelector:
    def select(
        self,
        assessment: Optional[QualityAssessment],
        attempt_state: AttemptState,
        provenance: Optional[Provenance],
    ) -> ConfirmationOutcome:
        if attempt_state.total_reached:
            return ConfirmationOutcome(
                behavior=Behavior.FORCE_ADVANCE,
                message=MessageTemplate(key="progress.force_advance"),
            )

        if provenance == Provenance.SELECTED:
            return ConfirmationOutcome(
                behavior=Behavior.REVIEW,
                message=MessageTemplate(key="confirm.suggestion"),
                offer_chips=[Chip.KEEP_AND_CONTINUE, Chip.REFINE, Chip.WRITE_OWN],
            )

        tier = assessment.tier if assessment else QualityTier.LOW
        hints = assessment.hints if assessment else []

        if tier == QualityTier.HIGH:
            return ConfirmationOutcome(
                behavior=Behavior.REVIEW,
                message=MessageTemplate(key="confirm.high_quality"),
                offer_chips=[Chip.KEEP_AND_CONTINUE, Chip.REFINE, Chip.EXPLORE_DEEPER],
            )

        if tier == QualityTier.MEDIUM:
            return ConfirmationOutcome(
                behavior=Behavior.REVIEW,
                message=MessageTemplate(
                    key="confirm.medium_quality",
                    params={"hint": hints[0] if hints else DEFAULT_ENHANCEMENT_HINT},
                ),
                offer_chips=[Chip.KEEP_AND_CONTINUE, Chip.REFINE],
            )

        return ConfirmationOutcome(
            behavior=Behavior.REFINE,
            message=MessageTemplate(
                key="coach.refine",
                params={"hint": hints[0] if hints else DEFAULT_COACHING_HINT},
            ),
            offer_chips=list(EXPLORATION_CHIPS),
        )
