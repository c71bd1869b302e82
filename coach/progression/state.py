"""
State TypedDict for the per-interaction routing graph.
"""

from typing import Any, List, Optional, TypedDict

from coach.progression.schemas import (
    Behavior,
    Chip,
    ContentCategory,
    MessageTemplate,
    QualityAssessment,
    RoutingResult,
    StepState,
)


class RoutingState(TypedDict, total=False):
    """
    Internal state for one routed interaction.

    The StepRecord itself lives on the engine; nodes only pass decisions along.
    """
    # Input
    step_id: str
    interaction: Any                            # One member of the Interaction union
    route: str                                  # classify | suggestion | help | confirm | decline | force

    # Candidate answer
    candidate: Optional[str]                    # Text to store as the step's current answer
    assessment: Optional[QualityAssessment]

    # Decision
    behavior: Behavior
    message: MessageTemplate
    offer_chips: List[Chip]
    next_state: StepState
    content_category: Optional[ContentCategory]
    depth: int                                  # Exploration depth after this interaction

    # Bookkeeping
    declined: bool                              # The author turned down a reviewed answer
    trace: List[str]                            # Nodes visited, for debug output

    # Output
    result: RoutingResult
