"""
Pydantic schemas for the Progression Engine.

Every value that crosses a component boundary is modelled here:
1. Closed enums for tiers, behaviors, states and category names
2. AudienceProfile → resolved once per session
3. QualityAssessment / ConfirmationOutcome → ephemeral, one per interaction
4. StepRecord → the mutable slot for one answer
5. Interaction union, ContentRequest, RoutingResult → the public contract
6. SessionSnapshot → what the persistence layer stores
"""

from datetime import datetime
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from coach.errors import ConfigurationError


# =============================================================================
# ENUMS
# =============================================================================

class AbstractionTier(str, Enum):
    """Audience abstraction tolerance, ordered LOW < MEDIUM < MEDIUM_HIGH < HIGH."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    MEDIUM_HIGH = "MEDIUM_HIGH"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return list(AbstractionTier).index(self)

    def at_least(self, other: "AbstractionTier") -> bool:
        return self.rank >= other.rank


class QualityTier(str, Enum):
    """Classifier verdict on one answer."""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"

    @property
    def rank(self) -> int:
        return list(QualityTier).index(self)


class Provenance(str, Enum):
    TYPED = "typed"
    SELECTED = "selected"


class Behavior(str, Enum):
    ACCEPT = "accept"
    REVIEW = "review"
    REFINE = "refine"
    FORCE_ADVANCE = "forceAdvance"


class StepState(str, Enum):
    EMPTY = "EMPTY"
    AWAITING_INPUT = "AWAITING_INPUT"
    COACHING = "COACHING"
    REFINING = "REFINING"
    REVIEWING = "REVIEWING"
    COMPLETE = "COMPLETE"


class StepForm(str, Enum):
    """Grammatical form a step expects its answer in."""
    DECLARATIVE = "declarative"
    INTERROGATIVE = "interrogative"


class AttemptCategory(str, Enum):
    COACHING = "coaching"
    REFINEMENT = "refinement"
    HELP = "help"
    TOTAL = "total"


class HelpCategory(str, Enum):
    IDEAS = "ideas"
    EXAMPLES = "examples"
    HELP = "help"


class ContentCategory(str, Enum):
    """Kinds of content the text-generation service can be asked for."""
    IDEAS = "ideas"
    EXAMPLES = "examples"
    GUIDANCE = "guidance"
    COACHING = "coaching"
    REFINEMENTS = "refinements"


class Chip(str, Enum):
    """Quick-reply options the UI may offer. Names only, never rendered text."""
    IDEAS = "ideas"
    EXAMPLES = "examples"
    HELP = "help"
    REFINE = "refine"
    KEEP_AND_CONTINUE = "keep_and_continue"
    WRITE_OWN = "write_own"
    EXPLORE_DEEPER = "explore_deeper"


class InteractionKind(str, Enum):
    TEXT = "text"
    SELECT_SUGGESTION = "selectSuggestion"
    REQUEST_HELP = "requestHelp"
    CONFIRM = "confirm"


# =============================================================================
# AUDIENCE
# =============================================================================

class AudienceProfile(BaseModel):
    """Complexity envelope for the author's declared audience."""
    abstraction_tier: AbstractionTier = Field(..., description="How much abstraction the audience tolerates")
    allows_theory: bool = Field(..., description="Theory/framework vocabulary is appropriate")
    allows_meta_reasoning: bool = Field(..., description="Philosophical and metacognitive framing is appropriate")
    min_word_count: int = Field(..., ge=1, description="Answers shorter than this fail closed as LOW")
    max_exploration_depth: int = Field(..., ge=0, description="Exploration rounds before redirecting to examples")

    class Config:
        frozen = True


# =============================================================================
# CLASSIFICATION & CONFIRMATION
# =============================================================================

class QualityAssessment(BaseModel):
    """Tier plus explainable hints for one answer."""
    tier: QualityTier
    is_valid: bool
    hints: List[str] = Field(default_factory=list, description="Template keys for improvement hints")
    matched_signals: List[str] = Field(default_factory=list, description="Lexical rules that fired")


class MessageTemplate(BaseModel):
    """A message the UI renders. Key plus parameters, never final prose."""
    key: str
    params: Dict[str, str] = Field(default_factory=dict)


class ConfirmationOutcome(BaseModel):
    """The behavior recommended for one interaction."""
    behavior: Behavior
    message: MessageTemplate
    offer_chips: List[Chip] = Field(default_factory=list)


# =============================================================================
# ATTEMPTS
# =============================================================================

class AttemptCounters(BaseModel):
    coaching: int = 0
    refinement: int = 0
    help: int = 0
    total: int = 0

    def value_of(self, category: AttemptCategory) -> int:
        return getattr(self, category.value)


class CeilingConfig(BaseModel):
    """Per-category iteration ceilings for a single step."""
    coaching: int = 3
    refinement: int = 2
    help: int = 2
    total: int = 8

    def value_of(self, category: AttemptCategory) -> int:
        return getattr(self, category.value)

    def validate_ceilings(self) -> None:
        """Raise ConfigurationError on negative ceilings or a total below 1."""
        errors = []
        for category in AttemptCategory:
            value = self.value_of(category)
            if value < 0:
                errors.append(f"{category.value} ceiling is negative ({value})")
        if self.total < 1:
            errors.append(f"total ceiling must be at least 1 (got {self.total})")

        if errors:
            raise ConfigurationError(f"Invalid ceilings: {', '.join(errors)}")


class AttemptState(BaseModel):
    """Snapshot of a step's budget, handed to the confirmation selector."""
    counters: AttemptCounters
    ceilings: CeilingConfig

    @property
    def total_reached(self) -> bool:
        return self.counters.total >= self.ceilings.total


# =============================================================================
# INTERACTIONS
# =============================================================================

class TextInteraction(BaseModel):
    kind: Literal["text"] = "text"
    value: str


class SelectSuggestionInteraction(BaseModel):
    kind: Literal["selectSuggestion"] = "selectSuggestion"
    value: str = Field(..., min_length=1)

    @field_validator("value")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("a selected suggestion cannot be blank")
        return value


class RequestHelpInteraction(BaseModel):
    kind: Literal["requestHelp"] = "requestHelp"
    category: HelpCategory


class ConfirmInteraction(BaseModel):
    kind: Literal["confirm"] = "confirm"


Interaction = Annotated[
    Union[TextInteraction, SelectSuggestionInteraction, RequestHelpInteraction, ConfirmInteraction],
    Field(discriminator="kind"),
]


class InteractionRecord(BaseModel):
    """One routed interaction, kept so the depth bonus can be recomputed."""
    kind: InteractionKind
    tier: Optional[QualityTier] = None
    behavior: Behavior


# =============================================================================
# STEPS
# =============================================================================

class StepRecord(BaseModel):
    """Mutable slot for one answer of the curriculum document."""
    step_id: str
    stage_id: str
    required: bool = True

    current_answer: Optional[str] = None
    provenance: Optional[Provenance] = None
    attempts: AttemptCounters = Field(default_factory=AttemptCounters)
    exploration_depth: int = 0
    state: StepState = StepState.EMPTY

    last_assessment: Optional[QualityAssessment] = None
    history: List[InteractionRecord] = Field(default_factory=list)
    offered_suggestions: List[str] = Field(default_factory=list)
    forced: bool = False

    @property
    def is_complete(self) -> bool:
        return self.state == StepState.COMPLETE

    @property
    def high_quality_count(self) -> int:
        return sum(1 for record in self.history if record.tier == QualityTier.HIGH)


# =============================================================================
# PUBLIC CONTRACT
# =============================================================================

class ContentRequest(BaseModel):
    """What the caller should ask the text-generation service for."""
    step_id: str
    category: ContentCategory
    audience_profile: AudienceProfile


class RoutingResult(BaseModel):
    """Everything the caller needs after one routed interaction."""
    behavior: Behavior
    step_state: StepState
    suggested_content_request: Optional[ContentRequest] = None
    attempts: AttemptCounters
    exploration_depth: int

    step_id: str
    stage_id: str
    assessment: Optional[QualityAssessment] = None
    message: MessageTemplate
    offer_chips: List[Chip] = Field(default_factory=list)

    current_stage_id: Optional[str] = None
    current_step_id: Optional[str] = None
    stage_complete: bool = False
    document_complete: bool = False


class SessionSnapshot(BaseModel):
    """Persistence payload: enough to rehydrate one session's engine."""
    session_id: str
    audience_descriptor: str = ""
    ceilings: CeilingConfig = Field(default_factory=CeilingConfig)
    steps: List[StepRecord] = Field(default_factory=list)
    current_stage_id: Optional[str] = None
    current_step_id: Optional[str] = None
    answers: Dict[str, Optional[str]] = Field(default_factory=dict)
    saved_at: datetime = Field(default_factory=datetime.utcnow)
