"""
Curriculum catalog: the fixed, ordered stages and the steps inside each one.

Framing → Journey → Deliverables. The catalog is data only; the engine walks
it in order and derives stage completion from step state.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from coach.errors import UnknownStageError, UnknownStepError
from coach.progression.schemas import StepForm


@dataclass(frozen=True)
class StepDefinition:
    step_id: str
    label: str
    form: StepForm = StepForm.DECLARATIVE
    required: bool = True
    context: str = "your educational goals"
    # Scales the audience's minimum word count; questions are naturally shorter
    min_word_factor: float = 1.0


@dataclass(frozen=True)
class StageDefinition:
    stage_id: str
    label: str
    steps: Tuple[StepDefinition, ...] = field(default_factory=tuple)

    @property
    def step_ids(self) -> List[str]:
        return [step.step_id for step in self.steps]


FRAMING = StageDefinition(
    stage_id="framing",
    label="Framing",
    steps=(
        StepDefinition(
            "central_concept", "Big Idea",
            context="your subject area and student needs",
        ),
        StepDefinition(
            "driving_question", "Essential Question",
            form=StepForm.INTERROGATIVE,
            context="driving inquiry and curiosity",
            min_word_factor=0.6,
        ),
        StepDefinition(
            "challenge", "Challenge",
            context="meaningful student work and authentic audience",
        ),
    ),
)

JOURNEY = StageDefinition(
    stage_id="journey",
    label="Learning Journey",
    steps=(
        StepDefinition("phases", "Learning Phases", context="realistic pacing and sequence"),
        StepDefinition("activities", "Activities", context="active learning and student engagement"),
        StepDefinition("resources", "Resources", required=False, context="materials, experts and tools"),
    ),
)

DELIVERABLES = StageDefinition(
    stage_id="deliverables",
    label="Deliverables",
    steps=(
        StepDefinition("milestones", "Milestones", context="checkpoints students can see"),
        StepDefinition("rubric", "Rubric", context="clear criteria and performance levels"),
        StepDefinition("assessment", "Assessment Methods", context="authentic evaluation methods"),
    ),
)


class CurriculumCatalog:
    """Ordered lookup over stage and step definitions."""

    def __init__(self, stages: Tuple[StageDefinition, ...] = (FRAMING, JOURNEY, DELIVERABLES)):
        if not stages:
            raise ValueError("A catalog needs at least one stage")

        self.stages = stages
        self._stages: Dict[str, StageDefinition] = {}
        self._steps: Dict[str, Tuple[StageDefinition, StepDefinition]] = {}
        for stage in stages:
            if stage.stage_id in self._stages:
                raise ValueError(f"Duplicate stage id '{stage.stage_id}'")
            self._stages[stage.stage_id] = stage
            for step in stage.steps:
                if step.step_id in self._steps:
                    raise ValueError(f"Duplicate step id '{step.step_id}'")
                self._steps[step.step_id] = (stage, step)

    def stage(self, stage_id: str) -> StageDefinition:
        try:
            return self._stages[stage_id]
        except KeyError:
            raise UnknownStageError(stage_id) from None

    def step(self, step_id: str) -> StepDefinition:
        try:
            return self._steps[step_id][1]
        except KeyError:
            raise UnknownStepError(step_id) from None

    def stage_of(self, step_id: str) -> StageDefinition:
        try:
            return self._steps[step_id][0]
        except KeyError:
            raise UnknownStepError(step_id) from None

    def stage_index(self, stage_id: str) -> int:
        return self.stages.index(self.stage(stage_id))

    @property
    def step_ids(self) -> List[str]:
        return list(self._steps)


DEFAULT_CATALOG = CurriculumCatalog()
