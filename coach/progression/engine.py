"""
Progression Engine - the Step/Stage State Machine.

Each authoring session owns one engine. Every interaction runs through a small
compiled LangGraph:

  guard ─┬─► classify ───► decide ─┐
         ├─► suggestion ─► decide ─┤
         ├─► help ─────────────────┤
         ├─► confirm ──────────────┼─► apply → END
         ├─► decline ──────────────┤
         └─► force ────────────────┘

guard:      records the TOTAL attempt, checks the ceilings, picks a route
classify:   tiers typed text with the Quality Classifier
suggestion: stores a chosen suggestion (tier floored at MEDIUM)
decide:     asks the Confirmation Strategy Selector for a behavior
help:       handles ideas / examples / help requests and exploration depth
confirm:    completes the step when its answer is valid
decline:    the author turned down a reviewed answer
force:      ceiling reached, accept the latest answer as-is
apply:      writes the decision onto the StepRecord and builds the RoutingResult

Stage completion and the current position are never stored; they are folded
from step states whenever they are asked for.
"""

import re
from typing import Dict, List, Optional, Union

from langgraph.graph import StateGraph, END
from pydantic import TypeAdapter

from coach.errors import StepLockedError
from coach.progression import audience
from coach.progression.catalog import DEFAULT_CATALOG, CurriculumCatalog, StageDefinition, StepDefinition
from coach.progression.classifier import QualityClassifier
from coach.progression.confirmation import ConfirmationStrategySelector
from coach.progression.governor import AttemptGovernor
from coach.progression.state import RoutingState
from coach.progression.schemas import (
    AttemptCategory,
    AudienceProfile,
    Behavior,
    CeilingConfig,
    Chip,
    ConfirmationOutcome,
    ContentCategory,
    ContentRequest,
    HelpCategory,
    Interaction,
    InteractionKind,
    InteractionRecord,
    MessageTemplate,
    Provenance,
    QualityAssessment,
    QualityTier,
    RoutingResult,
    SessionSnapshot,
    StepRecord,
    StepState,
)
from coach.utils.id_generator import generate_session_id


# Short replies while reviewing are read as intent, not as a new answer
SHORT_REPLY_WORDS = 6

# Latest generated suggestions kept per open step
MAX_OFFERED_SUGGESTIONS = 5

PROGRESS_SIGNALS = re.compile(
    r"\b(yes|yep|yeah|sure|ok|okay|good|great|perfect|continue|next|proceed|"
    r"move on|let's go|lets go|sounds good|that works|ready|done|confirmed|keep it|no changes)\b",
    re.IGNORECASE,
)

REFINEMENT_SIGNALS = re.compile(
    r"\b(wait|actually|hmm+|let me|not quite|almost|close but|revise|rework|try again|"
    r"change (?:it|that|this)|edit (?:it|that|this)|something different)\b",
    re.IGNORECASE,
)

# "not good enough", "this isn't great"
NEGATED_PROGRESS = re.compile(
    r"\b(?:not|never|isnt|dont|doesnt|wasnt|\w+n['\u2019]t)\s+(?:\w+\s+){0,2}?"
    r"(?:good|great|perfect|ready|done|right|there|enough|working|ok|okay)\b",
    re.IGNORECASE,
)

# A bare "no" only counts as the whole reply or as its opening word
DECLINING_REPLY = re.compile(r"^\s*(?:nope\b|nah\b|no\s*(?:[,.!]|$))", re.IGNORECASE)

_INTERACTION_ADAPTER = TypeAdapter(Interaction)

INTERACTION_ROUTES = {
    InteractionKind.TEXT: "classify",
    InteractionKind.SELECT_SUGGESTION: "suggestion",
    InteractionKind.REQUEST_HELP: "help",
    InteractionKind.CONFIRM: "confirm",
}


def parse_interaction(interaction: Union[Interaction, dict]) -> Interaction:
    """Accept a model instance or a plain dict shaped like one."""
    if isinstance(interaction, dict):
        return _INTERACTION_ADAPTER.validate_python(interaction)
    return interaction


def exploration_chips(depth: int) -> List[Chip]:
    if depth == 0:
        return [Chip.IDEAS, Chip.EXAMPLES, Chip.HELP]
    return [Chip.EXAMPLES, Chip.REFINE]


class ProgressionEngine:
    """
    Drives one session through the catalog's stages and steps.

    Single-threaded: callers must route one interaction at a time per engine.
    """

    def __init__(
        self,
        audience_descriptor: str = "",
        ceilings: Optional[CeilingConfig] = None,
        session_id: Optional[str] = None,
        catalog: CurriculumCatalog = DEFAULT_CATALOG,
    ):
        self.session_id = session_id or generate_session_id()
        self.catalog = catalog
        self.audience_descriptor = audience_descriptor or ""
        self.profile: AudienceProfile = audience.resolve(self.audience_descriptor)

        self.governor = AttemptGovernor(ceilings or CeilingConfig(), self.profile)
        self.classifier = QualityClassifier(catalog)
        self.selector = ConfirmationStrategySelector()

        self.steps: Dict[str, StepRecord] = {}
        for stage in catalog.stages:
            for step in stage.steps:
                self.steps[step.step_id] = StepRecord(
                    step_id=step.step_id, stage_id=stage.stage_id, required=step.required
                )
        self._open_reachable_steps()

        # Build the routing graph
        self.graph = self._build_graph()

    @property
    def ceilings(self) -> CeilingConfig:
        return self.governor.ceilings

    # =========================================================================
    # PUBLIC API
    # =========================================================================
    def route_interaction(self, step_id: str, interaction: Union[Interaction, dict]) -> RoutingResult:
        """
        Route one interaction for one step.

        Raises:
            UnknownStepError: step_id is not in the catalog.
            StepLockedError: the step's stage is not reachable or the step is complete.
        """
        interaction = parse_interaction(interaction)
        self._require_open(step_id)

        print(f"--- ROUTING {interaction.kind.upper()} → {step_id} ---")
        final_state = self.graph.invoke({
            "step_id": step_id,
            "interaction": interaction,
            "trace": [],
        })

        self._open_reachable_steps()
        result: RoutingResult = final_state["result"]
        print(f"   route: {' → '.join(final_state.get('trace', []))} | behavior={result.behavior.value} | state={result.step_state.value}")
        return result

    def reopen_step(self, step_id: str) -> StepRecord:
        """
        Explicit edit of a completed step.

        The answer stays as a draft; counters, depth and history start over.
        Steps that are not complete are returned unchanged.
        """
        step = self.step(step_id)
        if not self._is_reachable(step):
            raise StepLockedError(step_id, f"stage '{step.stage_id}' has not been reached yet")
        if step.state != StepState.COMPLETE:
            return step

        self.governor.reset(step)
        step.history = []
        step.forced = False
        step.state = StepState.AWAITING_INPUT
        print(f"↩️ Reopened step {step_id}")
        return step

    def change_audience(self, audience_descriptor: str) -> AudienceProfile:
        """
        Re-resolve the audience profile.

        Answers and counters are kept. Open steps are brought under the new
        profile: depth is clamped to its ceiling and current answers are
        reassessed.
        """
        self.audience_descriptor = audience_descriptor or ""
        self.profile = audience.resolve(self.audience_descriptor)
        self.governor.profile = self.profile

        for step in self.steps.values():
            if step.is_complete:
                continue
            step.exploration_depth = min(step.exploration_depth, self.governor.depth_ceiling(step))
            if step.current_answer is not None and step.last_assessment is not None:
                step.last_assessment = self._assess(step.step_id, step.current_answer, step.provenance)
                if step.state == StepState.REVIEWING and not step.last_assessment.is_valid:
                    step.state = StepState.COACHING

        print(f"🎯 Audience changed → {self.profile.abstraction_tier.value}")
        return self.profile

    def ingest_suggestion(self, step_id: str, text: Optional[str]) -> MessageTemplate:
        """
        Take the generator's reply for a content request.

        None (or blank) means the generator failed; the author can still type.
        """
        step = self.step(step_id)
        if text is None or not text.strip():
            print(f"⚠️ No suggestion available for {step_id}")
            return MessageTemplate(key="suggestion.unavailable")

        step.offered_suggestions.append(text.strip())
        del step.offered_suggestions[:-MAX_OFFERED_SUGGESTIONS]
        return MessageTemplate(key="suggestion.ready")

    def content_request(self, step_id: str, category: ContentCategory) -> ContentRequest:
        self.catalog.step(step_id)
        return ContentRequest(step_id=step_id, category=category, audience_profile=self.profile)

    # =========================================================================
    # DERIVED POSITION
    # =========================================================================
    def step(self, step_id: str) -> StepRecord:
        self.catalog.step(step_id)
        return self.steps[step_id]

    def step_definition(self, step_id: str) -> StepDefinition:
        return self.catalog.step(step_id)

    def is_stage_complete(self, stage_id: str) -> bool:
        stage = self.catalog.stage(stage_id)
        return all(self.steps[step.step_id].is_complete for step in stage.steps if step.required)

    def is_document_complete(self) -> bool:
        return all(self.is_stage_complete(stage.stage_id) for stage in self.catalog.stages)

    @property
    def current_stage(self) -> Optional[StageDefinition]:
        for stage in self.catalog.stages:
            if not self.is_stage_complete(stage.stage_id):
                return stage
        return None

    @property
    def current_step(self) -> Optional[StepDefinition]:
        stage = self.current_stage
        if stage is None:
            return None
        for step in stage.steps:
            if not self.steps[step.step_id].is_complete:
                return step
        return None

    @property
    def answers(self) -> Dict[str, Optional[str]]:
        return {step_id: record.current_answer for step_id, record in self.steps.items()}

    def progress(self) -> dict:
        """Stage-by-stage summary for progress displays."""
        current_stage = self.current_stage
        current_step = self.current_step
        return {
            "session_id": self.session_id,
            "audience_tier": self.profile.abstraction_tier.value,
            "current_stage_id": current_stage.stage_id if current_stage else None,
            "current_step_id": current_step.step_id if current_step else None,
            "document_complete": self.is_document_complete(),
            "stages": [
                {
                    "stage_id": stage.stage_id,
                    "label": stage.label,
                    "complete": self.is_stage_complete(stage.stage_id),
                    "steps": [
                        {
                            "step_id": step.step_id,
                            "label": step.label,
                            "required": step.required,
                            "state": self.steps[step.step_id].state.value,
                            "answer": self.steps[step.step_id].current_answer,
                            "forced": self.steps[step.step_id].forced,
                            "suggestions": list(self.steps[step.step_id].offered_suggestions),
                        }
                        for step in stage.steps
                    ],
                }
                for stage in self.catalog.stages
            ],
        }

    # =========================================================================
    # SNAPSHOTS
    # =========================================================================
    def snapshot(self) -> SessionSnapshot:
        current_stage = self.current_stage
        current_step = self.current_step
        return SessionSnapshot(
            session_id=self.session_id,
            audience_descriptor=self.audience_descriptor,
            ceilings=self.ceilings.model_copy(),
            steps=[record.model_copy(deep=True) for record in self.steps.values()],
            current_stage_id=current_stage.stage_id if current_stage else None,
            current_step_id=current_step.step_id if current_step else None,
            answers=self.answers,
        )

    @classmethod
    def from_snapshot(
        cls, snapshot: SessionSnapshot, catalog: CurriculumCatalog = DEFAULT_CATALOG
    ) -> "ProgressionEngine":
        """Rebuild an engine; position is re-derived from the restored steps."""
        engine = cls(
            audience_descriptor=snapshot.audience_descriptor,
            ceilings=snapshot.ceilings,
            session_id=snapshot.session_id,
            catalog=catalog,
        )
        for record in snapshot.steps:
            catalog.step(record.step_id)
            engine.steps[record.step_id] = record.model_copy(deep=True)
        engine._open_reachable_steps()
        return engine

    # =========================================================================
    # REACHABILITY
    # =========================================================================
    def _current_stage_index(self) -> int:
        stage = self.current_stage
        if stage is None:
            return len(self.catalog.stages) - 1
        return self.catalog.stage_index(stage.stage_id)

    def _is_reachable(self, step: StepRecord) -> bool:
        # Steps that were already opened stay reachable after an earlier step is reopened
        if step.state != StepState.EMPTY:
            return True
        return self.catalog.stage_index(step.stage_id) <= self._current_stage_index()

    def _open_reachable_steps(self) -> None:
        for step in self.steps.values():
            if step.state == StepState.EMPTY and self._is_reachable(step):
                step.state = StepState.AWAITING_INPUT

    def _require_open(self, step_id: str) -> StepRecord:
        step = self.step(step_id)
        if not self._is_reachable(step):
            raise StepLockedError(step_id, f"stage '{step.stage_id}' has not been reached yet")
        if step.is_complete:
            raise StepLockedError(step_id, "step is complete; reopen it to edit")
        return step

    # =========================================================================
    # NODE 1: GUARD
    # =========================================================================
    def _guard_node(self, state: RoutingState) -> dict:
        step = self.steps[state["step_id"]]
        interaction = state["interaction"]
        trace = state.get("trace", []) + ["guard"]

        self.governor.record_attempt(step, AttemptCategory.TOTAL)
        if self.governor.should_force_advance(step):
            return {"route": "force", "trace": trace}

        kind = InteractionKind(interaction.kind)
        route = INTERACTION_ROUTES[kind]
        declined = False

        if kind == InteractionKind.TEXT and step.state == StepState.REVIEWING:
            value = interaction.value.strip()
            if len(value.split()) <= SHORT_REPLY_WORDS:
                if (
                    DECLINING_REPLY.search(value)
                    or NEGATED_PROGRESS.search(value)
                    or REFINEMENT_SIGNALS.search(value)
                ):
                    return {"route": "decline", "declined": True, "trace": trace}
                if PROGRESS_SIGNALS.search(value):
                    return {"route": "confirm", "trace": trace}

            # A fresh answer while reviewing is a refinement of the reviewed one
            self.governor.record_attempt(step, AttemptCategory.REFINEMENT)
            declined = True

        return {"route": route, "declined": declined, "trace": trace}

    def _route_after_guard(self, state: RoutingState) -> str:
        return state["route"]

    # =========================================================================
    # NODE 2: CLASSIFY
    # =========================================================================
    def _classify_node(self, state: RoutingState) -> dict:
        text = state["interaction"].value
        assessment = self.classifier.classify(state["step_id"], text, self.profile)
        print(f"🔎 Classified {state['step_id']}: {assessment.tier.value} {assessment.hints}")
        return {
            "candidate": text.strip(),
            "assessment": assessment,
            "trace": state["trace"] + ["classify"],
        }

    # =========================================================================
    # NODE 3: SUGGESTION
    # =========================================================================
    def _suggestion_node(self, state: RoutingState) -> dict:
        text = state["interaction"].value.strip()
        return {
            "candidate": text,
            "assessment": self._assess(state["step_id"], text, Provenance.SELECTED),
            "trace": state["trace"] + ["suggestion"],
        }

    def _assess(self, step_id: str, text: str, provenance: Optional[Provenance]) -> QualityAssessment:
        raw = self.classifier.classify(step_id, text, self.profile)
        if provenance != Provenance.SELECTED:
            return raw

        # A chosen suggestion is never treated as low quality
        tier = raw.tier if raw.tier.rank >= QualityTier.MEDIUM.rank else QualityTier.MEDIUM
        return QualityAssessment(
            tier=tier,
            is_valid=True,
            hints=[] if tier == QualityTier.HIGH else raw.hints,
            matched_signals=raw.matched_signals + ["selected_suggestion"],
        )

    # =========================================================================
    # NODE 4: DECIDE
    # =========================================================================
    def _decide_node(self, state: RoutingState) -> dict:
        step = self.steps[state["step_id"]]
        assessment = state["assessment"]
        kind = InteractionKind(state["interaction"].kind)
        provenance = Provenance.SELECTED if kind == InteractionKind.SELECT_SUGGESTION else Provenance.TYPED

        outcome: ConfirmationOutcome = self.selector.select(
            assessment, self.governor.attempt_state(step), provenance
        )
        update = {
            "behavior": outcome.behavior,
            "message": outcome.message,
            "offer_chips": outcome.offer_chips,
            "depth": step.exploration_depth,
            "content_category": None,
            "trace": state["trace"] + ["decide"],
        }

        if outcome.behavior == Behavior.FORCE_ADVANCE:
            update["next_state"] = StepState.COMPLETE
        elif outcome.behavior == Behavior.REVIEW:
            update["next_state"] = StepState.REVIEWING
            if provenance == Provenance.TYPED and assessment.tier == QualityTier.MEDIUM:
                update["content_category"] = ContentCategory.REFINEMENTS
        else:
            deepen = self.governor.can_iterate(step, AttemptCategory.COACHING)
            self.governor.record_attempt(step, AttemptCategory.COACHING)
            if deepen:
                update["depth"] = step.exploration_depth + 1
                update["content_category"] = ContentCategory.COACHING
            else:
                update["content_category"] = ContentCategory.EXAMPLES
            update["next_state"] = StepState.REFINING if state.get("declined") else StepState.COACHING
            update["offer_chips"] = exploration_chips(update["depth"])

        return update

    # =========================================================================
    # NODE 5: HELP
    # =========================================================================
    def _help_node(self, state: RoutingState) -> dict:
        step = self.steps[state["step_id"]]
        category = HelpCategory(state["interaction"].category)

        depth = step.exploration_depth
        if category == HelpCategory.IDEAS and self.governor.can_iterate(step, AttemptCategory.HELP):
            depth += 1
            content, message = ContentCategory.IDEAS, "help.ideas"
        elif category in (HelpCategory.IDEAS, HelpCategory.EXAMPLES):
            # Examples ground the author again, so exploration starts over
            depth = 0
            content, message = ContentCategory.EXAMPLES, "help.examples"
        else:
            content, message = ContentCategory.GUIDANCE, "help.guidance"

        self.governor.record_attempt(step, AttemptCategory.HELP)
        print(f"💡 Help '{category.value}' on {step.step_id} → {content.value} (depth {depth})")

        return {
            "behavior": Behavior.REFINE,
            "message": MessageTemplate(key=message),
            "offer_chips": exploration_chips(depth),
            "depth": depth,
            "content_category": content,
            "next_state": StepState.REFINING if step.state == StepState.REVIEWING else StepState.COACHING,
            "trace": state["trace"] + ["help"],
        }

    # =========================================================================
    # NODE 6: CONFIRM
    # =========================================================================
    def _confirm_node(self, state: RoutingState) -> dict:
        step = self.steps[state["step_id"]]
        trace = state["trace"] + ["confirm"]

        ready = (
            step.current_answer is not None
            and step.last_assessment is not None
            and step.last_assessment.is_valid
        )
        if ready:
            return {
                "behavior": Behavior.ACCEPT,
                "message": MessageTemplate(key="confirm.accepted"),
                "offer_chips": [],
                "depth": step.exploration_depth,
                "content_category": None,
                "next_state": StepState.COMPLETE,
                "trace": trace,
            }

        return {
            "behavior": Behavior.REFINE,
            "message": MessageTemplate(key="coach.refine", params={"hint": "not_ready_to_confirm"}),
            "offer_chips": exploration_chips(step.exploration_depth),
            "depth": step.exploration_depth,
            "content_category": None,
            "next_state": StepState.COACHING,
            "trace": trace,
        }

    # =========================================================================
    # NODE 7: DECLINE
    # =========================================================================
    def _decline_node(self, state: RoutingState) -> dict:
        step = self.steps[state["step_id"]]
        self.governor.record_attempt(step, AttemptCategory.REFINEMENT)
        return {
            "behavior": Behavior.REFINE,
            "message": MessageTemplate(key="coach.decline"),
            "offer_chips": exploration_chips(step.exploration_depth),
            "depth": step.exploration_depth,
            "content_category": ContentCategory.REFINEMENTS,
            "next_state": StepState.REFINING,
            "trace": state["trace"] + ["decline"],
        }

    # =========================================================================
    # NODE 8: FORCE
    # =========================================================================
    def _force_node(self, state: RoutingState) -> dict:
        step = self.steps[state["step_id"]]
        interaction = state["interaction"]

        candidate = None
        assessment = None
        value = getattr(interaction, "value", None)
        if value is not None and value.strip():
            candidate = value.strip()
            provenance = Provenance.SELECTED if interaction.kind == InteractionKind.SELECT_SUGGESTION else Provenance.TYPED
            assessment = self._assess(step.step_id, candidate, provenance)

        has_answer = candidate is not None or step.current_answer is not None
        print(f"⏭️ Ceiling reached on {step.step_id} - moving forward with current progress")

        return {
            "candidate": candidate,
            "assessment": assessment,
            "behavior": Behavior.FORCE_ADVANCE,
            "message": MessageTemplate(key="progress.force_advance"),
            "offer_chips": [],
            "depth": step.exploration_depth,
            "content_category": None if has_answer else ContentCategory.EXAMPLES,
            "next_state": StepState.COMPLETE,
            "trace": state["trace"] + ["force"],
        }

    # =========================================================================
    # NODE 9: APPLY
    # =========================================================================
    def _apply_node(self, state: RoutingState) -> dict:
        step = self.steps[state["step_id"]]
        kind = InteractionKind(state["interaction"].kind)
        assessment = state.get("assessment")
        behavior = state["behavior"]

        candidate = state.get("candidate")
        if candidate is not None:
            step.current_answer = candidate
            step.provenance = Provenance.SELECTED if kind == InteractionKind.SELECT_SUGGESTION else Provenance.TYPED
        if assessment is not None:
            step.last_assessment = assessment

        # Only typed answers count towards the high-engagement bonus
        typed_tier = assessment.tier if assessment is not None and kind == InteractionKind.TEXT else None
        step.history.append(InteractionRecord(kind=kind, tier=typed_tier, behavior=behavior))

        step.exploration_depth = state.get("depth", step.exploration_depth)
        step.state = state["next_state"]

        attempts = step.attempts.model_copy()
        exploration_depth = step.exploration_depth
        if step.state == StepState.COMPLETE:
            step.forced = behavior == Behavior.FORCE_ADVANCE
            step.offered_suggestions = []
            self.governor.reset(step)
            print(f"✅ Step {step.step_id} complete ({behavior.value})")

        category = state.get("content_category")
        request = self.content_request(step.step_id, category) if category is not None else None

        current_stage = self.current_stage
        current_step = self.current_step
        result = RoutingResult(
            behavior=behavior,
            step_state=step.state,
            suggested_content_request=request,
            attempts=attempts,
            exploration_depth=exploration_depth,
            step_id=step.step_id,
            stage_id=step.stage_id,
            assessment=assessment,
            message=state["message"],
            offer_chips=state.get("offer_chips", []),
            current_stage_id=current_stage.stage_id if current_stage else None,
            current_step_id=current_step.step_id if current_step else None,
            stage_complete=self.is_stage_complete(step.stage_id),
            document_complete=self.is_document_complete(),
        )
        return {"result": result, "trace": state["trace"] + ["apply"]}

    # =========================================================================
    # GRAPH
    # =========================================================================
    def _build_graph(self) -> StateGraph:
        """
        Build and compile the routing graph.

        guard fans out by interaction kind (or to force when a ceiling is hit);
        classify and suggestion both go through decide; everything ends in apply.
        """
        graph = StateGraph(RoutingState)

        graph.add_node("guard", self._guard_node)
        graph.add_node("classify", self._classify_node)
        graph.add_node("suggestion", self._suggestion_node)
        graph.add_node("decide", self._decide_node)
        graph.add_node("help", self._help_node)
        graph.add_node("confirm", self._confirm_node)
        graph.add_node("decline", self._decline_node)
        graph.add_node("force", self._force_node)
        graph.add_node("apply", self._apply_node)

        graph.set_entry_point("guard")
        graph.add_conditional_edges(
            "guard",
            self._route_after_guard,
            {
                "classify": "classify",
                "suggestion": "suggestion",
                "help": "help",
                "confirm": "confirm",
                "decline": "decline",
                "force": "force",
            },
        )

        graph.add_edge("classify", "decide")
        graph.add_edge("suggestion", "decide")
        for node in ("decide", "help", "confirm", "decline", "force"):
            graph.add_edge(node, "apply")
        graph.add_edge("apply", END)

        return graph.compile()
