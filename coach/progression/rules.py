"""
Lexical rules for the Quality Classifier.

Each step owns a short, ordered list of LexicalRule entries. A rule is:
- signal: the name reported in QualityAssessment.matched_signals
- predicate: a cheap keyword/punctuation test over TextFeatures
- effect: what a match does under a given AudienceProfile (points, hints, cap)
- on_miss: optional effect when the predicate does NOT match

No parsing, no NLU. Every rule is a word list or a regex so the verdict can be
explained back to the author as a hint.
"""

import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Pattern, Tuple

from coach.progression.schemas import AbstractionTier, AudienceProfile, QualityTier


# =============================================================================
# VOCABULARY
# =============================================================================

def _words(*terms: str) -> Pattern:
    """Word-start match for any of the terms (suffixes allowed)."""
    return re.compile(r"\b(?:" + "|".join(terms) + r")\w*", re.IGNORECASE)


def _phrases(*terms: str) -> Pattern:
    return re.compile(r"\b(?:" + "|".join(re.escape(term) for term in terms) + r")\b", re.IGNORECASE)


ADVANCED_REGISTER = _words(
    "theor", "philosoph", "epistemolog", "ontolog", "paradigm", "framework",
    "dialectic", "phenomenolog", "hermeneutic", "semiotic",
    "discourse", "praxis", "pedagog", "ideolog", "hegemon", "postmodern",
    "postcolonial", "deconstruct", "implications",
)

CONCRETE_ACTION = _words(
    "creat", "build", "built", "design", "make", "making", "made", "develop",
    "produc", "solv", "implement", r"appl(?:y|ies|ied|ying)", "demonstrat", "explor",
)

CONNECTIVE = _phrases(
    "and", "between", "versus", "vs", "through", "across", "within",
    "shape", "shapes", "shaped", "influence", "influences", "connect", "connects",
    "affect", "affects", "impact", "impacts", "relationship",
)

PHILOSOPHICAL_STARTERS = _phrases(
    "to what extent", "in what ways", "how might we reconcile",
    "what are the implications", "what does it mean",
)

OPEN_INQUIRY = _phrases("how might", "what if", "how can we", "how could")

CHALLENGE_ACTION = _words(
    "creat", "design", "develop", "build", "produc", "analy", "evaluat",
    "synthesi", "propos", "plan", "solv", "improv", "invent", "pitch", "write",
)

RESEARCH_COMPONENT = _words(
    "research", "thesis", "analys", "critique", "framework", "model", "theor",
    "investigat", "literature",
)

AUTHENTIC_AUDIENCE = _words(
    "communit", "audience", "local", "public", "famil", "partner", "stakeholder",
    "client", "city", "council", "museum", "exhibit", "present", "share", "neighbo",
)

SEQUENCE_STRUCTURE = _words(
    "week", "day", "lesson", "session", "phase", "stage", "step", "first",
    "then", "next", "finally", "launch", "kickoff",
)

LEARNING_ACTIVITY = _words(
    "interview", "investigat", "build", "test", "research", "visit", "collaborat",
    "present", "observ", "measur", "experiment", "creat", "design", "write",
    "debate", "map", "survey", "prototyp", "discuss", "read",
)

RESOURCE_REFERENCE = _words(
    "book", "article", "video", "expert", "guest", "speaker", "partner", "tool",
    "software", "app", "material", "suppl", "librar", "museum", "website",
    "data", "kit", "lab", "field trip", "communit", "template",
)

PRODUCT_VERB = _words(
    "creat", "build", "design", "write", "develop", "produc", "draft",
    "present", "submit", "complet", "prototyp", "publish",
)

CRITERIA_LANGUAGE = _words(
    "criteri", "level", "proficien", "exceed", "meets", "developing",
    "beginning", "advanced", "evidence", "score", "point", "indicator", "standard",
)

STUDENT_FRIENDLY = _phrases("i can", "students can", "students will", "we can")

ASSESSMENT_METHOD = _words(
    "feedback", "reflect", "portfolio", "presentation", "peer", "self-assess",
    "exhibition", "conference", "exit ticket", "checkpoint", "observation",
    "journal", "critique", "review", "quiz", "rubric",
)

INTERROGATIVE_OPENERS = (
    "how", "what", "why", "when", "where", "who", "which", "whose",
    "should", "could", "would", "can", "will", "does", "do", "is", "are",
)
WH_OPENERS = ("how", "what", "why", "when", "where", "who", "which", "whose")
CLOSED_OPENERS = ("is", "are", "do", "does", "can", "will", "should")
PHRASE_OPENERS = ("to what", "in what", "what if")

_TOKEN = re.compile(r"[A-Za-z0-9'+-]+")


# =============================================================================
# FEATURES
# =============================================================================

@dataclass(frozen=True)
class TextFeatures:
    """Shallow facts about one answer, computed once per classification."""
    raw: str
    lower: str
    words: Tuple[str, ...]

    @property
    def word_count(self) -> int:
        return len(self.words)

    @property
    def opener(self) -> str:
        return self.words[0].lower() if self.words else ""

    @property
    def has_question_mark(self) -> bool:
        return "?" in self.raw

    @property
    def looks_like_question(self) -> bool:
        return (
            self.has_question_mark
            or self.opener in INTERROGATIVE_OPENERS
            or self.lower.startswith(PHRASE_OPENERS)
        )

    @property
    def opens_with_wh(self) -> bool:
        return self.opener in WH_OPENERS

    def has(self, pattern: Pattern) -> bool:
        return bool(pattern.search(self.lower))


def extract_features(text: str) -> TextFeatures:
    stripped = (text or "").strip()
    return TextFeatures(raw=stripped, lower=stripped.lower(), words=tuple(_TOKEN.findall(stripped)))


# =============================================================================
# RULES
# =============================================================================

@dataclass(frozen=True)
class RuleEffect:
    points: int = 0
    hints: Tuple[str, ...] = ()
    cap: Optional[QualityTier] = None


NO_EFFECT = RuleEffect()

EffectFn = Callable[[AudienceProfile, TextFeatures], RuleEffect]


def _constant(effect: RuleEffect) -> EffectFn:
    return lambda profile, features: effect


@dataclass(frozen=True)
class LexicalRule:
    signal: str
    predicate: Callable[[TextFeatures], bool]
    effect: EffectFn = field(default=_constant(NO_EFFECT))
    on_miss: Optional[EffectFn] = None


def matches(pattern: Pattern) -> Callable[[TextFeatures], bool]:
    return lambda features: features.has(pattern)


def by_tier(
    high: RuleEffect = NO_EFFECT,
    medium_high: RuleEffect = NO_EFFECT,
    medium: RuleEffect = NO_EFFECT,
    low: RuleEffect = NO_EFFECT,
) -> EffectFn:
    """Pick a fixed effect per abstraction tier."""
    table = {
        AbstractionTier.HIGH: high,
        AbstractionTier.MEDIUM_HIGH: medium_high,
        AbstractionTier.MEDIUM: medium,
        AbstractionTier.LOW: low,
    }
    return lambda profile, features: table[profile.abstraction_tier]


def advanced_register(points: int = 15) -> LexicalRule:
    """
    Theory vocabulary with audience polarity.

    HIGH raises. MEDIUM_HIGH raises only with a concrete action beside it and
    otherwise caps at MEDIUM. Tiers that disallow theory cap at LOW.
    """
    def effect(profile: AudienceProfile, features: TextFeatures) -> RuleEffect:
        if profile.abstraction_tier == AbstractionTier.HIGH:
            return RuleEffect(points=points)
        if profile.allows_theory:
            if features.has(CONCRETE_ACTION):
                return RuleEffect(points=points)
            return RuleEffect(cap=QualityTier.MEDIUM, hints=("add_concrete_application",))
        return RuleEffect(cap=QualityTier.LOW, hints=("too_abstract",))

    return LexicalRule("advanced_register", matches(ADVANCED_REGISTER), effect)


def _closed_question(features: TextFeatures) -> bool:
    return features.opener in CLOSED_OPENERS


# =============================================================================
# PER-STEP RULE SETS
# =============================================================================

STEP_RULES: Dict[str, List[LexicalRule]] = {
    "central_concept": [
        LexicalRule(
            "advanced_register",
            matches(ADVANCED_REGISTER),
            advanced_register().effect,
            on_miss=by_tier(high=RuleEffect(hints=("explore_theoretical_dimensions",))),
        ),
        LexicalRule(
            "concrete_action",
            matches(CONCRETE_ACTION),
            by_tier(
                high=RuleEffect(points=5),
                medium_high=RuleEffect(points=15),
                medium=RuleEffect(points=15),
                low=RuleEffect(points=15),
            ),
            on_miss=by_tier(
                high=RuleEffect(hints=("consider_application",)),
                medium=RuleEffect(hints=("connect_to_experience",)),
                low=RuleEffect(hints=("connect_to_experience",)),
            ),
        ),
        LexicalRule(
            "conceptual_connection",
            matches(CONNECTIVE),
            by_tier(
                high=RuleEffect(points=5),
                medium_high=RuleEffect(points=10),
                medium=RuleEffect(points=10),
                low=RuleEffect(points=10),
            ),
        ),
    ],
    "driving_question": [
        LexicalRule(
            "question_mark",
            lambda features: features.has_question_mark,
            on_miss=_constant(RuleEffect(cap=QualityTier.MEDIUM, hints=("end_with_question_mark",))),
        ),
        LexicalRule(
            "closed_question",
            _closed_question,
            _constant(RuleEffect(cap=QualityTier.MEDIUM, hints=("make_open_ended",))),
        ),
        LexicalRule(
            "philosophical_framing",
            matches(PHILOSOPHICAL_STARTERS),
            by_tier(high=RuleEffect(points=15), medium_high=RuleEffect(points=15)),
            on_miss=by_tier(high=RuleEffect(points=5, hints=("add_theoretical_depth",))),
        ),
        LexicalRule(
            "open_inquiry",
            matches(OPEN_INQUIRY),
            by_tier(
                medium_high=RuleEffect(points=15),
                medium=RuleEffect(points=10),
                low=RuleEffect(points=10),
            ),
            on_miss=by_tier(medium_high=RuleEffect(hints=("make_more_open_ended",))),
        ),
        LexicalRule(
            "advanced_register",
            matches(ADVANCED_REGISTER),
            advanced_register(points=10).effect,
            on_miss=by_tier(medium=RuleEffect(points=10), low=RuleEffect(points=10)),
        ),
    ],
    "challenge": [
        LexicalRule(
            "action_verb",
            matches(CHALLENGE_ACTION),
            _constant(RuleEffect(points=10)),
            on_miss=_constant(RuleEffect(cap=QualityTier.LOW, hints=("describe_student_action",))),
        ),
        LexicalRule(
            "research_component",
            matches(RESEARCH_COMPONENT),
            by_tier(high=RuleEffect(points=10)),
            on_miss=by_tier(high=RuleEffect(hints=("add_research_component",))),
        ),
        advanced_register(points=5),
        LexicalRule(
            "authentic_audience",
            matches(AUTHENTIC_AUDIENCE),
            _constant(RuleEffect(points=5)),
            on_miss=_constant(RuleEffect(hints=("name_authentic_audience",))),
        ),
    ],
    "phases": [
        LexicalRule(
            "sequence_structure",
            matches(SEQUENCE_STRUCTURE),
            by_tier(
                high=RuleEffect(points=15),
                medium_high=RuleEffect(points=10),
                medium=RuleEffect(points=10),
                low=RuleEffect(points=10),
            ),
            # Advanced learners may outline self-directed phases without a calendar
            on_miss=by_tier(
                high=RuleEffect(points=10, hints=("add_timeline",)),
                medium_high=RuleEffect(cap=QualityTier.LOW, hints=("break_into_steps",)),
                medium=RuleEffect(cap=QualityTier.LOW, hints=("break_into_steps",)),
                low=RuleEffect(cap=QualityTier.LOW, hints=("break_into_steps",)),
            ),
        ),
        advanced_register(points=5),
    ],
    "activities": [
        LexicalRule(
            "learning_activity",
            matches(LEARNING_ACTIVITY),
            _constant(RuleEffect(points=10)),
            on_miss=_constant(RuleEffect(cap=QualityTier.LOW, hints=("describe_student_action",))),
        ),
        LexicalRule("sequence_structure", matches(SEQUENCE_STRUCTURE), _constant(RuleEffect(points=5))),
        advanced_register(points=5),
    ],
    "resources": [
        LexicalRule(
            "resource_reference",
            matches(RESOURCE_REFERENCE),
            _constant(RuleEffect(points=10)),
            on_miss=_constant(RuleEffect(cap=QualityTier.MEDIUM, hints=("name_specific_resources",))),
        ),
        LexicalRule(
            "list_structure",
            lambda features: "," in features.raw or " and " in features.lower,
            _constant(RuleEffect(points=5)),
        ),
        advanced_register(points=5),
    ],
    "milestones": [
        LexicalRule(
            "product_verb",
            matches(PRODUCT_VERB),
            _constant(RuleEffect(points=10)),
            on_miss=_constant(RuleEffect(cap=QualityTier.LOW, hints=("describe_what_students_create",))),
        ),
        LexicalRule(
            "sequence_structure",
            matches(SEQUENCE_STRUCTURE),
            _constant(RuleEffect(points=5)),
            on_miss=_constant(RuleEffect(hints=("add_timeline",))),
        ),
        advanced_register(points=5),
    ],
    "rubric": [
        LexicalRule(
            "criteria_language",
            matches(CRITERIA_LANGUAGE),
            _constant(RuleEffect(points=10)),
            on_miss=_constant(RuleEffect(cap=QualityTier.LOW, hints=("name_criteria_and_levels",))),
        ),
        LexicalRule("student_friendly", matches(STUDENT_FRIENDLY), _constant(RuleEffect(points=5))),
        advanced_register(points=5),
    ],
    "assessment": [
        LexicalRule(
            "assessment_method",
            matches(ASSESSMENT_METHOD),
            _constant(RuleEffect(points=10)),
            on_miss=_constant(RuleEffect(cap=QualityTier.LOW, hints=("name_assessment_methods",))),
        ),
        LexicalRule("authentic_audience", matches(AUTHENTIC_AUDIENCE), _constant(RuleEffect(points=5))),
        advanced_register(points=5),
    ],
}
