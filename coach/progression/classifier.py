"""
Quality Classifier.

Tiers one free-text answer as HIGH / MEDIUM / LOW for a given step and
audience, with template-key hints explaining how to improve it.

Pipeline:
1. Fail closed on short input (needs_more_detail)
2. Wrong grammatical form for the step (wrong_form)
3. The step's ordered lexical rules, each adding points, hints or a tier cap
"""

import math
from typing import List, Optional

from coach.progression.catalog import DEFAULT_CATALOG, CurriculumCatalog, StepDefinition
from coach.progression.rules import ADVANCED_REGISTER, STEP_RULES, TextFeatures, extract_features
from coach.progression.schemas import AudienceProfile, QualityAssessment, QualityTier, StepForm


BASE_SCORE = 25
HIGH_THRESHOLD = 35
MEDIUM_THRESHOLD = 25


def tier_for_score(score: int) -> QualityTier:
    if score >= HIGH_THRESHOLD:
        return QualityTier.HIGH
    if score >= MEDIUM_THRESHOLD:
        return QualityTier.MEDIUM
    return QualityTier.LOW


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    ordered = []
    for item in items:
        if item not in seen:
            seen.add(item)
            ordered.append(item)
    return ordered


class QualityClassifier:
    """
    Shallow, explainable answer grading.

    The numeric score is internal; callers only ever see the tier, validity,
    hints and the names of the rules that matched.
    """

    def __init__(self, catalog: CurriculumCatalog = DEFAULT_CATALOG):
        self.catalog = catalog

    def min_words(self, step: StepDefinition, profile: AudienceProfile) -> int:
        return max(1, math.ceil(profile.min_word_count * step.min_word_factor))

    def classify(self, step_id: str, raw_text: Optional[str], profile: AudienceProfile) -> QualityAssessment:
        """
        Classify one answer.

        Raises:
            UnknownStepError: if step_id is not in the catalog.
        """
        step = self.catalog.step(step_id)
        features = extract_features(raw_text or "")

        if features.word_count < self.min_words(step, profile):
            hints, signals = ["needs_more_detail"], ["below_min_length"]
            # Short theory is flagged as abstract too when the audience disallows theory
            if not profile.allows_theory and features.has(ADVANCED_REGISTER):
                hints.append("too_abstract")
                signals.append("advanced_register")
            return self._assessment(QualityTier.LOW, hints, signals)

        form_failure = self._check_form(step, features)
        if form_failure is not None:
            return form_failure

        score = BASE_SCORE
        caps: List[QualityTier] = []
        hints: List[str] = []
        signals: List[str] = []

        for rule in STEP_RULES.get(step.step_id, []):
            if rule.predicate(features):
                signals.append(rule.signal)
                effect = rule.effect(profile, features)
            elif rule.on_miss is not None:
                effect = rule.on_miss(profile, features)
            else:
                continue

            score += effect.points
            hints.extend(effect.hints)
            if effect.cap is not None:
                caps.append(effect.cap)

        tier = tier_for_score(score)
        for cap in caps:
            if cap.rank < tier.rank:
                tier = cap

        return self._assessment(tier, hints, signals)

    def _check_form(self, step: StepDefinition, features: TextFeatures) -> Optional[QualityAssessment]:
        if step.form == StepForm.DECLARATIVE:
            if features.has_question_mark or features.opens_with_wh:
                return self._assessment(
                    QualityTier.LOW, ["wrong_form", "rephrase_as_statement"], ["question_form"]
                )
        elif not features.looks_like_question:
            return self._assessment(
                QualityTier.LOW, ["wrong_form", "rephrase_as_question"], ["statement_form"]
            )
        return None

    @staticmethod
    def _assessment(tier: QualityTier, hints: List[str], signals: List[str]) -> QualityAssessment:
        return QualityAssessment(
            tier=tier,
            is_valid=tier != QualityTier.LOW,
            hints=_dedupe(hints),
            matched_signals=signals,
        )
