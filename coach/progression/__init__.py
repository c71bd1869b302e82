"""
Adaptive Conversational Progression Engine

Drives a teacher through Framing → Journey → Deliverables:
1. Audience Policy Resolver - descriptor → complexity envelope
2. Quality Classifier - lexical tiering with explainable hints
3. Attempt Governor - per-step ceilings, termination guarantee
4. Confirmation Strategy Selector - tier + budget + provenance → behavior
5. ProgressionEngine - the step/stage state machine
"""

from coach.progression.audience import resolve
from coach.progression.classifier import QualityClassifier
from coach.progression.confirmation import ConfirmationStrategySelector
from coach.progression.engine import ProgressionEngine
from coach.progression.governor import AttemptGovernor
from coach.progression.registry import SessionRegistry

__all__ = [
    "resolve",
    "QualityClassifier",
    "ConfirmationStrategySelector",
    "ProgressionEngine",
    "AttemptGovernor",
    "SessionRegistry",
]
