"""
Audience Policy Resolver.

Maps a free-text audience descriptor ("7th graders", "ages 14-16",
"undergraduate seminar") to an AudienceProfile. Deterministic and total:
anything it cannot read degrades to a conservative tier instead of failing.

Classification order:
1. Advanced-education vocabulary → HIGH
2. Numeric age (or grade level converted to age) → MEDIUM_HIGH / MEDIUM / LOW
3. Anything else → MEDIUM
Empty descriptors resolve to LOW.
"""

import re
from typing import Dict, Optional

from coach.progression.schemas import AbstractionTier, AudienceProfile


ADVANCED_EDUCATION_TERMS = (
    "college", "university", "undergraduate", "graduate",
    "masters", "phd", "doctoral", "postsecondary", "post-secondary",
    "higher ed", "adult", "professional", "18+", "19+", "20+",
)

GRADE_OFFSET = 5  # grade N students are roughly N + 5 years old

_GRADE_BEFORE = re.compile(r"\bgrades?\s*(k|\d{1,2})\b", re.IGNORECASE)
_GRADE_AFTER = re.compile(r"\b(\d{1,2})(?:st|nd|rd|th)?[\s-]+grade", re.IGNORECASE)
_KINDERGARTEN = re.compile(r"\b(kindergarten|kinder|pre-?k)\b", re.IGNORECASE)
_NUMBER = re.compile(r"(\d{1,3})")


# Tier parameters. min_word_count and max_exploration_depth follow the
# age-adaptive validator and flow controller limits.
TIER_POLICIES: Dict[AbstractionTier, Dict[str, object]] = {
    AbstractionTier.HIGH: {
        "allows_theory": True,
        "allows_meta_reasoning": True,
        "min_word_count": 3,
        "max_exploration_depth": 4,
    },
    AbstractionTier.MEDIUM_HIGH: {
        "allows_theory": True,
        "allows_meta_reasoning": False,
        "min_word_count": 5,
        "max_exploration_depth": 3,
    },
    AbstractionTier.MEDIUM: {
        "allows_theory": False,
        "allows_meta_reasoning": False,
        "min_word_count": 8,
        "max_exploration_depth": 2,
    },
    AbstractionTier.LOW: {
        "allows_theory": False,
        "allows_meta_reasoning": False,
        "min_word_count": 10,
        "max_exploration_depth": 2,
    },
}

META_REASONING_AGE = 16


def is_advanced_education(descriptor: str) -> bool:
    lower = descriptor.lower()
    return any(term in lower for term in ADVANCED_EDUCATION_TERMS)


def extract_age(descriptor: str) -> Optional[int]:
    """
    Pull an approximate learner age out of the descriptor.

    Grade levels are converted ("grade 7" / "7th grade" → 12, "kindergarten" → 5);
    otherwise the first number is taken as an age ("ages 14-16" → 14).
    """
    match = _GRADE_BEFORE.search(descriptor) or _GRADE_AFTER.search(descriptor)
    if match:
        grade = match.group(1).lower()
        return GRADE_OFFSET if grade == "k" else int(grade) + GRADE_OFFSET

    if _KINDERGARTEN.search(descriptor):
        return GRADE_OFFSET

    match = _NUMBER.search(descriptor)
    if match:
        return int(match.group(1))
    return None


def tier_for_age(age: int) -> AbstractionTier:
    if age >= 14:
        return AbstractionTier.MEDIUM_HIGH
    if age >= 11:
        return AbstractionTier.MEDIUM
    return AbstractionTier.LOW


def build_profile(tier: AbstractionTier, age: Optional[int] = None) -> AudienceProfile:
    policy = dict(TIER_POLICIES[tier])
    if tier == AbstractionTier.MEDIUM_HIGH and age is not None:
        policy["allows_meta_reasoning"] = age >= META_REASONING_AGE
    return AudienceProfile(abstraction_tier=tier, **policy)


def resolve(descriptor: Optional[str]) -> AudienceProfile:
    """Resolve an audience descriptor to its complexity envelope."""
    text = (descriptor or "").strip()
    if not text:
        return build_profile(AbstractionTier.LOW)

    if is_advanced_education(text):
        return build_profile(AbstractionTier.HIGH)

    age = extract_age(text)
    if age is not None:
        return build_profile(tier_for_age(age), age)

    return build_profile(AbstractionTier.MEDIUM)
