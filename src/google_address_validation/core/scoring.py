"""Validation score and rating.

Turns the judgments of a ``ValidationResult`` into a single 0-100 number
for display. The confidence tier sets the base, a few positive signals add
on top, and every validity issue takes points away:

    tier base      HIGH 80, MEDIUM 55, LOW 30, UNCERTAIN 10
    bonuses        deliverable +10, precisely located +5, standardized +5
    penalty        -2 per validity issue, clamped to 0..100

The bonuses never add up to more than the gap between HIGH, MEDIUM and LOW,
so a result can never outrank a result from a higher one of those tiers:
HIGH lands in 78-100, MEDIUM in 51-73, LOW in 22-48, UNCERTAIN in 0-30.
A result carries at most five issues, so the UNCERTAIN base absorbs the
full penalty and the clamp at 0 is never reached.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .models import ConfidenceLevel, Rating, ValidationScore

if TYPE_CHECKING:
    from .response import ValidationResult

logger = logging.getLogger(__name__)

TIER_BASE: dict[ConfidenceLevel, int] = {
    ConfidenceLevel.HIGH: 80,
    ConfidenceLevel.MEDIUM: 55,
    ConfidenceLevel.LOW: 30,
    ConfidenceLevel.UNCERTAIN: 10,
}

DELIVERABLE_BONUS = 10
PRECISE_LOCATION_BONUS = 5
STANDARDIZED_BONUS = 5
ISSUE_PENALTY = 2

# Lower bound of each rating band, checked top-down.
RATING_BANDS: tuple[tuple[int, Rating], ...] = (
    (90, Rating.EXCELLENT),
    (75, Rating.GOOD),
    (50, Rating.FAIR),
)


def rating_for_score(score: int) -> Rating:
    """Map a 0-100 score onto its qualitative rating."""
    for threshold, rating in RATING_BANDS:
        if score >= threshold:
            return rating
    return Rating.POOR


def score_result(result: ValidationResult) -> ValidationScore:
    """Score a validation result.

    Deterministic: the same payload always yields the same score.
    """
    validity = result.check_validity()
    confidence = validity.confidence_level

    breakdown = {"confidence": TIER_BASE[confidence]}
    if result.is_deliverable():
        breakdown["deliverable"] = DELIVERABLE_BONUS
    if result.is_precisely_located():
        breakdown["precisely_located"] = PRECISE_LOCATION_BONUS
    if result.is_standardized():
        breakdown["standardized"] = STANDARDIZED_BONUS
    if validity.issues:
        breakdown["issues"] = -ISSUE_PENALTY * len(validity.issues)

    score = max(0, min(100, sum(breakdown.values())))
    rating = rating_for_score(score)

    logger.debug(
        "Scored response %s: %d (%s, %s)",
        result.response_id, score, rating.value, confidence.value,
    )

    return ValidationScore(
        score=score,
        rating=rating,
        confidence_level=confidence,
        breakdown=breakdown,
        issues=validity.issues,
    )
