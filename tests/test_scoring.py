"""Unit tests for the validation score and rating."""

import pytest

from google_address_validation.core.models import ConfidenceLevel, Rating
from google_address_validation.core.response import ValidationResult
from google_address_validation.core.scoring import rating_for_score, score_result


def _verdict_flags(**verdict) -> dict:
    return {
        "addressComplete": verdict.get("complete", False),
        "hasUnconfirmedComponents": verdict.get("unconfirmed", False),
        "hasInferredComponents": verdict.get("inferred", False),
        "hasReplacedComponents": verdict.get("replaced", False),
    }


def _result(make_payload, **verdict) -> ValidationResult:
    return ValidationResult(make_payload(verdict=_verdict_flags(**verdict)))


class TestRating:
    """Tests for rating_for_score()."""

    @pytest.mark.parametrize(
        ("score", "rating"),
        [
            (100, Rating.EXCELLENT),
            (90, Rating.EXCELLENT),
            (89, Rating.GOOD),
            (75, Rating.GOOD),
            (74, Rating.FAIR),
            (50, Rating.FAIR),
            (49, Rating.POOR),
            (0, Rating.POOR),
        ],
    )
    def test_bands(self, score, rating) -> None:
        assert rating_for_score(score) is rating


class TestScoreResult:
    """Tests for score_result()."""

    def test_fully_validated_scores_100(self, googleplex_payload) -> None:
        details = score_result(ValidationResult(googleplex_payload))
        assert details.score == 100
        assert details.rating is Rating.EXCELLENT
        assert details.confidence_level is ConfidenceLevel.HIGH
        assert details.breakdown == {
            "confidence": 80,
            "deliverable": 10,
            "precisely_located": 5,
            "standardized": 5,
        }

    def test_ordering_across_tiers(self, make_payload) -> None:
        fully_validated = ValidationResult(make_payload()).score

        high_only = ValidationResult(make_payload(
            geocode=None,
            verdict={"hasReplacedComponents": True},
            address={"formattedAddress": None},
        )).score

        medium = _result(make_payload, complete=True, inferred=True).score
        low = _result(make_payload, complete=False).score
        uncertain = _result(make_payload, complete=True, unconfirmed=True).score

        assert fully_validated > high_only > medium > low > uncertain

    def test_worst_high_beats_best_medium(self, make_payload) -> None:
        worst_high = ValidationResult(make_payload(
            geocode=None,
            verdict={"hasReplacedComponents": True},
            address={"formattedAddress": None},
        ))
        best_medium = _result(make_payload, complete=True, inferred=True)
        assert worst_high.confidence_level is ConfidenceLevel.HIGH
        assert worst_high.score == 78
        assert best_medium.score == 73

    def test_each_issue_lowers_score(self, make_payload) -> None:
        clean = _result(make_payload, complete=False)
        replaced = _result(make_payload, complete=False, replaced=True)
        inferred_and_replaced = _result(make_payload, complete=False, inferred=True, replaced=True)
        assert clean.score > replaced.score > inferred_and_replaced.score

    def test_missing_components_lower_score(self, make_payload) -> None:
        without = _result(make_payload, complete=False)
        payload = make_payload(
            verdict={"addressComplete": False},
            address={"missingComponentTypes": ["postal_code"]},
        )
        with_missing = ValidationResult(payload)
        assert with_missing.score == without.score - 2

    def test_uncertain_scores_drop_with_every_issue(self) -> None:
        def bare(**verdict) -> ValidationResult:
            return ValidationResult({"result": {"verdict": _verdict_flags(**verdict), "address": verdict.get("address", {})}})

        scores = [
            bare(complete=True, unconfirmed=True).score,
            bare(complete=True, unconfirmed=True, inferred=True).score,
            bare(complete=True, unconfirmed=True, inferred=True, replaced=True).score,
            bare(unconfirmed=True, inferred=True, replaced=True).score,
            bare(unconfirmed=True, inferred=True, replaced=True, address={"missingComponentTypes": ["route"]}).score,
        ]
        assert scores == [8, 6, 4, 2, 0]

    def test_worst_uncertain_result(self) -> None:
        payload = {
            "result": {
                "verdict": _verdict_flags(unconfirmed=True, inferred=True, replaced=True),
                "address": {"missingComponentTypes": ["route"]},
            },
        }
        details = ValidationResult(payload).score_details
        assert details.confidence_level is ConfidenceLevel.UNCERTAIN
        assert len(details.issues) == 5
        assert details.breakdown == {"confidence": 10, "issues": -10}
        assert details.score == 0
        assert details.rating is Rating.POOR

    def test_memoized_on_instance(self, googleplex_payload) -> None:
        result = ValidationResult(googleplex_payload)
        assert result.score_details is result.score_details
        assert result.rating is Rating.EXCELLENT
