"""Interpretation of a validateAddress response.

``ValidationResult`` wraps one decoded payload and answers questions about
it: how complete and trustworthy the address is, what kind of place it is,
whether mail can be delivered there. Every accessor is total. Missing blocks
fall back to empty defaults instead of raising, because the API omits
whole sub-objects depending on region and request options.

Derived values are cached per instance. The payload is never mutated after
construction, so a cached value can never go stale.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from functools import cached_property
from typing import Any, Optional

from pydantic import ValidationError

from .errors import DecodeError
from .models import (
    Address,
    AddressMetadata,
    AddressType,
    ConfidenceLevel,
    Geocode,
    PostalAddress,
    Rating,
    ResultBlock,
    UspsData,
    ValidationScore,
    ValidityReport,
    Verdict,
)
from .scoring import score_result

logger = logging.getLogger(__name__)

GRANULARITY_PREMISE = "PREMISE"

# USPS encodes its DPV flags as the strings "Y" / "N", or leaves them out.
USPS_CONFIRMED = "Y"
USPS_NOT_CONFIRMED = "N"


class ValidationResult:
    """Read-only view over a single Address Validation API response."""

    def __init__(self, data: Mapping[str, Any]):
        if not isinstance(data, Mapping):
            raise TypeError(f"ValidationResult expects a JSON object, got {type(data).__name__}")
        raw_result = data.get("result") or {}
        if not isinstance(raw_result, Mapping):
            raise DecodeError("Address Validation API response has a malformed 'result' block")
        try:
            self._result = ResultBlock.model_validate(raw_result)
        except ValidationError as exc:
            logger.warning("Unexpected validateAddress payload shape: %s", exc)
            raise DecodeError("Address Validation API response has a malformed 'result' block") from exc
        self._data = dict(data)
        self._response_id: Optional[str] = data.get("responseId")

    def __repr__(self) -> str:
        return f"ValidationResult(response_id={self._response_id!r}, formatted_address={self.formatted_address!r})"

    @property
    def raw(self) -> dict[str, Any]:
        """The payload this result was built from (a shallow copy)."""
        return dict(self._data)

    # ─── Verdict ─────────────────────────────────────────────────────────

    @property
    def response_id(self) -> Optional[str]:
        return self._response_id

    @property
    def verdict(self) -> Verdict:
        return self._result.verdict or Verdict()

    @property
    def input_granularity(self) -> Optional[str]:
        return self.verdict.input_granularity

    @property
    def validation_granularity(self) -> Optional[str]:
        return self.verdict.validation_granularity

    @property
    def geocode_granularity(self) -> Optional[str]:
        return self.verdict.geocode_granularity

    @property
    def is_address_complete(self) -> bool:
        return self.verdict.address_complete

    @property
    def has_unconfirmed_components(self) -> bool:
        return self.verdict.has_unconfirmed_components

    @property
    def has_inferred_components(self) -> bool:
        return self.verdict.has_inferred_components

    @property
    def has_replaced_components(self) -> bool:
        return self.verdict.has_replaced_components

    # ─── Address ─────────────────────────────────────────────────────────

    @property
    def address(self) -> Address:
        return self._result.address or Address()

    @property
    def formatted_address(self) -> Optional[str]:
        return self.address.formatted_address

    @property
    def postal_address(self) -> Optional[PostalAddress]:
        return self.address.postal_address

    @property
    def _postal(self) -> PostalAddress:
        return self.address.postal_address or PostalAddress()

    @property
    def address_lines(self) -> list[str]:
        return list(self._postal.address_lines)

    @property
    def administrative_area(self) -> Optional[str]:
        return self._postal.administrative_area

    @property
    def region_code(self) -> Optional[str]:
        return self._postal.region_code

    @property
    def locality(self) -> Optional[str]:
        return self._postal.locality

    @property
    def sublocality(self) -> Optional[str]:
        return self._postal.sublocality

    @property
    def postal_code(self) -> Optional[str]:
        return self._postal.postal_code

    @property
    def sorting_code(self) -> Optional[str]:
        return self._postal.sorting_code

    @property
    def language_code(self) -> Optional[str]:
        return self._postal.language_code

    @property
    def address_components(self) -> list[dict[str, Any]]:
        return list(self.address.address_components)

    def address_component(self, component_type: str) -> Optional[dict[str, Any]]:
        """Return the first address component of *component_type*, if any."""
        for component in self.address.address_components:
            if component.get("componentType") == component_type:
                return component
        return None

    @property
    def missing_component_types(self) -> list[str]:
        return list(self.address.missing_component_types)

    @property
    def unconfirmed_component_types(self) -> list[str]:
        return list(self.address.unconfirmed_component_types)

    @property
    def unresolved_tokens(self) -> list[str]:
        return list(self.address.unresolved_tokens)

    @property
    def english_latin_address(self) -> Optional[Address]:
        return self._result.english_latin_address

    @property
    def standardized_address(self) -> dict[str, Any]:
        """Flat snake_case view of the postal address plus the formatted line."""
        postal = self._postal
        return {
            "address_lines": list(postal.address_lines),
            "administrative_area": postal.administrative_area,
            "language_code": postal.language_code,
            "locality": postal.locality,
            "postal_code": postal.postal_code,
            "region_code": postal.region_code,
            "sorting_code": postal.sorting_code,
            "sublocality": postal.sublocality,
            "formatted_address": self.formatted_address,
        }

    # ─── Geocode ─────────────────────────────────────────────────────────

    @property
    def _geocode(self) -> Geocode:
        return self._result.geocode or Geocode()

    @property
    def geocode(self) -> Optional[dict[str, Optional[float]]]:
        """Latitude/longitude, or ``None`` when the response has no location."""
        location = self._geocode.location
        if location is None:
            return None
        return {"latitude": location.latitude, "longitude": location.longitude}

    @property
    def coordinates(self) -> tuple[Optional[float], Optional[float]]:
        geocode = self.geocode or {}
        return geocode.get("latitude"), geocode.get("longitude")

    @property
    def plus_code(self) -> Optional[dict[str, Any]]:
        return self._geocode.plus_code

    @property
    def viewport(self) -> Optional[dict[str, Any]]:
        return self._geocode.bounds

    @property
    def feature_size_meters(self) -> Optional[float]:
        return self._geocode.feature_size_meters

    @property
    def place_id(self) -> Optional[str]:
        return self._geocode.place_id

    @property
    def place_types(self) -> list[str]:
        return list(self._geocode.place_types)

    # ─── Metadata ────────────────────────────────────────────────────────

    @property
    def metadata(self) -> AddressMetadata:
        return self._result.metadata or AddressMetadata()

    @property
    def is_business(self) -> bool:
        return self.metadata.business

    @property
    def is_po_box(self) -> bool:
        return self.metadata.po_box

    @property
    def is_residential(self) -> bool:
        return self.metadata.residential

    # ─── USPS ────────────────────────────────────────────────────────────

    @property
    def usps_data(self) -> Optional[UspsData]:
        return self._result.usps_data

    @property
    def _usps(self) -> UspsData:
        return self._result.usps_data or UspsData()

    @property
    def usps_standardized_address(self) -> Optional[dict[str, Any]]:
        return self._usps.standardized_address

    @property
    def delivery_point_code(self) -> Optional[str]:
        return self._usps.delivery_point_code

    @property
    def carrier_route(self) -> Optional[str]:
        return self._usps.carrier_route

    @property
    def dpv_confirmation(self) -> Optional[str]:
        return self._usps.dpv_confirmation

    def is_commercial_mail_receiver(self) -> bool:
        return self._usps.dpv_cmra == USPS_CONFIRMED

    def is_vacant(self) -> bool:
        return self._usps.dpv_vacant == USPS_CONFIRMED

    def is_active(self) -> bool:
        return self._usps.dpv_no_stat == USPS_NOT_CONFIRMED

    # ─── Classification ──────────────────────────────────────────────────

    def address_type(self) -> AddressType:
        """Classify the address. The first matching rule wins.

        PO boxes are checked before anything else since a PO box address
        can carry the business flag as well.
        """
        if self.is_po_box:
            return AddressType.PO_BOX
        if self.is_valid_landmark():
            return AddressType.LANDMARK
        if self.is_residential:
            return AddressType.RESIDENTIAL
        if self.is_business:
            return AddressType.BUSINESS
        return AddressType.UNKNOWN

    def address_type_label(self) -> str:
        return self.address_type().label

    def is_valid_landmark(self) -> bool:
        return (
            not self.has_unconfirmed_components
            and self.geocode is not None
            and self.place_id is not None
        )

    # ─── Confidence & validity ───────────────────────────────────────────

    @cached_property
    def confidence_level(self) -> ConfidenceLevel:
        complete = self.is_address_complete
        unconfirmed = self.has_unconfirmed_components
        if complete and not unconfirmed and not self.has_inferred_components:
            return ConfidenceLevel.HIGH
        if complete and not unconfirmed:
            return ConfidenceLevel.MEDIUM
        if not unconfirmed:
            return ConfidenceLevel.LOW
        return ConfidenceLevel.UNCERTAIN

    @cached_property
    def _validity(self) -> ValidityReport:
        return ValidityReport(
            is_valid=self.is_address_complete and not self.has_unconfirmed_components,
            confidence_level=self.confidence_level,
            issues=tuple(self._validity_issues()),
        )

    def check_validity(self) -> ValidityReport:
        """Validity, confidence level and the list of issues found."""
        return self._validity

    def _validity_issues(self) -> list[str]:
        issues = []

        if not self.is_address_complete:
            issues.append("Address is incomplete")
            missing = self.missing_component_types
            if missing:
                issues.append(f"Missing components: {', '.join(missing)}")

        if self.has_unconfirmed_components:
            issues.append(f"Has unconfirmed components: {', '.join(self.unconfirmed_component_types)}")

        if self.has_inferred_components:
            issues.append("Contains inferred components")

        if self.has_replaced_components:
            issues.append("Contains replaced components")

        return issues

    # ─── Predicates ──────────────────────────────────────────────────────

    def is_us_address(self) -> bool:
        return self.region_code == "US"

    def is_fully_validated(self) -> bool:
        return (
            self.is_address_complete
            and not self.has_unconfirmed_components
            and not self.has_inferred_components
            and not self.has_replaced_components
        )

    def is_high_confidence(self) -> bool:
        return self.confidence_level is ConfidenceLevel.HIGH

    def has_minimal_components(self) -> bool:
        return (
            self.postal_code is not None
            and self.locality is not None
            and bool(self.address_lines)
        )

    def is_exact_match(self) -> bool:
        return not self.has_inferred_components and not self.has_replaced_components

    def is_minimal_valid(self) -> bool:
        return self.formatted_address is not None and self.geocode is not None

    def is_deliverable(self) -> bool:
        """Whether mail can reach the address.

        With USPS data the DPV confirmation decides on its own; the region
        code plays no part in choosing the branch.
        """
        if self.usps_data is not None:
            return self.dpv_confirmation == USPS_CONFIRMED
        return (
            self.is_address_complete
            and not self.has_unconfirmed_components
            and self.geocode is not None
        )

    def is_precisely_located(self) -> bool:
        return self.geocode is not None and self.geocode_granularity == GRANULARITY_PREMISE

    def is_standardized(self) -> bool:
        standardized = self.standardized_address
        return bool(standardized["postal_code"] and standardized["locality"] and standardized["formatted_address"])

    def is_shippable(self) -> bool:
        if self.usps_data is not None:
            return self.is_deliverable()
        return self.has_minimal_components() and not self.has_unconfirmed_components

    def is_verification_needed(self) -> bool:
        return (
            self.has_unconfirmed_components
            or self.has_inferred_components
            or not self.is_address_complete
        )

    # ─── Score ───────────────────────────────────────────────────────────

    @cached_property
    def score_details(self) -> ValidationScore:
        return score_result(self)

    @property
    def score(self) -> int:
        return self.score_details.score

    @property
    def rating(self) -> Rating:
        return self.score_details.rating
