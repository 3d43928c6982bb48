"""Pydantic data models shared across the package.

The payload sub-models mirror the JSON returned by the Address Validation
API. Every field is optional so that a partial payload still parses; the
interpreter in ``response.py`` layers the derived judgments on top.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class ConfidenceLevel(str, Enum):
    """How much the validation verdict can be trusted."""

    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"
    UNCERTAIN = "UNCERTAIN"


class AddressType(str, Enum):
    """Primary classification of a validated address."""

    PO_BOX = "po_box"
    LANDMARK = "landmark"
    RESIDENTIAL = "residential"
    BUSINESS = "business"
    UNKNOWN = "unknown"

    @property
    def label(self) -> str:
        return ADDRESS_TYPE_LABELS[self]


ADDRESS_TYPE_LABELS: dict[AddressType, str] = {
    AddressType.PO_BOX: "PO Box",
    AddressType.LANDMARK: "Landmark/Point of Interest",
    AddressType.RESIDENTIAL: "Residential Address",
    AddressType.BUSINESS: "Business Address",
    AddressType.UNKNOWN: "Unknown Address Type",
}


class Rating(str, Enum):
    """Qualitative band for a 0-100 validation score."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"


# ─── Request options ─────────────────────────────────────────────────────────


class ValidationOptions(BaseModel):
    """Per-call (or default) request options.

    ``None`` means "not supplied" and is never sent. An explicit ``False``
    or empty mapping is a real value and is sent as such.
    """

    model_config = ConfigDict(frozen=True)

    previous_response_id: Optional[str] = None
    enable_usps_cass: Optional[bool] = None
    language_options: Optional[dict[str, Any]] = None
    session_token: Optional[str] = None

    def merge(self, overrides: Optional[ValidationOptions]) -> ValidationOptions:
        """Return a copy where every supplied field of *overrides* wins."""
        if overrides is None:
            return self
        return self.model_copy(update=overrides.model_dump(exclude_none=True))


# ─── Response payload ────────────────────────────────────────────────────────


class _PayloadModel(BaseModel):
    """Base for API payload blocks: camelCase aliases, unknown keys kept."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def drop_nulls(cls, data: Any) -> Any:
        # An explicit JSON null reads as an absent key, so the field default applies.
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Verdict(_PayloadModel):
    input_granularity: Optional[str] = None
    validation_granularity: Optional[str] = None
    geocode_granularity: Optional[str] = None
    address_complete: bool = False
    has_unconfirmed_components: bool = False
    has_inferred_components: bool = False
    has_replaced_components: bool = False


class PostalAddress(_PayloadModel):
    revision: Optional[int] = None
    region_code: Optional[str] = None
    language_code: Optional[str] = None
    postal_code: Optional[str] = None
    sorting_code: Optional[str] = None
    administrative_area: Optional[str] = None
    locality: Optional[str] = None
    sublocality: Optional[str] = None
    address_lines: list[str] = Field(default_factory=list)
    recipients: list[str] = Field(default_factory=list)
    organization: Optional[str] = None


class Address(_PayloadModel):
    formatted_address: Optional[str] = None
    postal_address: Optional[PostalAddress] = None
    address_components: list[dict[str, Any]] = Field(default_factory=list)
    missing_component_types: list[str] = Field(default_factory=list)
    unconfirmed_component_types: list[str] = Field(default_factory=list)
    unresolved_tokens: list[str] = Field(default_factory=list)


class LatLng(_PayloadModel):
    latitude: Optional[float] = None
    longitude: Optional[float] = None


class Geocode(_PayloadModel):
    location: Optional[LatLng] = None
    plus_code: Optional[dict[str, Any]] = None
    bounds: Optional[dict[str, Any]] = None
    feature_size_meters: Optional[float] = None
    place_id: Optional[str] = None
    place_types: list[str] = Field(default_factory=list)


class AddressMetadata(_PayloadModel):
    business: bool = False
    po_box: bool = False
    residential: bool = False


class UspsData(_PayloadModel):
    standardized_address: Optional[dict[str, Any]] = None
    delivery_point_code: Optional[str] = None
    delivery_point_check_digit: Optional[str] = None
    carrier_route: Optional[str] = None
    dpv_confirmation: Optional[str] = None
    dpv_cmra: Optional[str] = None
    dpv_vacant: Optional[str] = None
    dpv_no_stat: Optional[str] = None
    county: Optional[str] = None


class ResultBlock(_PayloadModel):
    """The ``result`` object of a validateAddress response."""

    verdict: Optional[Verdict] = None
    address: Optional[Address] = None
    geocode: Optional[Geocode] = None
    metadata: Optional[AddressMetadata] = None
    usps_data: Optional[UspsData] = None
    english_latin_address: Optional[Address] = None


# ─── Derived reports ─────────────────────────────────────────────────────────


class ValidityReport(BaseModel):
    """Validity summary derived from the verdict."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    confidence_level: ConfidenceLevel
    issues: tuple[str, ...] = ()


class ValidationScore(BaseModel):
    """A 0-100 score with the contributions that produced it."""

    model_config = ConfigDict(frozen=True)

    score: int = Field(ge=0, le=100, description="0 = unusable, 100 = fully validated")
    rating: Rating
    confidence_level: ConfidenceLevel
    breakdown: dict[str, int] = Field(default_factory=dict, description="Named contributions to the score")
    issues: tuple[str, ...] = ()


# ─── Client configuration ────────────────────────────────────────────────────

API_ENDPOINT = "https://addressvalidation.googleapis.com/v1:validateAddress"
DEFAULT_CACHE_EXPIRATION = 24 * 60 * 60
DEFAULT_TIMEOUT_SECONDS = 15.0


class ClientConfig(BaseModel):
    """Settings shared by every call made through one client."""

    model_config = ConfigDict(frozen=True)

    api_key: str = Field(min_length=1, repr=False)
    enable_cache: bool = True
    cache_expiration: int = Field(DEFAULT_CACHE_EXPIRATION, ge=0, description="Cache TTL in seconds, 0 = never expire")
    cache_backend: Literal["memory", "sqlite"] = "memory"
    default_options: ValidationOptions = Field(default_factory=ValidationOptions)
    endpoint: str = API_ENDPOINT
    timeout: float = Field(DEFAULT_TIMEOUT_SECONDS, gt=0)
