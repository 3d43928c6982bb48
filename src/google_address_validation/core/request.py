"""Request body assembly for the validateAddress endpoint.

Pure functions only: nothing here performs I/O or raises on odd input.
Address content is not checked; the API is the judge of that.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import Any, Optional, Union

from .models import ValidationOptions

CACHE_KEY_PREFIX = "google_address_validation_"

# PostalAddress fields the API accepts on input, in emission order.
ADDRESS_FIELDS = (
    "revision",
    "regionCode",
    "languageCode",
    "postalCode",
    "sortingCode",
    "administrativeArea",
    "locality",
    "sublocality",
    "addressLines",
)

AddressInput = Union[str, Mapping[str, Any]]


def normalize_address(address: AddressInput) -> dict[str, Any]:
    """Convert a free-text or structured address into a PostalAddress dict.

    A plain string becomes a single address line. For a mapping, only the
    fields in ``ADDRESS_FIELDS`` are copied; anything else is dropped.
    """
    if isinstance(address, str):
        return {"addressLines": [address]}

    formatted: dict[str, Any] = {}
    for field in ADDRESS_FIELDS:
        value = address.get(field)
        if value is None:
            continue
        if field == "addressLines":
            value = [value] if isinstance(value, str) else list(value)
        formatted[field] = value
    return formatted


def build_request_body(
    address: AddressInput,
    options: Optional[ValidationOptions] = None,
    previous_response_id: Optional[str] = None,
    session_token: Optional[str] = None,
) -> dict[str, Any]:
    """Assemble the JSON body for a validateAddress call.

    Optional keys are only present when the matching value was supplied.
    Explicit ``previous_response_id`` / ``session_token`` arguments take
    precedence over the same fields in *options*.
    """
    options = options or ValidationOptions()
    body: dict[str, Any] = {"address": normalize_address(address)}

    previous = previous_response_id if previous_response_id is not None else options.previous_response_id
    if previous is not None:
        body["previousResponseId"] = previous

    if options.enable_usps_cass is not None:
        body["enableUspsCass"] = bool(options.enable_usps_cass)

    if options.language_options is not None:
        body["languageOptions"] = dict(options.language_options)

    token = session_token if session_token is not None else options.session_token
    if token is not None:
        body["sessionToken"] = token

    return body


def canonical_json(body: Mapping[str, Any]) -> str:
    """Serialize *body* so that equal requests produce identical strings."""
    return json.dumps(body, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def cache_key(body: Mapping[str, Any], namespace: str) -> str:
    """Stable cache key for a request body, scoped to *namespace* (the API key)."""
    digest = hashlib.sha256((canonical_json(body) + namespace).encode("utf-8")).hexdigest()
    return f"{CACHE_KEY_PREFIX}{digest}"
