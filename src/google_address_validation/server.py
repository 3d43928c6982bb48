"""Google Address Validation MCP Server.

FastMCP server exposing address validation as tools.
Run: google-address-validation-mcp
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from mcp.server.fastmcp import FastMCP
from mcp.types import ToolAnnotations

from .cache import ManagedCache, create_cache
from .config import load_config
from .core.clients.address_validation import AddressValidationClient
from .core.models import ValidationOptions
from .core.response import ValidationResult
from .scheduler import CachePurgeScheduler

logger = logging.getLogger(__name__)

READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=True)
DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=True, openWorldHint=False)

_client: Optional[AddressValidationClient] = None
_cache: Optional[ManagedCache] = None
_scheduler: Optional[CachePurgeScheduler] = None


async def _get_client() -> AddressValidationClient:
    """Build the shared client on first use from the environment."""
    global _client, _cache, _scheduler
    if _client is None:
        config = load_config()
        if config.enable_cache:
            _cache = create_cache(config.cache_backend)
            await _cache.init()
            _scheduler = CachePurgeScheduler(_cache)
            await _scheduler.start()
        _client = AddressValidationClient(config, cache=_cache)
    return _client


async def _shutdown() -> None:
    global _client, _cache, _scheduler
    if _scheduler is not None:
        await _scheduler.stop()
        _scheduler = None
    if _cache is not None:
        await _cache.close()
        _cache = None
    _client = None


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Configure logging and release the cache on shutdown."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s %(message)s")
    try:
        yield
    finally:
        await _shutdown()


mcp = FastMCP(
    "Google Address Validation",
    instructions="Validate postal addresses with the Google Address Validation API. Returns a 0-100 validation score, confidence level, deliverability and address type.",
    lifespan=lifespan,
)


# ─── Report rendering ────────────────────────────────────────────────────────


def _yes_no(value: bool) -> str:
    return "Yes" if value else "No"


def result_report(result: ValidationResult, cached: bool = False) -> dict:
    """Flatten a ValidationResult into a JSON-friendly report."""
    validity = result.check_validity()
    score = result.score_details
    address_type = result.address_type()

    report = {
        "title": "Address Validation",
        "score": score.score,
        "rating": score.rating.value,
        "score_breakdown": score.breakdown,
        "response_id": result.response_id,
        "formatted_address": result.formatted_address,
        "cached": cached,
        "verdict": {
            "input_granularity": result.input_granularity,
            "validation_granularity": result.validation_granularity,
            "geocode_granularity": result.geocode_granularity,
            "address_complete": result.is_address_complete,
            "has_unconfirmed_components": result.has_unconfirmed_components,
            "has_inferred_components": result.has_inferred_components,
            "has_replaced_components": result.has_replaced_components,
        },
        "validity": {
            "is_valid": validity.is_valid,
            "confidence_level": validity.confidence_level.value,
            "issues": list(validity.issues),
        },
        "address_type": address_type.value,
        "address_type_label": address_type.label,
        "checks": {
            "us_address": result.is_us_address(),
            "fully_validated": result.is_fully_validated(),
            "high_confidence": result.is_high_confidence(),
            "exact_match": result.is_exact_match(),
            "deliverable": result.is_deliverable(),
            "shippable": result.is_shippable(),
            "precisely_located": result.is_precisely_located(),
            "standardized": result.is_standardized(),
            "verification_needed": result.is_verification_needed(),
        },
        "geocode": result.geocode,
        "place_id": result.place_id,
        "place_types": result.place_types,
        "components": result.standardized_address,
        "missing_component_types": result.missing_component_types,
        "unconfirmed_component_types": result.unconfirmed_component_types,
        "unresolved_tokens": result.unresolved_tokens,
        "summary": _summary(result),
    }

    if result.usps_data is not None:
        report["usps"] = {
            "carrier_route": result.carrier_route,
            "delivery_point_code": result.delivery_point_code,
            "dpv_confirmation": result.dpv_confirmation,
            "commercial_mail_receiver": _yes_no(result.is_commercial_mail_receiver()),
            "vacant": _yes_no(result.is_vacant()),
            "active": _yes_no(result.is_active()),
        }

    return report


def _summary(result: ValidationResult) -> str:
    parts = [
        f"{result.score}/100 ({result.rating.value})",
        f"{result.confidence_level.value.lower()} confidence",
        result.address_type_label(),
    ]
    parts.append("deliverable" if result.is_deliverable() else "not confirmed deliverable")
    if result.is_verification_needed():
        parts.append("verification recommended")
    return " | ".join(parts)


# ─── Tool 1: Validate ────────────────────────────────────────────────────────


@mcp.tool(annotations=READ_ONLY)
async def validate_address(
    address: str,
    enable_usps: Optional[bool] = None,
    language_code: str = "",
    region_code: str = "",
) -> dict:
    """Validate a postal address and score the result.

    Args:
        address: Free-text address, e.g. '1600 Amphitheatre Parkway, Mountain View, CA'.
        enable_usps: Request USPS CASS data (US addresses only). Default: the
            server setting from GOOGLE_ADDRESS_VALIDATION_ENABLE_USPS.
        language_code: Preferred language for the response, e.g. 'en'. Default: API default.
        region_code: CLDR region code hint, e.g. 'US', 'GB'. Default: inferred.
    """
    address = address.strip()
    if not address:
        return {"title": "Address Validation", "error": {"kind": "input", "message": "address is required"}}

    options = ValidationOptions(
        enable_usps_cass=enable_usps,
        language_options={"languageCode": language_code} if language_code else None,
    )
    address_input = {"addressLines": address, "regionCode": region_code} if region_code else address

    client = await _get_client()
    outcome = await client.validate(address_input, options)
    if not outcome.is_ok:
        return {"title": "Address Validation", "error": outcome.error.to_dict()}
    return result_report(outcome.value, cached=outcome.cached)


# ─── Tool 2: Clear cache ─────────────────────────────────────────────────────


@mcp.tool(annotations=DESTRUCTIVE)
async def clear_address_cache() -> dict:
    """Clear cached validation results so later lookups hit the API again."""
    client = await _get_client()
    cleared = await client.clear_cache()
    if not cleared:
        return {"title": "Cache", "cleared": False, "summary": "Caching is disabled."}
    return {"title": "Cache", "cleared": True, "summary": "Cache cleared successfully."}


def main():
    """Entry point for the CLI command."""
    mcp.run()


if __name__ == "__main__":
    main()
