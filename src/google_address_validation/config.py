"""Environment-driven configuration for the server and CLI entry points."""

from __future__ import annotations

import os

from .core.models import DEFAULT_CACHE_EXPIRATION, ClientConfig, ValidationOptions

DEFAULT_PURGE_INTERVAL_MINUTES = 60

_TRUTHY = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in _TRUTHY


def load_config() -> ClientConfig:
    """Build a ``ClientConfig`` from ``GOOGLE_ADDRESS_VALIDATION_*`` variables."""
    api_key = os.environ.get("GOOGLE_ADDRESS_VALIDATION_API_KEY", "").strip()
    if not api_key:
        raise ValueError(
            "GOOGLE_ADDRESS_VALIDATION_API_KEY environment variable is required. "
            "Create a key with the Address Validation API enabled in the Google Cloud console."
        )

    default_options = ValidationOptions()
    if "GOOGLE_ADDRESS_VALIDATION_ENABLE_USPS" in os.environ:
        default_options = ValidationOptions(enable_usps_cass=_env_flag("GOOGLE_ADDRESS_VALIDATION_ENABLE_USPS", "false"))

    return ClientConfig(
        api_key=api_key,
        enable_cache=_env_flag("GOOGLE_ADDRESS_VALIDATION_ENABLE_CACHE", "true"),
        cache_expiration=int(os.environ.get(
            "GOOGLE_ADDRESS_VALIDATION_CACHE_DURATION",
            str(DEFAULT_CACHE_EXPIRATION),
        )),
        cache_backend=os.environ.get("GOOGLE_ADDRESS_VALIDATION_CACHE_BACKEND", "memory").strip().lower(),
        default_options=default_options,
    )


def purge_interval_seconds() -> int:
    return int(os.environ.get(
        "CACHE_PURGE_INTERVAL_MINUTES",
        str(DEFAULT_PURGE_INTERVAL_MINUTES),
    )) * 60
