"""Google Address Validation API client.

API docs: https://developers.google.com/maps/documentation/address-validation
One endpoint (validateAddress), authenticated with an API key in the query
string. Calls are not retried: any failure is terminal for that call.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Optional, Protocol

import httpx

from ..errors import (
    AddressValidationError,
    ApiError,
    DecodeError,
    Err,
    HttpStatusError,
    Ok,
    Outcome,
    TransportError,
)
from ..models import ClientConfig, ValidationOptions
from ..request import AddressInput, build_request_body, cache_key
from ..response import ValidationResult

logger = logging.getLogger(__name__)

HEADERS = {
    "Content-Type": "application/json",
    "Accept": "application/json",
}


def request_timeout(config: ClientConfig) -> httpx.Timeout:
    return httpx.Timeout(config.timeout, connect=min(config.timeout, 10.0))


class ResponseCache(Protocol):
    """What the client needs from a cache backend."""

    async def get(self, key: str) -> Optional[dict[str, Any]]: ...

    async def set(self, key: str, value: dict[str, Any], ttl: int) -> None: ...

    async def delete(self, key: str) -> bool: ...

    async def clear(self) -> int: ...


class HttpTransport:
    """POSTs request bodies to the API and returns the decoded JSON object.

    Raises an ``AddressValidationError`` subclass for every failure mode.
    A shared ``httpx.AsyncClient`` may be passed in; otherwise one is opened
    per call.
    """

    def __init__(self, config: ClientConfig, http_client: Optional[httpx.AsyncClient] = None):
        self._endpoint = config.endpoint
        self._api_key = config.api_key
        self._timeout = request_timeout(config)
        self._http_client = http_client

    async def send(self, body: dict[str, Any]) -> dict[str, Any]:
        if self._http_client is not None:
            response = await self._post(self._http_client, body)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await self._post(client, body)
        return self._decode(response)

    async def _post(self, client: httpx.AsyncClient, body: dict[str, Any]) -> httpx.Response:
        try:
            return await client.post(
                self._endpoint,
                params={"key": self._api_key},
                headers=HEADERS,
                content=json.dumps(body),
                timeout=self._timeout,
            )
        except httpx.HTTPError as exc:
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

    @staticmethod
    def _decode(response: httpx.Response) -> dict[str, Any]:
        if response.status_code != 200:
            raise HttpStatusError(response.status_code)

        try:
            data = response.json()
        except ValueError as exc:
            raise DecodeError() from exc

        if not isinstance(data, dict):
            raise DecodeError()

        error = data.get("error")
        if error is not None:
            if isinstance(error, dict):
                raise ApiError(error.get("message"), error.get("status"))
            raise ApiError(str(error))

        return data


class AddressValidationClient:
    """Validates addresses, caching successful responses.

    Usage:
        async with AddressValidationClient(ClientConfig(api_key=...)) as client:
            outcome = await client.validate("1600 Amphitheatre Pkwy, Mountain View, CA")
            if outcome.is_ok:
                print(outcome.value.score)
    """

    def __init__(
        self,
        config: ClientConfig,
        cache: Optional[ResponseCache] = None,
        transport: Optional[HttpTransport] = None,
    ):
        self.config = config
        self.cache = cache
        self._owned_http_client: Optional[httpx.AsyncClient] = None
        self._transport = transport

    async def __aenter__(self) -> AddressValidationClient:
        if self._transport is None:
            self._owned_http_client = httpx.AsyncClient(timeout=request_timeout(self.config))
            self._transport = HttpTransport(self.config, self._owned_http_client)
        return self

    async def __aexit__(self, *exc_info) -> None:
        if self._owned_http_client is not None:
            await self._owned_http_client.aclose()
            self._owned_http_client = None
            self._transport = None

    @property
    def transport(self) -> HttpTransport:
        if self._transport is None:
            self._transport = HttpTransport(self.config)
        return self._transport

    @property
    def cache_enabled(self) -> bool:
        return self.config.enable_cache and self.cache is not None

    def build_body(self, address: AddressInput, options: Optional[ValidationOptions] = None) -> dict[str, Any]:
        """Request body for *address*, with call options layered over the defaults."""
        return build_request_body(address, self.config.default_options.merge(options))

    def cache_key_for(self, body: dict[str, Any]) -> str:
        return cache_key(body, self.config.api_key)

    async def validate(self, address: AddressInput, options: Optional[ValidationOptions] = None) -> Outcome:
        """Validate *address*. Returns ``Ok(ValidationResult)`` or ``Err(error)``."""
        body = self.build_body(address, options)

        key = None
        if self.cache_enabled:
            key = self.cache_key_for(body)
            cached = await self._cache_get(key)
            if cached is not None:
                logger.debug("Cache hit for %s", key)
                try:
                    return Ok(ValidationResult(cached), cached=True)
                except DecodeError:
                    logger.warning("Cached payload for %s is unusable, refetching", key)
                    await self._cache_delete(key)

        try:
            payload = await self.transport.send(body)
            result = ValidationResult(payload)
        except AddressValidationError as exc:
            logger.warning("Address validation failed (%s): %s", exc.kind.value, exc.message)
            return Err(exc)

        if key is not None:
            await self._cache_set(key, payload)

        logger.info(
            "Validated address: response %s, verdict complete=%s",
            result.response_id, result.is_address_complete,
        )
        return Ok(result)

    # A failing cache backend degrades to no cache: reads miss, writes are dropped.

    async def _cache_get(self, key: str) -> Optional[dict[str, Any]]:
        try:
            return await self.cache.get(key)
        except Exception as exc:
            logger.warning("Cache read failed for %s: %s", key, exc)
            return None

    async def _cache_set(self, key: str, payload: dict[str, Any]) -> None:
        try:
            await self.cache.set(key, payload, self.config.cache_expiration)
        except Exception as exc:
            logger.warning("Cache write failed for %s: %s", key, exc)

    async def _cache_delete(self, key: str) -> None:
        try:
            await self.cache.delete(key)
        except Exception as exc:
            logger.warning("Cache delete failed for %s: %s", key, exc)

    async def clear_cache(self, identifier: Optional[dict[str, Any]] = None) -> bool:
        """Drop one cached response (*identifier* is its request body) or all of them."""
        if self.cache is None:
            return False
        if identifier is not None:
            return await self.cache.delete(self.cache_key_for(identifier))
        cleared = await self.cache.clear()
        logger.info("Cleared %d cached address validation responses", cleared)
        return True

