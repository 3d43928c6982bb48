"""Tests for the MCP server tools and report rendering."""

from __future__ import annotations

import json

import httpx
import pytest

from google_address_validation import server
from google_address_validation.cache import MemoryCache
from google_address_validation.core.clients.address_validation import AddressValidationClient, HttpTransport
from google_address_validation.core.models import ClientConfig, ValidationOptions
from google_address_validation.core.response import ValidationResult


@pytest.fixture
def fake_client(monkeypatch, make_payload):
    """Install a client backed by a mock API into the server module."""
    requests: list[httpx.Request] = []
    payload = make_payload(usps=True)

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json=payload)

    config = ClientConfig(api_key="test-key")
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    client = AddressValidationClient(config, cache=MemoryCache(), transport=HttpTransport(config, http_client))
    monkeypatch.setattr(server, "_client", client)
    return requests


class TestResultReport:
    """Tests for result_report()."""

    def test_googleplex_report(self, googleplex_payload) -> None:
        report = server.result_report(ValidationResult(googleplex_payload))
        assert report["score"] == 100
        assert report["rating"] == "Excellent"
        assert report["validity"] == {"is_valid": True, "confidence_level": "HIGH", "issues": []}
        assert report["address_type"] == "landmark"
        assert report["address_type_label"] == "Landmark/Point of Interest"
        assert report["checks"]["deliverable"] is True
        assert report["components"]["locality"] == "Mountain View"
        assert "usps" not in report
        assert report["summary"].startswith("100/100 (Excellent) | high confidence")

    def test_usps_block(self, make_payload) -> None:
        report = server.result_report(ValidationResult(make_payload(usps=True, uspsData={"dpvVacant": "Y"})))
        assert report["usps"]["carrier_route"] == "C909"
        assert report["usps"]["dpv_confirmation"] == "Y"
        assert report["usps"]["vacant"] == "Yes"
        assert report["usps"]["commercial_mail_receiver"] == "No"
        assert report["usps"]["active"] == "Yes"

    def test_summary_flags_verification(self, make_payload) -> None:
        result = ValidationResult(make_payload(verdict={"hasInferredComponents": True}))
        assert "verification recommended" in server.result_report(result)["summary"]


class TestTools:
    """Tests for the MCP tool functions."""

    async def test_validate_address(self, fake_client) -> None:
        report = await server.validate_address("1600 Amphitheatre Pkwy", enable_usps=True, language_code="en")
        assert report["score"] == 100
        assert report["cached"] is False
        body = fake_client[0].content
        assert b'"enableUspsCass": true' in body
        assert b'"languageCode": "en"' in body

    async def test_configured_usps_default_applies(self, monkeypatch) -> None:
        requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"result": {}})

        config = ClientConfig(
            api_key="test-key",
            enable_cache=False,
            default_options=ValidationOptions(enable_usps_cass=True),
        )
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        monkeypatch.setattr(server, "_client", AddressValidationClient(config, transport=HttpTransport(config, http_client)))

        await server.validate_address("1 Main St")
        await server.validate_address("1 Main St", enable_usps=False)

        assert json.loads(requests[0].content)["enableUspsCass"] is True
        assert json.loads(requests[1].content)["enableUspsCass"] is False

    async def test_usps_omitted_without_default(self, fake_client) -> None:
        await server.validate_address("1600 Amphitheatre Pkwy")
        assert "enableUspsCass" not in json.loads(fake_client[0].content)

    async def test_region_code_hint(self, fake_client) -> None:
        await server.validate_address("10 Downing Street, London", region_code="GB")
        assert b'"regionCode": "GB"' in fake_client[0].content

    async def test_repeat_lookup_is_cached(self, fake_client) -> None:
        await server.validate_address("1600 Amphitheatre Pkwy")
        report = await server.validate_address("1600 Amphitheatre Pkwy")
        assert report["cached"] is True
        assert len(fake_client) == 1

    async def test_blank_address(self, fake_client) -> None:
        report = await server.validate_address("   ")
        assert report["error"]["kind"] == "input"
        assert fake_client == []

    async def test_api_failure_reported(self, monkeypatch) -> None:
        config = ClientConfig(api_key="bad-key", enable_cache=False)
        http_client = httpx.AsyncClient(transport=httpx.MockTransport(lambda request: httpx.Response(403)))
        monkeypatch.setattr(server, "_client", AddressValidationClient(config, transport=HttpTransport(config, http_client)))

        report = await server.validate_address("1 Main St")

        assert report["error"] == {
            "kind": "http_status",
            "message": "Address Validation API returned error code: 403",
            "status_code": 403,
        }

    async def test_clear_cache(self, fake_client) -> None:
        await server.validate_address("1600 Amphitheatre Pkwy")
        assert (await server.clear_address_cache())["cleared"] is True
        await server.validate_address("1600 Amphitheatre Pkwy")
        assert len(fake_client) == 2

    async def test_client_built_from_environment(self, monkeypatch, tmp_path) -> None:
        monkeypatch.setattr(server, "_client", None)
        monkeypatch.setenv("GOOGLE_ADDRESS_VALIDATION_API_KEY", "env-key")
        monkeypatch.setenv("GOOGLE_ADDRESS_VALIDATION_CACHE_BACKEND", "sqlite")
        monkeypatch.setenv("DATA_DIR", str(tmp_path))
        try:
            client = await server._get_client()
            assert client.config.api_key == "env-key"
            assert (tmp_path / "cache.db").exists()
            assert server._scheduler is not None
        finally:
            await server._shutdown()
        assert server._client is None

    async def test_memory_cache_gets_purge_scheduler(self, monkeypatch) -> None:
        monkeypatch.setattr(server, "_client", None)
        monkeypatch.setenv("GOOGLE_ADDRESS_VALIDATION_API_KEY", "env-key")
        monkeypatch.setenv("GOOGLE_ADDRESS_VALIDATION_CACHE_BACKEND", "memory")
        try:
            await server._get_client()
            assert isinstance(server._cache, MemoryCache)
            assert server._scheduler is not None
            assert server._scheduler.running is True
        finally:
            await server._shutdown()
        assert server._scheduler is None
