"""Shared fixtures: validateAddress payloads shaped like the real API."""

from __future__ import annotations

import copy

import pytest

GOOGLEPLEX = {
    "responseId": "8f2b6f0e-5d1a-4d8b-9a43-1f6f2b7f0c11",
    "result": {
        "verdict": {
            "inputGranularity": "PREMISE",
            "validationGranularity": "PREMISE",
            "geocodeGranularity": "PREMISE",
            "addressComplete": True,
        },
        "address": {
            "formattedAddress": "1600 Amphitheatre Parkway, Mountain View, CA 94043-1351, USA",
            "postalAddress": {
                "regionCode": "US",
                "languageCode": "en",
                "postalCode": "94043-1351",
                "administrativeArea": "CA",
                "locality": "Mountain View",
                "addressLines": ["1600 Amphitheatre Pkwy"],
            },
            "addressComponents": [
                {
                    "componentName": {"text": "1600"},
                    "componentType": "street_number",
                    "confirmationLevel": "CONFIRMED",
                },
                {
                    "componentName": {"text": "Amphitheatre Parkway", "languageCode": "en"},
                    "componentType": "route",
                    "confirmationLevel": "CONFIRMED",
                },
            ],
        },
        "geocode": {
            "location": {"latitude": 37.4225009, "longitude": -122.0847547},
            "plusCode": {"globalCode": "849VCWC8+X3"},
            "bounds": {
                "low": {"latitude": 37.4220, "longitude": -122.0853},
                "high": {"latitude": 37.4229, "longitude": -122.0841},
            },
            "featureSizeMeters": 91.5,
            "placeId": "ChIJF4Yf2Ry7j4AR__1AkytDyAE",
            "placeTypes": ["premise"],
        },
        "metadata": {"business": True, "poBox": False, "residential": False},
    },
}

USPS_DATA = {
    "standardizedAddress": {
        "firstAddressLine": "1600 AMPHITHEATRE PKWY",
        "cityStateZipAddressLine": "MOUNTAIN VIEW CA 94043-1351",
        "city": "MOUNTAIN VIEW",
        "state": "CA",
        "zipCode": "94043",
        "zipCodeExtension": "1351",
    },
    "deliveryPointCode": "00",
    "deliveryPointCheckDigit": "0",
    "dpvConfirmation": "Y",
    "dpvCmra": "N",
    "dpvVacant": "N",
    "dpvNoStat": "N",
    "carrierRoute": "C909",
}


def _deep_update(target: dict, updates: dict) -> dict:
    for key, value in updates.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_update(target[key], value)
        else:
            target[key] = value
    return target


@pytest.fixture
def make_payload():
    """Build a payload from the Googleplex response with nested overrides.

    Passing ``None`` for a result block removes it entirely.
    """

    def _make(usps: bool = False, **blocks) -> dict:
        payload = copy.deepcopy(GOOGLEPLEX)
        result = payload["result"]
        if usps:
            result["uspsData"] = copy.deepcopy(USPS_DATA)
        for name, value in blocks.items():
            if value is None:
                result.pop(name, None)
            elif isinstance(value, dict) and isinstance(result.get(name), dict):
                _deep_update(result[name], value)
            else:
                result[name] = value
        return payload

    return _make


@pytest.fixture
def googleplex_payload(make_payload):
    return make_payload()
