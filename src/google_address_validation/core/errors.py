"""Failure taxonomy for calls to the Address Validation API.

The transport raises these exceptions; the client turns them into an
``Err`` outcome so callers get either ``Ok(result)`` or ``Err(error)``
back from ``validate()`` and never an exception from the happy path.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional, Union

if TYPE_CHECKING:
    from .response import ValidationResult


class ErrorKind(str, Enum):
    TRANSPORT = "transport"
    HTTP_STATUS = "http_status"
    DECODE = "decode"
    API = "api"


class AddressValidationError(Exception):
    """Base class for every terminal failure of a validation call."""

    kind: ErrorKind

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"kind": self.kind.value, "message": self.message}


class TransportError(AddressValidationError):
    """The service could not be reached (connection failure, timeout)."""

    kind = ErrorKind.TRANSPORT

    def __init__(self, detail: str):
        super().__init__(f"Address Validation API request failed: {detail}")
        self.detail = detail


class HttpStatusError(AddressValidationError):
    """The service answered with a non-success status code."""

    kind = ErrorKind.HTTP_STATUS

    def __init__(self, status_code: int):
        super().__init__(f"Address Validation API returned error code: {status_code}")
        self.status_code = status_code

    def to_dict(self) -> dict:
        return {**super().to_dict(), "status_code": self.status_code}


class DecodeError(AddressValidationError):
    """The response body was not a JSON object."""

    kind = ErrorKind.DECODE

    def __init__(self, message: str = "Failed to parse Address Validation API response"):
        super().__init__(message)


class ApiError(AddressValidationError):
    """The decoded payload carries an ``error`` object (bad key, quota, ...)."""

    kind = ErrorKind.API

    def __init__(self, api_message: Optional[str] = None, status: Optional[str] = None):
        api_message = api_message or "Unknown error"
        super().__init__(f"Address Validation API returned error: {api_message}")
        self.api_message = api_message
        self.status = status


@dataclass(frozen=True)
class Ok:
    """Successful validation call."""

    value: ValidationResult
    cached: bool = False

    @property
    def is_ok(self) -> bool:
        return True

    def unwrap(self) -> ValidationResult:
        return self.value


@dataclass(frozen=True)
class Err:
    """Failed validation call; ``error`` says why."""

    error: AddressValidationError

    @property
    def is_ok(self) -> bool:
        return False

    def unwrap(self) -> ValidationResult:
        raise self.error


Outcome = Union[Ok, Err]
