"""Google Address Validation client.

Validate postal addresses with the Google Address Validation API and
interpret the verdict: confidence level, deliverability, address type and
a 0-100 validation score.
"""

__version__ = "0.1.0"

from .core.clients.address_validation import AddressValidationClient, HttpTransport
from .core.errors import (
    AddressValidationError,
    ApiError,
    DecodeError,
    Err,
    ErrorKind,
    HttpStatusError,
    Ok,
    TransportError,
)
from .core.models import (
    AddressType,
    ClientConfig,
    ConfidenceLevel,
    Rating,
    ValidationOptions,
    ValidationScore,
    ValidityReport,
)
from .core.request import build_request_body, normalize_address
from .core.response import ValidationResult

__all__ = [
    "AddressType",
    "AddressValidationClient",
    "AddressValidationError",
    "ApiError",
    "ClientConfig",
    "ConfidenceLevel",
    "DecodeError",
    "Err",
    "ErrorKind",
    "HttpStatusError",
    "HttpTransport",
    "Ok",
    "Rating",
    "TransportError",
    "ValidationOptions",
    "ValidationResult",
    "ValidationScore",
    "ValidityReport",
    "build_request_body",
    "normalize_address",
]
