from __future__ import annotations

from enum import StrEnum
from typing import Any, Final

from .sms import ErrorResponse


class ErrorCode(StrEnum):
    MISSING_FIELDS = "MISSING_FIELDS"
    INVALID_PHONE_FORMAT = "INVALID_PHONE_FORMAT"
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_API_KEY = "INVALID_API_KEY"
    API_KEY_NOT_CONFIGURED = "API_KEY_NOT_CONFIGURED"
    RATE_LIMIT_EXCEEDED = "RATE_LIMIT_EXCEEDED"
    TWILIO_NOT_CONFIGURED = "TWILIO_NOT_CONFIGURED"
    TWILIO_ERROR = "TWILIO_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Twilio error code -> message shown to the caller.
# https://www.twilio.com/docs/api/errors
PROVIDER_ERROR_MESSAGES: Final[dict[int, str]] = {
    21211: "Invalid phone number",
    21608: "Phone number is not reachable",
    21614: "Phone number is not valid for SMS",
    20003: "Authentication failed - check Twilio credentials",
    20429: "Too many requests - rate limited",
}


def provider_error_message(code: int, provider_message: str | None) -> str:
    """Look up the caller-facing message for a Twilio error code."""
    mapped = PROVIDER_ERROR_MESSAGES.get(code)
    if mapped is not None:
        return mapped
    return f"Twilio error: {provider_message or 'SMS sending failed'}"


class GatewayError(Exception):
    """
    An error that maps directly onto a JSON error response.

    Raised from dependencies, endpoints and the dispatcher; rendered by the
    exception handler registered in main.py as:

      {"error": <error>, "code": <code>, **extra}
    """

    def __init__(
        self,
        status_code: int,
        code: ErrorCode,
        error: str,
        **extra: Any,
    ) -> None:
        super().__init__(error)
        self.status_code = status_code
        self.code = code
        self.error = error
        self.extra = extra

    def to_content(self) -> dict[str, Any]:
        return ErrorResponse(error=self.error, code=self.code.value, **self.extra).to_content()


def missing_fields() -> GatewayError:
    return GatewayError(400, ErrorCode.MISSING_FIELDS, "Missing required fields: to, message")


def invalid_phone_format(hint: bool = False) -> GatewayError:
    error = "Invalid phone number format"
    if hint:
        error += ". Use format: +1234567890"
    return GatewayError(400, ErrorCode.INVALID_PHONE_FORMAT, error)
