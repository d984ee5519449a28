from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# `to` / `message` are optional at the schema level: a request missing them
# must produce MISSING_FIELDS, not a framework validation error.


class CheckSmsRequest(BaseModel):
    to: str | None = None
    message: str | None = None
    test: bool = False


class SendSmsRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    to: str | None = None
    message: str | None = None
    # Accepted for client compatibility; the configured Twilio number is
    # always used as the sender.
    from_: str | None = Field(default=None, alias="from")
    emergency: bool = False


class SendSmsResponse(BaseModel):
    success: bool = True
    message: str = "SMS sent successfully"
    sid: str
    status: str | None
    to: str
    timestamp: str



class ErrorResponse(BaseModel):
    """JSON body of every error reply; unset optional fields are omitted."""

    error: str
    code: str
    provider_code: int | None = None
    twilio_error: bool | None = None
    message: str | None = None
    available_endpoints: list[str] | None = None
    details: list[dict[str, Any]] | None = None

    def to_content(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class SmsStatusCallback(BaseModel):
    """Subset of the form fields Twilio posts to a status callback URL."""

    message_sid: str | None = None
    message_status: str | None = None
    to: str | None = None
