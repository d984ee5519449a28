from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Final

from twilio.base.exceptions import TwilioRestException
from twilio.http.http_client import TwilioHttpClient
from twilio.rest import Client

from .config import Settings
from .errors import ErrorCode, GatewayError, provider_error_message
from .log import get_logger

log = get_logger()

BRANDING_SUFFIX: Final[str] = "\n\n- Sent via SafeSpace Emergency App"

# Twilio-side delivery hints for emergency messages (best effort, no local retry).
EMERGENCY_ATTEMPTS: Final[int] = 3

LOG_PREVIEW_CHARS: Final[int] = 50


@dataclass
class DispatchResult:
    sid: str
    status: str | None
    to: str


def get_twilio_client(settings: Settings) -> Client:
    if not settings.twilio_account_sid or not settings.twilio_auth_token:
        raise RuntimeError(
            "Twilio credentials are not configured (TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN)"
        )

    # One bounded HTTP call per send; TwilioHttpClient does not retry by default.
    http_client = TwilioHttpClient(timeout=settings.twilio_timeout_seconds)
    return Client(settings.twilio_account_sid, settings.twilio_auth_token, http_client=http_client)


def brand_message(message: str) -> str:
    return f"{message}{BRANDING_SUFFIX}"


def send_sms(settings: Settings, to: str, message: str, emergency: bool = False) -> DispatchResult:
    """
    Send one SMS through the configured Twilio account.

    `to` must already be normalized (see phone.format_phone_number).
    Provider failures are converted to GatewayError so the endpoint can
    return them unchanged.
    """
    if not settings.twilio_phone_number:
        raise RuntimeError("TWILIO_PHONE_NUMBER is not configured")

    body = brand_message(message)
    options: dict[str, Any] = {
        "to": to,
        "from_": settings.twilio_phone_number,
        "body": body,
    }
    if emergency:
        options["provide_feedback"] = True
        options["attempt"] = EMERGENCY_ATTEMPTS

    log.info("sms_sending", to=to, emergency=emergency, preview=body[:LOG_PREVIEW_CHARS])

    try:
        client = get_twilio_client(settings)
        twilio_message = client.messages.create(**options)
    except TwilioRestException as exc:
        log.warning("sms_send_failed", to=to, provider_code=exc.code, provider_status=exc.status)
        if exc.code is None:
            raise _internal_error(settings, exc) from exc
        raise GatewayError(
            400,
            ErrorCode.TWILIO_ERROR,
            provider_error_message(exc.code, exc.msg),
            provider_code=exc.code,
            twilio_error=True,
        ) from exc
    except Exception as exc:
        log.exception("sms_send_failed", to=to)
        raise _internal_error(settings, exc) from exc

    # Don't log the body for privacy; the SID is enough to trace it in Twilio.
    log.info("sms_sent", sid=twilio_message.sid, status=twilio_message.status, to=to)
    return DispatchResult(sid=twilio_message.sid, status=twilio_message.status, to=to)


def _internal_error(settings: Settings, exc: Exception) -> GatewayError:
    detail = str(exc) if settings.is_development else "SMS service temporarily unavailable"
    return GatewayError(
        500,
        ErrorCode.INTERNAL_ERROR,
        "Internal server error while sending SMS",
        message=detail,
    )
