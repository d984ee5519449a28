from __future__ import annotations

import hmac

from fastapi import Depends, Request

from .config import Settings, get_settings
from .errors import ErrorCode, GatewayError
from .log import get_logger

log = get_logger()

BEARER_PREFIX = "Bearer "


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("Authorization")
    if not header:
        return None
    if header.startswith(BEARER_PREFIX):
        return header[len(BEARER_PREFIX) :]
    return header


def require_api_key(request: Request, settings: Settings = Depends(get_settings)) -> None:
    """
    Static bearer-token protection for the SMS endpoints:
    - API_KEY set: require `Authorization: Bearer <API_KEY>`
    - API_KEY unset in development: let everything through
    - API_KEY unset anywhere else: refuse rather than run an open relay
    """
    if not settings.api_key:
        if settings.is_development:
            log.warning("api_key_gate_open", path=request.url.path)
            return
        raise GatewayError(
            500,
            ErrorCode.API_KEY_NOT_CONFIGURED,
            "API key not configured on server",
        )

    token = _bearer_token(request)
    if token is None or not hmac.compare_digest(token.encode(), settings.api_key.encode()):
        raise GatewayError(401, ErrorCode.INVALID_API_KEY, "Unauthorized: Invalid API key")
