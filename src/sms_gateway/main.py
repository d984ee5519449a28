from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import Depends, FastAPI, Form, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import ValidationError
from slowapi.errors import RateLimitExceeded
from starlette.concurrency import run_in_threadpool
from starlette.exceptions import HTTPException as StarletteHTTPException

from .auth import require_api_key
from .config import Settings, get_settings
from .errors import ErrorCode, GatewayError, invalid_phone_format, missing_fields
from .log import configure_logging, get_logger
from .phone import format_phone_number, is_valid_phone_number
from .rate_limit import RATE_LIMIT_MESSAGE, SEND_SMS_RATE_LIMIT, limiter
from .sms import (
    CheckSmsRequest,
    ErrorResponse,
    SendSmsRequest,
    SendSmsResponse,
    SmsStatusCallback,
)
from .twilio_client import send_sms as dispatch_sms

SERVICE_NAME = "SafeSpace SMS API"
SERVICE_VERSION = "1.0.0"

ENDPOINTS = {
    "POST /send-sms": "Send emergency SMS",
    "POST /test-sms": "Test SMS configuration",
    "GET /status": "Service status",
}
AVAILABLE_ENDPOINTS = ["/", "/status", "/send-sms", "/test-sms"]

log = get_logger()


def iso_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: report what this process is configured to do
    settings = get_settings()
    log.info(
        "service_started",
        service=SERVICE_NAME,
        port=settings.port,
        twilio_configured=settings.twilio_configured,
        environment=settings.environment,
    )
    if not settings.api_key:
        if settings.is_development:
            log.warning("api_key_gate_open", detail="API_KEY unset; SMS endpoints are unauthenticated")
        else:
            log.error("api_key_not_configured", detail="API_KEY unset; SMS endpoints will refuse requests")
    yield


configure_logging(get_settings().log_level)

app = FastAPI(title=SERVICE_NAME, version=SERVICE_VERSION, lifespan=lifespan)

app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=[get_settings().frontend_url],
    allow_methods=["POST", "GET", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# --- Error handlers ---


def error_response(status_code: int, code: ErrorCode, error: str, **extra: Any) -> JSONResponse:
    body = ErrorResponse(error=error, code=code.value, **extra)
    return JSONResponse(status_code=status_code, content=body.to_content())


@app.exception_handler(GatewayError)
async def gateway_error_handler(request: Request, exc: GatewayError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_content())


@app.exception_handler(RateLimitExceeded)
async def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> JSONResponse:
    log.warning("rate_limit_exceeded", path=request.url.path, limit=str(exc.detail))
    return error_response(429, ErrorCode.RATE_LIMIT_EXCEEDED, RATE_LIMIT_MESSAGE)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(
        400, ErrorCode.INVALID_REQUEST, "Invalid request body", details=jsonable_errors(exc.errors())
    )


def jsonable_errors(errors: Any) -> list[dict[str, Any]]:
    # Keep only the JSON-safe parts; `input`/`ctx` may hold raw bytes or exceptions.
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg", ""), "type": err.get("type", "")}
        for err in errors
    ]


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # 405 on a known path is reported like any other unknown endpoint.
    if exc.status_code in (404, 405):
        return error_response(
            404,
            ErrorCode.NOT_FOUND,
            "Endpoint not found",
            available_endpoints=AVAILABLE_ENDPOINTS,
        )
    code = ErrorCode.INTERNAL_ERROR if exc.status_code >= 500 else ErrorCode.INVALID_REQUEST
    return error_response(exc.status_code, code, str(exc.detail))


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("unhandled_error", path=request.url.path)
    return error_response(500, ErrorCode.INTERNAL_ERROR, "Internal server error")


# --- Routes ---


@app.get("/")
def service_descriptor() -> dict[str, Any]:
    return {
        "service": SERVICE_NAME,
        "status": "operational",
        "version": SERVICE_VERSION,
        "endpoints": ENDPOINTS,
    }


@app.get("/status")
def service_status(settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    return {
        "status": "operational",
        "twilio_configured": settings.twilio_configured,
        "provider_configured": settings.twilio_configured,
        "timestamp": iso_timestamp(),
    }


@app.post("/test-sms", dependencies=[Depends(require_api_key)])
def check_sms(payload: CheckSmsRequest | None = None) -> dict[str, Any]:
    """
    Validate a send request without contacting Twilio.

    Accepts JSON:

      { "to": "+15551234567", "message": "Hi", "test": true }
    """
    payload = payload or CheckSmsRequest()

    if not payload.to or not payload.message:
        raise missing_fields()
    if not is_valid_phone_number(payload.to):
        raise invalid_phone_format()

    if payload.test:
        return {
            "success": True,
            "message": "Test configuration successful",
            "to": payload.to,
            "test_mode": True,
        }
    return {
        "success": True,
        "message": "Configuration test passed - ready for real SMS",
        "to": payload.to,
    }


async def read_send_request(request: Request) -> SendSmsRequest:
    """
    Parse the /send-sms body by hand.

    Declaring the model as an endpoint parameter would make FastAPI
    validate it before the rate limit decorator runs, so malformed
    bodies would never be counted.
    """
    if not await request.body():
        return SendSmsRequest()
    try:
        return SendSmsRequest.model_validate(await request.json())
    except ValidationError as exc:
        raise GatewayError(
            400,
            ErrorCode.INVALID_REQUEST,
            "Invalid request body",
            details=jsonable_errors(exc.errors()),
        ) from exc
    except ValueError as exc:
        raise GatewayError(400, ErrorCode.INVALID_REQUEST, "Request body is not valid JSON") from exc


@app.post("/send-sms")
@limiter.limit(SEND_SMS_RATE_LIMIT)
async def send_sms(request: Request, settings: Settings = Depends(get_settings)) -> dict[str, Any]:
    """
    Send an SMS through Twilio.

    Accepts JSON:

      { "to": "(555) 123-4567", "message": "I need help", "emergency": true }

    Checks run in order: rate limit, API key, body, required fields,
    Twilio configuration, phone format. Only then is Twilio called.
    """
    # Called here rather than as a route dependency so the rate limit
    # (applied by the decorator) is checked first.
    require_api_key(request, settings)

    payload = await read_send_request(request)
    if not payload.to or not payload.message:
        raise missing_fields()

    if not settings.twilio_configured or not settings.twilio_phone_number:
        raise GatewayError(500, ErrorCode.TWILIO_NOT_CONFIGURED, "Twilio not configured on server")

    if not is_valid_phone_number(payload.to):
        raise invalid_phone_format(hint=True)

    # The Twilio SDK is blocking; keep it off the event loop.
    result = await run_in_threadpool(
        dispatch_sms,
        settings,
        to=format_phone_number(payload.to),
        message=payload.message,
        emergency=payload.emergency,
    )
    return SendSmsResponse(
        sid=result.sid,
        status=result.status,
        to=result.to,
        timestamp=iso_timestamp(),
    ).model_dump()


@app.post("/webhook/sms-status")
def sms_status_webhook(
    message_sid: str | None = Form(None, alias="MessageSid"),
    message_status: str | None = Form(None, alias="MessageStatus"),
    to: str | None = Form(None, alias="To"),
) -> PlainTextResponse:
    """
    Twilio delivery-status callback.

    Only logs the update; nothing is stored and nothing is sent back.
    """
    callback = SmsStatusCallback(message_sid=message_sid, message_status=message_status, to=to)
    log.info("sms_status_update", **callback.model_dump())
    return PlainTextResponse("OK")
