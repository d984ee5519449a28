from __future__ import annotations

import argparse

import uvicorn

from .config import get_settings

APP_IMPORT_PATH = "sms_gateway.main:app"


def serve(host: str, port: int, reload: bool = False) -> None:
    """
    Run the gateway under uvicorn.

    Workers are not exposed: the rate limiter keeps its counters in
    process memory, so the service is meant to run as a single process.
    """
    settings = get_settings()
    uvicorn.run(
        APP_IMPORT_PATH,
        host=host,
        port=port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


def main() -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(description="Run the SMS gateway HTTP service.")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument(
        "--port",
        type=int,
        default=settings.port,
        help=f"Port to listen on (default: PORT env var or {settings.port}).",
    )
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (dev only).")
    args = parser.parse_args()

    serve(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
