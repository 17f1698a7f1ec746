"""Request tracing middleware shared by the ProPath services.

Every request gets an ``X-Request-ID`` (propagated from the caller when
present), and its start/finish is logged with the elapsed time so booking
and progression logs can be correlated with the HTTP call that caused them.
"""
import time
from typing import Callable

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from libs.common.logging import (
    clear_request_context,
    configure_logging,
    get_logger,
    set_request_context,
)

logger = get_logger(__name__)

_QUIET_PATHS = frozenset({"/health"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, service_name: str = "propath"):
        super().__init__(app)
        self.service_name = service_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = set_request_context(
            request_id=request.headers.get("X-Request-ID"),
            path=request.url.path,
            method=request.method,
        )
        quiet = request.url.path in _QUIET_PATHS
        started = time.perf_counter()

        if not quiet:
            logger.info(
                "%s %s started",
                request.method,
                request.url.path,
                extra={"extra_fields": {"service": self.service_name}},
            )

        try:
            response = await call_next(request)
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)

            if not quiet:
                log = logger.warning if response.status_code >= 400 else logger.info
                log(
                    "%s %s completed %d in %.2fms",
                    request.method,
                    request.url.path,
                    response.status_code,
                    elapsed_ms,
                    extra={
                        "extra_fields": {
                            "service": self.service_name,
                            "status_code": response.status_code,
                            "duration_ms": elapsed_ms,
                        }
                    },
                )

            response.headers["X-Request-ID"] = request_id
            return response
        except Exception:
            logger.exception(
                "%s %s failed with unhandled exception",
                request.method,
                request.url.path,
                extra={
                    "extra_fields": {
                        "service": self.service_name,
                        "duration_ms": round(
                            (time.perf_counter() - started) * 1000, 2
                        ),
                    }
                },
            )
            raise
        finally:
            clear_request_context()


def add_observability_middleware(app: FastAPI, service_name: str) -> None:
    """Configure logging and install request tracing on ``app``."""
    configure_logging()
    app.add_middleware(RequestContextMiddleware, service_name=service_name)
