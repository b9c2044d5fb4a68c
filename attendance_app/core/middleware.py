import time
from typing import Callable, Set

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from .logging_config import get_logger, set_request_id, generate_request_id

logger = get_logger("http")

# Noisy paths the client polls or humans browse
SKIP_LOGGING_PATHS: Set[str] = {
    "/health",
    "/",
    "/favicon.ico",
    "/docs",
    "/redoc",
    "/openapi.json",
}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags each request with an X-Request-ID and logs method, path, status and duration."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)

        path = request.url.path
        skip_logging = path in SKIP_LOGGING_PATHS
        start_time = time.perf_counter()

        try:
            response = await call_next(request)
            duration_ms = (time.perf_counter() - start_time) * 1000
            response.headers["X-Request-ID"] = request_id

            if not skip_logging:
                status_code = response.status_code
                if status_code >= 500:
                    log_func = logger.error
                elif status_code >= 400:
                    log_func = logger.warning
                else:
                    log_func = logger.info
                log_func(
                    f"{request.method} {path} - {status_code} ({duration_ms:.2f}ms)",
                    extra={
                        "http_method": request.method,
                        "http_path": path,
                        "http_status": status_code,
                        "duration_ms": round(duration_ms, 2),
                    }
                )
            return response
        except Exception:
            # the app-level Exception handler runs outside this middleware, after the id is cleared
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.exception(
                f"{request.method} {path} - 500 ({duration_ms:.2f}ms)",
                extra={
                    "http_method": request.method,
                    "http_path": path,
                    "http_status": 500,
                    "duration_ms": round(duration_ms, 2),
                    "request_id": request_id,
                }
            )
            raise
        finally:
            set_request_id("")
