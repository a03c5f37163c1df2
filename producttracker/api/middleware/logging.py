"""
Request logging middleware.

One log line per request with method, path, status and timing, tagged with
a request id that is echoed back in ``X-Request-ID``. Tokens, cookies and
password fields never reach the log.
"""

import json
import logging
import time
import uuid
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Request ID for the request being handled
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

logger = logging.getLogger("producttracker.api")

REDACTED = "[REDACTED]"


@dataclass
class LoggingConfig:
    """Configuration for request logging."""

    enabled: bool = True

    # JSON request bodies only; uploads are never logged
    log_request_body: bool = False
    max_body_log_size: int = 10000

    excluded_paths: Set[str] = field(default_factory=lambda: {
        "/health",
        "/favicon.ico",
    })

    excluded_headers: Set[str] = field(default_factory=lambda: {
        "x-auth-token",
        "authorization",
        "cookie",
        "set-cookie",
    })

    redacted_fields: Set[str] = field(default_factory=lambda: {
        "password",
        "password_hash",
        "token",
        "secret",
    })

    slow_request_threshold: float = 2.0

    request_id_header: str = "X-Request-ID"


class StructuredLogFormatter(logging.Formatter):
    """Formats records as single-line JSON."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        for attr, key in (
            ("request_data", "request"),
            ("response_data", "response"),
            ("duration_ms", "duration_ms"),
        ):
            if hasattr(record, attr):
                log_data[key] = getattr(record, attr)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def redact_sensitive_data(data: Any, redacted_fields: Set[str]) -> Any:
    """Recursively replace values of sensitive keys."""
    if isinstance(data, dict):
        return {
            key: REDACTED if key.lower() in redacted_fields else redact_sensitive_data(value, redacted_fields)
            for key, value in data.items()
        }
    if isinstance(data, list):
        return [redact_sensitive_data(item, redacted_fields) for item in data]
    return data


def get_request_id() -> str:
    """Get current request ID from context."""
    return request_id_var.get()


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs every request that is not on the excluded paths.

    Multipart uploads are summarized by their declared length; file
    downloads by their content type. Neither payload is read here.
    """

    def __init__(self, app: FastAPI, config: Optional[LoggingConfig] = None):
        super().__init__(app)
        self.config = config or LoggingConfig()

    def _safe_headers(self, request: Request) -> Dict[str, str]:
        excluded = self.config.excluded_headers
        return {
            name: REDACTED if name.lower() in excluded else value
            for name, value in request.headers.items()
        }

    async def _json_body(self, request: Request) -> Optional[str]:
        raw = await request.body()
        if len(raw) > self.config.max_body_log_size:
            return f"[BODY TOO LARGE: {len(raw)} bytes]"
        try:
            parsed = json.loads(raw) if raw else None
        except json.JSONDecodeError:
            return "[INVALID JSON]"
        if parsed is None:
            return None
        return json.dumps(redact_sensitive_data(parsed, self.config.redacted_fields))

    async def _describe_request(self, request: Request) -> Dict[str, Any]:
        content_type = request.headers.get("content-type", "")
        described = {
            "method": request.method,
            "path": request.url.path,
            "query": str(request.url.query) or None,
            "headers": self._safe_headers(request),
            "client_ip": request.client.host if request.client else None,
        }

        if content_type.startswith("multipart/form-data"):
            described["upload_bytes"] = int(request.headers.get("content-length", 0))
        elif self.config.log_request_body and content_type.startswith("application/json"):
            body = await self._json_body(request)
            if body:
                described["body"] = body
        return described

    def _level_for(self, status_code: int, duration: float) -> int:
        if status_code >= 500:
            return logging.ERROR
        if status_code >= 400 or duration > self.config.slow_request_threshold:
            return logging.WARNING
        return logging.INFO

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get(self.config.request_id_header) or uuid.uuid4().hex[:12]
        request_id_var.set(request_id)

        if not self.config.enabled or request.url.path in self.config.excluded_paths:
            response = await call_next(request)
            response.headers[self.config.request_id_header] = request_id
            return response

        described = await self._describe_request(request)
        started = time.perf_counter()

        response = await call_next(request)

        duration = time.perf_counter() - started
        duration_ms = round(duration * 1000, 2)
        response.headers[self.config.request_id_header] = request_id

        response_data = {"status_code": response.status_code}
        if "content-disposition" in response.headers:
            response_data["download_type"] = response.headers.get("content-type")

        summary = f"{request.method} {request.url.path} {response.status_code} in {duration_ms}ms"
        if duration > self.config.slow_request_threshold:
            summary = f"[SLOW] {summary}"

        logger.log(
            self._level_for(response.status_code, duration),
            summary,
            extra={
                "request_data": described,
                "response_data": response_data,
                "duration_ms": duration_ms,
            },
        )
        return response


def setup_logging(
    app: FastAPI,
    config: Optional[LoggingConfig] = None,
    structured: bool = True,
) -> None:
    """
    Install the request logging middleware.

    With ``structured`` the ``producttracker`` stdlib logger also gets a
    single JSON handler; repeated calls (one per test app) do not stack
    handlers.
    """
    if structured:
        app_logger = logging.getLogger("producttracker")
        if not any(isinstance(h.formatter, StructuredLogFormatter) for h in app_logger.handlers):
            json_handler = logging.StreamHandler()
            json_handler.setFormatter(StructuredLogFormatter())
            app_logger.addHandler(json_handler)
        app_logger.setLevel(logging.INFO)

    app.add_middleware(RequestLoggingMiddleware, config=config or LoggingConfig())
