"""Axiom API 로깅 미들웨어.

Request logging middleware. Every request gets an ``X-Request-ID`` that is
bound into the structlog context for the service logs of that request;
when Axiom is configured a structured event (method, path, params, masked
body, status, error detail, duration) is shipped per request.

Sensitive fields (password, token, secret, grant ids) are masked, and the
client onboarding access token is stripped from logged paths.
"""

import json
import re
import time
from typing import Any
from uuid import uuid4

import structlog
from axiom_py import Client as AxiomClient
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from app.config import settings

logger = structlog.get_logger(__name__)

REQUEST_ID_HEADER: str = "X-Request-ID"

# 마스킹 대상 필드 패턴 — Fields to mask in request bodies and query strings
_SENSITIVE_KEYS = re.compile(
    r"(password|passwd|secret|token|authorization|api_key|apikey|grant|credential)",
    re.IGNORECASE,
)

# 온보딩 접근 토큰이 포함된 경로 — Client portal paths carry the access token
_CLIENT_TOKEN_PATH = re.compile(r"(/client/onboarding/)[^/]+")

# 로깅 제외 경로 — Paths excluded from logging
_SKIP_PATHS = {"/health", "/docs", "/redoc", "/openapi.json"}


def _mask_dict(data: Any, depth: int = 0) -> Any:
    """민감 필드 자동 마스킹 — Recursively mask sensitive fields in dicts/lists."""
    if depth > 5:
        return "..."
    if isinstance(data, dict):
        return {
            k: "***" if _SENSITIVE_KEYS.search(str(k)) else _mask_dict(v, depth + 1)
            for k, v in data.items()
        }
    if isinstance(data, list):
        return [_mask_dict(item, depth + 1) for item in data[:20]]
    return data


def mask_path(path: str) -> str:
    return _CLIENT_TOKEN_PATH.sub(r"\1***", path)


def _truncate(value: Any, max_len: int = 2000) -> Any:
    if isinstance(value, str) and len(value) > max_len:
        return value[:max_len] + "...(truncated)"
    return value


async def _read_json_body(request: Request) -> Any:
    try:
        body_bytes: bytes = await request.body()
        if not body_bytes:
            return None
        return _truncate(_mask_dict(json.loads(body_bytes)))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return "(non-json body)"


class AxiomLoggingMiddleware(BaseHTTPMiddleware):
    """요청 ID 부여 및 Axiom 요청 로깅 미들웨어."""

    def __init__(self, app: Any) -> None:
        super().__init__(app)
        self._client: AxiomClient | None = None
        self._dataset: str = settings.AXIOM_DATASET

        if settings.AXIOM_API_TOKEN and settings.AXIOM_DATASET:
            self._client = AxiomClient(token=settings.AXIOM_API_TOKEN)

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id: str = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)

        if request.url.path in _SKIP_PATHS or self._client is None:
            response: Response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            return response

        start_time: float = time.monotonic()
        method: str = request.method
        request_body: Any = await _read_json_body(request) if method in ("POST", "PUT", "PATCH") else None

        error_detail: str | None = None
        status_code: int = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            if status_code >= 400:
                response, error_detail = await self._capture_error(response)
            response.headers[REQUEST_ID_HEADER] = request_id
        except Exception as exc:
            error_detail = f"{type(exc).__name__}: {str(exc)[:300]}"
            raise
        finally:
            event: dict[str, Any] = {
                "request_id": request_id,
                "method": method,
                "path": mask_path(request.url.path),
                "status_code": status_code,
                "duration_ms": round((time.monotonic() - start_time) * 1000, 2),
            }
            if request.query_params:
                event["query_params"] = _mask_dict(dict(request.query_params))
            if request_body is not None:
                event["request_body"] = request_body
            if error_detail:
                event["error"] = error_detail
            self._ingest(event)

        return response

    async def _capture_error(self, response: Response) -> tuple[Response, str]:
        """에러 응답 본문에서 사유를 추출하고 응답을 다시 만듭니다."""
        body: bytes = b""
        async for chunk in response.body_iterator:
            body += chunk if isinstance(chunk, bytes) else chunk.encode("utf-8")

        try:
            data: Any = json.loads(body)
            detail: str = str(data.get("detail", data)) if isinstance(data, dict) else str(data)
        except (json.JSONDecodeError, UnicodeDecodeError):
            detail = body.decode("utf-8", errors="replace")
        if len(detail) > 500:
            detail = detail[:500] + "..."

        rebuilt = Response(
            content=body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )
        return rebuilt, detail

    def _ingest(self, event: dict[str, Any]) -> None:
        # 로깅 실패는 요청 처리에 영향을 주지 않음
        try:
            self._client.ingest_events(self._dataset, [event])
        except Exception as exc:
            logger.warning("axiom_ingest_failed", error=str(exc))
