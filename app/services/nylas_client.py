"""Nylas v3 이메일 API 클라이언트 (httpx).

Async client for the Nylas v3 REST API. Only the message endpoints used by
the mailbox sync are wrapped. Transient failures (connection errors,
timeouts, 5xx/429) are retried with tenacity; anything else surfaces as
``NylasAPIError``.
"""

from typing import Any

import httpx
import structlog
from tenacity import retry, retry_if_exception, stop_after_attempt, wait_exponential

from app.config import settings

logger = structlog.get_logger(__name__)

# 페이지당 메시지 수 — Messages per page
PAGE_LIMIT: int = 50


class NylasAPIError(Exception):
    """Nylas API 호출 실패.

    Attributes:
        status_code: HTTP 상태 코드, 네트워크 오류이면 None
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code: int | None = status_code


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, (httpx.ConnectError, httpx.TimeoutException)):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code == 429 or exc.response.status_code >= 500
    return False


_nylas_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception(_is_transient),
    reraise=True,
)


class NylasClient:
    """Nylas v3 메시지 API 래퍼.

    Args:
        api_key: Nylas API 키 (Bearer)
        base_url: API 기준 URL (e.g. https://api.us.nylas.com)
        transport: 테스트용 httpx 전송 계층 (Optional transport, used by tests)
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key: str = api_key if api_key is not None else settings.NYLAS_API_KEY
        self._base_url: str = (base_url or settings.NYLAS_API_URI).rstrip("/")
        self._timeout: float = timeout or settings.NYLAS_TIMEOUT_SECONDS
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers={
                "Authorization": f"Bearer {self._api_key}",
                "Accept": "application/json",
            },
            timeout=self._timeout,
            transport=self._transport,
        )

    @_nylas_retry
    async def _get_raw(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        async with self._client() as client:
            response = await client.get(path, params=params)
            response.raise_for_status()
            return response.json()

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        try:
            return await self._get_raw(path, params)
        except httpx.HTTPStatusError as exc:
            logger.error("nylas_request_failed", path=path, status_code=exc.response.status_code)
            raise NylasAPIError(
                f"Nylas API returned {exc.response.status_code}",
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("nylas_request_failed", path=path, error=str(exc))
            raise NylasAPIError(f"Nylas API request failed: {exc}") from exc

    async def list_messages(
        self,
        grant_id: str,
        page_token: str | None = None,
        limit: int = PAGE_LIMIT,
    ) -> tuple[list[dict[str, Any]], str | None]:
        """메시지 한 페이지를 조회합니다.

        Returns:
            tuple[list[dict], str | None]: (메시지 목록, 다음 페이지 커서)
        """
        params: dict[str, Any] = {"limit": limit}
        if page_token:
            params["page_token"] = page_token
        body: dict[str, Any] = await self._get(f"/v3/grants/{grant_id}/messages", params)
        return body.get("data") or [], body.get("next_cursor")

    async def get_message(self, grant_id: str, message_id: str) -> dict[str, Any]:
        body: dict[str, Any] = await self._get(f"/v3/grants/{grant_id}/messages/{message_id}")
        return body.get("data") or {}


# 싱글턴 인스턴스 — Singleton instance
nylas_client: NylasClient = NylasClient()
