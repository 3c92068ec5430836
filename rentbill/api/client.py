from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

import httpx

from rentbill.api.errors import ApiError, extract_data_message
from rentbill.settings import settings

logger = logging.getLogger(__name__)


class ApiClient:
    """Authenticated async JSON client for the rental backend."""

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        token_provider: Callable[[], str | None] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.token_provider = token_provider or settings.get_access_token
        headers = {
            "Accept": "application/json",
            "User-Agent": settings.api_user_agent,
        }
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout if timeout is not None else settings.api_timeout,
            headers=headers,
            transport=transport,
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        token: str | None = None,
    ) -> Any:
        token = token or self.token_provider()
        headers = {"Authorization": f"Bearer {token}"} if token else None
        logger.debug("%s %s has_token=%s", method, path, bool(token))

        try:
            res = await self._client.request(method, path, json=json, params=params, headers=headers)
            res.raise_for_status()
        except httpx.HTTPStatusError as e:
            data = _safe_json(e.response)
            logger.error(
                "API error: %s %s -> %s %s",
                method,
                path,
                e.response.status_code,
                data,
            )
            message = extract_data_message(data) or e.response.reason_phrase or str(e)
            raise ApiError(message, e.response.status_code, data) from e
        except httpx.RequestError as e:
            logger.error("API request failed: %s %s: %s", method, path, e)
            raise ApiError(str(e) or e.__class__.__name__) from e

        return _safe_json(res)

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> ApiClient:
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


def _safe_json(res: httpx.Response) -> Any:
    if not res.content:
        return None
    try:
        return res.json()
    except ValueError:
        return res.text
