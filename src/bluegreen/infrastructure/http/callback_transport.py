"""Callback transport implementations."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import structlog
import urllib3

from bluegreen.config import CallbackSettings
from bluegreen.domain.errors import TransportError
from bluegreen.domain.ports.services import CallbackResponse, CallbackTransport


logger = structlog.get_logger(__name__)


def create_pool_manager(settings: CallbackSettings) -> urllib3.PoolManager:
    timeout = urllib3.Timeout(connect=settings.connect_timeout, read=settings.read_timeout)
    return urllib3.PoolManager(timeout=timeout, retries=False)


class Urllib3CallbackTransport(CallbackTransport):
    """HTTPS PUT to the pre-signed callback URL using urllib3."""

    def __init__(self, http: urllib3.PoolManager) -> None:
        self._http = http

    def _put(self, url: str, body: bytes, headers: dict[str, str]) -> CallbackResponse:
        try:
            response = self._http.request(
                "PUT", url, body=body, headers=headers, retries=False
            )
        except urllib3.exceptions.HTTPError as e:
            raise TransportError(f"Callback request failed: {e}") from e

        if not 200 <= response.status < 300:
            raise TransportError(
                f"Callback rejected with HTTP {response.status}: "
                f"{response.data.decode('utf-8', errors='replace')}",
                status=response.status,
            )
        return CallbackResponse(status=response.status, reason=response.reason or "")

    async def put(self, url: str, body: bytes, headers: dict[str, str]) -> CallbackResponse:
        logger.debug("callback_request", method="PUT", headers=headers)
        return await asyncio.to_thread(self._put, url, body, headers)


class InMemoryCallbackTransport(CallbackTransport):
    """In-memory callback transport for development/testing."""

    def __init__(self, fail_with: TransportError | None = None) -> None:
        self._fail_with = fail_with
        self._deliveries: list[tuple[str, bytes, dict[str, str]]] = []

    async def put(self, url: str, body: bytes, headers: dict[str, str]) -> CallbackResponse:
        if self._fail_with is not None:
            raise self._fail_with
        self._deliveries.append((url, body, dict(headers)))
        return CallbackResponse(status=200, reason="OK")

    @property
    def deliveries(self) -> list[tuple[str, bytes, dict[str, str]]]:
        return list(self._deliveries)

    @property
    def documents(self) -> list[dict[str, Any]]:
        """Delivered bodies decoded from JSON."""
        return [json.loads(body) for _, body, _ in self._deliveries]

    def clear(self) -> None:
        self._deliveries.clear()
