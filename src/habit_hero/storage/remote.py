from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from habit_hero.storage.base import Snapshot, StorageError

logger = logging.getLogger(__name__)


class RemoteSnapshotStore:
    """Snapshot rows in a PostgREST table: one row per player, JSON in `data`."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        table: str = "profiles",
        timeout: float = 10.0,
        retry_cap: float = 5.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.table = table
        self.retry_cap = retry_cap
        self._client = client or httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout)
        self._headers = self._build_headers(api_key)

    @staticmethod
    def _build_headers(api_key: str | None) -> dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if api_key:
            headers["apikey"] = api_key
            headers["Authorization"] = f"Bearer {api_key}"
        return headers

    @property
    def _path(self) -> str:
        return f"/rest/v1/{self.table}"

    async def _request_with_retry(
        self, method: str, extra_headers: dict[str, str] | None = None, **kwargs: Any
    ) -> httpx.Response:
        headers = {**self._headers, **(extra_headers or {})}
        resp = await self._client.request(method, self._path, headers=headers, **kwargs)
        if resp.status_code != 429:
            return resp
        retry_after = resp.headers.get("Retry-After")
        wait_seconds = 2.0
        try:
            if retry_after:
                wait_seconds = max(1.0, float(retry_after))
        except ValueError:
            wait_seconds = 2.0
        await asyncio.sleep(min(wait_seconds, self.retry_cap))
        return await self._client.request(method, self._path, headers=headers, **kwargs)

    async def load_snapshot(self, player_id: str) -> Snapshot | None:
        try:
            resp = await self._request_with_retry(
                "GET",
                params={"id": f"eq.{player_id}", "select": "data"},
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"remote read failed: {exc}") from exc
        if resp.status_code >= 400:
            text = resp.text[:200].replace("\n", " ")
            raise StorageError(f"remote read error {resp.status_code}: {text}")
        try:
            rows = resp.json()
        except ValueError as exc:
            raise StorageError(f"remote read returned invalid JSON: {exc}") from exc
        if isinstance(rows, dict):
            rows = [rows]
        if not rows or not isinstance(rows, list):
            return None
        data = rows[0].get("data") if isinstance(rows[0], dict) else None
        if not isinstance(data, dict) or not data:
            return None
        return data

    async def save_snapshot(self, player_id: str, snapshot: Snapshot) -> None:
        try:
            resp = await self._request_with_retry(
                "POST",
                params={"on_conflict": "id"},
                json={"id": player_id, "data": snapshot},
                extra_headers={"Prefer": "resolution=merge-duplicates,return=minimal"},
            )
        except httpx.HTTPError as exc:
            raise StorageError(f"remote write failed: {exc}") from exc
        if resp.status_code >= 400:
            text = resp.text[:200].replace("\n", " ")
            raise StorageError(f"remote write error {resp.status_code}: {text}")
        logger.debug("Saved remote snapshot player=%s status=%s", player_id, resp.status_code)

    async def aclose(self) -> None:
        await self._client.aclose()


class NullRemoteStore:
    """Used when no remote URL is configured."""

    async def load_snapshot(self, player_id: str) -> Snapshot | None:
        return None

    async def save_snapshot(self, player_id: str, snapshot: Snapshot) -> None:
        logger.debug("No remote store configured, dropping snapshot for player=%s", player_id)

    async def aclose(self) -> None:
        return None
