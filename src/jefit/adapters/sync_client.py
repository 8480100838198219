"""HTTP client for the remote sync API."""

from dataclasses import dataclass
from datetime import date
from typing import Protocol

import httpx

from jefit.domain.errors import NotFoundError, StorageError, ValidationError

DEVICE_HEADER = "X-Device-ID"


class SyncClient(Protocol):
    """Interface for the remote sync endpoints."""

    async def pull(self, device_id: str, day: date | None = None) -> dict[str, object]:
        """Fetch the device's snapshot and return raw API data."""

    async def push(
        self, device_id: str, action: str, data: dict[str, object]
    ) -> dict[str, object]:
        """Send one tagged mutation and return raw API data."""


@dataclass
class HttpxSyncClient(SyncClient):
    """HTTPX-backed sync client."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxSyncClient":
        """Create a sync client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def pull(self, device_id: str, day: date | None = None) -> dict[str, object]:
        """Call ``GET /api/sync``."""
        params = {"date": day.isoformat()} if day else None
        response = await self.http_client.get(
            f"{self.base_url}/api/sync",
            headers={DEVICE_HEADER: device_id},
            params=params,
            timeout=15,
        )
        _raise_for_error(response)
        return response.json()

    async def push(
        self, device_id: str, action: str, data: dict[str, object]
    ) -> dict[str, object]:
        """Call ``POST /api/sync``."""
        response = await self.http_client.post(
            f"{self.base_url}/api/sync",
            headers={DEVICE_HEADER: device_id},
            json={"action": action, "data": data},
            timeout=15,
        )
        _raise_for_error(response)
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()


def _raise_for_error(response: httpx.Response) -> None:
    """Translate the API error envelope into domain errors."""
    if response.is_success:
        return
    try:
        body = response.json()
    except ValueError:
        body = {}
    message = str(body.get("error") or response.reason_phrase or "Sync failed")
    code = body.get("code")
    if code == "client_error" or response.status_code == httpx.codes.BAD_REQUEST:
        raise ValidationError(message)
    if code == "not_found" or response.status_code == httpx.codes.NOT_FOUND:
        raise NotFoundError(message)
    raise StorageError(message)
