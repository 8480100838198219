"""HTTP client for the remote coach endpoint."""

from dataclasses import dataclass

import httpx

from jefit.domain.advice import AdviceSnapshot
from jefit.services.advisory import AdviceClient


@dataclass
class HttpxCoachClient(AdviceClient):
    """Advice client that calls ``POST /api/coach`` on the sync server."""

    base_url: str
    http_client: httpx.AsyncClient

    @classmethod
    def create(cls, base_url: str) -> "HttpxCoachClient":
        """Create a coach client with a managed httpx session."""
        return cls(base_url=base_url.rstrip("/"), http_client=httpx.AsyncClient())

    async def get_advice(
        self, snapshot: AdviceSnapshot, question: str | None = None
    ) -> str:
        """Post the snapshot and return the advice text."""
        payload: dict[str, object] = {"userData": snapshot.model_dump(by_alias=True)}
        if question:
            payload["question"] = question
        response = await self.http_client.post(
            f"{self.base_url}/api/coach", json=payload, timeout=20
        )
        response.raise_for_status()
        return str(response.json().get("advice") or "")

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
