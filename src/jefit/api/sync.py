"""Sync and coach endpoints keyed by device id."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING

from fastapi import APIRouter, Header, Query, Request

from jefit.adapters.sync_client import DEVICE_HEADER
from jefit.api.models import CoachRequest, PushRequest  # noqa: TC001
from jefit.domain.serialization import snapshot_to_dict

if TYPE_CHECKING:
    from jefit.containers import AppContainer

router = APIRouter(prefix="/api", tags=["sync"])


@router.get("/sync")
async def pull(
    request: Request,
    day: date | None = Query(default=None, alias="date"),
    device_id: str | None = Header(default=None, alias=DEVICE_HEADER),
) -> dict[str, object]:
    """Return the profile, recent entries and the day's water for a device."""
    container: AppContainer = request.app.state.container
    snapshot = container.sync_service.pull(device_id or "", day)
    return snapshot_to_dict(snapshot)


@router.post("/sync")
async def push(
    body: PushRequest,
    request: Request,
    device_id: str | None = Header(default=None, alias=DEVICE_HEADER),
) -> dict[str, object]:
    """Apply one tagged mutation for the device's user."""
    container: AppContainer = request.app.state.container
    result = container.sync_service.push(device_id or "", body.action, body.data)
    if result.id is not None:
        return {"id": result.id}
    return {"success": True}


@router.post("/coach")
async def coach(body: CoachRequest, request: Request) -> dict[str, str]:
    """Return short coaching advice for the supplied day summary."""
    container: AppContainer = request.app.state.container
    advice = await container.advisory_service.get_advice(
        body.user_data, body.question
    )
    return {"advice": advice}
