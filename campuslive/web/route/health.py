"""Liveness and hub statistics."""

from __future__ import annotations

import typing as t

from fastapi import APIRouter, Depends

from campuslive.core import di
from campuslive.realtime import RealtimeHub

router = APIRouter(tags=["health"])


@router.get("/health", operation_id="health")
@di.inject
async def health(hub: RealtimeHub = Depends(di.Provide["realtime.hub"])) -> dict[str, t.Any]:
    return {
        "status": "ok",
        "connections": len(hub.state),
        "online": hub.online_count(),
        "channels": len(hub.state.channels.channels()),
    }
