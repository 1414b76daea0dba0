"""The websocket endpoint clients hold open for pushes."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, WebSocket
from starlette.websockets import WebSocketState

from campuslive.core import di
from campuslive.core.logging import TRACE
from campuslive.realtime import AuthenticationFailure, ConnectionHandler, RealtimeHub, UnknownConnection

from ..transport import WebSocketTransport

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])

# application-defined close code for a rejected handshake
CloseUnauthorized = 4401


def bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


@router.websocket("/ws")
@di.inject
async def realtime_socket(
    websocket: WebSocket,
    token: str | None = Query(default=None),
    hub: RealtimeHub = Depends(di.Provide["realtime.hub"]),
) -> None:
    credential = token or bearer_token(websocket.headers.get("authorization"))
    await websocket.accept()

    transport = WebSocketTransport(websocket)
    try:
        connection = await hub.connect(credential, transport)
    except AuthenticationFailure as e:
        await transport.close(code=CloseUnauthorized, reason=e.code)
        return
    except UnknownConnection:
        await transport.close(code=1011, reason="connection closed during handshake")
        return

    cid = str(connection.connection_id)
    handler = ConnectionHandler(hub, connection)
    try:
        while websocket.application_state is WebSocketState.CONNECTED:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                logger.debug(
                    "client disconnected",
                    extra={"connection_id": cid, "close_code": message.get("code", 1000)},
                )
                break

            # binary frames are decoded like text; undecodable ones get an invalid_message reply
            data: str | bytes | None = message.get("text")
            if data is None:
                data = message.get("bytes") or b""
            logger.log(TRACE, "received frame", extra={"connection_id": cid, "bytes": len(data)})
            await handler.receive(data)
    finally:
        await hub.on_transport_closed(connection.connection_id)
