"""Starlette websocket adapter for the realtime transport seam."""

from __future__ import annotations

from starlette.websockets import WebSocket, WebSocketState

from campuslive.model import OutboundMessage


class WebSocketTransport(object):
    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    async def send(self, message: OutboundMessage) -> None:
        await self.websocket.send_text(message.model_dump_json(by_alias=True))

    async def close(self, code: int = 1000, reason: str = "") -> None:
        if self.websocket.application_state is WebSocketState.DISCONNECTED:
            return
        await self.websocket.close(code=code, reason=reason)
