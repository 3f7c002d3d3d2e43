from fastapi import Request, WebSocket

from lounge.services.message_log import MessageLog
from lounge.websocket.hub import ChatHub


def get_message_log(request: Request) -> MessageLog:
    return request.app.state.message_log


def get_hub(request: Request) -> ChatHub:
    return request.app.state.hub


def get_ws_hub(websocket: WebSocket) -> ChatHub:
    """Same hub as get_hub, for WebSocket routes (no Request object there)."""
    return websocket.app.state.hub
