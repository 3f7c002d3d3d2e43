import asyncio
import json
import logging
from typing import Any

from fastapi import WebSocket, WebSocketDisconnect

from lounge.websocket.hub import ChatHub
from lounge.websocket.manager import Connection

logger = logging.getLogger(__name__)


async def _pump(websocket: WebSocket, connection: Connection) -> None:
    """Drain the connection's outbox onto the socket until told to close."""
    try:
        while True:
            payload = await connection.next_payload()
            if payload is None:
                await websocket.close(code=1013)  # try again later: client too slow
                return
            await websocket.send_text(json.dumps(payload))
    except Exception as exc:
        logger.info("Writer for %s stopped: %s", connection.id, exc)


async def chat_ws_handler(websocket: WebSocket, hub: ChatHub, max_queue: int = 256) -> None:
    """Full lifecycle handler for one chat WebSocket connection."""
    await websocket.accept()
    connection = Connection(max_queue=max_queue)
    logger.info("WebSocket connected: %s", connection.id)
    writer = asyncio.create_task(_pump(websocket, connection))

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                data: dict[str, Any] = json.loads(raw)
            except json.JSONDecodeError:
                continue

            try:
                await hub.dispatch(connection, data)
            except Exception as exc:
                logger.error(
                    "Error handling event %r from %s: %s",
                    data.get("type") if isinstance(data, dict) else None,
                    connection.id,
                    exc,
                    exc_info=True,
                )

    except WebSocketDisconnect:
        pass
    except RuntimeError as exc:
        # Socket already closed by the writer (slow consumer)
        logger.info("WebSocket %s closed: %s", connection.id, exc)
    finally:
        writer.cancel()
        logger.info("WebSocket disconnected: %s", connection.id)
        # Shielded so a cancelled handler still frees the name and announces the leave
        await asyncio.shield(hub.disconnect(connection))
