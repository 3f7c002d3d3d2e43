"""
Chat hub: the per-connection session protocol and broadcast fan-out.

Every state-changing operation (register, send, typing, disconnect) runs
under one asyncio lock, so registry mutations, log appends and publishes
never interleave and every subscriber sees events in the same order.
Publishing only enqueues onto each connection's outbox; nothing here waits
on a client socket.

Errors are reported to the originating connection only and never end the
session.
"""

import asyncio
import logging
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from lounge.core import events
from lounge.core.errors import ChatError, NameTaken, Unauthorized, ValidationError
from lounge.schemas.message import MessageCreate
from lounge.schemas.user import RegisterRequest
from lounge.services.message_log import MessageLog, build_message, utc_timestamp
from lounge.services.presence import PresenceRegistry
from lounge.storage import upload_exists
from lounge.websocket.manager import Connection, ConnectionManager, ConnectionState

logger = logging.getLogger(__name__)


def _first_error(exc: PydanticValidationError) -> str:
    """Human-readable message for the first failing field."""
    err = exc.errors()[0]
    ctx_error = (err.get("ctx") or {}).get("error")
    if ctx_error is not None:
        return str(ctx_error)
    return err.get("msg", "Invalid request")


class ChatHub:
    def __init__(
        self,
        registry: PresenceRegistry,
        log: MessageLog,
        manager: ConnectionManager | None = None,
        upload_dir: str = "./uploads",
        upload_url_prefix: str = "/uploads",
    ) -> None:
        self.registry = registry
        self.log = log
        self.manager = manager or ConnectionManager()
        self._upload_dir = upload_dir
        self._upload_url_prefix = upload_url_prefix
        self._lock = asyncio.Lock()
        self._handlers = {
            events.REGISTER: self.register,
            events.SEND_MESSAGE: self.send_message,
            events.TYPING: self.typing,
            events.STOP_TYPING: self.stop_typing,
        }

    # ------------------------------------------------------------------
    # Frame dispatch
    # ------------------------------------------------------------------

    async def dispatch(self, connection: Connection, frame: dict[str, Any]) -> None:
        """Route one decoded client frame; ChatErrors go back to the sender as ``error``."""
        event_type = frame.get("type") if isinstance(frame, dict) else None
        handler = self._handlers.get(event_type)
        try:
            if handler is None:
                raise ValidationError(f"Unknown event type: {event_type!r}")
            await handler(connection, frame)
        except ChatError as exc:
            logger.info("Rejected %r from %s: %s", event_type, connection.id, exc.message)
            connection.send({"type": events.ERROR, "message": exc.message, "code": exc.code})

    # ------------------------------------------------------------------
    # Registration
    # ------------------------------------------------------------------

    async def register(self, connection: Connection, frame: dict[str, Any]) -> None:
        try:
            username = RegisterRequest(username=frame.get("username")).username
        except PydanticValidationError as exc:
            self._register_failed(connection, _first_error(exc))
            return

        async with self._lock:
            if connection.state is ConnectionState.DISCONNECTED:
                return
            try:
                registration = self.registry.register(connection.id, username)
            except NameTaken as exc:
                self._register_failed(connection, exc.message)
                return

            connection.username = registration.username
            connection.state = ConnectionState.REGISTERED
            if not self.manager.is_subscribed(connection.id):
                self.manager.subscribe(connection)
            connection.send({"type": events.REGISTER_SUCCESS, "username": registration.username})

            if registration.is_noop:
                return
            if registration.is_rename:
                self.manager.publish(
                    {
                        "type": events.USER_NAME_CHANGED,
                        "oldUsername": registration.previous,
                        "newUsername": registration.username,
                        "timestamp": utc_timestamp(),
                        "activeUsers": self.registry.snapshot(),
                    }
                )
            else:
                self.manager.publish(
                    {
                        "type": events.USER_JOINED,
                        "username": registration.username,
                        "timestamp": utc_timestamp(),
                        "activeUsers": self.registry.snapshot(),
                    }
                )

    def _register_failed(self, connection: Connection, reason: str) -> None:
        logger.info("Registration failed for %s: %s", connection.id, reason)
        connection.send({"type": events.REGISTER_FAILED, "reason": reason})

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    async def send_message(self, connection: Connection, frame: dict[str, Any]) -> None:
        if not connection.registered:
            raise Unauthorized()

        try:
            body = MessageCreate.model_validate({k: v for k, v in frame.items() if k != "type"})
        except PydanticValidationError as exc:
            raise ValidationError(_first_error(exc)) from exc

        if body.image_url and not upload_exists(body.image_url, self._upload_dir, self._upload_url_prefix):
            raise ValidationError("Unknown image attachment")

        async with self._lock:
            # The connection may have gone away while this frame was queued
            if not connection.registered:
                raise Unauthorized()
            message = build_message(connection.username, body.text, body.image_url)
            # PersistenceFailure propagates to dispatch; nothing is published
            await asyncio.to_thread(self.log.append, message)
            self.manager.publish({"type": events.MESSAGE_NEW, "message": message.model_dump(by_alias=True)})

    # ------------------------------------------------------------------
    # Typing relay; the server keeps no typing state
    # ------------------------------------------------------------------

    async def typing(self, connection: Connection, frame: dict[str, Any]) -> None:
        await self._relay_typing(connection, events.USER_TYPING)

    async def stop_typing(self, connection: Connection, frame: dict[str, Any]) -> None:
        await self._relay_typing(connection, events.USER_STOP_TYPING)

    async def _relay_typing(self, connection: Connection, event_type: str) -> None:
        if not connection.registered:
            raise Unauthorized()
        async with self._lock:
            self.manager.publish({"type": event_type, "username": connection.username}, exclude_id=connection.id)

    # ------------------------------------------------------------------
    # Disconnect
    # ------------------------------------------------------------------

    async def disconnect(self, connection: Connection) -> None:
        """Tear down *connection*. Safe to call more than once."""
        async with self._lock:
            if connection.state is ConnectionState.DISCONNECTED:
                return
            connection.state = ConnectionState.DISCONNECTED
            self.manager.unsubscribe(connection.id)
            username = self.registry.unregister(connection.id)
            if username is None:
                return
            self.manager.publish(
                {
                    "type": events.USER_LEFT,
                    "username": username,
                    "timestamp": utc_timestamp(),
                    "activeUsers": self.registry.snapshot(),
                }
            )

    @property
    def active_users(self) -> list[str]:
        return self.registry.snapshot()
