import asyncio
import enum
import logging
import uuid

logger = logging.getLogger(__name__)

# Queued in place of a payload to tell the writer to close the socket
_CLOSE = object()


class ConnectionState(enum.Enum):
    CONNECTED = "connected"
    REGISTERED = "registered"
    DISCONNECTED = "disconnected"


class Connection:
    """One live chat session.

    Outbound events go through a bounded queue that the socket's writer task
    drains, so publishing never waits on a slow client.  When the queue
    overflows the backlog is discarded and the writer is told to close the
    socket instead.
    """

    def __init__(self, connection_id: str | None = None, max_queue: int = 256) -> None:
        self.id = connection_id or uuid.uuid4().hex
        self.username: str | None = None
        self.state = ConnectionState.CONNECTED
        self._outbox: asyncio.Queue = asyncio.Queue(maxsize=max_queue)
        self._closing = False

    @property
    def registered(self) -> bool:
        return self.state is ConnectionState.REGISTERED

    @property
    def closing(self) -> bool:
        return self._closing

    def send(self, payload: dict) -> bool:
        """Queue *payload* for delivery. Returns False if the connection can't take it."""
        if self._closing or self.state is ConnectionState.DISCONNECTED:
            return False
        try:
            self._outbox.put_nowait(payload)
        except asyncio.QueueFull:
            logger.warning("Connection %s outbound queue full, closing", self.id)
            self._closing = True
            self.drain()
            self._outbox.put_nowait(_CLOSE)
            return False
        return True

    async def next_payload(self) -> dict | None:
        """Wait for the next queued payload; None means close the socket."""
        item = await self._outbox.get()
        if item is _CLOSE:
            return None
        return item

    def drain(self) -> list[dict]:
        """Remove and return everything queued right now."""
        items: list[dict] = []
        while not self._outbox.empty():
            item = self._outbox.get_nowait()
            if item is not _CLOSE:
                items.append(item)
        return items


class ConnectionManager:
    """Broadcast topic. Connections subscribe once registered and leave on disconnect."""

    def __init__(self) -> None:
        # connection_id -> Connection
        self._subscribers: dict[str, Connection] = {}

    def subscribe(self, connection: Connection) -> None:
        self._subscribers[connection.id] = connection
        logger.info("Connection %s subscribed (%d live)", connection.id, len(self._subscribers))

    def unsubscribe(self, connection_id: str) -> None:
        if self._subscribers.pop(connection_id, None) is not None:
            logger.info("Connection %s unsubscribed (%d live)", connection_id, len(self._subscribers))

    def is_subscribed(self, connection_id: str) -> bool:
        return connection_id in self._subscribers

    def publish(self, payload: dict, exclude_id: str | None = None) -> int:
        """Queue *payload* for every subscriber except *exclude_id*. Returns the delivery count."""
        delivered = 0
        dead: list[str] = []
        for cid, connection in list(self._subscribers.items()):
            if cid == exclude_id:
                continue
            if connection.send(payload):
                delivered += 1
            else:
                dead.append(cid)
        for cid in dead:
            self.unsubscribe(cid)
        return delivered

    def __len__(self) -> int:
        return len(self._subscribers)
