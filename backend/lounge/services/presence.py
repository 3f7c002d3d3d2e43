"""
Presence registry: which live connection holds which display name.

Purely in-memory and owned by a single ChatHub; a restart empties it, which
is equivalent to every user leaving.  Names are unique among live entries
only and are compared exactly (case-sensitive).
"""

import logging
from dataclasses import dataclass

from lounge.core.errors import NameTaken

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Registration:
    username: str
    # None for a fresh join, otherwise the name the connection held before
    previous: str | None = None

    @property
    def is_rename(self) -> bool:
        return self.previous is not None and self.previous != self.username

    @property
    def is_noop(self) -> bool:
        return self.previous == self.username


class PresenceRegistry:
    def __init__(self) -> None:
        # connection_id -> username
        self._names: dict[str, str] = {}

    def register(self, connection_id: str, username: str) -> Registration:
        """Claim *username* for *connection_id*.

        Raises NameTaken when another live connection already holds it.
        Re-registering a connection is a rename; re-registering the name it
        already holds succeeds without change.
        """
        for cid, name in self._names.items():
            if name == username and cid != connection_id:
                raise NameTaken(username)

        previous = self._names.get(connection_id)
        self._names[connection_id] = username
        if previous is None:
            logger.info("Presence: %s registered as %r", connection_id, username)
        elif previous != username:
            logger.info("Presence: %s renamed %r -> %r", connection_id, previous, username)
        return Registration(username=username, previous=previous)

    def unregister(self, connection_id: str) -> str | None:
        """Drop the entry for *connection_id*; returns the freed name, if any."""
        username = self._names.pop(connection_id, None)
        if username is not None:
            logger.info("Presence: %s (%r) left", connection_id, username)
        return username

    def get(self, connection_id: str) -> str | None:
        return self._names.get(connection_id)

    def snapshot(self) -> list[str]:
        """Current names. Order is not meaningful."""
        return list(self._names.values())

    def __contains__(self, connection_id: object) -> bool:
        return connection_id in self._names

    def __len__(self) -> int:
        return len(self._names)
