"""
Append-only message log backed by SQLAlchemy.

Appends are serialized behind a single-writer lock and committed before
``append`` returns, so a caller that broadcasts after ``append`` never
announces a message that is not stored.  Reads are served from whatever is
committed at the time and need no lock.

Pagination counts ``offset`` from the *newest* end of the log: a page is the
window ``[total - offset - limit, total - offset)`` returned newest-first.
"""

import logging
import secrets
import string
import threading
import time
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from lounge.core.errors import PersistenceFailure
from lounge.models.message import MessageRecord
from lounge.schemas.message import ChatMessage, MessagePage

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_message_id() -> str:
    """Millisecond timestamp plus a random base36 suffix, e.g. ``1700000000000-k3j9x0q2a``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


def utc_timestamp() -> str:
    """ISO-8601 UTC with millisecond precision and a ``Z`` suffix."""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def build_message(username: str, text: str, image_url: str | None = None) -> ChatMessage:
    return ChatMessage(
        id=new_message_id(),
        username=username,
        text=text,
        image_url=image_url,
        timestamp=utc_timestamp(),
    )


class MessageLog:
    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory
        self._write_lock = threading.Lock()

    def append(self, message: ChatMessage) -> ChatMessage:
        """Persist *message*. Raises PersistenceFailure if the commit fails."""
        record = MessageRecord(
            id=message.id,
            username=message.username,
            text=message.text,
            image_url=message.image_url,
            timestamp=message.timestamp,
        )
        with self._write_lock:
            db: Session = self._session_factory()
            try:
                db.add(record)
                db.commit()
            except SQLAlchemyError as exc:
                db.rollback()
                logger.error("Failed to append message %s: %s", message.id, exc, exc_info=True)
                raise PersistenceFailure("Failed to send message") from exc
            finally:
                db.close()
        logger.debug("Appended message %s from %r", message.id, message.username)
        return message

    def read_page(self, offset: int = 0, limit: int = 30) -> MessagePage:
        """Return up to *limit* messages, newest first, skipping the *offset* newest."""
        if offset < 0 or limit < 0:
            raise ValueError("offset and limit must be non-negative")

        db: Session = self._session_factory()
        try:
            total = db.scalar(select(func.count()).select_from(MessageRecord)) or 0
            rows = db.scalars(
                select(MessageRecord).order_by(MessageRecord.seq.desc()).offset(offset).limit(limit)
            ).all()
        except SQLAlchemyError as exc:
            logger.error("Failed to read messages (offset=%s, limit=%s): %s", offset, limit, exc, exc_info=True)
            raise PersistenceFailure("Failed to load messages") from exc
        finally:
            db.close()

        return MessagePage(
            messages=[ChatMessage.model_validate(row) for row in rows],
            total=total,
            has_more=offset + limit < total,
        )

    def count(self) -> int:
        db: Session = self._session_factory()
        try:
            return db.scalar(select(func.count()).select_from(MessageRecord)) or 0
        except SQLAlchemyError as exc:
            raise PersistenceFailure("Failed to count messages") from exc
        finally:
            db.close()
