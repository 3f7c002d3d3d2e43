from sqlalchemy import Column, Integer, String

from lounge.database import Base


class MessageRecord(Base):
    """One committed chat message. Rows are only ever inserted."""

    __tablename__ = "messages"

    # Append sequence; the log's total order
    seq = Column(Integer, primary_key=True, autoincrement=True)
    id = Column(String(64), unique=True, index=True, nullable=False)
    username = Column(String(64), nullable=False)
    text = Column(String(4000), nullable=False, default="")
    image_url = Column(String(512), nullable=True)
    timestamp = Column(String(32), nullable=False)  # ISO-8601, UTC, assigned server-side
