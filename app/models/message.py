# app/models/message.py
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Integer, String, Text, Index
from app.models.base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Message(Base):
    __tablename__ = "messages"

    # Autoincrement id breaks created_at ties in insertion order
    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String, nullable=False)
    role = Column(String, nullable=False)  # "user" | "assistant"
    content = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    __table_args__ = (
        Index("ix_messages_user_created", "user_id", "created_at"),
    )
