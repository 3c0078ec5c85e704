# app/core/store.py
import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import sessionmaker

from app.core.config import Capability, Settings
from app.models.file import StoredFile
from app.models.message import Message

USER = "user"
ASSISTANT = "assistant"
ROLES = (USER, ASSISTANT)


def store_capability(settings: Settings, store: Optional["MessageStore"]) -> Capability:
    """The one answer to "can we persist right now?" shared by the pipeline and the routes."""
    if store is not None:
        return Capability.ok()
    configured = settings.database_capability()
    if not configured.available:
        return configured
    return Capability(False, "DATABASE_URL 無法使用，請檢查連線字串格式。")


@dataclass(frozen=True)
class FileBlob:
    id: str
    user_id: str
    filename: str
    mime: str
    data: bytes
    created_at: datetime


class MessageStore:
    """
    Append-only message log and file blob store on top of a SQLAlchemy
    session factory. Every call runs in its own short-lived session.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def append_message(self, user_id: str, role: str, content: str) -> int:
        if role not in ROLES:
            raise ValueError(f"Unknown message role: {role!r}")
        with self.session_factory() as db:
            msg = Message(user_id=user_id, role=role, content=content)
            db.add(msg)
            db.commit()
            return msg.id

    def recent_messages(self, user_id: str, limit: int) -> List[dict]:
        """
        Return the latest `limit` messages for a user, oldest first,
        as role/content dicts ready for the model.
        """
        with self.session_factory() as db:
            rows = (
                db.query(Message.role, Message.content)
                .filter(Message.user_id == user_id)
                .order_by(Message.created_at.desc(), Message.id.desc())
                .limit(limit)
                .all()
            )
        return [{"role": role, "content": content} for role, content in reversed(rows)]

    def save_file(self, user_id: str, filename: str, mime: str, data: bytes) -> str:
        file_id = str(uuid.uuid4())
        with self.session_factory() as db:
            db.add(StoredFile(
                id=file_id,
                user_id=user_id,
                filename=filename,
                mime=mime,
                data=data,
            ))
            db.commit()
        return file_id

    def get_file(self, file_id: str) -> Optional[FileBlob]:
        with self.session_factory() as db:
            row = db.query(StoredFile).filter(StoredFile.id == file_id).first()
            if row is None:
                return None
            return FileBlob(
                id=row.id,
                user_id=row.user_id,
                filename=row.filename,
                mime=row.mime,
                data=bytes(row.data),
                created_at=row.created_at,
            )
