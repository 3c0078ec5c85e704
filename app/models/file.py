# app/models/file.py
from sqlalchemy import Column, DateTime, LargeBinary, String
from app.models.base import Base
from app.models.message import utcnow


class StoredFile(Base):
    __tablename__ = "files"

    id = Column(String, primary_key=True, index=True)  # UUID as string
    user_id = Column(String, nullable=False)
    filename = Column(String, nullable=False)
    mime = Column(String, nullable=False)
    data = Column(LargeBinary, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
