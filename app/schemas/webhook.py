# app/schemas/webhook.py
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class EventSource(BaseModel):
    type: Optional[str] = None
    userId: Optional[str] = None


class EventMessage(BaseModel):
    id: Optional[str] = None
    type: str
    text: Optional[str] = None


class WebhookEvent(BaseModel):
    type: str
    replyToken: Optional[str] = None
    source: Optional[EventSource] = None
    message: Optional[EventMessage] = None

    def is_text_message(self) -> bool:
        return self.type == "message" and self.message is not None and self.message.type == "text"

    @property
    def user_id(self) -> str:
        if self.source and self.source.userId:
            return self.source.userId
        return "unknown"

    @property
    def text(self) -> str:
        return str(self.message.text or "").strip() if self.message else ""


class WebhookBody(BaseModel):
    destination: Optional[str] = None
    # Kept raw so one malformed event does not invalidate its siblings
    events: List[Any] = Field(default_factory=list)
