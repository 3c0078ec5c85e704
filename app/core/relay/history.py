# app/core/relay/history.py
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError

from app.core.config import HISTORY_LIMIT
from app.core.logging_config import get_logger
from app.core.store import MessageStore, USER

logger = get_logger("history")


class HistoryReader:
    """
    Reads the conversation memory handed to the model.

    With no store (or a store that errors) the memory degrades to the message
    that was just received, so the model still has something to answer.
    """

    def __init__(self, store: Optional[MessageStore], limit: int = HISTORY_LIMIT):
        self.store = store
        self.limit = limit

    def read(self, user_id: str, just_received: str) -> List[dict]:
        fallback = [{"role": USER, "content": just_received}]
        if self.store is None:
            return fallback
        try:
            history = self.store.recent_messages(user_id, self.limit)
        except SQLAlchemyError as exc:
            logger.warning("History read failed for %s, using the current message only: %s", user_id, exc)
            return fallback
        return history or fallback
