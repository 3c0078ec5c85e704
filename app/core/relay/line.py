# app/core/relay/line.py
from typing import Optional, Tuple

from linebot.v3.messaging import (
    ApiClient,
    Configuration,
    MessagingApi,
    ReplyMessageRequest,
    TextMessage,
)
from linebot.v3.webhook import SignatureValidator

from app.core.config import REPLY_MAX_CHARS
from app.core.logging_config import get_logger

logger = get_logger("line")


def verify_signature(channel_secret: Optional[str], body: bytes, signature: Optional[str]) -> Tuple[bool, str]:
    """Returns (valid, reason). `reason` is only set when the check fails."""
    if not channel_secret:
        return False, "LINE_CHANNEL_SECRET is not configured"
    if not signature:
        return False, "missing X-Line-Signature header"
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError:
        return False, "body is not valid UTF-8"
    if not SignatureValidator(channel_secret).validate(text, signature):
        return False, "signature mismatch"
    return True, ""


class LineMessenger:
    """Sends reply messages through the LINE Messaging API."""

    def __init__(self, channel_access_token: Optional[str]):
        self.configuration = Configuration(access_token=channel_access_token or "")
        self.configured = bool(channel_access_token)

    def reply(self, reply_token: str, text: str) -> None:
        with ApiClient(self.configuration) as api_client:
            MessagingApi(api_client).reply_message(
                ReplyMessageRequest(
                    reply_token=reply_token,
                    messages=[TextMessage(text=str(text)[:REPLY_MAX_CHARS])],
                )
            )

    def safe_reply(self, reply_token: Optional[str], text: str) -> bool:
        """
        Best-effort reply. A reply token is single use and the user is already
        gone from our point of view if this fails, so errors are only logged.
        """
        if not reply_token:
            return False
        if not self.configured:
            logger.error("[LINE] reply skipped: LINE_CHANNEL_ACCESS_TOKEN is not configured")
            return False
        try:
            self.reply(reply_token, text)
        except Exception:
            logger.exception("[LINE] reply error")
            return False
        return True
