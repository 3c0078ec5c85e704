# app/core/relay/pipeline.py
from typing import Callable, Optional

from pydantic import ValidationError

from app.core.config import Capability, Settings
from app.core.logging_config import get_logger
from app.core.relay.history import HistoryReader
from app.core.relay.line import LineMessenger
from app.core.relay.renderer import RenderedDocument, render_document, xml_safe_text
from app.core.relay.responder import ConversationResponder
from app.core.relay.routing import should_render_document, with_download_link
from app.core.store import ASSISTANT, USER, MessageStore, store_capability
from app.schemas.webhook import WebhookEvent

logger = get_logger("pipeline")

ERROR_REPLY = "抱歉，處理訊息時發生錯誤，請稍後再傳一次。"
NO_DB_DOCUMENT_NOTE = "\n\n（DB 未設定，暫時無法產 Word）"


class RelayPipeline:
    """
    Runs one inbound LINE event through the relay:

      persist user message -> read history -> generate reply ->
      (render + save document) -> persist assistant message -> reply
    """

    def __init__(
        self,
        settings: Settings,
        store: Optional[MessageStore],
        responder: Optional[ConversationResponder],
        messenger: LineMessenger,
        renderer: Callable[[str, str], RenderedDocument] = render_document,
        database: Optional[Capability] = None,
    ):
        self.settings = settings
        self.store = store
        self.database = database if database is not None else store_capability(settings, store)
        self.responder = responder
        self.messenger = messenger
        self.renderer = renderer
        self.history = HistoryReader(store)

    def process_event(self, raw_event) -> None:
        """
        Event boundary: never raises. Failures are logged and, when the event
        carries a reply token, the user gets a short apology.
        """
        try:
            event = WebhookEvent.model_validate(raw_event)
        except ValidationError as exc:
            logger.info("Ignoring malformed event: %s", exc.errors()[:1])
            return

        if not event.is_text_message():
            return

        try:
            self.handle_text_event(event)
        except Exception:
            logger.exception("[WEBHOOK] event failed for user %s", event.user_id)
            self.messenger.safe_reply(event.replyToken, ERROR_REPLY)

    def handle_text_event(self, event: WebhookEvent) -> str:
        user_id = event.user_id
        user_text = event.text

        line = self.settings.line_capability()
        if not line.available:
            self.messenger.safe_reply(event.replyToken, line.reason)
            return line.reason

        generation = self.settings.openai_capability()
        if not generation.available or self.responder is None:
            self.messenger.safe_reply(event.replyToken, generation.reason)
            return generation.reason

        # 1) Persist the user message
        if self.database.available:
            self.store.append_message(user_id, USER, user_text)

        # 2) Recent conversation memory
        history = self.history.read(user_id, user_text)

        # 3) Generate
        reply_text = self.responder.generate(history)

        # 4) Word document when the user asked for one
        if should_render_document(user_text):
            if not self.database.available:
                final_text = reply_text + NO_DB_DOCUMENT_NOTE
                self.messenger.safe_reply(event.replyToken, final_text)
                return final_text
            # The stored and replied text must match the document content
            reply_text = xml_safe_text(reply_text)
            file_id = self.save_document(user_id, reply_text)
            final_text = with_download_link(reply_text, self.settings.public_base_url, file_id)
        else:
            final_text = reply_text

        # 5) Store exactly what the user will see, then reply
        if self.database.available:
            self.store.append_message(user_id, ASSISTANT, final_text)
        self.messenger.safe_reply(event.replyToken, final_text)
        return final_text

    def save_document(self, user_id: str, text: str) -> str:
        document = self.renderer(user_id, text)
        file_id = self.store.save_file(user_id, document.filename, document.mime_type, document.data)
        logger.info("Saved %s (%d bytes) as %s for %s", document.filename, len(document.data), file_id, user_id)
        return file_id
