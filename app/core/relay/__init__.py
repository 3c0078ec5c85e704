from .history import HistoryReader
from .line import LineMessenger, verify_signature
from .pipeline import RelayPipeline
from .renderer import RenderedDocument, render_document
from .responder import ConversationResponder
from .routing import should_render_document, with_download_link

__all__ = [
    "HistoryReader",
    "LineMessenger",
    "verify_signature",
    "RelayPipeline",
    "RenderedDocument",
    "render_document",
    "ConversationResponder",
    "should_render_document",
    "with_download_link",
]
