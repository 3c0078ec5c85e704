# app/core/relay/renderer.py
import io
import re
from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Optional

from docx import Document

from app.core.config import DOCUMENT_TITLE, DOCX_MIME

# Characters XML 1.0 cannot carry (tab, LF and CR are allowed)
XML_INVALID_CHARS = re.compile("[\x00-\x08\x0b\x0c\x0e-\x1f\ud800-\udfff\ufffe\uffff]")


@dataclass(frozen=True)
class RenderedDocument:
    filename: str
    mime_type: str
    data: bytes


def xml_safe_text(text: str) -> str:
    """Drop control characters that cannot be written into a .docx."""
    return XML_INVALID_CHARS.sub("", text)


def report_filename(today: Optional[date] = None) -> str:
    today = today or datetime.now(timezone.utc).date()
    return f"report_{today.isoformat()}.docx"


def render_document(user_id: str, text: str, today: Optional[date] = None) -> RenderedDocument:
    """
    Render `text` as a Word document: a bold title paragraph, then one
    paragraph per line of `text`. Lines are neither merged nor wrapped.

    Each line is written as literal run text, so a stray `\\r` (or tab) stays
    inside its paragraph instead of becoming a line break. Characters XML
    cannot hold are dropped, see `xml_safe_text`.
    """
    doc = Document()
    doc.core_properties.title = DOCUMENT_TITLE
    doc.core_properties.author = xml_safe_text(user_id)

    title = doc.add_paragraph()
    title.add_run(DOCUMENT_TITLE).bold = True

    for line in xml_safe_text(text).split("\n"):
        paragraph = doc.add_paragraph()
        if line:
            # add_run(text) would translate \r and \t into <w:br/>/<w:tab/>
            paragraph.add_run()._r.add_t(line)

    buffer = io.BytesIO()
    doc.save(buffer)
    return RenderedDocument(
        filename=report_filename(today),
        mime_type=DOCX_MIME,
        data=buffer.getvalue(),
    )
