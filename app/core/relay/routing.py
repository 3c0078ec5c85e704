# app/core/relay/routing.py

DOCUMENT_TRIGGERS = (
    "word",
    "report",
    "報告",
    "整理成檔",
    "compile to file",
    "完整分析",
    "full analysis",
    "週彙總",
    "weekly summary",
    "月彙總",
    "monthly summary",
)


def should_render_document(user_text: str) -> bool:
    lowered = (user_text or "").lower()
    return any(trigger in lowered for trigger in DOCUMENT_TRIGGERS)


def file_link(base_url: str, file_id: str) -> str:
    return f"{base_url.strip().rstrip('/')}/files/{file_id}"


def with_download_link(reply_text: str, base_url: str, file_id: str) -> str:
    """
    Append the download link for a rendered report, or a reminder to set
    PUBLIC_BASE_URL plus the raw file id when no base URL is configured.
    """
    if not (base_url or "").strip():
        return (
            f"{reply_text}\n\n📄 Word 已生成，但 PUBLIC_BASE_URL 尚未設定。\n"
            "請在部署環境變數設定 PUBLIC_BASE_URL = 你的公開網址（例如 https://example.com）\n"
            f"檔案ID：{file_id}"
        )
    return f"{reply_text}\n\n📄 Word 下載連結：\n{file_link(base_url, file_id)}"
