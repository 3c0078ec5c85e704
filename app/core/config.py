# app/core/config.py
import os
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

from dotenv import load_dotenv

from app.core.logging_config import get_logger

load_dotenv()

logger = get_logger("config")

DEFAULT_OPENAI_MODEL = "gpt-4.1-mini"
DEFAULT_PORT = 3000

# Number of messages sent to the model as conversation memory
HISTORY_LIMIT = 20

# LINE rejects text messages over 5000 characters
REPLY_MAX_CHARS = 4900

SYSTEM_PROMPT = """
你是我的訓練教練助理，用繁體中文。
我回報訓練（跑步/重訓/游泳/登山/瑜珈）時：
- 回覆：重點摘要、風險提醒、明日建議（清楚表列）
- 若避免受傷更重要，請保守建議
若我說「產出報告」或「做成Word」，請產出一份可下載 Word 報告（條列清楚）。
""".strip()

EMPTY_REPLY_FALLBACK = "我剛剛沒有產生到回覆，請再傳一次～"

DOCUMENT_TITLE = "訓練分析報告"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


def _env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return value.strip()


def _int_env(name: str, default: int) -> int:
    value = _env(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        logger.error("[ENV] %s=%r is not a number, using %s", name, value, default)
        return default


class ConfigurationMissing(Exception):
    """Raised when a client is built for a capability that is not configured."""


@dataclass(frozen=True)
class Capability:
    available: bool
    reason: str = ""

    @classmethod
    def ok(cls) -> "Capability":
        return cls(True)

    @classmethod
    def missing(cls, *names: str) -> "Capability":
        return cls(False, "、".join(names) + " 尚未設定完成，請先在部署環境變數設定。")

    def require(self) -> None:
        if not self.available:
            raise ConfigurationMissing(self.reason)


@dataclass
class Settings:
    """
    Runtime settings read from the environment (and `.env` when present).

    Nothing here is mandatory: every consumer asks for a `Capability` and
    degrades when it is unavailable instead of crashing the process.
    """
    line_channel_access_token: Optional[str] = None
    line_channel_secret: Optional[str] = None
    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    database_url: Optional[str] = None
    public_base_url: str = ""
    port: int = DEFAULT_PORT
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            line_channel_access_token=_env("LINE_CHANNEL_ACCESS_TOKEN"),
            line_channel_secret=_env("LINE_CHANNEL_SECRET"),
            openai_api_key=_env("OPENAI_API_KEY"),
            openai_model=_env("OPENAI_MODEL") or DEFAULT_OPENAI_MODEL,
            database_url=_env("DATABASE_URL"),
            public_base_url=_env("PUBLIC_BASE_URL") or "",
            port=_int_env("PORT", DEFAULT_PORT),
            log_level=(_env("LOG_LEVEL") or "INFO").upper(),
        )

    def missing_names(self) -> list:
        required = {
            "LINE_CHANNEL_ACCESS_TOKEN": self.line_channel_access_token,
            "LINE_CHANNEL_SECRET": self.line_channel_secret,
            "OPENAI_API_KEY": self.openai_api_key,
            "DATABASE_URL": self.database_url,
        }
        return [name for name, value in required.items() if not value]

    def line_capability(self) -> Capability:
        missing = []
        if not self.line_channel_access_token:
            missing.append("LINE_CHANNEL_ACCESS_TOKEN")
        if not self.line_channel_secret:
            missing.append("LINE_CHANNEL_SECRET")
        return Capability.missing(*missing) if missing else Capability.ok()

    def openai_capability(self) -> Capability:
        if not self.openai_api_key:
            return Capability.missing("OPENAI_API_KEY")
        return Capability.ok()

    def database_capability(self) -> Capability:
        if not self.database_url:
            return Capability.missing("DATABASE_URL")
        return Capability.ok()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings.from_env()
