import base64
import hashlib
import hmac
import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.core.database import build_engine, build_session_factory, init_db
from app.core.relay import ConversationResponder, RelayPipeline
from app.core.services import Services
from app.core.store import MessageStore, store_capability
from app.main import create_app
from app.models.file import StoredFile
from app.models.message import Message

SECRET = "test-channel-secret"
BASE_URL = "https://coach.example.com"


def sign(body: bytes, secret: str = SECRET) -> str:
    digest = hmac.new(secret.encode("utf-8"), body, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("utf-8")


def text_event(text, user_id="U123", reply_token="reply-1"):
    return {
        "type": "message",
        "replyToken": reply_token,
        "source": {"type": "user", "userId": user_id},
        "message": {"id": "m1", "type": "text", "text": text},
    }


def webhook_body(*events) -> bytes:
    return json.dumps({"destination": "Ubot", "events": list(events)}, ensure_ascii=False).encode("utf-8")


class FakeCompletions:
    def __init__(self, replies):
        self.replies = list(replies)
        self.calls = []

    def create(self, **kwargs):
        self.calls.append(kwargs)
        reply = self.replies.pop(0) if len(self.replies) > 1 else self.replies[0]
        if isinstance(reply, Exception):
            raise reply
        if reply is None:
            return SimpleNamespace(choices=[])
        return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=reply))])


class FakeOpenAI:
    def __init__(self, *replies):
        self.completions = FakeCompletions(replies or ["好的"])
        self.chat = SimpleNamespace(completions=self.completions)


class FakeMessenger:
    def __init__(self):
        self.replies = []

    def safe_reply(self, reply_token, text):
        if not reply_token:
            return False
        self.replies.append((reply_token, text))
        return True


@pytest.fixture
def settings(tmp_path):
    return Settings(
        line_channel_access_token="line-token",
        line_channel_secret=SECRET,
        openai_api_key="sk-test",
        database_url=f"sqlite:///{tmp_path / 'relay.db'}",
        public_base_url=BASE_URL,
    )


@pytest.fixture
def session_factory(settings):
    engine = build_engine(settings.database_url)
    assert init_db(engine)
    yield build_session_factory(engine)
    engine.dispose()


@pytest.fixture
def store(session_factory):
    return MessageStore(session_factory)


@pytest.fixture
def messenger():
    return FakeMessenger()


@pytest.fixture
def openai_client():
    return FakeOpenAI("今天的訓練很紮實！\n明天建議休息。")


def build_client(settings, store, openai_client, messenger):
    responder = ConversationResponder(openai_client, settings.openai_model) if openai_client else None
    database = store_capability(settings, store)
    pipeline = RelayPipeline(settings, store, responder, messenger, database=database)
    services = Services(settings=settings, store=store, database=database, pipeline=pipeline)
    return TestClient(create_app(services))


@pytest.fixture
def client(settings, store, openai_client, messenger):
    return build_client(settings, store, openai_client, messenger)


@pytest.fixture
def post_events(client):
    def _post(*events, secret=SECRET):
        body = webhook_body(*events)
        return client.post(
            "/webhook",
            content=body,
            headers={"X-Line-Signature": sign(body, secret), "Content-Type": "application/json"},
        )
    return _post


def all_messages(session_factory, user_id=None):
    with session_factory() as db:
        query = db.query(Message)
        if user_id:
            query = query.filter(Message.user_id == user_id)
        return [(m.role, m.content) for m in query.order_by(Message.id).all()]


def all_files(session_factory):
    with session_factory() as db:
        return db.query(StoredFile).all()
