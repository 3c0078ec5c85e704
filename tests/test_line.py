from conftest import SECRET, sign
from app.core.relay import LineMessenger, verify_signature


def test_valid_signature():
    body = b'{"events": []}'
    assert verify_signature(SECRET, body, sign(body)) == (True, "")


def test_signature_failures():
    body = b'{"events": []}'
    assert verify_signature(None, body, sign(body))[0] is False
    assert verify_signature(SECRET, body, None)[0] is False
    assert verify_signature(SECRET, body, sign(body, "other"))[0] is False
    assert verify_signature(SECRET, b"\xff\xfe", "abc")[0] is False


def test_safe_reply_requires_token():
    messenger = LineMessenger("token")
    assert messenger.safe_reply(None, "hi") is False


def test_safe_reply_unconfigured():
    messenger = LineMessenger(None)
    assert messenger.safe_reply("r1", "hi") is False


def test_safe_reply_swallows_errors(monkeypatch):
    messenger = LineMessenger("token")

    def boom(reply_token, text):
        raise ConnectionError("LINE unreachable")

    monkeypatch.setattr(messenger, "reply", boom)
    assert messenger.safe_reply("r1", "hi") is False


def test_safe_reply_sends(monkeypatch):
    messenger = LineMessenger("token")
    sent = []
    monkeypatch.setattr(messenger, "reply", lambda token, text: sent.append((token, text)))
    assert messenger.safe_reply("r1", "hi") is True
    assert sent == [("r1", "hi")]
