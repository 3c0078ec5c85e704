import pytest

from conftest import FakeOpenAI
from app.core.config import EMPTY_REPLY_FALLBACK, SYSTEM_PROMPT
from app.core.relay import ConversationResponder

HISTORY = [
    {"role": "user", "content": "今天游泳1公里"},
    {"role": "assistant", "content": "很棒！"},
    {"role": "user", "content": "肩膀有點緊"},
]


def test_prepends_system_prompt_and_uses_model():
    client = FakeOpenAI("多做伸展")
    responder = ConversationResponder(client, "gpt-test")

    assert responder.generate(HISTORY) == "多做伸展"

    call = client.completions.calls[0]
    assert call["model"] == "gpt-test"
    assert call["messages"][0] == {"role": "system", "content": SYSTEM_PROMPT}
    assert call["messages"][1:] == HISTORY
    assert len(client.completions.calls) == 1


@pytest.mark.parametrize("empty", ["", "   \n", None])
def test_empty_output_falls_back(empty):
    client = FakeOpenAI()
    client.completions.replies = [empty]
    assert ConversationResponder(client, "m").generate(HISTORY) == EMPTY_REPLY_FALLBACK


def test_errors_propagate_without_retry():
    client = FakeOpenAI(PermissionError("bad key"))
    with pytest.raises(PermissionError):
        ConversationResponder(client, "m").generate(HISTORY)
    assert len(client.completions.calls) == 1
