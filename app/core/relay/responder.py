# app/core/relay/responder.py
from typing import List

from openai import OpenAI

from app.core.config import EMPTY_REPLY_FALLBACK, SYSTEM_PROMPT
from app.core.logging_config import get_logger

logger = get_logger("responder")


class ConversationResponder:
    def __init__(self, client: OpenAI, model: str, system_prompt: str = SYSTEM_PROMPT):
        self.client = client
        self.model = model
        self.system_prompt = system_prompt

    def build_conversation(self, history: List[dict]) -> List[dict]:
        return [{"role": "system", "content": self.system_prompt}] + [
            {"role": m["role"], "content": m["content"]} for m in history
        ]

    def generate(self, history: List[dict]) -> str:
        """
        Calls the chat completions API once with the persona prompt followed by
        `history`. API errors propagate to the caller; an empty completion is
        replaced by a fixed "please resend" message.
        """
        completion = self.client.chat.completions.create(
            model=self.model,
            messages=self.build_conversation(history),
        )

        if not completion.choices:
            logger.warning("No completion choices returned from %s", self.model)
            return EMPTY_REPLY_FALLBACK

        text = completion.choices[0].message.content or ""
        if not text.strip():
            return EMPTY_REPLY_FALLBACK
        return text


def build_responder(settings) -> ConversationResponder:
    settings.openai_capability().require()
    return ConversationResponder(
        client=OpenAI(api_key=settings.openai_api_key),
        model=settings.openai_model,
    )
