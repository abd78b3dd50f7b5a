"""AI chat relay for diet questions."""

import logging
from dataclasses import dataclass
from typing import Protocol

SYSTEM_PROMPT = (
    "You are NutriLite Assistant. Only answer questions about NutriLite "
    "(features, navigation) and diet/calorie guidance (foods, calories, macros, "
    "portions, meal ideas). If unrelated, refuse politely."
)

_logger = logging.getLogger(__name__)


class ChatClient(Protocol):
    """Interface for a chat completion backend."""

    async def complete(
        self,
        *,
        model: str,
        system_prompt: str,
        message: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the reply text for a single user message."""


@dataclass(frozen=True)
class ChatReply:
    """Status code and body; the body always carries a `text` key."""

    status_code: int
    body: dict[str, str]


@dataclass
class ChatService:
    """Forwards a user message to the chat backend.

    `client` is None when no OpenAI key is configured.
    """

    client: ChatClient | None
    model: str = "gpt-4o-mini"
    temperature: float = 0.6
    max_tokens: int = 300

    async def reply(self, message: object) -> ChatReply:
        """Answer a message, mapping every failure to a `{text}` body."""
        text = str(message or "").strip()
        if not text:
            return ChatReply(400, {"error": "Missing message", "text": ""})
        if self.client is None:
            return ChatReply(501, {"text": ""})
        try:
            answer = await self.client.complete(
                model=self.model,
                system_prompt=SYSTEM_PROMPT,
                message=text,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception:
            _logger.exception("Chat failed")
            return ChatReply(500, {"error": "Chat failed", "text": ""})
        return ChatReply(200, {"text": answer.strip()})
