"""OpenAI Chat Completions client."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from nutrilite.services.chat import ChatClient


@dataclass
class OpenAIChatClient(ChatClient):
    """Chat client backed by the OpenAI Chat Completions API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIChatClient":
        """Create an OpenAI chat client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def complete(
        self,
        *,
        model: str,
        system_prompt: str,
        message: str,
        temperature: float,
        max_tokens: int,
    ) -> str:
        """Return the assistant's reply text, or an empty string."""
        completion = await self.client.chat.completions.create(
            model=model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": message},
            ],
            temperature=temperature,
            max_tokens=max_tokens,
        )
        if not completion.choices:
            return ""
        content = completion.choices[0].message.content
        return (content or "").strip()

    async def close(self) -> None:
        await self.client.close()
