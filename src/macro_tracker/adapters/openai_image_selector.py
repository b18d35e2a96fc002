"""OpenAI chat client used to pick the best food photo."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from macro_tracker.services.images import ImageSelector


@dataclass
class OpenAIImageSelector(ImageSelector):
    """Image selector backed by the OpenAI Chat Completions API."""

    client: AsyncOpenAI
    model: str

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAIImageSelector":
        """Create an OpenAI image selector."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one system and one user message and return the reply text."""
        completion = await self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        )
        if not completion.choices:
            raise RuntimeError("OpenAI returned no choices")
        return completion.choices[0].message.content or ""

    async def close(self) -> None:
        """Close the underlying OpenAI client."""
        await self.client.close()
