"""OpenAI Responses API client for coaching advice."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from jefit.domain.advice import AdviceSnapshot
from jefit.services.advisory import SYSTEM_PROMPT, AdviceClient, format_user_context


@dataclass
class OpenAIAdviceClient(AdviceClient):
    """Advice client backed by OpenAI Responses API."""

    client: AsyncOpenAI
    model: str
    max_output_tokens: int = 200

    @classmethod
    def create(cls, api_key: str, model: str) -> "OpenAIAdviceClient":
        """Create an OpenAI advice client."""
        return cls(client=AsyncOpenAI(api_key=api_key), model=model)

    async def get_advice(
        self, snapshot: AdviceSnapshot, question: str | None = None
    ) -> str:
        """Ask the model for a short tip about today's numbers."""
        response = await self.client.responses.create(
            model=self.model,
            instructions=SYSTEM_PROMPT,
            input=format_user_context(snapshot, question),
            max_output_tokens=self.max_output_tokens,
        )
        return response.output_text or ""
