import logging

from openai import AsyncOpenAI, OpenAIError

from app.config import Settings
from core.errors import CompletionError
from core.prompts import INTRO_SYSTEM_PROMPT, ITINERARY_SYSTEM_PROMPT, intro_prompt, itinerary_prompt
from models.dtos import FinalizeRequest

logger = logging.getLogger(__name__)


class CompletionClient:

    def __init__(self, settings: Settings, client: AsyncOpenAI | None = None) -> None:
        self.model = settings.openai_model
        self.intro_model = settings.openai_intro_model
        self.temperature = settings.openai_temperature
        self.max_tokens = settings.openai_max_tokens
        self.client = client or AsyncOpenAI(
            api_key=settings.openai_api_key,
            timeout=settings.openai_timeout,
        )

    async def close(self) -> None:
        await self.client.close()

    async def _complete(self, model: str, messages: list[dict], max_tokens: int | None = None) -> str:
        params = {
            "model": model,
            "messages": messages,
            "temperature": self.temperature,
        }
        if max_tokens:
            params["max_tokens"] = max_tokens

        try:
            completion = await self.client.chat.completions.create(**params)
        except OpenAIError as e:
            logger.error(f"[COMPLETION] {model} request failed: {e}")
            raise CompletionError(str(e)) from e

        reply = None
        if completion.choices:
            reply = completion.choices[0].message.content
        reply = (reply or "").strip()

        if not reply:
            raise CompletionError(f"Empty reply from {model}")
        return reply

    async def start_conversation(self, location: str) -> str:
        return await self._complete(
            self.intro_model,
            [
                {"role": "system", "content": INTRO_SYSTEM_PROMPT},
                {"role": "user", "content": intro_prompt(location)},
            ],
        )

    async def generate_itinerary(self, request: FinalizeRequest) -> str:
        """Raw, un-normalized itinerary text for a finalize request."""
        reply = await self._complete(
            self.model,
            [
                {"role": "system", "content": ITINERARY_SYSTEM_PROMPT},
                {"role": "user", "content": itinerary_prompt(request)},
            ],
            max_tokens=self.max_tokens,
        )
        logger.info(f"Generated itinerary for {request.location} ({len(reply)} chars)")
        return reply
