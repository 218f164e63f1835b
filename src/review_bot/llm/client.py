import os

import litellm

from review_bot.config import Settings
from review_bot.exceptions import ReviewCapabilityError


class LLMClient:
    def __init__(self, settings: Settings):
        self.model = settings.llm_model
        self._setup_api_keys(settings)

    def _setup_api_keys(self, settings: Settings):
        if settings.gemini_api_key:
            os.environ["GEMINI_API_KEY"] = settings.gemini_api_key
        if settings.openai_api_key:
            os.environ["OPENAI_API_KEY"] = settings.openai_api_key
        if settings.anthropic_api_key:
            os.environ["ANTHROPIC_API_KEY"] = settings.anthropic_api_key
        if settings.xai_api_key:
            os.environ["XAI_API_KEY"] = settings.xai_api_key

    async def complete(self, system: str, prompt: str, max_tokens: int) -> str:
        """Один chat-запрос к модели. Любая ошибка превращается в ReviewCapabilityError."""
        try:
            response = await litellm.acompletion(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                max_tokens=max_tokens,
            )
            text = response.choices[0].message.content
        except Exception as e:
            raise ReviewCapabilityError(f"{type(e).__name__}: {e}") from e

        if not text or not text.strip():
            raise ReviewCapabilityError("Модель вернула пустой ответ")
        return text
