from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from review_bot.prompts import REVIEW_SYSTEM_PROMPT, SUMMARY_SYSTEM_PROMPT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    github_token: str | None = None
    github_app_id: str | None = None
    github_private_key: str | None = None
    github_webhook_secret: str | None = None

    llm_model: str = "gemini/gemini-2.5-flash"
    gemini_api_key: str | None = None
    openai_api_key: str | None = None
    anthropic_api_key: str | None = None
    xai_api_key: str | None = None

    review_system_prompt: str = REVIEW_SYSTEM_PROMPT
    summary_system_prompt: str = SUMMARY_SYSTEM_PROMPT
    review_max_tokens: int = 1500
    summary_max_tokens: int = 500
    max_diff_chars: int = 60_000
    dedupe_comments: bool = False

    host: str = "0.0.0.0"
    port: int = 3000

    @field_validator("github_private_key")
    @classmethod
    def _unfold_newlines(cls, value: str | None) -> str | None:
        # В .env ключ обычно хранится одной строкой с \n
        return value.replace("\\n", "\n") if value else value


def get_settings() -> Settings:
    return Settings()
