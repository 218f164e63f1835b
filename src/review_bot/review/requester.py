from rich.console import Console
from rich.markup import escape

from review_bot.config import Settings
from review_bot.exceptions import ReviewCapabilityError
from review_bot.llm import LLMClient
from review_bot.prompts import FILE_SECTION, NO_PATCH_SECTION, TRUNCATED_MARKER
from review_bot.review.schemas import AIReviewResult, ChangedFile, Finding

console = Console()


class ReviewRequester:
    """Запросы к модели: ревью изменений и сводка по найденным замечаниям."""

    def __init__(self, settings: Settings, llm: LLMClient):
        self.settings = settings
        self.llm = llm

    def build_payload(self, files: list[ChangedFile]) -> str:
        sections = []
        for f in files:
            if f.patch:
                sections.append(FILE_SECTION.format(filename=f.filename, patch=f.patch))
            else:
                sections.append(NO_PATCH_SECTION.format(filename=f.filename))

        payload = "\n\n".join(sections)
        limit = self.settings.max_diff_chars
        if len(payload) > limit:
            payload = payload[:limit] + TRUNCATED_MARKER
        return payload

    async def request_review(self, files: list[ChangedFile]) -> AIReviewResult:
        if not any(f.patch for f in files):
            return AIReviewResult.failure("В PR нет текстовых изменений для ревью")

        return await self._ask(
            self.settings.review_system_prompt,
            self.build_payload(files),
            self.settings.review_max_tokens,
        )

    async def request_summary(self, findings: list[Finding]) -> AIReviewResult:
        listing = "\n".join(f"- {f.file}:{f.line} — {f.issue}" for f in findings)
        return await self._ask(
            self.settings.summary_system_prompt,
            listing,
            self.settings.summary_max_tokens,
        )

    async def _ask(self, system: str, prompt: str, max_tokens: int) -> AIReviewResult:
        try:
            text = await self.llm.complete(system, prompt, max_tokens)
        except ReviewCapabilityError as e:
            console.print(f"[yellow]LLM недоступна: {escape(str(e))}[/yellow]")
            return AIReviewResult.failure(str(e))
        return AIReviewResult(text=text)
