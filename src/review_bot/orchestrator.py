from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum

from rich.console import Console
from rich.markup import escape

from review_bot.exceptions import EventValidationError, GitHubAPIError
from review_bot.github import GitHubClient
from review_bot.review.parser import parse_review_text
from review_bot.review.publisher import AnnotationPublisher
from review_bot.review.requester import ReviewRequester
from review_bot.review.schemas import (
    AIReviewResult,
    Finding,
    ParseSkip,
    PublishReport,
    PullRequestAction,
    PullRequestEvent,
)

console = Console()

Connector = Callable[[PullRequestEvent], Awaitable[GitHubClient]]


class PipelineState(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    FILES_FETCHED = "files_fetched"
    REVIEWED = "reviewed"
    PARSED = "parsed"
    PUBLISHED = "published"
    DONE = "done"
    ERROR = "error"


@dataclass
class PipelineOutcome:
    status_code: int
    message: str
    state: PipelineState
    history: list[PipelineState]
    event: PullRequestEvent | None = None
    review: AIReviewResult | None = None
    findings: list[Finding] = field(default_factory=list)
    skipped_blocks: list[ParseSkip] = field(default_factory=list)
    report: PublishReport | None = None

    @property
    def ok(self) -> bool:
        return self.status_code < 400


class WebhookOrchestrator:
    """Обработка одной доставки вебхука pull_request от начала до конца.

    Received -> Validated -> FilesFetched -> Reviewed -> Parsed -> Published -> Done.
    Наружу как ошибка выходят только невалидное событие (400) и сбой получения
    файлов PR (500). Сбои модели и отдельных комментариев поглощаются.
    """

    def __init__(self, requester: ReviewRequester, connect: Connector, dedupe_comments: bool = False):
        self.requester = requester
        self.connect = connect
        self.dedupe_comments = dedupe_comments

    async def handle(self, payload, event_type: str | None = None) -> PipelineOutcome:
        history = [PipelineState.RECEIVED]

        try:
            event = PullRequestEvent.from_payload(payload, event_type)
        except EventValidationError as e:
            console.print(f"[yellow]Событие отклонено: {escape(str(e))}[/yellow]")
            return PipelineOutcome(400, str(e), PipelineState.RECEIVED, history)

        if event.action == PullRequestAction.CLOSED:
            console.print(f"[dim]PR #{event.pr_number} закрыт, пропускаю[/dim]")
            return PipelineOutcome(400, "PR закрыт, ревью не требуется", PipelineState.RECEIVED, history, event)

        history.append(PipelineState.VALIDATED)
        return await self._run(event, history)

    async def _run(self, event: PullRequestEvent, history: list[PipelineState]) -> PipelineOutcome:
        console.print(
            f"[blue]PR #{event.pr_number} в {event.full_name} ({event.action.value}): "
            f"{escape(event.title)}[/blue]"
        )

        try:
            github = await self.connect(event)
            files = await github.get_changed_files(event)
        except GitHubAPIError as e:
            history.append(PipelineState.ERROR)
            console.print(f"[red]Не удалось получить файлы PR: {escape(str(e))}[/red]")
            return PipelineOutcome(500, f"Не удалось получить файлы PR: {e}", PipelineState.ERROR, history, event)

        history.append(PipelineState.FILES_FETCHED)
        console.print(f"[blue]Получено файлов: {len(files)}[/blue]")

        if not files:
            history.append(PipelineState.DONE)
            return PipelineOutcome(200, "В PR нет изменённых файлов", PipelineState.DONE, history, event)

        console.print("[blue]Запрашиваю ревью у модели...[/blue]")
        review = await self.requester.request_review(files)
        history.append(PipelineState.REVIEWED)

        parsed = parse_review_text(review.text)
        history.append(PipelineState.PARSED)
        console.print(f"[blue]Замечаний: {len(parsed.findings)}[/blue]")

        publisher = AnnotationPublisher(github, self.requester, dedupe=self.dedupe_comments)
        report = await publisher.publish(parsed.findings, files, event, review)
        history.append(PipelineState.PUBLISHED)

        message = (
            f"Замечаний: {len(parsed.findings)}, опубликовано: {report.posted}, "
            f"пропущено: {report.skipped}, ошибок: {report.failed}"
        )
        console.print(f"[green]Ревью PR #{event.pr_number} завершено. {message}[/green]")
        history.append(PipelineState.DONE)

        return PipelineOutcome(
            200,
            message,
            PipelineState.DONE,
            history,
            event,
            review=review,
            findings=parsed.findings,
            skipped_blocks=parsed.skipped,
            report=report,
        )
