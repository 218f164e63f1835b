from rich.console import Console
from rich.markup import escape

from review_bot.exceptions import GitHubAPIError
from review_bot.github import GitHubClient
from review_bot.review.diff import map_line_to_position
from review_bot.review.requester import ReviewRequester
from review_bot.review.schemas import (
    AIReviewResult,
    ChangedFile,
    CommentResult,
    Finding,
    PublishReport,
    PullRequestEvent,
)

console = Console()

NO_ISSUES_TEXT = "Замечаний не найдено."


class AnnotationPublisher:
    """Публикует замечания в PR: inline-комментарий на каждое и одну сводку.

    Ошибка публикации одного комментария не мешает остальным.
    """

    def __init__(self, github: GitHubClient, requester: ReviewRequester, dedupe: bool = False):
        self.github = github
        self.requester = requester
        self.dedupe = dedupe

    async def publish(
        self,
        findings: list[Finding],
        files: list[ChangedFile],
        event: PullRequestEvent,
        review: AIReviewResult,
    ) -> PublishReport:
        files_by_name = {f.filename: f for f in files}
        existing = await self._existing_comments(event) if self.dedupe else set()

        report = PublishReport()
        for finding in findings:
            result = await self._publish_finding(finding, files_by_name, event, existing)
            report.inline.append(result)

        report.summary = await self._publish_summary(findings, event, review, report)
        return report

    async def _existing_comments(self, event: PullRequestEvent) -> set[tuple[str, int | None, str]]:
        try:
            comments = await self.github.get_review_comments(event)
        except GitHubAPIError as e:
            console.print(f"[yellow]Не удалось получить комментарии PR, дедупликация отключена: {escape(str(e))}[/yellow]")
            return set()
        return {(c.path, c.position, c.body.strip()) for c in comments}

    async def _publish_finding(
        self,
        finding: Finding,
        files_by_name: dict[str, ChangedFile],
        event: PullRequestEvent,
        existing: set[tuple[str, int | None, str]],
    ) -> CommentResult:
        location = f"{finding.file}:{finding.line}"

        changed = files_by_name.get(finding.file)
        if changed is None:
            console.print(f"[dim]Пропуск {escape(location)}: файла нет в PR[/dim]")
            return CommentResult("skipped", finding.file, finding.line, detail="файла нет в PR")

        position = map_line_to_position(changed.patch, finding.line)
        if position is None:
            console.print(f"[dim]Пропуск {escape(location)}: строки нет в diff[/dim]")
            return CommentResult("skipped", finding.file, finding.line, detail="строки нет в diff")

        if (finding.file, position, finding.issue.strip()) in existing:
            console.print(f"[dim]Пропуск {escape(location)}: такой комментарий уже есть[/dim]")
            return CommentResult("skipped", finding.file, finding.line, position, "дубликат")

        try:
            await self.github.create_inline_comment(event, finding.file, position, finding.issue)
        except GitHubAPIError as e:
            console.print(f"[yellow]Не удалось оставить комментарий {escape(location)}: {escape(str(e))}[/yellow]")
            return CommentResult("failed", finding.file, finding.line, position, str(e))

        return CommentResult("posted", finding.file, finding.line, position)

    async def _publish_summary(
        self,
        findings: list[Finding],
        event: PullRequestEvent,
        review: AIReviewResult,
        report: PublishReport,
    ) -> CommentResult:
        body = await self._compose_summary(findings, review, report)
        try:
            await self.github.create_summary_comment(event, body)
        except GitHubAPIError as e:
            console.print(f"[yellow]Не удалось опубликовать сводку: {escape(str(e))}[/yellow]")
            return CommentResult("failed", detail=str(e))
        return CommentResult("posted")

    async def _compose_summary(
        self, findings: list[Finding], review: AIReviewResult, report: PublishReport
    ) -> str:
        if not review.ok:
            summary = f"Не удалось получить ревью от модели: {review.error}"
        elif not findings:
            summary = NO_ISSUES_TEXT
        else:
            condensed = await self.requester.request_summary(findings)
            if condensed.ok:
                summary = condensed.text.strip()
            else:
                summary = "\n".join(f"- **{f.file}:{f.line}**: {f.issue}" for f in findings)

        body = f"## Результат AI-ревью\n\n{summary}\n\n"
        if findings:
            body += (
                f"_Комментариев в коде: {report.posted}, "
                f"пропущено: {report.skipped}, ошибок: {report.failed}._\n"
            )
        return body
