import asyncio

import typer
import uvicorn
from rich.console import Console
from rich.markup import escape

from review_bot.config import get_settings
from review_bot.exceptions import GitHubAPIError
from review_bot.github import GitHubClient
from review_bot.llm import LLMClient
from review_bot.orchestrator import WebhookOrchestrator
from review_bot.review.requester import ReviewRequester
from review_bot.review.schemas import PullRequestEvent

app = typer.Typer(
    name="review-bot",
    help="AI-ревью pull request с inline-комментариями на GitHub",
    no_args_is_help=True,
    add_completion=False,
)
console = Console()


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Адрес для прослушивания"),
    port: int | None = typer.Option(None, "--port", "-p", help="Порт"),
):
    """Запустить сервер вебхуков."""
    settings = get_settings()
    uvicorn.run(
        "review_bot.server:app",
        host=host or settings.host,
        port=port or settings.port,
    )


@app.command()
def review(
    pr: int = typer.Option(..., "--pr", "-p", help="Номер PR"),
    repo: str = typer.Option(..., "--repo", "-r", help="Репозиторий (owner/repo)"),
    token: str | None = typer.Option(None, "--token", "-t", help="GitHub токен"),
):
    """Проверить существующий PR без вебхука и оставить комментарии."""
    settings = get_settings()
    if token:
        settings.github_token = token
    if not settings.github_token:
        console.print("[red]Не задан GitHub токен (--token или GITHUB_TOKEN)[/red]")
        raise typer.Exit(1)

    github = GitHubClient(settings.github_token)

    async def connect(event: PullRequestEvent) -> GitHubClient:
        return github

    orchestrator = WebhookOrchestrator(
        ReviewRequester(settings, LLMClient(settings)),
        connect,
        dedupe_comments=settings.dedupe_comments,
    )

    async def run():
        payload = await github.get_pull_request_payload(repo, pr)
        return await orchestrator.handle(payload)

    try:
        outcome = asyncio.run(run())
    except GitHubAPIError as e:
        if e.status_code == 404:
            console.print(f"[red]PR #{pr} не найден в {repo}[/red]")
        else:
            console.print(f"[red]Ошибка GitHub: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not outcome.ok:
        console.print(f"[red]{escape(outcome.message)}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]{escape(outcome.message)}[/green]")


if __name__ == "__main__":
    app()
