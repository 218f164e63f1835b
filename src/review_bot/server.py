import hashlib
import hmac
import json
from contextlib import asynccontextmanager

import anyio
import httpx
import jwt
from fastapi import FastAPI, HTTPException, Request
from rich.console import Console

from review_bot.config import Settings
from review_bot.exceptions import UpstreamFetchError
from review_bot.github import GitHubAppAuth, GitHubClient
from review_bot.llm import LLMClient
from review_bot.orchestrator import WebhookOrchestrator
from review_bot.review.requester import ReviewRequester
from review_bot.review.schemas import PullRequestEvent

console = Console()

settings = Settings()
app_auth = GitHubAppAuth(app_id=settings.github_app_id, private_key=settings.github_private_key)


async def connect_github(event: PullRequestEvent) -> GitHubClient:
    """Клиент GitHub для доставки: токен установки App или статический GITHUB_TOKEN."""
    if event.installation_id and app_auth.configured:
        try:
            token = await anyio.to_thread.run_sync(app_auth.get_installation_token, event.installation_id)
        except (httpx.HTTPError, jwt.PyJWTError, ValueError, KeyError) as e:
            raise UpstreamFetchError(f"Не удалось получить токен установки: {e}") from e
    else:
        token = settings.github_token

    if not token:
        raise UpstreamFetchError("Не задан GITHUB_TOKEN и не настроено GitHub App")
    return GitHubClient(token)


orchestrator = WebhookOrchestrator(
    ReviewRequester(settings, LLMClient(settings)),
    connect_github,
    dedupe_comments=settings.dedupe_comments,
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    console.print("[green]Сервер запущен[/green]")
    yield
    console.print("[yellow]Сервер остановлен[/yellow]")


app = FastAPI(lifespan=lifespan)


def verify_signature(payload: bytes, signature: str, secret: str | None) -> bool:
    if not secret:
        return True
    expected = "sha256=" + hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature)


@app.post("/webhook")
async def webhook(request: Request):
    payload = await request.body()
    signature = request.headers.get("X-Hub-Signature-256", "")

    if not verify_signature(payload, signature, settings.github_webhook_secret):
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        data = json.loads(payload)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON")

    outcome = await orchestrator.handle(data, request.headers.get("X-GitHub-Event"))
    if not outcome.ok:
        raise HTTPException(status_code=outcome.status_code, detail=outcome.message)

    report = outcome.report
    return {
        "status": "ok",
        "message": outcome.message,
        "findings": len(outcome.findings),
        "posted": report.posted if report else 0,
        "skipped": report.skipped if report else 0,
        "failed": report.failed if report else 0,
    }


@app.get("/health")
async def health():
    return {"status": "healthy"}
