from dataclasses import dataclass

import anyio
import requests
from github import Auth, Github, GithubException
from github.PullRequest import PullRequest

from review_bot.exceptions import GitHubAPIError
from review_bot.review.schemas import ChangedFile, PullRequestEvent


@dataclass
class ExistingComment:
    path: str
    position: int | None
    body: str


def _error_message(e: GithubException) -> str:
    data = e.data if isinstance(e.data, dict) else {}
    return data.get("message", str(e))


class GitHubClient:
    """Асинхронная обёртка над PyGithub для одной доставки вебхука.

    PyGithub блокирующий, поэтому каждый вызов уходит в рабочий поток.
    Ошибки транспорта превращаются в GitHubAPIError.
    """

    def __init__(self, token: str):
        # Каждый запрос выполняется один раз: повторов нет ни для GET, ни для POST
        self.github = Github(auth=Auth.Token(token), retry=None)
        self._pulls: dict[tuple[str, int], PullRequest] = {}

    def _get_pr(self, full_name: str, number: int) -> PullRequest:
        key = (full_name, number)
        if key not in self._pulls:
            repo = self.github.get_repo(full_name, lazy=True)
            self._pulls[key] = repo.get_pull(number)
        return self._pulls[key]

    async def _call(self, func, *args):
        try:
            return await anyio.to_thread.run_sync(func, *args)
        except GithubException as e:
            raise GitHubAPIError(f"GitHub {e.status}: {_error_message(e)}", e.status) from e
        except requests.RequestException as e:
            raise GitHubAPIError(f"GitHub недоступен: {e}") from e

    async def get_changed_files(self, event: PullRequestEvent) -> list[ChangedFile]:
        return await self._call(self._list_files, event.full_name, event.pr_number)

    def _list_files(self, full_name: str, number: int) -> list[ChangedFile]:
        pr = self._get_pr(full_name, number)
        return [ChangedFile(filename=f.filename, patch=f.patch) for f in pr.get_files()]

    async def create_inline_comment(
        self, event: PullRequestEvent, path: str, position: int, body: str
    ) -> None:
        payload = {
            "body": body,
            "commit_id": event.head_commit_id,
            "path": path,
            "position": position,
        }
        await self._call(self._post_review_comment, event.full_name, event.pr_number, payload)

    def _post_review_comment(self, full_name: str, number: int, payload: dict) -> None:
        # PullRequest.create_review_comment не принимает position, шлём запрос напрямую
        pr = self._get_pr(full_name, number)
        pr._requester.requestJsonAndCheck("POST", f"{pr.url}/comments", input=payload)

    async def create_summary_comment(self, event: PullRequestEvent, body: str) -> None:
        await self._call(self._post_issue_comment, event.full_name, event.pr_number, body)

    def _post_issue_comment(self, full_name: str, number: int, body: str) -> None:
        self._get_pr(full_name, number).create_issue_comment(body)

    async def get_review_comments(self, event: PullRequestEvent) -> list[ExistingComment]:
        return await self._call(self._list_review_comments, event.full_name, event.pr_number)

    def _list_review_comments(self, full_name: str, number: int) -> list[ExistingComment]:
        pr = self._get_pr(full_name, number)
        return [
            ExistingComment(path=c.path, position=c.position, body=c.body or "")
            for c in pr.get_review_comments()
        ]

    async def get_pull_request_payload(self, full_name: str, number: int) -> dict:
        """Собрать тело, аналогичное вебхуку pull_request, по текущему состоянию PR."""
        return await self._call(self._pull_payload, full_name, number)

    def _pull_payload(self, full_name: str, number: int) -> dict:
        pr = self._get_pr(full_name, number)
        owner, name = full_name.split("/", 1)
        return {
            "action": "opened",
            "pull_request": {
                "number": pr.number,
                "title": pr.title,
                "head": {"sha": pr.head.sha},
            },
            "repository": {"name": name, "owner": {"login": owner}},
        }
