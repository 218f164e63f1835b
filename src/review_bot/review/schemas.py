from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from review_bot.exceptions import EventValidationError


class PullRequestAction(str, Enum):
    OPENED = "opened"
    SYNCHRONIZE = "synchronize"
    REOPENED = "reopened"
    CLOSED = "closed"
    OTHER = "other"

    @classmethod
    def parse(cls, value) -> "PullRequestAction":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


class PullRequestEvent(BaseModel):
    """Снимок одной доставки вебхука pull_request."""

    model_config = ConfigDict(frozen=True)

    action: PullRequestAction
    repo_owner: str
    repo_name: str
    pr_number: int
    head_commit_id: str
    title: str = ""
    installation_id: int | None = None

    @property
    def full_name(self) -> str:
        return f"{self.repo_owner}/{self.repo_name}"

    @classmethod
    def from_payload(cls, data, event_type: str | None = None) -> "PullRequestEvent":
        # pull_request_review и pull_request_review_comment тоже несут pull_request
        if event_type is not None and event_type != "pull_request":
            raise EventValidationError(f"Событие {event_type} не обрабатывается")

        if not isinstance(data, dict):
            raise EventValidationError("Тело запроса не является JSON-объектом")

        pr = data.get("pull_request")
        if not isinstance(pr, dict):
            raise EventValidationError("Not a PR event")

        repo = data.get("repository")
        installation = data.get("installation")
        try:
            return cls(
                action=PullRequestAction.parse(data.get("action")),
                repo_owner=repo["owner"]["login"],
                repo_name=repo["name"],
                pr_number=pr["number"],
                head_commit_id=pr["head"]["sha"],
                title=pr.get("title") or "",
                installation_id=installation.get("id") if isinstance(installation, dict) else None,
            )
        except (KeyError, TypeError) as e:
            raise EventValidationError(f"В событии нет обязательного поля: {e}") from e
        except ValueError as e:
            # pydantic.ValidationError наследует ValueError
            raise EventValidationError(f"Некорректное событие PR: {e}") from e


class ChangedFile(BaseModel):
    """Файл, изменённый в PR. patch отсутствует у бинарных файлов и чистых переименований."""

    model_config = ConfigDict(frozen=True)

    filename: str
    patch: str | None = None


class Finding(BaseModel):
    """Замечание модели, привязанное к строке новой версии файла."""

    model_config = ConfigDict(frozen=True)

    file: str = Field(min_length=1)
    line: int = Field(ge=1)
    issue: str


@dataclass(frozen=True)
class AIReviewResult:
    text: str
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: str) -> "AIReviewResult":
        return cls(text="", error=error)


@dataclass(frozen=True)
class ParseSkip:
    block: str
    reason: str


@dataclass
class ParseResult:
    findings: list[Finding] = field(default_factory=list)
    skipped: list[ParseSkip] = field(default_factory=list)


CommentStatus = Literal["posted", "skipped", "failed"]


@dataclass(frozen=True)
class CommentResult:
    status: CommentStatus
    path: str | None = None
    line: int | None = None
    position: int | None = None
    detail: str = ""


@dataclass
class PublishReport:
    inline: list[CommentResult] = field(default_factory=list)
    summary: CommentResult | None = None

    def _count(self, status: CommentStatus) -> int:
        return sum(1 for r in self.inline if r.status == status)

    @property
    def posted(self) -> int:
        return self._count("posted")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")
