import pytest
from fakes import FakeGitHub, FakeLLM, make_payload

from review_bot.exceptions import ReviewCapabilityError, UpstreamFetchError
from review_bot.orchestrator import PipelineState, WebhookOrchestrator
from review_bot.review.requester import ReviewRequester

S = PipelineState


def orchestrator_for(github, settings, *llm_responses, dedupe=False):
    async def connect(event):
        return github

    requester = ReviewRequester(settings, FakeLLM(*llm_responses))
    return WebhookOrchestrator(requester, connect, dedupe_comments=dedupe)


class TestValidation:
    @pytest.mark.asyncio
    async def test_not_a_pr_event(self, settings):
        github = FakeGitHub()
        outcome = await orchestrator_for(github, settings).handle({"action": "created", "comment": {}})

        assert outcome.status_code == 400
        assert outcome.history == [S.RECEIVED]
        assert github.summaries == []

    @pytest.mark.asyncio
    async def test_review_event_is_rejected(self, settings, a_js):
        github = FakeGitHub(files=[a_js])
        orchestrator = orchestrator_for(github, settings, "File: a.js\nLine: 5\nIssue: x")
        outcome = await orchestrator.handle(make_payload(action="submitted"), "pull_request_review")

        assert outcome.status_code == 400
        assert outcome.history == [S.RECEIVED]
        assert github.inline == [] and github.summaries == []

    @pytest.mark.asyncio
    async def test_closed_pr_is_ignored(self, settings, a_js):
        github = FakeGitHub(files=[a_js])
        outcome = await orchestrator_for(github, settings).handle(make_payload(action="closed"))

        assert outcome.status_code == 400
        assert outcome.history == [S.RECEIVED]
        assert github.inline == [] and github.summaries == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("action", ["opened", "synchronize", "reopened", "edited"])
    async def test_open_actions_are_processed(self, settings, action):
        outcome = await orchestrator_for(FakeGitHub(), settings).handle(make_payload(action=action))
        assert outcome.state == S.DONE


class TestPipeline:
    @pytest.mark.asyncio
    async def test_end_to_end(self, settings, a_js):
        github = FakeGitHub(files=[a_js])
        orchestrator = orchestrator_for(
            github,
            settings,
            "File: a.js\nLine: 5\nIssue: missing null check",
            "- a.js: нет проверки на null",
        )

        outcome = await orchestrator.handle(make_payload())

        assert outcome.status_code == 200
        assert outcome.history == [
            S.RECEIVED, S.VALIDATED, S.FILES_FETCHED, S.REVIEWED, S.PARSED, S.PUBLISHED, S.DONE,
        ]
        assert len(github.inline) == 1
        assert github.inline[0]["path"] == "a.js"
        assert github.inline[0]["position"] == 4
        assert github.inline[0]["commit_id"] == "abc123"
        assert len(github.summaries) == 1

    @pytest.mark.asyncio
    async def test_review_failure_is_absorbed(self, settings, a_js):
        github = FakeGitHub(files=[a_js])
        orchestrator = orchestrator_for(github, settings, ReviewCapabilityError("502 from provider"))

        outcome = await orchestrator.handle(make_payload())

        assert outcome.status_code == 200
        assert outcome.findings == []
        assert github.inline == []
        assert len(github.summaries) == 1
        assert "502 from provider" in github.summaries[0]

    @pytest.mark.asyncio
    async def test_unresolvable_finding_skipped(self, settings, a_js):
        github = FakeGitHub(files=[a_js])
        review = "File: a.js\nLine: 500\nIssue: far away\n\nLine: 6\nIssue: return без проверки"
        orchestrator = orchestrator_for(github, settings, review, "- сводка")

        outcome = await orchestrator.handle(make_payload())

        assert outcome.status_code == 200
        assert len(outcome.findings) == 2
        assert [c["position"] for c in github.inline] == [5]
        assert outcome.report.skipped == 1

    @pytest.mark.asyncio
    async def test_malformed_blocks_are_reported(self, settings, a_js):
        github = FakeGitHub(files=[a_js])
        review = "File: a.js\nLine: 5\nIssue: bug\n\nFile: a.js\nIssue: no line"
        orchestrator = orchestrator_for(github, settings, review, "- сводка")

        outcome = await orchestrator.handle(make_payload())

        assert len(outcome.findings) == 1
        assert len(outcome.skipped_blocks) == 1

    @pytest.mark.asyncio
    async def test_publish_failures_still_succeed(self, settings, a_js):
        github = FakeGitHub(files=[a_js], fail_paths=["a.js"], fail_summary=True)
        orchestrator = orchestrator_for(github, settings, "File: a.js\nLine: 5\nIssue: bug", "- сводка")

        outcome = await orchestrator.handle(make_payload())

        assert outcome.status_code == 200
        assert outcome.report.failed == 1
        assert outcome.report.summary.status == "failed"

    @pytest.mark.asyncio
    async def test_no_changed_files(self, settings):
        github = FakeGitHub(files=[])

        outcome = await orchestrator_for(github, settings).handle(make_payload())

        assert outcome.status_code == 200
        assert outcome.history == [S.RECEIVED, S.VALIDATED, S.FILES_FETCHED, S.DONE]
        assert outcome.review is None
        assert github.summaries == []


class TestUpstreamErrors:
    @pytest.mark.asyncio
    async def test_file_fetch_failure(self, settings):
        github = FakeGitHub(fail_fetch=True)

        outcome = await orchestrator_for(github, settings).handle(make_payload())

        assert outcome.status_code == 500
        assert outcome.state == S.ERROR
        assert outcome.history == [S.RECEIVED, S.VALIDATED, S.ERROR]
        assert github.summaries == []

    @pytest.mark.asyncio
    async def test_connect_failure(self, settings):
        async def connect(event):
            raise UpstreamFetchError("Не задан GITHUB_TOKEN")

        orchestrator = WebhookOrchestrator(ReviewRequester(settings, FakeLLM()), connect)
        outcome = await orchestrator.handle(make_payload())

        assert outcome.status_code == 500
        assert "GITHUB_TOKEN" in outcome.message
