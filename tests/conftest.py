import pytest
from fakes import A_JS_PATCH, make_payload

from review_bot.config import Settings
from review_bot.review.schemas import ChangedFile, PullRequestEvent


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def event():
    return PullRequestEvent.from_payload(make_payload())


@pytest.fixture
def a_js():
    return ChangedFile(filename="a.js", patch=A_JS_PATCH)
