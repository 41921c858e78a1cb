"""
Tests of the functions in info.py
"""

import pytest

from stalebot.info import (
    commenter,
    get_bot_username,
    get_permission_level,
    is_maintainer,
    issue_author,
)
from stalebot.utils import RequestFailed

from .helpers import issue_comment_event, opened_event, review_comment_event, review_event


@pytest.fixture
def repo(fake_github):
    repo = fake_github.make_repo("an-org", "a-repo")
    repo.set_permission("carol", "admin")
    repo.set_permission("bob", "write")
    repo.set_permission("dave", "read")
    repo.set_permission("mallory", "none")
    return repo


@pytest.mark.parametrize("login, permission, maintainer", [
    ("carol", "admin", True),
    ("bob", "write", True),
    ("dave", "read", False),
    ("mallory", "none", False),
])
def test_permissions(repo, login, permission, maintainer):
    assert get_permission_level(repo.full_name, login) == permission
    assert is_maintainer(repo.full_name, login) is maintainer


def test_unknown_user_has_no_permission(repo):
    assert get_permission_level(repo.full_name, "nobody-at-all") == "none"
    assert not is_maintainer(repo.full_name, "nobody-at-all")


def test_permission_lookup_failure(repo, requests_mocker):
    requests_mocker.get(
        "https://api.github.com/repos/an-org/a-repo/collaborators/bob/permission",
        status_code=403,
        json={"message": "Resource not accessible by integration"},
    )
    with pytest.raises(RequestFailed):
        is_maintainer(repo.full_name, "bob")


def test_get_bot_username(fake_github):
    assert get_bot_username() == "stale-bot"
    assert get_bot_username() == "stale-bot"
    # It's memoized.
    assert len(fake_github.requests_made("/user")) == 1


def test_issue_comment_people(repo):
    issue = repo.make_issue(user="alice")
    comment = issue.add_comment(user="bob", body="Hello")
    event = issue_comment_event(issue, comment)
    assert issue_author(event) == "alice"
    assert commenter(event) == "bob"


def test_review_people(repo):
    pr = repo.make_pull_request(user="alice")
    event = review_event(pr, "carol")
    assert issue_author(event) == "alice"
    assert commenter(event) == "carol"

    comment = pr.add_comment(user="dave", body="nit")
    event = review_comment_event(pr, comment)
    assert issue_author(event) == "alice"
    assert commenter(event) == "dave"


def test_sender_is_the_fallback(repo):
    issue = repo.make_issue(user="alice")
    event = opened_event(issue)
    assert issue_author(event) == "alice"
    assert commenter(event) == "alice"
    assert issue_author({}) is None
    assert commenter({}) is None
