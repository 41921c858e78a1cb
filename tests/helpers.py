"""Helpers for tests: webhook payloads shaped like the ones GitHub sends."""

import hashlib
import hmac
import json

from .fake_github import Comment, Issue, Repo


def sign_payload(secret: str, payload: bytes) -> str:
    """The X-Hub-Signature-256 header GitHub would send with `payload`."""
    return "sha256=" + hmac.new(secret.encode(), msg=payload, digestmod=hashlib.sha256).hexdigest()


def webhook_request_kwargs(event_type: str, event: dict, secret: str) -> dict:
    """Keyword arguments for a Flask test client POST of a webhook."""
    payload = json.dumps(event).encode()
    return {
        "data": payload,
        "content_type": "application/json",
        "headers": {
            "X-GitHub-Event": event_type,
            "X-Hub-Signature-256": sign_payload(secret, payload),
        },
    }


def _item_key(issue: Issue) -> str:
    return "pull_request" if issue.is_pull_request else "issue"


def opened_event(issue: Issue) -> dict:
    """The payload of issues.opened or pull_request.opened."""
    return {
        "action": "opened",
        _item_key(issue): issue.as_json(),
        "repository": issue.repo.as_json(),
        "sender": issue.user.as_json(),
    }


def issue_comment_event(issue: Issue, comment: Comment) -> dict:
    """The payload of issue_comment.created.  Pull requests come as "issue" here too."""
    return {
        "action": "created",
        "issue": issue.as_json(),
        "comment": comment.as_json(),
        "repository": issue.repo.as_json(),
        "sender": comment.user.as_json(),
    }


def review_event(pr: Issue, reviewer: str) -> dict:
    """The payload of pull_request_review.submitted."""
    user = pr.repo.github.get_user(reviewer, create=True)
    return {
        "action": "submitted",
        "review": {"id": 80, "state": "commented", "user": user.as_json()},
        "pull_request": pr.as_json(),
        "repository": pr.repo.as_json(),
        "sender": user.as_json(),
    }


def review_comment_event(pr: Issue, comment: Comment) -> dict:
    """The payload of pull_request_review_comment.created."""
    return {
        "action": "created",
        "comment": comment.as_json(),
        "pull_request": pr.as_json(),
        "repository": pr.repo.as_json(),
        "sender": comment.user.as_json(),
    }


def installation_event(owner: str, repos: list[Repo], action: str = "created") -> dict:
    """The payload of installation.created or installation_repositories.added."""
    key = "repositories" if action == "created" else "repositories_added"
    return {
        "action": action,
        "installation": {"id": 1234, "account": {"login": owner}},
        key: [{"name": r.repo, "full_name": r.full_name} for r in repos],
        "sender": {"login": owner},
    }
