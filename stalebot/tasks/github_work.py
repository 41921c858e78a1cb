"""
Operations on GitHub data.
"""

from typing import Iterable, List, Optional
from urllib.parse import quote

from urlobject import URLObject

from stalebot.auth import get_github_session
from stalebot.labels import LabelDef
from stalebot.tasks import logger
from stalebot.types import CommentDict, IssueDict, IssueId
from stalebot.utils import log_check_response, paginated_get, reverse_paginated_get


def _labels_url(issue_id: IssueId) -> str:
    return f"/repos/{issue_id.full_name}/issues/{issue_id.number}/labels"


def add_labels(issue_id: IssueId, labels: List[str]) -> None:
    """
    Add labels to an issue or pull request.

    Labels it already has are left alone by GitHub.
    """
    logger.info(f"Adding labels to {issue_id}: {labels}")
    resp = get_github_session().post(_labels_url(issue_id), json={"labels": labels})
    log_check_response(resp)


def remove_label(issue_id: IssueId, label: str) -> bool:
    """
    Remove one label from an issue or pull request.

    Returns False if the issue didn't have the label.
    """
    url = _labels_url(issue_id) + "/" + quote(label, safe="")
    logger.info(f"Removing label from {issue_id}: {label!r}")
    resp = get_github_session().delete(url)
    if resp.status_code == 404:
        logger.info(f"{issue_id} didn't have label {label!r}")
        return False
    log_check_response(resp)
    return True


def _already_exists(resp) -> bool:
    """Is `resp` GitHub's "Validation Failed" error for a duplicate?"""
    if resp.status_code != 422:
        return False
    try:
        errors = resp.json().get("errors", [])
    except ValueError:
        return False
    return any(err.get("code") == "already_exists" for err in errors)


def create_label(repo: str, label: LabelDef) -> bool:
    """
    Create a label on a repo.

    Returns False if the repo already had a label by that name.
    """
    resp = get_github_session().post(f"/repos/{repo}/labels", json=label.as_json())
    if _already_exists(resp):
        logger.debug(f"Label {label.name!r} already exists on {repo}")
        return False
    log_check_response(resp)
    logger.info(f"Created label {label.name!r} on {repo}")
    return True


def open_issues_with_label(repo: str, label: str) -> Iterable[IssueDict]:
    """All the open issues and pull requests in `repo` labeled `label`."""
    url = URLObject(f"/repos/{repo}/issues").set_query_params(state="open", labels=label)
    return paginated_get(url, session=get_github_session())


def last_comment_by(issue_id: IssueId, login: str) -> Optional[CommentDict]:
    """The most recent comment by `login` on an issue, or None."""
    url = f"/repos/{issue_id.full_name}/issues/{issue_id.number}/comments"
    for comment in reverse_paginated_get(url, session=get_github_session()):
        if comment["user"]["login"] == login:
            return comment
    return None


def org_repo_names(org: str) -> List[str]:
    """The full names of all the repos in an organization."""
    url = f"/orgs/{org}/repos"
    return [repo["full_name"] for repo in paginated_get(url, session=get_github_session())]
