"""
Get information about people, repos, and events.
"""

from typing import Optional

from stalebot.auth import get_github_session
from stalebot.types import EventDict
from stalebot.utils import log_check_response, memoize

# Permission levels that make someone a maintainer of a repo.
MAINTAINER_PERMISSIONS = {"admin", "write"}


@memoize
def github_whoami():
    self_resp = get_github_session().get("/user")
    log_check_response(self_resp)
    return self_resp.json()


def get_bot_username() -> str:
    """What is the username of the bot?"""
    me = github_whoami()
    return me["login"]


def issue_author(event: EventDict) -> Optional[str]:
    """The login of the person who opened the issue or pull request in `event`."""
    match event:
        case {"issue": {"user": {"login": login}}}:
            return login
        case {"pull_request": {"user": {"login": login}}}:
            return login
    return None


def commenter(event: EventDict) -> Optional[str]:
    """The login of the person who wrote the comment or review in `event`."""
    match event:
        case {"comment": {"user": {"login": login}}}:
            return login
        case {"review": {"user": {"login": login}}}:
            return login
        case {"sender": {"login": login}}:
            return login
    return None


def get_permission_level(repo: str, username: str) -> str:
    """
    Get the permission `username` has on `repo`.

    Returns one of "admin", "write", "read", or "none".  Someone GitHub
    doesn't know as a collaborator (a 404) has "none".  Any other failure
    raises, so that a broken lookup never passes for an answer.
    """
    url = f"/repos/{repo}/collaborators/{username}/permission"
    resp = get_github_session().get(url)
    if resp.status_code == 404:
        return "none"
    log_check_response(resp)
    return resp.json()["permission"]


def is_maintainer(repo: str, username: str) -> bool:
    """Can `username` write to `repo`?"""
    return get_permission_level(repo, username) in MAINTAINER_PERMISSIONS
