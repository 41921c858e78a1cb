"""
Queuable background tasks that label issues and pull requests.
"""

import datetime
import traceback
from typing import Dict, Iterable, List, Optional, Set

import arrow

from stalebot import celery, settings
from stalebot.info import commenter, get_bot_username, is_maintainer, issue_author
from stalebot.labels import LABELS, WAITING_FOR_MAINTAINER, LabelDef
from stalebot.tasks import logger
from stalebot.tasks.github_work import (
    add_labels,
    create_label,
    last_comment_by,
    open_issues_with_label,
    org_repo_names,
    remove_label,
)
from stalebot.triage import (
    LabelChanges,
    Role,
    age_in_days,
    opened_changes,
    status_changes,
    status_for_age,
    waiting_for_changes,
)
from stalebot.types import EventDict, IssueDict, IssueId
from stalebot.utils import log_rate_limit, sentry_extra_context


class DryRunLabelActions:
    """
    Implementation of actions for dry runs.
    """
    def __init__(self):
        self.action_calls = []

    def __getattr__(self, name):
        def fn(**kwargs):
            self.action_calls.append((name, kwargs))
        return fn


class LabelActions:
    """
    The changes the bot makes to an issue.

    All arguments must be JSON-serializable so that dry runs can report on
    the actions.
    """

    def __init__(self, issue_id: IssueId):
        self.issue_id = issue_id

    def initial_state(self, *, labels: List[str], last_author_comment: Optional[str]) -> None:
        """
        Does nothing when really changing labels, but captures information for dry runs.
        """

    def remove_label(self, *, label: str) -> None:
        remove_label(self.issue_id, label)

    def add_labels(self, *, labels: List[str]) -> None:
        add_labels(self.issue_id, labels)


def apply_label_changes(changes: LabelChanges, actions) -> None:
    """Make `changes` with `actions`: removals first, then one add."""
    for label in sorted(changes.remove):
        actions.remove_label(label=label)
    if changes.add:
        actions.add_labels(labels=sorted(changes.add))


def label_names(item: IssueDict) -> Set[str]:
    """The names of the labels on an issue or pull request."""
    return {lbl["name"] for lbl in item.get("labels") or ()}


def _event_item(event: EventDict) -> IssueDict:
    return event.get("issue") or event["pull_request"]


@celery.task(bind=True)
def item_opened_task(_, event):
    """A bound Celery task to call item_opened."""
    try:
        item_opened(event)
        log_rate_limit()
    except Exception:
        logger.exception("Couldn't item_opened_task")
        raise


def item_opened(event: EventDict, actions=None) -> LabelChanges:
    """
    Process a newly opened issue or pull request.

    It now waits for a maintainer.
    """
    issue_id = IssueId.from_event(event)
    logger.info(f"{issue_id} opened by @{issue_author(event)}")
    labels = label_names(_event_item(event))
    changes = opened_changes(labels)
    apply_label_changes(changes, actions or LabelActions(issue_id))
    logger.debug(f"{issue_id} labels: {sorted(changes.apply(labels))}")
    return changes


@celery.task(bind=True)
def comment_created_task(_, event):
    """A bound Celery task to call comment_created."""
    try:
        comment_created(event)
        log_rate_limit()
    except Exception:
        logger.exception("Couldn't comment_created_task")
        raise


def commenter_role(repo: str, who: Optional[str], author: Optional[str]) -> Role:
    """
    How `who` relates to an issue opened by `author` in `repo`.

    Authors are never treated as maintainers of their own issues, even if
    they could write to the repo.
    """
    if who is None:
        return Role.OTHER
    if who == author:
        return Role.AUTHOR
    if is_maintainer(repo, who):
        return Role.MAINTAINER
    return Role.OTHER


def comment_created(event: EventDict, actions=None) -> LabelChanges:
    """
    Process a new comment, review, or review comment.

    When the author speaks, the issue waits for a maintainer.  When a
    maintainer speaks, it waits for the author.  Anyone else changes nothing.
    """
    issue_id = IssueId.from_event(event)
    who = commenter(event)
    if who == get_bot_username():
        # Our own comments don't move the conversation along.
        return LabelChanges()

    role = commenter_role(issue_id.full_name, who, issue_author(event))
    logger.info(f"{issue_id} has a comment from @{who} ({role.value})")
    labels = label_names(_event_item(event))
    changes = waiting_for_changes(labels, role)
    apply_label_changes(changes, actions or LabelActions(issue_id))
    if changes:
        logger.debug(f"{issue_id} labels: {sorted(changes.apply(labels))}")
    return changes


@celery.task(bind=True)
def installation_changed_task(_, event):
    """A bound Celery task to call installation_changed."""
    try:
        return installation_changed(event)
    except Exception:
        logger.exception("Couldn't installation_changed_task")
        raise


def installation_changed(event: EventDict) -> Dict[str, List[str]]:
    """
    Create our labels on repos the app was just installed on.
    """
    match event:
        case {"action": "created", "repositories": repos}:
            pass
        case {"action": "added", "repositories_added": repos}:
            pass
        case _:
            return {}
    owner = event["installation"]["account"]["login"]
    return provision_labels(owner, [repo["name"] for repo in repos])


def provision_labels(
        owner: str,
        repo_names: Iterable[str],
        labels: Iterable[LabelDef] = LABELS,
    ) -> Dict[str, List[str]]:
    """
    Create `labels` on each of the repos named `repo_names` owned by `owner`.

    Labels that already exist are fine.  Every label is attempted; any other
    failures are raised together at the end.

    Returns a dict mapping repo full names to the names of labels created.
    """
    created: Dict[str, List[str]] = {}
    exceptions: List[Exception] = []
    for repo_name in repo_names:
        repo = f"{owner}/{repo_name}"
        sentry_extra_context({"repo": repo})
        created[repo] = []
        for label in labels:
            try:
                if create_label(repo, label):
                    created[repo].append(label.name)
            except Exception as exc:    # pylint: disable=broad-exception-caught
                exceptions.append(exc)

    if exceptions:
        raise ExceptionGroup("Couldn't create some labels", exceptions)
    return created


def escalate_issue(
        repo: str,
        issue: IssueDict,
        now: datetime.datetime,
        actions=None,
    ) -> Optional[str]:
    """
    Set the status label of one issue that is waiting for a maintainer.

    The status depends on how long ago the issue's author last commented.
    Issues the author has never commented on are left alone.

    Returns the new status label, or None if nothing changed.
    """
    issue_id = IssueId(repo, issue["number"])
    actions = actions or LabelActions(issue_id)
    author = issue["user"]["login"]
    labels = label_names(issue)

    last_comment = last_comment_by(issue_id, author)
    actions.initial_state(
        labels=sorted(labels),
        last_author_comment=last_comment["created_at"] if last_comment else None,
    )
    if last_comment is None:
        logger.debug(f"{issue_id}: no comments from @{author}")
        return None

    age = age_in_days(arrow.get(last_comment["created_at"]).datetime, now)
    status = status_for_age(age)
    changes = status_changes(labels, status)
    if not changes:
        return None

    logger.info(f"{issue_id}: @{author} last commented {age:.1f} days ago, now {status!r}")
    apply_label_changes(changes, actions)
    return status


@celery.task(bind=True)
def sweep_repository_task(_, repo, dry_run=False):
    """A bound Celery task to call sweep_repository."""
    return sweep_repository(repo, dry_run=dry_run)


def sweep_repository(repo: str, dry_run: bool = False) -> Dict:
    """
    Recompute the status label of every issue waiting for a maintainer.

    Issues are handled one at a time.  A failure on one issue is recorded and
    the sweep moves on to the next.

    Arguments:
        repo (str): the full name of the repo, "owner/name".
        dry_run (bool): if True, don't write to GitHub. Put names of action
            methods and their arguments into the "dry_run_actions" key of the
            return value.

    """
    sentry_extra_context({"repo": repo})
    logger.info(f"Sweeping {repo} for issues to escalate")
    now = arrow.utcnow().datetime

    changed: Dict[int, str] = {}
    errors: Dict[int, str] = {}
    dry_run_actions = {}

    issue: IssueDict
    for issue in open_issues_with_label(repo, WAITING_FOR_MAINTAINER):
        sentry_extra_context({"issue": issue.get("html_url")})
        actions = DryRunLabelActions() if dry_run else None
        try:
            status = escalate_issue(repo, issue, now, actions=actions)
        except Exception:       # pylint: disable=broad-except
            errors[issue["number"]] = traceback.format_exc()
        else:
            if status is not None:
                changed[issue["number"]] = status
            if dry_run:
                assert actions is not None
                dry_run_actions[issue["number"]] = actions.action_calls

    if not dry_run:
        logger.info(f"Changed status on {len(changed)} issues in {repo}: {sorted(changed)}")

    info: Dict = {
        "repo": repo,
        "changed": changed,
        "errors": errors,
    }
    if dry_run_actions:
        info["dry_run_actions"] = dry_run_actions
    return info


@celery.task(bind=True)
def sweep_organization_task(_, org, dry_run=False):
    """A bound Celery task to call sweep_organization."""
    return sweep_organization(org, dry_run=dry_run)


def sweep_organization(org: str, dry_run: bool = False) -> Dict:
    """
    Sweep every repo in an organization.

    Only repos where something changed or failed appear in the result.
    """
    infos = {}
    for repo in org_repo_names(org):
        info = sweep_repository(repo, dry_run=dry_run)
        if info["changed"] or info["errors"] or info.get("dry_run_actions"):
            infos[repo] = info
    return infos


@celery.task(bind=True)
def sweep_configured_repos_task(_):
    """The scheduled sweep, run by Celery beat."""
    result = sweep_configured_repos()
    log_rate_limit()
    return result


def sweep_configured_repos(entries: Optional[Iterable[str]] = None) -> Dict:
    """
    Sweep the repos named in settings.STALEBOT_SWEEP_REPOS.

    An entry that fails as a whole (say, the repo is gone) is recorded under
    "errors" and the other entries are still swept.
    """
    if entries is None:
        entries = settings.STALEBOT_SWEEP_REPOS
    results: Dict = {}
    errors: Dict[str, str] = {}
    for entry in entries:
        try:
            if entry.startswith("all:"):
                results.update(sweep_organization(entry[4:]))
            else:
                results[entry] = sweep_repository(entry)
        except Exception:       # pylint: disable=broad-except
            logger.exception(f"Couldn't sweep {entry}")
            errors[entry] = traceback.format_exc()
    return {"results": results, "errors": errors}
