"""
These are the views that process webhook events coming from Github.
"""

import logging

from flask import current_app as app
from flask import Blueprint, jsonify, render_template, request

from stalebot.tasks.github import (
    comment_created_task,
    installation_changed_task,
    item_opened_task,
    provision_labels,
    sweep_organization_task,
    sweep_repository,
    sweep_repository_task,
)
from stalebot.utils import (
    is_valid_payload, queue_task, requires_auth, sentry_extra_context
)

github_bp = Blueprint('github_views', __name__)
logger = logging.getLogger(__name__)


@github_bp.route('/hook-receiver', methods=('POST',))
def hook_receiver():
    """
    Process incoming GitHub webhook events.

    1.  Make sure the payload hashes to the proper signature. If not,
        reject the request with http status of 403.
    2.  Send a job to the queue with details of the event.
    3.  Respond with http status 202.

    Returns:
        A response, or Tuple[str, int]: Message payload and HTTP status code
    """
    signature = request.headers.get("X-Hub-Signature-256") or request.headers.get("X-Hub-Signature")
    secret = app.config.get('GITHUB_WEBHOOKS_SECRET')
    if not is_valid_payload(secret, signature, request.data):   # type: ignore[arg-type]
        msg = "Rejecting because signature doesn't match!"
        logger.info(msg)
        return msg, 403

    event_type = request.headers.get("X-GitHub-Event", "")
    event = request.get_json()

    action = event.get("action")
    repo = event.get("repository", {}).get("full_name")
    who = event.get("sender", {}).get("login", "someone")
    logger.info(f"Incoming GitHub event: {event_type=!r}, {repo=!r}, {action=!r}, {who=!r}")

    sentry_extra_context({"event": event})

    match (event_type, action):
        case ("issues", "opened") | ("pull_request", "opened"):
            return queue_task(item_opened_task, event)

        case ("issue_comment", "created") \
                | ("pull_request_review", "submitted") \
                | ("pull_request_review_comment", "created"):
            return queue_task(comment_created_task, event)

        case ("installation", "created") | ("installation_repositories", "added"):
            return queue_task(installation_changed_task, event)

        case ("ping", _):
            logger.info(f"ping from {repo}")
            return "PONG"

        case _:
            # Ignore all other events.
            return "Thank you", 202


@github_bp.route("/sweep", methods=("GET",))
@requires_auth
def sweep_get():
    """
    Display a friendly HTML form for sweeping repos by hand.
    """
    return render_template("github_sweep.html")


@github_bp.route("/sweep", methods=("POST",))
@requires_auth
def sweep():
    """
    Run the escalation sweep on a repo now, instead of waiting for the
    schedule.  A repo of "all:ORG" sweeps every repo in the organization.
    """
    repo = request.form.get("repo", "")
    if not repo:
        resp = jsonify({"error": "Repo required"})
        resp.status_code = 400
        return resp
    inline = bool(request.form.get("inline", False))
    dry_run = bool(request.form.get("dry_run", False))

    if repo.startswith('all:'):
        if inline:
            return "Don't be silly."
        return queue_task(sweep_organization_task, repo[4:], dry_run=dry_run)
    elif inline:
        return jsonify(sweep_repository(repo, dry_run=dry_run))
    else:
        return queue_task(sweep_repository_task, repo, dry_run=dry_run)


@github_bp.route("/provision", methods=("POST",))
@requires_auth
def provision():
    """
    Create the bot's labels on a repo that was set up some other way.
    """
    repo = request.form.get("repo", "")
    owner, _, name = repo.partition("/")
    if not owner or not name:
        resp = jsonify({"error": "Repo required, as owner/name"})
        resp.status_code = 400
        return resp
    return jsonify(provision_labels(owner, [name]))
