import logging

from flask import Blueprint, render_template

from stalebot import settings
from stalebot.info import get_bot_username
from stalebot.labels import LABELS
from stalebot.utils import requires_auth

ui = Blueprint('ui', __name__)
logger = logging.getLogger(__name__)

@ui.route("/")
@requires_auth
def index():
    """
    Display an HTML overview page: who the bot is, the labels it manages,
    and the repos the scheduled sweep visits.
    """
    try:
        github_username = get_bot_username()
    except Exception:
        logger.exception("Couldn't find out who the bot is")
        github_username = None

    return render_template(
        "main.html",
        github_username=github_username,
        labels=LABELS,
        sweep_repos=settings.STALEBOT_SWEEP_REPOS,
    )
