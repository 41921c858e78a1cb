"""Settings for how the bot should behave."""

import os
from typing import List


def read_list_setting(setting_name: str) -> List[str]:
    """Read a comma-separated list from a setting.

    Whitespace around entries is ignored, as are empty entries.

    Returns:
        The list of entries, empty if the setting is missing.
    """
    value = os.environ.get(setting_name, "")
    return [entry.strip() for entry in value.split(",") if entry.strip()]


GITHUB_PERSONAL_TOKEN = os.environ.get("GITHUB_PERSONAL_TOKEN", None)

# The repos the scheduled escalation sweep visits.  Each entry is either
# "owner/repo", or "all:org" for every repo in an organization.
STALEBOT_SWEEP_REPOS = read_list_setting("STALEBOT_SWEEP_REPOS")
