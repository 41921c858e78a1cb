"""
The labels the bot controls.

There are two families.  The "waiting-for" labels say whose turn it is to
respond, and the "status" labels say how long the author has been waiting
for a maintainer.  An issue should carry at most one label of each family.
"""

import dataclasses
from typing import Tuple


@dataclasses.dataclass(frozen=True)
class LabelDef:
    """A label the bot creates on repositories."""
    name: str
    color: str

    def as_json(self):
        return dataclasses.asdict(self)


WAITING_FOR_PREFIX = "stalebot/waiting-for/"
STATUS_PREFIX = "stalebot/status/"

WAITING_FOR_MAINTAINER = WAITING_FOR_PREFIX + "maintainer"
WAITING_FOR_AUTHOR = WAITING_FOR_PREFIX + "author"

STATUS_FRESH = STATUS_PREFIX + "fresh"
STATUS_NEEDS_ATTENTION = STATUS_PREFIX + "needs-attention"
STATUS_STALE = STATUS_PREFIX + "stale"
STATUS_DIRE = STATUS_PREFIX + "dire"

LABELS: Tuple[LabelDef, ...] = (
    LabelDef(WAITING_FOR_MAINTAINER, "cccccc"),
    LabelDef(WAITING_FOR_AUTHOR, "cccccc"),
    LabelDef(STATUS_FRESH, "5dcc77"),
    LabelDef(STATUS_NEEDS_ATTENTION, "f9dc5c"),
    LabelDef(STATUS_STALE, "ff8552"),
    LabelDef(STATUS_DIRE, "da344d"),
)

WAITING_FOR_LABELS = frozenset(lbl.name for lbl in LABELS if lbl.name.startswith(WAITING_FOR_PREFIX))
STATUS_LABELS = frozenset(lbl.name for lbl in LABELS if lbl.name.startswith(STATUS_PREFIX))

# Minimum age in days for each status, most urgent first.  The first
# threshold an age reaches wins.  Anything younger is fresh.
STATUS_THRESHOLDS: Tuple[Tuple[int, str], ...] = (
    (90, STATUS_DIRE),
    (15, STATUS_STALE),
    (1, STATUS_NEEDS_ATTENTION),
)
