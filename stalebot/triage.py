"""
The label state machine.

These functions don't talk to GitHub.  They take the labels an issue has now
and what just happened, and say which labels to add and remove.
"""

from __future__ import annotations

import dataclasses
import datetime
import enum
from typing import AbstractSet, FrozenSet, Iterable, Optional, Set

from stalebot.labels import (
    STATUS_FRESH,
    STATUS_LABELS,
    STATUS_THRESHOLDS,
    WAITING_FOR_AUTHOR,
    WAITING_FOR_LABELS,
    WAITING_FOR_MAINTAINER,
)

SECONDS_PER_DAY = 24 * 60 * 60


class Role(enum.Enum):
    """How the person acting on an issue relates to it."""
    AUTHOR = "author"
    MAINTAINER = "maintainer"
    OTHER = "other"


@dataclasses.dataclass(frozen=True)
class LabelChanges:
    """Labels to remove from an issue, and labels to add to it."""
    add: FrozenSet[str] = frozenset()
    remove: FrozenSet[str] = frozenset()

    def __bool__(self):
        return bool(self.add or self.remove)

    def apply(self, labels: Iterable[str]) -> Set[str]:
        """The labels that `labels` becomes after these changes."""
        return (set(labels) - self.remove) | self.add


def _others_in_family(labels: Iterable[str], family: AbstractSet[str], wanted: str) -> FrozenSet[str]:
    """The labels from `family` in `labels` other than `wanted`."""
    return frozenset((set(labels) & family) - {wanted})


def waiting_for_label(role: Role) -> Optional[str]:
    """
    After someone with `role` speaks, who are we waiting for?

    Only authors and maintainers move the conversation along, so anyone
    else gets None.
    """
    if role == Role.AUTHOR:
        return WAITING_FOR_MAINTAINER
    elif role == Role.MAINTAINER:
        return WAITING_FOR_AUTHOR
    else:
        return None


def waiting_for_changes(labels: Iterable[str], role: Role) -> LabelChanges:
    """
    The waiting-for label changes when someone with `role` comments.

    The wanted label is always added, even if `labels` already lists it.
    Other labels of the family in `labels` are removed.
    """
    wanted = waiting_for_label(role)
    if wanted is None:
        return LabelChanges()
    return LabelChanges(
        add=frozenset([wanted]),
        remove=_others_in_family(labels, WAITING_FOR_LABELS, wanted),
    )


def opened_changes(labels: Iterable[str]) -> LabelChanges:
    """A newly opened issue is the author's move: it waits for a maintainer."""
    return waiting_for_changes(labels, Role.AUTHOR)


def age_in_days(then: datetime.datetime, now: datetime.datetime) -> float:
    """Days elapsed from `then` until `now`, as a fraction."""
    return (now - then).total_seconds() / SECONDS_PER_DAY


def status_for_age(age_days: float) -> str:
    """
    The status label for an issue whose author last spoke `age_days` ago.

    Thresholds are inclusive: exactly 15 days is already stale.
    """
    for min_days, label in STATUS_THRESHOLDS:
        if age_days >= min_days:
            return label
    return STATUS_FRESH


def status_changes(labels: Iterable[str], status: str) -> LabelChanges:
    """
    Changes that make `status` the issue's only status label.

    An issue that already has exactly the right status needs no changes.
    """
    labels = set(labels)
    add = frozenset() if status in labels else frozenset([status])
    return LabelChanges(add=add, remove=_others_in_family(labels, STATUS_LABELS, status))
