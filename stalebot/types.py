"""Types specific to stalebot."""

from __future__ import annotations

import dataclasses
from typing import Dict

# An issue or pull request as described by a JSON object.
IssueDict = Dict

# A comment on an issue as described by a JSON object.
CommentDict = Dict

# A webhook event payload.
EventDict = Dict


@dataclasses.dataclass(frozen=True)
class IssueId:
    """An id of an issue or pull request, with a repo full_name and a number."""
    full_name: str
    number: int

    @classmethod
    def from_event(cls, event: EventDict) -> IssueId:
        item = event.get("issue") or event["pull_request"]
        return cls(event["repository"]["full_name"], item["number"])

    def __str__(self):
        return f"{self.full_name}#{self.number}"