"""Set reconciliation for list satellites (emergency contacts, household members).

A sync plan compares the rows currently stored for a client with the rows
submitted on the form and says which stored rows to delete, which new rows
to insert, and which stored rows to leave alone.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Hashable, Sequence, TypeVar


RowT = TypeVar("RowT")
NewT = TypeVar("NewT")


class ListSyncPolicy(str, Enum):
    """
    - REPLACE_ALL: delete every stored row and insert the full new set.
      Row ids are NOT preserved, even when the content is identical.
    - MATCH_BY_CONTENT: keep stored rows whose content key appears in the
      new set; only the differences are deleted/inserted.
    """

    REPLACE_ALL = "replace_all"
    MATCH_BY_CONTENT = "match_by_content"


@dataclass
class ListSyncPlan:
    to_remove: list[Any] = field(default_factory=list)
    to_add: list[Any] = field(default_factory=list)
    to_keep: list[Any] = field(default_factory=list)

    @property
    def is_noop(self) -> bool:
        return not self.to_remove and not self.to_add


def plan_list_sync(
    existing: Sequence[RowT],
    incoming: Sequence[NewT],
    policy: ListSyncPolicy = ListSyncPolicy.REPLACE_ALL,
    existing_key: Callable[[RowT], Hashable] | None = None,
    incoming_key: Callable[[NewT], Hashable] | None = None,
) -> ListSyncPlan:
    """
    Build an add/remove/keep plan for a list satellite.

    MATCH_BY_CONTENT requires both key functions; duplicates are matched
    one-for-one, so two identical stored rows and one identical incoming
    row keep one row and remove the other.

    Raises:
        ValueError: If MATCH_BY_CONTENT is requested without key functions
    """
    if policy == ListSyncPolicy.REPLACE_ALL:
        return ListSyncPlan(to_remove=list(existing), to_add=list(incoming))

    if existing_key is None or incoming_key is None:
        raise ValueError("MATCH_BY_CONTENT requires existing_key and incoming_key")

    unmatched: dict[Hashable, list[RowT]] = {}
    for row in existing:
        unmatched.setdefault(existing_key(row), []).append(row)

    plan = ListSyncPlan()
    for item in incoming:
        bucket = unmatched.get(incoming_key(item))
        if bucket:
            plan.to_keep.append(bucket.pop(0))
        else:
            plan.to_add.append(item)

    for rows in unmatched.values():
        plan.to_remove.extend(rows)
    return plan
