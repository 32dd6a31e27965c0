from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Dict, Generic, Hashable, List, Sequence, TypeVar

from ..errors import GroupKey

ItemT = TypeVar("ItemT")


@dataclass(frozen=True)
class GroupPlan(Generic[ItemT]):
    """Ordered partition of items into groups keyed by `key_fn`.

    Keys iterate in order of first appearance; member indices keep input order.
    """

    items: Sequence[ItemT]
    indices: Dict[Hashable, List[int]]

    @property
    def sizes(self) -> Dict[Hashable, int]:
        return {key: len(members) for key, members in self.indices.items()}

    def members(self, key: Hashable) -> List[ItemT]:
        return [self.items[idx] for idx in self.indices[key]]

    def __len__(self) -> int:
        return len(self.indices)


def build_group_plan(
    items: Sequence[ItemT],
    key_fn: Callable[[ItemT], Hashable],
) -> GroupPlan[ItemT]:
    """Group items by `key_fn`, preserving first-appearance key order."""
    groups: Dict[Hashable, List[int]] = {}
    for idx, item in enumerate(items):
        groups.setdefault(key_fn(item), []).append(idx)
    return GroupPlan(items=items, indices=groups)
