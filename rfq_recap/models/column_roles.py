from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Mapping

"""Column role model.

A role is the semantic meaning of a raw column (e.g. "this column holds the
customer name"). ColumnRoleMap is the immutable result of header resolution.
"""

__all__ = [
    "Role",
    "KeywordRule",
    "ColumnRoleMap",
]


class Role(Enum):
    AMOUNT = "amount"
    SECONDARY_AMOUNT = "secondaryAmount"
    CUSTOMER = "customer"
    SALESPERSON = "salesperson"
    STATUS = "status"
    DATE = "date"
    RFQ_ID = "rfqId"
    REMARK = "remark"


@dataclass(frozen=True)
class KeywordRule:
    """One header-matching rule for a role.

    A case-folded header matches when it contains every keyword in ``all_of``,
    at least one keyword in ``any_of`` (if given), none of ``none_of``, and
    equals one of ``exact`` (if given). Lower ``priority`` wins.
    """
    priority: int
    all_of: tuple[str, ...] = ()
    any_of: tuple[str, ...] = ()
    none_of: tuple[str, ...] = ()
    exact: tuple[str, ...] = ()

    def matches(self, folded_header: str) -> bool:
        if self.exact and folded_header not in self.exact:
            return False
        if any(k not in folded_header for k in self.all_of):
            return False
        if self.any_of and not any(k in folded_header for k in self.any_of):
            return False
        return not any(k in folded_header for k in self.none_of)


@dataclass(frozen=True)
class ColumnRoleMap:
    """Role -> header index, plus the priority of the rule that picked it."""
    indices: Mapping[Role, int] = field(default_factory=dict)
    priorities: Mapping[Role, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "indices", MappingProxyType(dict(self.indices)))
        object.__setattr__(self, "priorities", MappingProxyType(dict(self.priorities)))

    def index_of(self, role: Role) -> int | None:
        return self.indices.get(role)

    def is_resolved(self, role: Role) -> bool:
        return role in self.indices

    def header_of(self, role: Role, headers: tuple[str, ...] | list[str]) -> str | None:
        idx = self.indices.get(role)
        if idx is None or idx >= len(headers):
            return None
        return headers[idx]

    @property
    def unresolved(self) -> list[Role]:
        return [r for r in Role if r not in self.indices]
