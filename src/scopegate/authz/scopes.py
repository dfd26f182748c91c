"""Scope references and root-scope resolution for scoped records.

A scope is addressed as ScopeRef(kind, id) or the string "<kind>:<uuid>".
Leaf records carry their root scope in (scope_kind, scope_id); nested
children copy it from their parent instead of resolving through joins.
"""

from dataclasses import dataclass
from typing import Any
from uuid import UUID

from src.scopegate.models.enums import ScopeKind

LEAF_KINDS = frozenset({ScopeKind.PROJECT, ScopeKind.ENGAGEMENT})


@dataclass(frozen=True)
class ScopeRef:
    """Immutable reference to one tenant, project or engagement."""

    kind: ScopeKind
    id: UUID

    def __str__(self) -> str:
        return f"{self.kind.value}:{self.id}"

    @property
    def is_leaf(self) -> bool:
        return self.kind in LEAF_KINDS

    @classmethod
    def parse(cls, value: Any) -> "ScopeRef | None":
        """Parse a ScopeRef, "<kind>:<uuid>" string, or None.

        Returns None for anything malformed. Never raises.
        """
        if isinstance(value, ScopeRef):
            return value
        if not isinstance(value, str):
            return None
        kind_str, sep, id_str = value.partition(":")
        if not sep:
            return None
        try:
            return cls(kind=ScopeKind(kind_str), id=UUID(id_str))
        except ValueError:
            return None

    @classmethod
    def of(cls, kind: ScopeKind | str, id: UUID | str) -> "ScopeRef | None":
        """Build from loose parts (path params, form fields). None if invalid."""
        try:
            return cls(kind=ScopeKind(kind), id=id if isinstance(id, UUID) else UUID(str(id)))
        except ValueError:
            return None


def scope_of(record: Any) -> ScopeRef | None:
    """Return the denormalized root scope stored on a scoped record."""
    kind = getattr(record, "scope_kind", None)
    scope_id = getattr(record, "scope_id", None)
    if kind is None or scope_id is None:
        return None
    return ScopeRef.of(kind, scope_id)


def attach_to_scope(record: Any, scope: ScopeRef) -> None:
    """Set the root scope of a top-level scoped record."""
    if not scope.is_leaf:
        raise ValueError(f"Records attach to a project or engagement, not {scope.kind.value}")
    record.scope_kind = scope.kind.value
    record.scope_id = scope.id


def attach_to_parent(record: Any, parent: Any) -> None:
    """Copy the root scope from a parent record onto a child.

    Call on creation and whenever the child is reparented.
    """
    scope = scope_of(parent)
    if scope is None:
        raise ValueError("Parent record has no root scope")
    attach_to_scope(record, scope)
