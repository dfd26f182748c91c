"""Declarative attachment of access predicates to protected entities.

Each protected entity registers an EntityPolicy naming which predicate and
role set gates each action. AccessPolicy.authorize looks the entity up here;
an entity with no registered policy is denied.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum


class Action(str, Enum):
    READ = "read"
    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"


@dataclass(frozen=True)
class EntityPolicy:
    """Per-entity gating rules.

    Attributes:
        read_roles: None gates reads with can_access; a role set gates them
            with has_any_role.
        insert_roles / update_roles / delete_roles: Role sets passed to
            can_write. None uses the scope kind's default write roles.
        owner_draft_actions: Actions where the record's creator may proceed
            while the record is still a draft, regardless of role.
    """

    read_roles: frozenset[str] | None = None
    insert_roles: frozenset[str] | None = None
    update_roles: frozenset[str] | None = None
    delete_roles: frozenset[str] | None = None
    owner_draft_actions: frozenset[Action] = field(default_factory=frozenset)

    def roles_for(self, action: Action) -> frozenset[str] | None:
        return {
            Action.READ: self.read_roles,
            Action.INSERT: self.insert_roles,
            Action.UPDATE: self.update_roles,
            Action.DELETE: self.delete_roles,
        }[action]

    @classmethod
    def build(
        cls,
        read: Iterable[str] | None = None,
        insert: Iterable[str] | None = None,
        update: Iterable[str] | None = None,
        delete: Iterable[str] | None = None,
        owner_draft: Iterable[Action | str] = (),
    ) -> "EntityPolicy":
        """Construct from loose iterables of role values (str or enum)."""

        def _roles(roles: Iterable[str] | None) -> frozenset[str] | None:
            if roles is None:
                return None
            return frozenset(r.value if isinstance(r, Enum) else r for r in roles)

        return cls(
            read_roles=_roles(read),
            insert_roles=_roles(insert),
            update_roles=_roles(update),
            delete_roles=_roles(delete),
            owner_draft_actions=frozenset(Action(a) for a in owner_draft),
        )


class PolicyRegistry:
    """Name -> EntityPolicy mapping consulted by AccessPolicy.authorize."""

    def __init__(self) -> None:
        self._policies: dict[str, EntityPolicy] = {}

    def register(self, entity: str, policy: EntityPolicy) -> None:
        if entity in self._policies:
            raise ValueError(f"Policy already registered for '{entity}'")
        self._policies[entity] = policy

    def replace(self, entity: str, policy: EntityPolicy) -> None:
        self._policies[entity] = policy

    def get(self, entity: str) -> EntityPolicy | None:
        return self._policies.get(entity)

    def __contains__(self, entity: object) -> bool:
        return entity in self._policies

    def entities(self) -> list[str]:
        return sorted(self._policies)


# Process-wide registry; business modules register their entities on import
policy_registry = PolicyRegistry()
