"""Request-scoped view of the caller, built by the authorization filter."""

from __future__ import annotations

from dataclasses import dataclass, field

from kitchensink.models.user import Role


@dataclass(frozen=True)
class CallerIdentity:
    username: str | None = None
    roles: frozenset[Role] = field(default_factory=frozenset)
    authenticated: bool = False

    @classmethod
    def anonymous(cls) -> CallerIdentity:
        return cls()

    def has_role(self, role: Role) -> bool:
        return self.authenticated and role in self.roles
