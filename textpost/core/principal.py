"""
Authenticated principal.

A request acts on behalf of exactly one principal. Two kinds exist:

- PasswordPrincipal: a username managed by this service in the `users` table.
- ProviderPrincipal: an identity owned by Supabase Auth (user id + email),
  resolved from a bearer access token.

Post ownership is checked by passing `owner_filter()` as equality filters to
the posts table, so route and service code never branch on the variant.
"""

from dataclasses import dataclass
from typing import ClassVar, Dict, Optional


@dataclass(frozen=True)
class Principal:
    provider: ClassVar[str] = ""

    @property
    def display_name(self) -> str:
        raise NotImplementedError

    def author_fields(self) -> Dict[str, Optional[str]]:
        """Columns written on a new post."""
        raise NotImplementedError

    def owner_filter(self) -> Dict[str, str]:
        """Columns that must match for update/delete."""
        raise NotImplementedError


@dataclass(frozen=True)
class PasswordPrincipal(Principal):
    username: str

    provider: ClassVar[str] = "password"

    @property
    def display_name(self) -> str:
        return self.username

    def author_fields(self) -> Dict[str, Optional[str]]:
        return {"username": self.username}

    def owner_filter(self) -> Dict[str, str]:
        return {"username": self.username}


@dataclass(frozen=True)
class ProviderPrincipal(Principal):
    user_id: str
    email: Optional[str] = None

    provider: ClassVar[str] = "supabase"

    @property
    def display_name(self) -> str:
        return self.email or self.user_id

    def author_fields(self) -> Dict[str, Optional[str]]:
        return {"user_id": self.user_id, "email": self.email}

    def owner_filter(self) -> Dict[str, str]:
        return {"user_id": self.user_id}
