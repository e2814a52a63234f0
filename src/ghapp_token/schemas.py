from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Literal

from pydantic import BaseModel


class Account(BaseModel):
    """Аккаунт, на который установлено приложение."""

    login: str
    type: Literal["User", "Organization"]


class Installation(BaseModel):
    """Установка GitHub App."""

    id: int
    account: Account
    repository_selection: Literal["all", "selected"]
    permissions: dict[str, str] = {}


class RepositoryRef(BaseModel):
    name: str


class AccessTokenResponse(BaseModel):
    """Ответ POST /app/installations/{id}/access_tokens."""

    token: str
    expires_at: str
    permissions: dict[str, str] | None = None
    repositories: list[RepositoryRef] | None = None


@dataclass(frozen=True)
class TokenScope:
    repositories: tuple[str, ...] | None = None
    permissions: dict[str, str] | None = None

    @classmethod
    def build(
        cls,
        repositories: Iterable[str] | None = None,
        permissions: Mapping[str, str] | None = None,
    ) -> "TokenScope":
        if isinstance(repositories, str):
            repositories = [repositories]
        repos = tuple(dict.fromkeys(repositories)) if repositories is not None else ()
        perms = dict(permissions) if isinstance(permissions, Mapping) else permissions
        return cls(repositories=repos or None, permissions=perms or None)

    @property
    def is_empty(self) -> bool:
        return self.repositories is None and self.permissions is None

    def request_body(self) -> dict | None:
        if self.is_empty:
            return None
        body: dict = {}
        if self.repositories is not None:
            body["repositories"] = list(self.repositories)
        if self.permissions is not None:
            body["permissions"] = dict(self.permissions)
        return body


@dataclass(frozen=True)
class IssuedToken:
    token: str = field(repr=False)
    expires_at: datetime
    permissions: dict[str, str] | None = None
    repositories: tuple[str, ...] | None = None

    def __str__(self) -> str:
        return self.token

    @property
    def preview(self) -> str:
        return f"{self.token[:8]}..."

    def remaining(self, now: datetime | None = None) -> timedelta:
        now = now or datetime.now(timezone.utc)
        return self.expires_at - now

    def expired(self, now: datetime | None = None) -> bool:
        return self.remaining(now) <= timedelta(0)
