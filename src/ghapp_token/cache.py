import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from ghapp_token.schemas import TokenScope

logger = logging.getLogger(__name__)

DEFAULT_MARGIN_SECONDS = 60.0


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CacheEntry:
    token: str = field(repr=False)
    expires_at: datetime
    permissions: dict[str, str] | None = None
    repositories: tuple[str, ...] | None = None


def make_cache_key(app_id: str | int, installation_id: int, scope: TokenScope | None = None) -> str:
    """Ключ не зависит от порядка репозиториев и permissions."""
    key = f"{app_id}_{installation_id}"
    if scope is None:
        return key
    if scope.repositories is not None:
        key += "|repositories=" + ",".join(sorted(set(scope.repositories)))
    if scope.permissions is not None:
        pairs = (f"{name}:{scope.permissions[name]}" for name in sorted(scope.permissions))
        key += "|permissions=" + ",".join(pairs)
    return key


class TokenCache:
    """In-memory кэш токенов на время жизни процесса."""

    def __init__(
        self,
        margin: float = DEFAULT_MARGIN_SECONDS,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.margin = timedelta(seconds=margin)
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def get_entry(self, key: str) -> CacheEntry | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            if self._clock() >= entry.expires_at - self.margin:
                del self._entries[key]
                logger.debug("Токен %s истёк, удалён из кэша", key)
                return None
            return entry

    def get(self, key: str) -> str | None:
        entry = self.get_entry(key)
        return entry.token if entry is not None else None

    def set(
        self,
        key: str,
        token: str,
        expires_at: datetime,
        *,
        permissions: dict[str, str] | None = None,
        repositories: tuple[str, ...] | None = None,
    ) -> str:
        with self._lock:
            self._entries[key] = CacheEntry(token, expires_at, permissions, repositories)
        return token

    def clear(self, key: str | None = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: str) -> bool:
        with self._lock:
            return key in self._entries


default_cache = TokenCache()
