import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace

from ghapp_token.cache import TokenCache, make_cache_key
from ghapp_token.errors import ConfigError, GhAppTokenError, TokenIssuanceError
from ghapp_token.github.app_auth import generate_jwt_claim
from ghapp_token.github.client import DEFAULT_API_URL, DEFAULT_TIMEOUT, GitHubAppClient
from ghapp_token.permissions import validate_permissions
from ghapp_token.schemas import Installation, IssuedToken, TokenScope

logger = logging.getLogger(__name__)


def _require_credentials(app_id, private_key: str | None, private_key_path: str | None) -> None:
    if app_id is None or not str(app_id).strip():
        raise ConfigError("Не задан GitHub App ID (GHAPP_APP_ID или --app-id)")
    if not (private_key and private_key.strip()) and not (private_key_path and private_key_path.strip()):
        raise ConfigError(
            "Не задан приватный ключ (GHAPP_PRIVATE_KEY, GHAPP_PRIVATE_KEY_PATH или --private-key-path)"
        )


class TokenIssuer:
    """Выпуск installation-токенов с кэшированием до истечения срока."""

    def __init__(
        self,
        cache: TokenCache | None = None,
        client: GitHubAppClient | None = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.cache = cache if cache is not None else TokenCache()
        self._owns_client = client is None
        self.client = client or GitHubAppClient(api_url=api_url, timeout=timeout)

    def close(self) -> None:
        # переданный снаружи клиент закрывает его владелец
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> "TokenIssuer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def issue(
        self,
        app_id: str | int,
        private_key: str | None = None,
        private_key_path: str | None = None,
        installation_id: int | None = None,
        repositories: Iterable[str] | None = None,
        permissions: Mapping[str, str] | None = None,
    ) -> IssuedToken:
        try:
            return self._issue(
                app_id, private_key, private_key_path, installation_id, repositories, permissions
            )
        except GhAppTokenError as e:
            raise TokenIssuanceError(e) from e

    def get_token(self, app_id: str | int, **kwargs) -> str:
        return self.issue(app_id, **kwargs).token

    def list_installations(
        self,
        app_id: str | int,
        private_key: str | None = None,
        private_key_path: str | None = None,
    ) -> list[Installation]:
        try:
            _require_credentials(app_id, private_key, private_key_path)
            claim = generate_jwt_claim(app_id, private_key, private_key_path)
            return self.client.list_installations(claim)
        except GhAppTokenError as e:
            raise TokenIssuanceError(e) from e

    def clear_cache(self, key: str | None = None) -> None:
        self.cache.clear(key)

    def _issue(
        self, app_id, private_key, private_key_path, installation_id, repositories, permissions
    ) -> IssuedToken:
        _require_credentials(app_id, private_key, private_key_path)
        validate_permissions(permissions)
        scope = TokenScope.build(repositories, permissions)

        claim = generate_jwt_claim(app_id, private_key, private_key_path)

        default_permissions = None
        if installation_id is None:
            installation = self.client.first_installation(claim)
            installation_id = installation.id
            default_permissions = installation.permissions or None
            logger.debug(
                "Используется установка %s (%s)", installation_id, installation.account.login
            )

        key = make_cache_key(app_id, installation_id, scope)
        entry = self.cache.get_entry(key)
        if entry is not None:
            logger.debug("Токен для %s взят из кэша", key)
            return IssuedToken(
                token=entry.token,
                expires_at=entry.expires_at,
                permissions=entry.permissions or default_permissions,
                repositories=entry.repositories,
            )

        issued = self.client.create_access_token(claim, installation_id, scope)
        self.cache.set(
            key,
            issued.token,
            issued.expires_at,
            permissions=issued.permissions,
            repositories=issued.repositories,
        )

        if issued.permissions is None and default_permissions is not None:
            return replace(issued, permissions=default_permissions)
        return issued
