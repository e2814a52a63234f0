import logging
import re
from datetime import datetime, timezone

import httpx
from pydantic import ValidationError

from ghapp_token.errors import ApiError, NoInstallations
from ghapp_token.permissions import validate_permissions
from ghapp_token.schemas import AccessTokenResponse, Installation, IssuedToken, TokenScope

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 15.0
EXPIRES_AT_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
EXPIRES_AT_RE = re.compile(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z")


def parse_expires_at(value: str) -> datetime:
    # strptime допускает поля без ведущих нулей
    if not isinstance(value, str) or not EXPIRES_AT_RE.fullmatch(value):
        raise ApiError("unparseable expiry", body=str(value))
    try:
        return datetime.strptime(value, EXPIRES_AT_FORMAT).replace(tzinfo=timezone.utc)
    except (TypeError, ValueError) as e:
        raise ApiError("unparseable expiry", body=str(value)) from e


class GitHubAppClient:
    """Запросы от имени самого приложения (JWT), а не установки."""

    def __init__(
        self,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http: httpx.Client | None = None,
    ):
        self.api_url = api_url.rstrip("/")
        # повтор только при ошибке соединения, HTTP-статусы не повторяются
        self.http = http or httpx.Client(
            timeout=timeout, transport=httpx.HTTPTransport(retries=2)
        )

    def close(self) -> None:
        self.http.close()

    def list_installations(self, claim: str) -> list[Installation]:
        data = self._request("GET", "/app/installations", claim)
        if not isinstance(data, list):
            raise ApiError("malformed response", body="ожидался список установок")
        try:
            installations = [Installation.model_validate(item) for item in data]
        except ValidationError as e:
            raise ApiError("malformed response", body=str(e)) from e

        logger.debug("Найдено установок: %d", len(installations))
        return installations

    def first_installation(self, claim: str) -> Installation:
        installations = self.list_installations(claim)
        if not installations:
            raise NoInstallations()
        return installations[0]

    def create_access_token(
        self, claim: str, installation_id: int, scope: TokenScope | None = None
    ) -> IssuedToken:
        scope = scope or TokenScope()
        validate_permissions(scope.permissions)

        data = self._request(
            "POST",
            f"/app/installations/{installation_id}/access_tokens",
            claim,
            json=scope.request_body(),
        )
        try:
            response = AccessTokenResponse.model_validate(data)
        except ValidationError as e:
            raise ApiError("malformed response", body=str(e)) from e

        repositories = None
        if response.repositories is not None:
            repositories = tuple(repo.name for repo in response.repositories)

        issued = IssuedToken(
            token=response.token,
            expires_at=parse_expires_at(response.expires_at),
            permissions=response.permissions,
            repositories=repositories,
        )
        logger.info(
            "Получен токен %s для установки %s, истекает %s",
            issued.preview, installation_id, issued.expires_at.isoformat(),
        )
        return issued

    def _request(self, method: str, path: str, claim: str, json: dict | None = None):
        headers = {
            "Authorization": f"Bearer {claim}",
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
        }
        try:
            resp = self.http.request(method, f"{self.api_url}{path}", headers=headers, json=json)
        except httpx.HTTPError as e:
            raise ApiError("request failed", body=str(e)) from e

        if not resp.is_success:
            raise ApiError("http error", status=resp.status_code, body=resp.text)

        try:
            return resp.json()
        except ValueError as e:
            raise ApiError("malformed response", status=resp.status_code, body=resp.text) from e
