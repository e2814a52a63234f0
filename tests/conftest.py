import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa

from ghapp_token.github.client import GitHubAppClient


@pytest.fixture(scope="session")
def rsa_key():
    return rsa.generate_private_key(public_exponent=65537, key_size=2048)


@pytest.fixture(scope="session")
def private_key_pem(rsa_key):
    return rsa_key.private_bytes(
        serialization.Encoding.PEM,
        serialization.PrivateFormat.TraditionalOpenSSL,
        serialization.NoEncryption(),
    ).decode()


@pytest.fixture
def key_file(tmp_path, private_key_pem):
    path = tmp_path / "app.pem"
    path.write_text(private_key_pem)
    return path


def installation_payload(id=12345678, login="test-org", permissions=None):
    return {
        "id": id,
        "account": {"login": login, "id": 1234, "type": "Organization"},
        "app_id": 123456,
        "repository_selection": "all",
        "permissions": permissions if permissions is not None else {"contents": "read", "metadata": "read"},
        "events": ["push", "pull_request"],
    }


def token_payload(token="ghs_test_token_abc123", expires_at=None, permissions=None, repositories=None):
    if expires_at is None:
        expires_at = (datetime.now(timezone.utc) + timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M:%SZ")
    data = {"token": token, "expires_at": expires_at}
    if permissions is not None:
        data["permissions"] = permissions
    if repositories is not None:
        data["repositories"] = [
            {"id": i, "name": name, "full_name": f"test-org/{name}"}
            for i, name in enumerate(repositories)
        ]
    return data


class FakeGitHub:
    """Записывает запросы и отвечает заготовленными данными."""

    def __init__(self, installations=None, token=None, token_status=201):
        self.installations = [installation_payload()] if installations is None else installations
        self.token = token or token_payload(permissions={"contents": "read", "metadata": "read"})
        self.token_status = token_status
        self.requests: list[httpx.Request] = []

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "GET" and request.url.path.endswith("/app/installations"):
            return httpx.Response(200, json=self.installations)
        if request.method == "POST" and request.url.path.endswith("/access_tokens"):
            return httpx.Response(self.token_status, json=self.token)
        return httpx.Response(404, json={"message": "Not Found"})

    def client(self, api_url="https://api.github.com") -> GitHubAppClient:
        return GitHubAppClient(api_url=api_url, http=httpx.Client(transport=httpx.MockTransport(self.handler)))

    def calls(self, method: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == method]

    @staticmethod
    def body(request: httpx.Request):
        return json.loads(request.content) if request.content else None


@pytest.fixture
def github():
    return FakeGitHub()
