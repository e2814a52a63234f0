import time
from pathlib import Path

import jwt
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.serialization import load_pem_private_key

from ghapp_token.errors import CredentialError

CLOCK_SKEW_SECONDS = 60
JWT_TTL_SECONDS = 600


def read_private_key(private_key: str | None = None, private_key_path: str | None = None) -> str:
    """Вернуть PEM: inline-ключ имеет приоритет над путём к файлу."""
    if private_key and private_key.strip():
        # ключ из однострочной env-переменной
        return private_key.replace("\\n", "\n")

    if private_key_path and private_key_path.strip():
        path = Path(private_key_path).expanduser()
        try:
            content = path.read_text()
        except OSError as e:
            raise CredentialError("unreadable key", str(e)) from e
        if content.strip():
            return content

    raise CredentialError("missing private key")


def load_private_key(private_key: str | None = None, private_key_path: str | None = None) -> RSAPrivateKey:
    pem = read_private_key(private_key, private_key_path)
    try:
        key = load_pem_private_key(pem.encode(), password=None)
    except (ValueError, TypeError, UnsupportedAlgorithm) as e:
        raise CredentialError("unparseable key", str(e)) from e

    if not isinstance(key, RSAPrivateKey):
        raise CredentialError("unparseable key", "RS256 требует RSA-ключ")
    return key


def generate_jwt_claim(
    app_id: str | int,
    private_key: str | None = None,
    private_key_path: str | None = None,
    now: int | None = None,
) -> str:
    key = load_private_key(private_key, private_key_path)
    now = int(time.time()) if now is None else now
    payload = {
        "iat": now - CLOCK_SKEW_SECONDS,
        "exp": now + JWT_TTL_SECONDS,
        "iss": str(app_id),
    }
    return jwt.encode(payload, key, algorithm="RS256")
