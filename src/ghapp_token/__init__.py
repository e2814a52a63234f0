from ghapp_token.cache import TokenCache, default_cache, make_cache_key
from ghapp_token.errors import (
    ApiError,
    ConfigError,
    CredentialError,
    GhAppTokenError,
    InvalidPermissions,
    NoInstallations,
    TokenIssuanceError,
)
from ghapp_token.issuer import TokenIssuer
from ghapp_token.permissions import GITHUB_PERMISSIONS, validate_permissions
from ghapp_token.schemas import Installation, IssuedToken, TokenScope

__all__ = [
    "TokenIssuer",
    "TokenCache",
    "default_cache",
    "make_cache_key",
    "IssuedToken",
    "Installation",
    "TokenScope",
    "GITHUB_PERMISSIONS",
    "validate_permissions",
    "GhAppTokenError",
    "ConfigError",
    "InvalidPermissions",
    "CredentialError",
    "ApiError",
    "NoInstallations",
    "TokenIssuanceError",
]
