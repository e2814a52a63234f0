from ghapp_token.github.app_auth import generate_jwt_claim, load_private_key
from ghapp_token.github.client import DEFAULT_API_URL, GitHubAppClient

__all__ = ["generate_jwt_claim", "load_private_key", "GitHubAppClient", "DEFAULT_API_URL"]
