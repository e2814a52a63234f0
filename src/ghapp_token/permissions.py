from collections.abc import Mapping

from ghapp_token.errors import InvalidPermissions

GITHUB_PERMISSIONS = frozenset({
    # repository
    "actions", "administration", "checks", "contents", "deployments",
    "environments", "issues", "metadata", "packages", "pages",
    "pull_requests", "repository_hooks", "repository_projects",
    "secret_scanning_alerts", "secrets", "security_events", "single_file",
    "statuses", "vulnerability_alerts", "workflows",
    # organization
    "members", "organization_administration", "organization_hooks",
    "organization_plan", "organization_projects", "organization_secrets",
    "organization_self_hosted_runners", "organization_user_blocking",
    "team_discussions",
})

ACCESS_LEVELS = ("read", "write")


def validate_permissions(permissions: Mapping[str, str] | None) -> None:
    """Проверить permissions; все ошибочные имена сообщаются одним исключением."""
    if permissions is None:
        return

    if not isinstance(permissions, Mapping):
        raise InvalidPermissions("not a named mapping")

    unknown = [name for name in permissions if name not in GITHUB_PERMISSIONS]
    invalid_levels = [
        name for name, level in permissions.items()
        if name not in unknown and level not in ACCESS_LEVELS
    ]

    if unknown:
        raise InvalidPermissions(
            "unknown permission", unknown=unknown, invalid_levels=invalid_levels
        )
    if invalid_levels:
        raise InvalidPermissions("invalid access level", invalid_levels=invalid_levels)
