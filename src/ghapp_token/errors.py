class GhAppTokenError(Exception):
    """Базовая ошибка выпуска токена."""


class ConfigError(GhAppTokenError):
    """Не заданы app id или приватный ключ."""


class InvalidPermissions(GhAppTokenError):
    def __init__(
        self,
        reason: str,
        offending: list[str] | None = None,
        unknown: list[str] | None = None,
        invalid_levels: list[str] | None = None,
    ):
        self.reason = reason
        self.unknown = unknown or []
        self.invalid_levels = invalid_levels or []
        self.offending = offending if offending is not None else self.unknown + self.invalid_levels
        super().__init__(self._message())

    def _message(self) -> str:
        if not self.offending:
            return f"Некорректные permissions: {self.reason}"
        parts = []
        if self.unknown:
            parts.append(f"неизвестные permissions: {', '.join(map(str, self.unknown))}")
        if self.invalid_levels:
            parts.append(
                "уровень доступа должен быть read или write: "
                + ", ".join(map(str, self.invalid_levels))
            )
        return f"Некорректные permissions ({self.reason}): {'; '.join(parts)}"


class CredentialError(GhAppTokenError):
    def __init__(self, reason: str, detail: str = ""):
        self.reason = reason
        self.detail = detail
        message = f"Ошибка приватного ключа: {reason}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)


class ApiError(GhAppTokenError):
    def __init__(self, reason: str, status: int | None = None, body: str = ""):
        self.reason = reason
        self.status = status
        self.body = body
        message = f"Ошибка GitHub API: {reason}"
        if status is not None:
            message += f" [{status}]"
        if body:
            message += f": {body[:200]}"
        super().__init__(message)


class NoInstallations(GhAppTokenError):
    def __init__(self):
        super().__init__("У GitHub App нет ни одной установки")


class TokenIssuanceError(GhAppTokenError):
    """Единая ошибка оркестратора, исходная доступна в `cause`."""

    def __init__(self, cause: GhAppTokenError):
        self.cause = cause
        super().__init__(f"Не удалось получить токен: {cause}")
