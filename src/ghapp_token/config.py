from pydantic_settings import BaseSettings, SettingsConfigDict

from ghapp_token.github.client import DEFAULT_API_URL, DEFAULT_TIMEOUT


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="GHAPP_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    app_id: str = ""
    private_key: str = ""
    private_key_path: str = ""
    installation_id: int | None = None
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    log_level: str = "WARNING"


def get_settings() -> Settings:
    return Settings()
