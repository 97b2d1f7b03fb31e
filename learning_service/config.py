import os
from pathlib import Path

from pydantic import BaseModel
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

APPLICATION_NAME = "learning-platform"
IS_WINDOWS = os.name == "nt"


def find_config_file() -> Path:
    """Locate config.toml: $LEARNING_CONFIG, ./config.toml, then the user config dir
    (~/.config/<app>/ on unix, %APPDATA%\\<app>\\ on windows)."""
    explicit = os.environ.get("LEARNING_CONFIG")
    if explicit:
        return Path(explicit)

    local = Path("./config.toml")
    if local.exists():
        return local

    base = os.environ.get("APPDATA" if IS_WINDOWS else "HOME")
    if base:
        user_dir = Path(base) if IS_WINDOWS else Path(base) / ".config"
        candidate = user_dir / APPLICATION_NAME / "config.toml"
        if candidate.exists():
            return candidate
    return local


class HostSettings(BaseModel):
    bindto: str = "127.0.0.1:5000"

    @property
    def bind_host(self) -> str:
        return self.bindto.rsplit(":", 1)[0]

    @property
    def bind_port(self) -> int:
        return int(self.bindto.rsplit(":", 1)[1])


class AppSettings(BaseModel):
    jwt: str = "dev-secret-learning"
    database_uri: str = "sqlite:///./learning.db"
    public_host: str = "http://127.0.0.1:5000"
    docs: bool = True


class Settings(BaseSettings):
    host: HostSettings = HostSettings()
    app: AppSettings = AppSettings()

    REDIS_URL: str | None = None
    JWT_ALGORITHM: str = "HS256"
    JWT_TTL_MINUTES: int = 60 * 24
    PROGRESS_TOKEN_TTL_MINUTES: int = 30
    LOG_LEVEL: str = "INFO"
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_ENABLED: bool = True
    CACHE_TTL: int = 300  # 5 minutes
    UPLOADS_DIR: str = "./uploads"
    TEST_DATABASE_ADMIN_URL: str | None = None

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlConfigSettingsSource(settings_cls, toml_file=find_config_file()),
        )


settings = Settings()
