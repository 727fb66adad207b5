"""Configuration file loading and validation."""

import logging
from pathlib import Path
from zoneinfo import ZoneInfo, available_timezones

from pydantic import BaseModel, Field, ValidationError, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
    TomlConfigSettingsSource,
)

from .consts import (
    CONFIG_FILE_DEFAULT,
    DATABASE_PATH,
    EXPORT_DIR_DEFAULT,
    LOG_FILE_DEFAULT,
)
from .enums import UnresolvedPolicy
from .errors import ConfigException

logger = logging.getLogger(__name__)

ENV_PREFIX = "PROMPTOR_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class DatabaseConfig(BaseModel):
    """Schema storage configuration."""

    path: str = Field(default=DATABASE_PATH)


class LogConfig(BaseModel):
    """Logging configuration."""

    file: str = Field(default=LOG_FILE_DEFAULT)
    level: str = Field(default="INFO")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {v}")
        return level


class GenerationConfig(BaseModel):
    """Text generation configuration."""

    unresolved: UnresolvedPolicy = Field(default=UnresolvedPolicy.KEEP)


class ExportConfig(BaseModel):
    """Export configuration."""

    directory: str = Field(default=EXPORT_DIR_DEFAULT)


class WebConfig(BaseModel):
    """Web service configuration."""

    enabled: bool = False
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=5000, ge=1, le=65535)


class Config(BaseSettings):
    """Application configuration."""

    timezone: str = Field(default="UTC")

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    log: LogConfig = Field(default_factory=LogConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    export: ExportConfig = Field(default_factory=ExportConfig)
    web: WebConfig = Field(default_factory=WebConfig)

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_nested_delimiter="__",
    )

    @field_validator("timezone", mode="before")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        if v not in available_timezones():
            raise ValueError(
                f"Invalid timezone configuration: '{v}'. "
                "Please use a valid IANA timezone identifier"
            )
        return v

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
            TomlConfigSettingsSource(settings_cls),
        )

    @classmethod
    def load_from_file(cls, config_path: str) -> "Config":
        """Load configuration from specified path."""
        path = Path(config_path)
        if not path.exists():
            raise ConfigException(f"Configuration file not found: {config_path}")

        class _Config(cls):
            model_config = SettingsConfigDict(
                toml_file=str(path),
                env_prefix=ENV_PREFIX,
                env_nested_delimiter="__",
            )

        try:
            return _Config()
        except ValidationError as e:
            error_lines = ["Configuration validation failed:"]
            for error in e.errors():
                loc = " -> ".join(str(item) for item in error["loc"])
                error_lines.append(f"  - {loc}: {error['msg']}")
            raise ConfigException("\n".join(error_lines)) from e

    @classmethod
    def load(cls, config_path: str | None = None) -> "Config":
        """Load from a file when one is given or ``config.toml`` exists in the
        working directory, otherwise from env and defaults.
        """
        if not config_path and Path(CONFIG_FILE_DEFAULT).is_file():
            config_path = CONFIG_FILE_DEFAULT
        if config_path:
            return cls.load_from_file(config_path)

        try:
            return cls()
        except ValidationError as e:
            raise ConfigException(f"Configuration validation failed: {e}") from e

    def get_timezone(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)
