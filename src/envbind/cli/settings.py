from __future__ import annotations

from dataclasses import dataclass

from envbind.core.environment import Environment
from envbind.core.errors import ConfigError
from envbind.core.fields import env_field
from envbind.core.loader import parse_with_prefix
from envbind.core.logging_setup import LOG_FORMATS, LOG_LEVELS

SETTINGS_PREFIX = "ENVBIND_"


@dataclass
class CliSettings:
    """Settings of the envbind command itself, read from ``ENVBIND_*`` variables."""

    log_level: str = env_field("LOG_LEVEL", default="warning", initial="warning")
    log_format: str = env_field("LOG_FORMAT", default="console", initial="console")
    env_file: str | None = env_field("ENV_FILE")

    def validate(self) -> None:
        self.log_level = self.log_level.lower()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"{SETTINGS_PREFIX}LOG_LEVEL must be one of {sorted(LOG_LEVELS)}")
        if self.log_format not in LOG_FORMATS:
            raise ConfigError(f"{SETTINGS_PREFIX}LOG_FORMAT must be one of {sorted(LOG_FORMATS)}")


def load_settings(environment: Environment | None = None) -> CliSettings:
    settings = CliSettings()
    parse_with_prefix(settings, SETTINGS_PREFIX, env=environment)
    settings.validate()
    return settings
