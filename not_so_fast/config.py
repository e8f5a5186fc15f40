"""
Configuration for not-so-fast limiters.

``LimiterOptions`` validates the options a limiter is constructed with.
``LimiterSettings`` reads defaults from the environment (or a ``.env`` file)
for hosts that prefer to configure limiters that way.
"""

import math
from typing import Any, Mapping, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from not_so_fast.errors import ConfigurationError
from not_so_fast.logging import LOG_LEVELS, configure_logging


class LimiterOptions(BaseModel):
    """Validated limiter options: ``threshold`` tokens per ``ttl`` seconds."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    threshold: Union[int, float]
    ttl: Union[int, float]

    @field_validator("threshold", "ttl", mode="before")
    @classmethod
    def _non_negative_number(cls, value: Any) -> Union[int, float]:
        # bool is an int subclass but never a valid option
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise ValueError("must be a number")
        if math.isnan(value) or math.isinf(value):
            raise ValueError("must be finite")
        if value < 0:
            raise ValueError("must be greater than or equal to 0")
        return value

    @property
    def ttl_milliseconds(self) -> float:
        return self.ttl * 1000

    @classmethod
    def parse(cls, options: Any) -> "LimiterOptions":
        """Build options from a mapping, raising ``ConfigurationError`` on bad input."""
        if isinstance(options, cls):
            return options
        if not isinstance(options, Mapping):
            raise ConfigurationError(
                "Invalid or missing options",
                details={"received": type(options).__name__}
            )

        try:
            return cls(**{key: options[key] for key in ("threshold", "ttl") if key in options})
        except ValidationError as e:
            raise configuration_error(e) from e


def configuration_error(error: ValidationError) -> ConfigurationError:
    """Translate a pydantic validation failure into a ``ConfigurationError``.

    The first failing field names the error; fields are reported in
    declaration order, so ``threshold`` wins over ``ttl``.
    """
    errors = error.errors(include_url=False, include_input=False)
    field = str(errors[0]["loc"][0]) if errors and errors[0]["loc"] else "options"
    return ConfigurationError(
        f"Invalid or missing options.{field}",
        details={
            "field": field,
            "errors": [{"loc": list(err["loc"]), "msg": err["msg"]} for err in errors]
        }
    )


class LimiterSettings(BaseSettings):
    """Environment-driven limiter defaults."""

    model_config = SettingsConfigDict(
        env_prefix="NOT_SO_FAST_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    threshold: int = Field(default=100, ge=0)
    ttl: float = Field(default=60.0, ge=0)
    name: str = "default"
    log_level: str = "info"

    @field_validator("log_level")
    @classmethod
    def _known_log_level(cls, value: str) -> str:
        if value.lower() not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return value.lower()

    def to_options(self) -> LimiterOptions:
        return LimiterOptions.parse({"threshold": self.threshold, "ttl": self.ttl})

    def configure_logging(self) -> None:
        """Set up structured logging at ``log_level`` for limiter ``name``."""
        configure_logging(self.name, self.log_level)


def get_settings(**overrides: Any) -> LimiterSettings:
    """Load limiter settings from the environment, raising ``ConfigurationError`` on bad values."""
    try:
        return LimiterSettings(**overrides)
    except ValidationError as e:
        raise configuration_error(e) from e
