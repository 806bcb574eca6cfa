"""
Settings configuration using pydantic-settings.

Loads configuration from:
1. Constructor arguments (highest precedence)
2. Environment variables with CONTEXTS_ prefix
3. Field defaults (lowest)

Example:
  CONTEXTS_OUTPUT_FORMAT=json contexts collapse project.yaml defaults.yaml
"""

import logging as _logging
import typing as _typing

import pydantic as _pydantic
import pydantic_settings as _pydantic_settings

import contexts.constants as constants


class Settings(_pydantic_settings.BaseSettings):
    """
    Settings for the contexts command-line interface.

    All settings can be overridden via environment variables with the
    CONTEXTS_ prefix, e.g. CONTEXTS_LOG_LEVEL=DEBUG.
    """

    model_config = _pydantic_settings.SettingsConfigDict(
        env_prefix=constants.ENV_PREFIX,
        extra="ignore",
    )

    output_format: _typing.Literal["yaml", "json"] = constants.DEFAULT_OUTPUT_FORMAT
    """Format for printed values and collapsed views."""

    ordered: bool = True
    """Collapse with sorted keys."""

    base_first: bool = False
    """File arguments list the least local layer first."""

    log_level: str = constants.DEFAULT_LOG_LEVEL
    """Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    @_pydantic.field_validator("log_level")
    @classmethod
    def _validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if not isinstance(_logging.getLevelName(level), int):
            raise ValueError(f"unknown log level: {value!r}")
        return level

    @property
    def log_level_number(self) -> int:
        """Numeric logging level for logging.basicConfig()."""
        return _typing.cast(int, _logging.getLevelName(self.log_level))
