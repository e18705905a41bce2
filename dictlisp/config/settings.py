"""
Interpreter settings.

Settings come from DICTLISP_* environment variables and can be overridden
field by field (the CLI does this with its flags).
"""
import logging
import os
from typing import Literal, Mapping, Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

ENV_PREFIX = "DICTLISP_"

_TRUE_STRINGS = {"1", "true", "yes", "on"}


class InterpreterSettings(BaseModel):
    """Runtime configuration for the interpreter and its front ends."""
    log_level: LogLevel = "WARNING"
    log_file: Optional[str] = None
    desugar_dictionaries: bool = Field(
        False, description="Rewrite dictionary literals onto the 'dict' primitive before evaluation."
    )
    fresh_name_separator: str = Field(
        "__", min_length=1, description="Separator placed between a renamed variable and its counter."
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None, **overrides) -> "InterpreterSettings":
        """
        Build settings from DICTLISP_* environment variables.

        Args:
            environ: Mapping to read from. Defaults to os.environ.
            overrides: Field values that win over the environment. None values are ignored.
        """
        environ = os.environ if environ is None else environ
        values = {}
        if f"{ENV_PREFIX}LOG_LEVEL" in environ:
            values["log_level"] = environ[f"{ENV_PREFIX}LOG_LEVEL"]
        if environ.get(f"{ENV_PREFIX}LOG_FILE"):
            values["log_file"] = environ[f"{ENV_PREFIX}LOG_FILE"]
        if f"{ENV_PREFIX}DESUGAR" in environ:
            values["desugar_dictionaries"] = environ[f"{ENV_PREFIX}DESUGAR"].strip().lower() in _TRUE_STRINGS
        if f"{ENV_PREFIX}FRESH_NAME_SEPARATOR" in environ:
            values["fresh_name_separator"] = environ[f"{ENV_PREFIX}FRESH_NAME_SEPARATOR"]
        values.update({k: v for k, v in overrides.items() if v is not None})
        logger.debug(f"Loaded interpreter settings: {values}")
        return cls(**values)
