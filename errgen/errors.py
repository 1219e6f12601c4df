"""Typed error models for failures."""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class StrictModel(BaseModel):
    model_config = ConfigDict(extra="forbid")


class GeneratorErrorType(str, Enum):
    schema_validation_error = "schema_validation_error"
    naming_collision = "naming_collision"
    config_error = "config_error"
    io_error = "io_error"
    drift = "drift"
    internal_error = "internal_error"


class GeneratorError(StrictModel):
    type: GeneratorErrorType
    code: str
    message: str
    is_retryable: bool
    suggested_next_step: str
    details: Optional[dict[str, Any]] = None


class SchemaValidityError(ValueError):
    """Raised when the input model cannot be turned into error shapes."""

    def __init__(self, code: str, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.error = GeneratorError(
            type=GeneratorErrorType.schema_validation_error,
            code=code,
            message=message,
            is_retryable=False,
            suggested_next_step="Fix the model file, then rerun the generator.",
            details=details,
        )


class NamingCollisionError(ValueError):
    def __init__(self, message: str, details: Optional[dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.error = GeneratorError(
            type=GeneratorErrorType.naming_collision,
            code="naming_collision",
            message=message,
            is_retryable=False,
            suggested_next_step="Rename one of the clashing shapes in the model.",
            details=details,
        )


class InvariantViolation(AssertionError):
    """Caller misuse of the generator core; never a data error."""
