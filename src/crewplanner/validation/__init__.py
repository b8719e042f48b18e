"""Validation module for requests and generated schedules."""

from crewplanner.validation.validator import (
    InputValidator,
    OutputValidator,
    ValidationError,
    ValidationErrorType,
    ValidationResult,
    validate_request,
    validate_schedule,
)

__all__ = [
    "InputValidator",
    "OutputValidator",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
    "validate_request",
    "validate_schedule",
]
