"""
Core error definitions for cranker

Provides error codes and the exception hierarchy raised by the factory engine.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Standardized error codes for the factory engine."""

    # Job pipeline errors
    NO_ACTIVE_JOB = "NO_ACTIVE_JOB"
    UNKNOWN_FACTORY = "UNKNOWN_FACTORY"
    MISSING_MODEL = "MISSING_MODEL"

    # Trait errors
    UNKNOWN_TRAIT = "UNKNOWN_TRAIT"

    # Item errors
    INVALID_ITEM = "INVALID_ITEM"
    SAVE_FAILED = "SAVE_FAILED"

    # Fixture and stats file errors
    MALFORMED_FIXTURE = "MALFORMED_FIXTURE"

    # Lint errors
    LINT_FAILED = "LINT_FAILED"


class FactoryError(Exception):
    """Base exception for all factory engine errors."""

    def __init__(self, code: ErrorCode, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ContractViolation(FactoryError):
    """Raised when the job stack is used outside of a running factory method."""

    def __init__(self, message: str = "No active factory job", details: Optional[Dict] = None):
        super().__init__(ErrorCode.NO_ACTIVE_JOB, message, details)


class UnknownFactory(FactoryError):
    """Raised when no factory method is declared for a target."""

    def __init__(self, target: str):
        self.target = target
        super().__init__(
            ErrorCode.UNKNOWN_FACTORY,
            f"Invalid factory '{target}'! No method '{target}' is defined.",
            {'target': target}
        )


class UnknownTrait(FactoryError):
    """Raised when a requested trait has no bound mutator."""

    def __init__(self, trait: str, target: str):
        self.trait = trait
        self.target = target
        self.method_name = f"apply_trait_{trait}_to_{target}"
        super().__init__(
            ErrorCode.UNKNOWN_TRAIT,
            f"Invalid trait '{trait}'! No method '{self.method_name}' is defined.",
            {'trait': trait, 'target': target, 'method': self.method_name}
        )


class ValidationFailure(FactoryError):
    """Raised by debug builds when a produced item is invalid."""

    def __init__(self, item_type: str, errors: Any):
        self.item_type = item_type
        self.errors = errors
        super().__init__(
            ErrorCode.INVALID_ITEM,
            f"Oops, the {item_type} created by the Factory has the following errors: {errors}",
            {'item_type': item_type, 'errors': errors}
        )


class PersistenceFailure(FactoryError):
    """Raised by strict creates when an item could not be saved."""

    def __init__(self, item_type: str, errors: Any = None):
        self.item_type = item_type
        self.errors = errors
        message = f"Failed to save {item_type}"
        if errors:
            message = f"{message}: {errors}"
        super().__init__(ErrorCode.SAVE_FAILED, message, {'item_type': item_type, 'errors': errors})


class FixtureFormatError(FactoryError):
    """Raised when a fixture file does not have the expected structure."""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(ErrorCode.MALFORMED_FIXTURE, message, details)


class LintFailure(FactoryError):
    """Raised when linting finds factories or traits producing invalid items."""

    def __init__(self, failures: list):
        self.failures = failures
        lines = [f"  - {failure}" for failure in failures]
        super().__init__(
            ErrorCode.LINT_FAILED,
            "The following factories are invalid:\n" + "\n".join(lines),
            {'failures': failures}
        )
