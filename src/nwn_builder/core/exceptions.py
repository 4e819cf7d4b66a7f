"""Custom exception hierarchy for the NWN character builder.

This module defines the exception hierarchy used across the rules engine.
All exceptions inherit from NwnBuilderError, enabling unified error handling
at the application boundary while preserving domain-specific context.

Only programming errors and infrastructure failures are raised. Player input
that breaks a rule (an attribute out of range, an overspent skill budget) is
reported through a ValidationResult instead, and structurally invalid
commands leave the character unchanged.

Example:
    >>> from nwn_builder.core.exceptions import LevelNotFoundError
    >>> raise LevelNotFoundError("Level 4 does not exist", level=4, total_level=3)
"""

from __future__ import annotations

from typing import Any


class NwnBuilderError(Exception):
    """Base exception for all NWN character builder errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary containing additional error context.
    """

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        """Initialize the base exception.

        Args:
            message: Human-readable error description.
            details: Optional dictionary containing additional error context.
        """
        self.message = message
        self.details = details or {}
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the exception message with optional details.

        Returns:
            Formatted error message including any provided details.
        """
        if self.details:
            detail_str = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            return f"{self.message} [{detail_str}]"
        return self.message

    def __repr__(self) -> str:
        """Return a detailed string representation of the exception."""
        return f"{self.__class__.__name__}(message={self.message!r}, details={self.details!r})"


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigurationError(NwnBuilderError):
    """Raised when application configuration is invalid.

    This includes missing required settings, invalid values, or
    incompatible configuration combinations.
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize configuration error with config key context.

        Args:
            message: Human-readable error description.
            config_key: The configuration key that caused the error.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if config_key:
            combined_details["config_key"] = config_key
        super().__init__(message, details=combined_details)


# =============================================================================
# Catalog Exceptions
# =============================================================================


class CatalogError(NwnBuilderError):
    """Base exception for rule catalog errors.

    Raised when the catalog file cannot be read or a lookup that the
    caller depends on fails.
    """

    def __init__(
        self,
        message: str,
        *,
        source_file: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize catalog error with source file context.

        Args:
            message: Human-readable error description.
            source_file: Path to the catalog file involved.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if source_file:
            combined_details["source_file"] = source_file
        super().__init__(message, details=combined_details)


class ClassNotFoundError(CatalogError):
    """Raised when a class id is absent from the catalog."""

    def __init__(
        self,
        message: str,
        *,
        class_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if class_id:
            combined_details["class_id"] = class_id
        super().__init__(message, details=combined_details)


# =============================================================================
# Rules Engine Exceptions
# =============================================================================


class RulesEngineError(NwnBuilderError):
    """Base exception for rules engine precondition failures.

    These indicate a caller bug (asking about something that does not
    exist), not a player mistake.
    """


class LevelNotFoundError(RulesEngineError):
    """Raised when a computation targets a level the character does not have."""

    def __init__(
        self,
        message: str,
        *,
        level: int | None = None,
        total_level: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize level error with level context.

        Args:
            message: Human-readable error description.
            level: The requested level.
            total_level: The character's actual total level.
            details: Optional dictionary containing additional error context.
        """
        combined_details = details or {}
        if level is not None:
            combined_details["level"] = level
        if total_level is not None:
            combined_details["total_level"] = total_level
        super().__init__(message, details=combined_details)


# =============================================================================
# Persistence Exceptions
# =============================================================================


class PersistenceError(NwnBuilderError):
    """Raised (or returned) when the character store fails.

    The persistence port returns these inside a StorageResult rather than
    raising them, so callers decide whether to retry.
    """

    def __init__(
        self,
        message: str,
        *,
        character_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        combined_details = details or {}
        if character_id:
            combined_details["character_id"] = character_id
        super().__init__(message, details=combined_details)


class CharacterNotFoundError(PersistenceError):
    """Raised when no stored character matches the requested id."""


__all__ = [
    # Base exception
    "NwnBuilderError",
    # Configuration exceptions
    "ConfigurationError",
    # Catalog exceptions
    "CatalogError",
    "ClassNotFoundError",
    # Rules engine exceptions
    "RulesEngineError",
    "LevelNotFoundError",
    # Persistence exceptions
    "PersistenceError",
    "CharacterNotFoundError",
]
