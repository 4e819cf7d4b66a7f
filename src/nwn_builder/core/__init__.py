"""Core module providing configuration, logging, and base exceptions.

Exports:
    Exceptions:
        NwnBuilderError: Base exception for all application errors.
        ConfigurationError: Configuration-related errors.
        CatalogError: Rule catalog errors.
        RulesEngineError: Rules engine precondition failures.
        PersistenceError: Character store failures.

    Configuration:
        Settings: Main application settings class.
        get_settings: Get the settings singleton.
        clear_settings_cache: Force settings reload.

    Logging:
        configure_logging: Set up application logging.
        get_logger: Get a configured logger instance.
        character_context: Bind a character id to log entries.
"""

from __future__ import annotations

from nwn_builder.core.config import (
    RulesSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from nwn_builder.core.exceptions import (
    CatalogError,
    CharacterNotFoundError,
    ClassNotFoundError,
    ConfigurationError,
    LevelNotFoundError,
    NwnBuilderError,
    PersistenceError,
    RulesEngineError,
)
from nwn_builder.core.logging import (
    character_context,
    configure_logging,
    get_logger,
)


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
    # Configuration
    "Settings",
    "RulesSettings",
    "StorageSettings",
    "get_settings",
    "clear_settings_cache",
    # Logging
    "configure_logging",
    "get_logger",
    "character_context",
]
