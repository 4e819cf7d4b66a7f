"""Configuration management for the NWN character builder.

This module provides centralized configuration management using pydantic-settings,
supporting environment variables, .env files, and runtime configuration overrides.

Example:
    >>> from nwn_builder.core.config import get_settings
    >>> settings = get_settings()
    >>> settings.rules.point_buy_budget
    32

Environment Variables:
    NWN_BUILDER_RULES_POINT_BUY_BUDGET: Point-buy budget for attributes
    NWN_BUILDER_RULES_MAX_CHARACTER_LEVEL: Level cap (30 by default)
    NWN_BUILDER_DATABASE_PATH: Path to the SQLite character store
    NWN_BUILDER_CATALOG_PATH: Path to a JSON rule catalog
    NWN_BUILDER_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from nwn_builder.core.constants import (
    DEFAULT_SKILL_POINTS,
    EPIC_LEVEL,
    FIRST_LEVEL_SKILL_MULTIPLIER,
    MAX_CHARACTER_LEVEL,
    POINT_BUY_TOTAL,
    SIMPLE_WEAPON_FEAT,
)
from nwn_builder.core.exceptions import ConfigurationError


class RulesSettings(BaseSettings):
    """Configuration for the character progression rules.

    Attributes:
        point_buy_budget: Points available for buying base attributes.
        max_character_level: Total level cap.
        epic_level: Total level from which epic feats become selectable.
        first_level_skill_multiplier: Skill point multiplier at level 1.
        default_skill_points: Base skill points for classes that omit them.
        bonus_skill_point_races: Races gaining +1 skill point per level.
        bonus_feat_races: Races gaining an extra general feat slot at level 1.
        simple_weapon_feat: Feat granted to everyone unless a class excludes it.
    """

    model_config = SettingsConfigDict(
        env_prefix="NWN_BUILDER_RULES_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    point_buy_budget: int = Field(
        default=POINT_BUY_TOTAL,
        ge=0,
        le=200,
        description="Point-buy budget for base attributes",
    )
    max_character_level: int = Field(
        default=MAX_CHARACTER_LEVEL,
        ge=1,
        le=MAX_CHARACTER_LEVEL,
        description="Maximum total character level",
    )
    epic_level: int = Field(
        default=EPIC_LEVEL,
        ge=2,
        description="Total level required for epic feats",
    )
    first_level_skill_multiplier: int = Field(
        default=FIRST_LEVEL_SKILL_MULTIPLIER,
        ge=1,
        le=10,
        description="Skill point multiplier applied at level 1",
    )
    default_skill_points: int = Field(
        default=DEFAULT_SKILL_POINTS,
        ge=0,
        description="Base skill points when a class does not declare them",
    )
    bonus_skill_point_races: list[str] = Field(
        default_factory=lambda: ["human"],
        description="Races gaining one extra skill point per level",
    )
    bonus_feat_races: list[str] = Field(
        default_factory=lambda: ["human"],
        description="Races gaining an extra general feat slot at level 1",
    )
    simple_weapon_feat: str = Field(
        default=SIMPLE_WEAPON_FEAT,
        min_length=1,
        description="Default simple weapon proficiency feat id",
    )

    @model_validator(mode="after")
    def validate_epic_level(self) -> "RulesSettings":
        """Ensure the epic threshold is reachable under the level cap.

        Returns:
            Self if validation passes.

        Raises:
            ConfigurationError: If epic_level exceeds max_character_level.
        """
        if self.epic_level > self.max_character_level:
            raise ConfigurationError(
                f"epic_level ({self.epic_level}) must not exceed "
                f"max_character_level ({self.max_character_level})",
                config_key="epic_level",
            )
        return self


class StorageSettings(BaseSettings):
    """Configuration for persistence and catalog locations.

    Attributes:
        database_path: Path to the SQLite character store.
        storage_key: Key under which the character list is stored.
        catalog_path: Optional JSON catalog; the bundled one is used if unset.
    """

    model_config = SettingsConfigDict(
        env_prefix="NWN_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_path: Path = Field(
        default=Path("data/nwn_builder.db"),
        description="Path to SQLite database",
    )
    storage_key: str = Field(
        default="nwn_characters",
        min_length=1,
        description="Storage key holding the saved character list",
    )
    catalog_path: Path | None = Field(
        default=None,
        description="JSON rule catalog to load instead of the bundled one",
    )

    @field_validator("catalog_path", mode="after")
    @classmethod
    def ensure_catalog_exists(cls, value: Path | None) -> Path | None:
        """Reject a configured catalog path that does not exist.

        Args:
            value: The configured path, if any.

        Returns:
            The validated path.

        Raises:
            ConfigurationError: If the file is missing.
        """
        if value is not None and not value.is_file():
            raise ConfigurationError(
                f"Catalog file not found: {value}",
                config_key="catalog_path",
            )
        return value


class Settings(BaseSettings):
    """Main application settings aggregating all configuration domains.

    Attributes:
        app_name: Application name.
        app_version: Application version string.
        debug: Enable debug mode.
        log_level: Application logging level.
        rules: Progression rule settings.
        storage: Storage settings.
    """

    model_config = SettingsConfigDict(
        env_prefix="NWN_BUILDER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_nested_delimiter="__",
    )

    app_name: str = Field(
        default="NWN Character Builder",
        description="Application name",
    )
    app_version: str = Field(
        default="0.1.0",
        description="Application version",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    rules: RulesSettings = Field(default_factory=RulesSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return not self.debug


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The application Settings instance.

    Raises:
        ConfigurationError: If required configuration is missing or invalid.
    """
    try:
        return Settings()
    except ConfigurationError:
        raise
    except Exception as exc:
        raise ConfigurationError(
            f"Failed to load application settings: {exc}",
            details={"original_error": str(exc)},
        ) from exc


def clear_settings_cache() -> None:
    """Clear the settings cache, forcing a reload on next access.

    This is primarily useful for testing or when environment variables
    have changed at runtime.
    """
    get_settings.cache_clear()


__all__ = [
    "RulesSettings",
    "StorageSettings",
    "Settings",
    "get_settings",
    "clear_settings_cache",
]
