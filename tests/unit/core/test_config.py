"""Tests for configuration management."""

from __future__ import annotations

from pathlib import Path

import pytest

from nwn_builder.core.config import (
    RulesSettings,
    Settings,
    StorageSettings,
    clear_settings_cache,
    get_settings,
)
from nwn_builder.core.exceptions import ConfigurationError


class TestRulesSettings:
    """Tests for RulesSettings configuration."""

    def test_default_values(self) -> None:
        """Test default progression rules."""
        settings = RulesSettings()

        assert settings.point_buy_budget == 32
        assert settings.max_character_level == 30
        assert settings.epic_level == 21
        assert settings.first_level_skill_multiplier == 4
        assert settings.bonus_skill_point_races == ["human"]
        assert settings.bonus_feat_races == ["human"]
        assert settings.simple_weapon_feat == "simple_weapon_proficiency"

    def test_epic_level_must_not_exceed_cap(self) -> None:
        """Test that epic_level must be reachable under the level cap."""
        with pytest.raises(ConfigurationError) as exc_info:
            RulesSettings(max_character_level=20, epic_level=21)

        assert "epic_level" in str(exc_info.value)

    def test_env_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test rule values read from the environment."""
        monkeypatch.setenv("NWN_BUILDER_RULES_POINT_BUY_BUDGET", "28")

        settings = RulesSettings()

        assert settings.point_buy_budget == 28


class TestStorageSettings:
    """Tests for StorageSettings configuration."""

    def test_default_values(self) -> None:
        """Test default storage settings."""
        settings = StorageSettings()

        assert settings.database_path == Path("data/nwn_builder.db")
        assert settings.storage_key == "nwn_characters"
        assert settings.catalog_path is None

    def test_missing_catalog_path_rejected(self, tmp_path: Path) -> None:
        """Test that a configured catalog file must exist."""
        with pytest.raises(ConfigurationError) as exc_info:
            StorageSettings(catalog_path=tmp_path / "missing.json")

        assert exc_info.value.details["config_key"] == "catalog_path"

    def test_existing_catalog_path(self, tmp_path: Path) -> None:
        """Test an existing catalog file is accepted."""
        catalog_file = tmp_path / "catalog.json"
        catalog_file.write_text("{}", encoding="utf-8")

        settings = StorageSettings(catalog_path=catalog_file)

        assert settings.catalog_path == catalog_file


class TestSettings:
    """Tests for main Settings configuration."""

    def test_default_settings(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test default settings initialization."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.app_name == "NWN Character Builder"
        assert settings.app_version == "0.1.0"
        assert settings.debug is False
        assert settings.log_level == "INFO"
        assert settings.is_production is True

    def test_env_vars(
        self,
        mock_env_vars: dict[str, str],
        tmp_path: Path,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """Test settings read from environment variables."""
        monkeypatch.chdir(tmp_path)

        settings = Settings()

        assert settings.debug is True
        assert settings.is_production is False
        assert settings.log_level == "DEBUG"
        assert settings.storage.database_path == Path(mock_env_vars["NWN_BUILDER_DATABASE_PATH"])
        assert settings.rules.point_buy_budget == 30


class TestGetSettings:
    """Tests for get_settings singleton function."""

    def test_caching(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that settings are cached."""
        monkeypatch.chdir(tmp_path)

        assert get_settings() is get_settings()

    def test_cache_clear(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that cache can be cleared."""
        monkeypatch.chdir(tmp_path)

        settings1 = get_settings()
        clear_settings_cache()
        settings2 = get_settings()

        assert settings1 is not settings2

    def test_invalid_env_wrapped(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test that invalid values surface as ConfigurationError."""
        monkeypatch.chdir(tmp_path)
        monkeypatch.setenv("NWN_BUILDER_LOG_LEVEL", "LOUD")

        with pytest.raises(ConfigurationError):
            get_settings()
