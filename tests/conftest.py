"""Pytest configuration and shared fixtures.

This module provides the small rule catalog and character factories used
across the NWN character builder test suite. Rule functions take the
catalog as an argument, so every test states exactly which races, classes,
feats and skills exist.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
import structlog

from nwn_builder.models.catalog import (
    BonusFeatProgression,
    Catalog,
    CharacterClass,
    ClassRequirements,
    Feat,
    Proficiencies,
    Race,
    Skill,
    SpellcastingInfo,
)
from nwn_builder.models.character import Attributes, Character, LevelEntry
from nwn_builder.rules.skills import recompute_skill_ranks


if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from pathlib import Path


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture(autouse=True)
def reset_settings_cache() -> Generator[None, None, None]:
    """Reset the settings cache before and after each test."""
    from nwn_builder.core.config import clear_settings_cache

    clear_settings_cache()
    yield
    clear_settings_cache()


@pytest.fixture(autouse=True)
def reset_logging() -> Generator[None, None, None]:
    """Return structlog to its defaults after each test."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def mock_env_vars(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> dict[str, str]:
    """Set up mock environment variables for testing.

    Returns:
        Dictionary of environment variables that were set.
    """
    env_vars = {
        "NWN_BUILDER_DEBUG": "true",
        "NWN_BUILDER_LOG_LEVEL": "DEBUG",
        "NWN_BUILDER_DATABASE_PATH": str(tmp_path / "env.db"),
        "NWN_BUILDER_RULES_POINT_BUY_BUDGET": "30",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    return env_vars


# =============================================================================
# Catalog Fixtures
# =============================================================================


def _races() -> list[Race]:
    return [
        Race(id="human", name="Human"),
        Race(
            id="elf",
            name="Elf",
            attribute_bonuses={"dexterity": 2, "constitution": -2},
            racial_feats=["keen_sense"],
            skill_bonuses={"listen": 2},
        ),
        Race(
            id="dwarf",
            name="Dwarf",
            attribute_bonuses={"constitution": 2, "charisma": -2},
            racial_feats=["darkvision", "hardiness_vs_poisons"],
        ),
    ]


def _skills() -> list[Skill]:
    return [
        Skill(id="hide", name="Hide", main_attribute="dexterity"),
        Skill(id="move_silently", name="Move Silently", main_attribute="dexterity"),
        Skill(id="tumble", name="Tumble", main_attribute="dexterity"),
        Skill(id="open_lock", name="Open Lock", main_attribute="dexterity", trained_only=True),
        Skill(id="listen", name="Listen", main_attribute="wisdom"),
        Skill(id="lore", name="Lore", main_attribute="intelligence"),
        Skill(id="spellcraft", name="Spellcraft", main_attribute="intelligence", trained_only=True),
        Skill(id="concentration", name="Concentration", main_attribute="constitution"),
        Skill(id="discipline", name="Discipline", main_attribute="strength"),
    ]


def _classes() -> list[CharacterClass]:
    return [
        CharacterClass(
            id="fighter",
            name="Fighter",
            hit_die="d10",
            skill_points=2,
            base_attack_bonus="full",
            proficiencies=Proficiencies(
                weapons=["simple", "martial"],
                armor=["light", "medium", "heavy"],
                shields=True,
            ),
            skills=["discipline", "lore"],
            primary_saves=["fortitude"],
            bonus_feats=BonusFeatProgression(
                levels=[1, 2, 4, 6, 8, 10, 12, 14, 16, 18, 20],
                type="bonus",
                restrictions=["fighter"],
            ),
        ),
        CharacterClass(
            id="rogue",
            name="Rogue",
            hit_die="d6",
            skill_points=8,
            base_attack_bonus="medium",
            proficiencies=Proficiencies(armor=["light"]),
            skills=["hide", "move_silently", "tumble", "open_lock", "listen", "lore"],
            primary_saves=["reflex"],
            excludes_simple_weapons=True,
            bonus_feats=BonusFeatProgression(levels=[10, 13, 16, 19], type="class"),
        ),
        CharacterClass(
            id="sorcerer",
            name="Sorcerer",
            hit_die="d4",
            skill_points=2,
            base_attack_bonus="low",
            proficiencies=Proficiencies(weapons=["simple"]),
            skills=["concentration", "lore", "spellcraft"],
            primary_saves=["will"],
            spellcasting=SpellcastingInfo(type="arcane", ability="charisma"),
        ),
        CharacterClass(
            id="wizard",
            name="Wizard",
            hit_die="d4",
            skill_points=2,
            base_attack_bonus="low",
            skills=["concentration", "lore", "spellcraft"],
            primary_saves=["will"],
            spellcasting=SpellcastingInfo(type="arcane", ability="intelligence"),
            excludes_simple_weapons=True,
            bonus_feats=BonusFeatProgression(levels=[5], type="bonus", restrictions=["metamagic"]),
        ),
        CharacterClass(
            id="cleric",
            name="Cleric",
            hit_die="d8",
            skill_points=2,
            base_attack_bonus="medium",
            proficiencies=Proficiencies(
                weapons=["simple"],
                armor=["light", "medium", "heavy"],
                shields=True,
            ),
            skills=["concentration", "lore", "spellcraft"],
            primary_saves=["fortitude", "will"],
            spellcasting=SpellcastingInfo(type="divine", ability="wisdom"),
        ),
        CharacterClass(
            id="druid",
            name="Druid",
            hit_die="d8",
            skill_points=4,
            base_attack_bonus="medium",
            skills=["concentration", "listen", "lore", "spellcraft"],
            primary_saves=["fortitude", "will"],
            spellcasting=SpellcastingInfo(type="divine", ability="wisdom"),
        ),
        CharacterClass(
            id="shadowdancer",
            name="Shadowdancer",
            type="prestige",
            hit_die="d8",
            skill_points=6,
            skills=["hide", "move_silently", "tumble", "listen"],
            primary_saves=["reflex"],
            requirements=ClassRequirements(
                skills={"Move Silently": 8, "hide": 10, "tumble": 5},
                feats=["dodge", "mobility"],
            ),
        ),
        CharacterClass(
            id="assassin",
            name="Assassin",
            type="prestige",
            hit_die="d6",
            skill_points=4,
            skills=["hide", "move_silently"],
            primary_saves=["reflex"],
            requirements=ClassRequirements(alignment="Any evil"),
        ),
        CharacterClass(
            id="arcane_archer",
            name="Arcane Archer",
            type="prestige",
            hit_die="d8",
            skill_points=4,
            base_attack_bonus="full",
            primary_saves=["fortitude", "reflex"],
        ),
        CharacterClass(
            id="pale_master",
            name="Pale Master",
            type="prestige",
            hit_die="d6",
            skill_points=2,
            base_attack_bonus="low",
            primary_saves=["fortitude", "will"],
            requirements=ClassRequirements(spellcasting="arcane_level_3"),
        ),
        CharacterClass(
            id="shifter",
            name="Shifter",
            type="prestige",
            hit_die="d8",
            skill_points=4,
            primary_saves=["fortitude", "reflex"],
            requirements=ClassRequirements(
                feats=["alertness"],
                special="wild_shape_or_polymorph_spell_known",
            ),
        ),
        CharacterClass(
            id="duelist",
            name="Duelist",
            type="prestige",
            hit_die="d10",
            skill_points=4,
            base_attack_bonus="full",
            primary_saves=["reflex"],
        ),
    ]


def _feats() -> list[Feat]:
    return [
        Feat(id="simple_weapon_proficiency", name="Weapon Proficiency (Simple)", type="Proficiency"),
        Feat(id="martial_weapon_proficiency", name="Weapon Proficiency (Martial)", type="Proficiency"),
        Feat(id="light_armor_proficiency", name="Armor Proficiency (Light)", type="Proficiency"),
        Feat(id="medium_armor_proficiency", name="Armor Proficiency (Medium)", type="Proficiency"),
        Feat(id="heavy_armor_proficiency", name="Armor Proficiency (Heavy)", type="Proficiency"),
        Feat(id="shield_proficiency", name="Shield Proficiency", type="Proficiency"),
        Feat(id="keen_sense", name="Keen Sense", type="Racial"),
        Feat(id="darkvision", name="Darkvision", type="Racial"),
        Feat(id="hardiness_vs_poisons", name="Hardiness versus Poisons", type="Racial"),
        Feat(id="alertness", name="Alertness", type="General"),
        Feat(id="toughness", name="Toughness", type="General, Fighter"),
        Feat(id="dodge", name="Dodge", type="General, Fighter", required_attributes={"dexterity": 13}),
        Feat(
            id="mobility",
            name="Mobility",
            type="General, Fighter",
            required_attributes={"dexterity": 13},
            required_feats=["dodge"],
        ),
        Feat(id="power_attack", name="Power Attack", type="General, Fighter", required_attributes={"force": 13}),
        Feat(id="cleave", name="Cleave", type="General, Fighter", required_feats="power_attack"),
        Feat(
            id="weapon_focus_longbow",
            name="Weapon Focus (Longbow)",
            type="General, Fighter",
            aliases=["weapon_focus_bow"],
        ),
        Feat(id="point_blank_shot", name="Point Blank Shot", type="General, Fighter"),
        Feat(id="empower_spell", name="Empower Spell", type="Metamagic"),
        Feat(id="luck_of_heroes", name="Luck of Heroes", type="General", max_level=1),
        Feat(id="great_cleave", name="Great Cleave", type="General, Fighter", min_level=4, required_feats=["cleave"]),
        Feat(id="epic_prowess", name="Epic Prowess", type="Epic, General"),
        Feat(id="skill_focus", name="Skill Focus", type="General", repeatable=True),
    ]


@pytest.fixture
def catalog() -> Catalog:
    """Provide a small fixture rule catalog.

    Returns:
        Catalog with three races, six base and six prestige classes.
    """
    return Catalog(races=_races(), classes=_classes(), feats=_feats(), skills=_skills())


# =============================================================================
# Character Fixtures
# =============================================================================


@pytest.fixture
def make_character() -> Callable[..., Character]:
    """Provide a factory for characters with consistent levels.

    The factory takes class ids as positional arguments, one per level,
    and keeps ``total_level`` and ``skill_ranks`` in sync with the levels.

    Returns:
        Character factory.
    """

    def _make(
        *class_ids: str,
        race_id: str = "human",
        attributes: dict[str, int] | None = None,
        alignment: str | None = None,
        skills_by_level: dict[int, dict[str, int]] | None = None,
        feats_by_level: dict[int, list[str]] | None = None,
        **fields: Any,
    ) -> Character:
        levels = [
            LevelEntry(
                level=index,
                class_id=class_id,
                hit_points_gained=4,
                skill_ranks_this_level=(skills_by_level or {}).get(index, {}),
                chosen_feats=(feats_by_level or {}).get(index, []),
            )
            for index, class_id in enumerate(class_ids, start=1)
        ]
        return Character(
            name="Test Character",
            race_id=race_id,
            base_attributes=Attributes(**(attributes or {})),
            levels=levels,
            total_level=len(levels),
            skill_ranks=recompute_skill_ranks(levels),
            alignment=alignment,
            **fields,
        )

    return _make


@pytest.fixture
def sample_character(make_character: Callable[..., Character]) -> Character:
    """Provide a level 3 human fighter with a few choices made.

    Returns:
        Character with Str 16, Dex 14 and Dodge at level 1.
    """
    return make_character(
        "fighter",
        "fighter",
        "fighter",
        attributes={"strength": 16, "dexterity": 14, "constitution": 14},
        alignment="Lawful Neutral",
        skills_by_level={1: {"discipline": 4}, 2: {"discipline": 1}},
        feats_by_level={1: ["dodge", "power_attack"]},
    )
