"""Integration tests for building a character with the bundled catalog.

Drives the builder through commands only, the way a UI would, and checks
the rule queries and validator against the result.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from nwn_builder.engine.commands import (
    AddFeatToLevel,
    AddLevel,
    CreateCharacter,
    UpdateAttributes,
    UpdateDetails,
    UpdateLevelSkills,
)
from nwn_builder.engine.state_machine import CharacterBuilder
from nwn_builder.models.catalog import Catalog, load_catalog
from nwn_builder.rules.feats import feat_stats
from nwn_builder.rules.progression import base_attack_bonus, saving_throws
from nwn_builder.rules.requirements import check_class_requirements
from nwn_builder.rules.skills import all_unspent_skill_points, skill_points_for_level
from nwn_builder.storage.memory_store import InMemoryCharacterStore


pytestmark = pytest.mark.integration


@pytest.fixture
def bundled_catalog(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Catalog:
    """Provide the catalog shipped with the package."""
    monkeypatch.chdir(tmp_path)
    return load_catalog()


@pytest.fixture
def rogue_builder(bundled_catalog: Catalog) -> CharacterBuilder:
    """Provide a builder holding a level 1 human rogue with Int 16."""
    builder = CharacterBuilder(bundled_catalog, InMemoryCharacterStore())
    builder.dispatch(CreateCharacter(name="Tomi", race_id="human", character_id="tomi"))
    builder.dispatch(
        UpdateAttributes(
            attributes={
                "strength": 10,
                "dexterity": 16,
                "constitution": 12,
                "intelligence": 16,
                "wisdom": 10,
                "charisma": 8,
            }
        )
    )
    builder.dispatch(UpdateDetails(alignment="Chaotic Neutral"))
    builder.dispatch(AddLevel(class_id="rogue", hit_points_gained=6))
    return builder


class TestRogueToShadowdancer:
    """Test a rogue build qualifying for a prestige class."""

    def test_first_level_budget(self, rogue_builder: CharacterBuilder) -> None:
        info = skill_points_for_level(rogue_builder.character, 1, rogue_builder.catalog)

        assert info.total_points == 48

    def test_automatic_feats(self, rogue_builder: CharacterBuilder) -> None:
        """Test a rogue gets light armor but not the default simple weapons."""
        feats = rogue_builder.character.levels[0].automatic_feats

        assert "light_armor_proficiency" in feats
        assert "simple_weapon_proficiency" not in feats

    def test_qualifies_after_training(self, rogue_builder: CharacterBuilder) -> None:
        builder = rogue_builder
        shadowdancer = builder.catalog.get_class("shadowdancer")

        assert not check_class_requirements(builder.character, shadowdancer, builder.catalog).can_take

        builder.dispatch(
            UpdateLevelSkills(level=1, skills={"hide": 4, "move_silently": 4, "tumble": 4}, remaining_points=36)
        )
        builder.dispatch(AddFeatToLevel(level=1, feat_id="dodge"))
        builder.dispatch(AddFeatToLevel(level=1, feat_id="mobility"))
        for _ in range(6):
            builder.dispatch(AddLevel(class_id="rogue", hit_points_gained=6))
        builder.dispatch(
            UpdateLevelSkills(level=7, skills={"hide": 6, "move_silently": 4, "tumble": 1}, remaining_points=1)
        )

        check = check_class_requirements(builder.character, shadowdancer, builder.catalog)
        assert check.can_take, check.missing_requirements

        builder.dispatch(AddLevel(class_id="shadowdancer", hit_points_gained=8))
        character = builder.character
        assert character.total_level == 8
        assert character.class_levels() == {"rogue": 7, "shadowdancer": 1}
        assert len(character.levels) == character.total_level

        result = builder.validate()
        assert result.valid, result.errors
        assert builder.state.validation == result

    def test_derived_numbers(self, rogue_builder: CharacterBuilder) -> None:
        for _ in range(3):
            rogue_builder.dispatch(AddLevel(class_id="rogue", hit_points_gained=4))
        character = rogue_builder.character

        assert base_attack_bonus(character, rogue_builder.catalog) == 3
        assert saving_throws(character, rogue_builder.catalog).reflex == 7
        assert all_unspent_skill_points(character, rogue_builder.catalog) == {1: 48, 2: 12, 3: 12, 4: 12}


class TestFighterFeats:
    """Test feat slots for a fighter build."""

    def test_bonus_slots_and_overflow(self, bundled_catalog: Catalog) -> None:
        builder = CharacterBuilder(bundled_catalog, InMemoryCharacterStore())
        builder.dispatch(CreateCharacter(name="Daelan", race_id="half_orc"))
        builder.dispatch(UpdateAttributes(attributes={"strength": 16, "dexterity": 14}))
        builder.dispatch(AddLevel(class_id="fighter", hit_points_gained=10))
        for feat_id in ("power_attack", "cleave", "toughness"):
            builder.dispatch(AddFeatToLevel(level=1, feat_id=feat_id))

        stats = feat_stats(builder.character, bundled_catalog)
        result = builder.validate()

        assert stats.total_slots == 2
        assert stats.overflow == {1: 1}
        assert result.valid
        assert "Level 1: 1 feat(s) chosen beyond available slots" in result.warnings


class TestPrestigeEligibility:
    """Test prestige prerequisites against the bundled overlays."""

    def test_druid_with_alertness_can_take_shifter(self, bundled_catalog: Catalog) -> None:
        """Test Wild Shape comes from druid levels, not a chosen feat."""
        builder = CharacterBuilder(bundled_catalog, InMemoryCharacterStore())
        builder.dispatch(CreateCharacter(name="Linu", race_id="human"))
        builder.dispatch(UpdateDetails(alignment="True Neutral"))
        builder.dispatch(AddLevel(class_id="druid", hit_points_gained=8))
        builder.dispatch(AddFeatToLevel(level=1, feat_id="alertness"))

        check = check_class_requirements(builder.character, bundled_catalog.get_class("shifter"), bundled_catalog)

        assert check.can_take, check.missing_requirements
        assert not builder.character.has_feat("wild_shape")

    @pytest.mark.parametrize("class_id", ["assassin", "blackguard"])
    def test_alignment_reported_once(self, bundled_catalog: Catalog, class_id: str) -> None:
        builder = CharacterBuilder(bundled_catalog, InMemoryCharacterStore())
        builder.dispatch(CreateCharacter(name="Aribeth", race_id="human"))
        builder.dispatch(UpdateDetails(alignment="Lawful Good"))
        builder.dispatch(AddLevel(class_id="fighter", hit_points_gained=10))

        check = check_class_requirements(builder.character, bundled_catalog.get_class(class_id), bundled_catalog)

        assert [line for line in check.missing_requirements if line.startswith("Alignment")] == ["Alignment: Evil"]
