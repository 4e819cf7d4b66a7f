"""Tests for prestige class prerequisite checks."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from nwn_builder.models.catalog import Catalog, RequirementOverlay
from nwn_builder.models.character import Character
from nwn_builder.rules.overlays import REQUIREMENT_OVERLAYS, get_overlay
from nwn_builder.rules.requirements import (
    BASE_CLASS_REQUIREMENTS,
    UNDOCUMENTED_REQUIREMENTS,
    alignment_allowed,
    alignment_has,
    check_class_requirements,
    get_complete_requirements,
    parse_alignment_rule,
    spellcasting_satisfied,
    spellcasting_text,
)


class TestAlignment:
    """Tests for alignment parsing."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("Non-evil", ([], ["evil"])),
            ("Lawful Good", (["lawful", "good"], [])),
            ("Any evil", (["evil"], [])),
            ("Not lawful", ([], ["lawful"])),
            ("Loyal Bon", (["lawful", "good"], [])),
        ],
    )
    def test_parse_rule(self, text: str, expected: tuple[list[str], list[str]]) -> None:
        assert parse_alignment_rule(text) == expected

    def test_alignment_has(self) -> None:
        assert alignment_has("Chaotique Mauvais", "evil")
        assert alignment_has("Lawful Neutral", "lawful")
        assert not alignment_has("Lawful Neutral", "good")
        assert not alignment_has(None, "evil")

    def test_alignment_allowed(self) -> None:
        assert alignment_allowed("Neutral Good", [], ["evil"])
        assert not alignment_allowed("Neutral Evil", [], ["evil"])
        assert not alignment_allowed(None, ["evil"], [])


class TestSpellcastingPredicates:
    """Tests for spellcasting capability predicates."""

    def test_any_level(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        """Test spell level N needs 2N - 1 total levels."""
        assert not spellcasting_satisfied(make_character("fighter", "fighter"), "any_level_2", catalog)
        assert spellcasting_satisfied(make_character("fighter", "fighter", "fighter"), "any_level_2", catalog)

    def test_caster_type(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        """Test typed predicates count only levels in classes of that type."""
        character = make_character("cleric", "cleric", "cleric", "cleric", "cleric")

        assert spellcasting_satisfied(character, "divine_level_3", catalog)
        assert not spellcasting_satisfied(character, "arcane_level_1", catalog)

    def test_unknown_predicate_satisfied(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        assert spellcasting_satisfied(make_character(), "knows_fireball", catalog)

    def test_text(self) -> None:
        assert spellcasting_text("any_level_1") == "Ability to cast level 1 spells"
        assert spellcasting_text("arcane_level_3") == "Ability to cast level 3 arcane spells"


class TestOverlays:
    """Tests for the per-class overlay table."""

    def test_builtin_table(self) -> None:
        assert REQUIREMENT_OVERLAYS["shadowdancer"].skills == {"hide": 10, "move_silently": 8}
        assert get_overlay("fighter") is None

    def test_catalog_overlay_preferred(self, catalog: Catalog) -> None:
        custom = RequirementOverlay(base_attack_bonus=1)
        catalog = Catalog(
            races=catalog.races,
            classes=catalog.classes,
            feats=catalog.feats,
            skills=catalog.skills,
            requirement_overlays={"shadowdancer": custom},
        )

        assert get_overlay("shadowdancer", catalog) is custom


class TestCheckClassRequirements:
    """Tests for checking a character against class prerequisites."""

    def test_base_class_always_qualifies(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        check = check_class_requirements(make_character(), catalog.get_class("fighter"), catalog)

        assert check.can_take
        assert check.missing_requirements == []

    def test_schema_and_overlay_merged(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        """Test overlay messages that repeat schema ones are listed once."""
        check = check_class_requirements(make_character("rogue"), catalog.get_class("shadowdancer"), catalog)

        assert not check.can_take
        assert check.missing_requirements == [
            "Move Silently 8 ranks (current: 0)",
            "Hide 10 ranks (current: 0)",
            "Tumble 5 ranks (current: 0)",
            "Feat: Dodge",
            "Feat: Mobility",
        ]

    def test_qualified(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        character = make_character(
            "rogue",
            skills_by_level={1: {"hide": 10, "move_silently": 8, "tumble": 5}},
            feats_by_level={1: ["dodge", "mobility"]},
        )

        assert check_class_requirements(character, catalog.get_class("shadowdancer"), catalog).can_take

    def test_alignment(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        assassin = catalog.get_class("assassin")
        good = make_character("rogue", alignment="Lawful Good")

        missing = check_class_requirements(good, assassin, catalog).missing_requirements

        assert [line for line in missing if line.startswith("Alignment")] == ["Alignment: Any evil"]
        assert "Hide 8 ranks (current: 0)" in missing

    def test_french_alignment(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        character = make_character(
            "rogue",
            alignment="Neutre Mauvais",
            skills_by_level={1: {"hide": 8, "move_silently": 8}},
        )

        assert check_class_requirements(character, catalog.get_class("assassin"), catalog).can_take

    def test_overlay_only_class(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        """Test overlay requirements apply when the class schema has none."""
        check = check_class_requirements(make_character("fighter"), catalog.get_class("arcane_archer"), catalog)

        assert check.missing_requirements == [
            "BAB +6 (current: +1)",
            "Feat: Weapon Focus (Longbow)",
            "Feat: Point Blank Shot",
            "Race: elf or half_elf",
        ]

    def test_overlay_only_class_qualified(
        self,
        catalog: Catalog,
        make_character: Callable[..., Character],
    ) -> None:
        character = make_character(
            *["fighter"] * 6,
            race_id="elf",
            feats_by_level={1: ["weapon_focus_longbow", "point_blank_shot"]},
        )

        assert check_class_requirements(character, catalog.get_class("arcane_archer"), catalog).can_take

    @pytest.mark.parametrize(
        ("class_ids", "expected"),
        [
            (["wizard"] * 4, ["Ability to cast level 3 arcane spells", "Ability to cast 3rd level spells"]),
            (["wizard"] * 5, []),
            (["cleric"] * 5, ["Ability to cast level 3 arcane spells"]),
        ],
    )
    def test_spellcasting(
        self,
        catalog: Catalog,
        make_character: Callable[..., Character],
        class_ids: list[str],
        expected: list[str],
    ) -> None:
        check = check_class_requirements(make_character(*class_ids), catalog.get_class("pale_master"), catalog)

        assert check.missing_requirements == expected

    def test_special(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        shifter = catalog.get_class("shifter")
        druid = make_character("druid", feats_by_level={1: ["alertness"]})
        sorcerer = make_character("sorcerer", feats_by_level={1: ["alertness", "wild_shape"]})

        assert check_class_requirements(druid, shifter, catalog).can_take
        assert check_class_requirements(sorcerer, shifter, catalog).missing_requirements == [
            "Wild Shape or a known Polymorph spell"
        ]

    def test_undocumented_prestige_class(self, catalog: Catalog, make_character: Callable[..., Character]) -> None:
        assert check_class_requirements(make_character(), catalog.get_class("duelist"), catalog).can_take


class TestGetCompleteRequirements:
    """Tests for display lists of prerequisites."""

    def test_base_class(self, catalog: Catalog) -> None:
        assert get_complete_requirements(catalog.get_class("fighter"), catalog) == [BASE_CLASS_REQUIREMENTS]

    def test_undocumented(self, catalog: Catalog) -> None:
        assert get_complete_requirements(catalog.get_class("duelist"), catalog) == [UNDOCUMENTED_REQUIREMENTS]

    def test_merged_lines(self, catalog: Catalog) -> None:
        lines = get_complete_requirements(catalog.get_class("shadowdancer"), catalog)

        assert lines == [
            "Move Silently 8 ranks",
            "Hide 10 ranks",
            "Tumble 5 ranks",
            "Feat: Dodge",
            "Feat: Mobility",
        ]

    def test_overlay_notes(self, catalog: Catalog) -> None:
        lines = get_complete_requirements(catalog.get_class("pale_master"), catalog)

        assert lines == [
            "Ability to cast level 3 arcane spells",
            "Ability to cast 3rd level spells",
            "Necromancy specialization (recommended)",
        ]
