"""Built-in prerequisite overlays for prestige classes.

Some prestige classes carry requirements the generic class schema cannot
express, or that the shipped class tables omit. They are listed here as
data. A catalog entry in ``requirement_overlays`` replaces the built-in
entry for the same class id.
"""

from __future__ import annotations

from nwn_builder.models.catalog import Catalog, LevelCondition, RequirementOverlay


ARCANE_CLASSES = ["wizard", "sorcerer", "bard"]
CASTER_CLASSES = ["sorcerer", "wizard", "bard", "cleric", "druid", "paladin", "ranger"]


REQUIREMENT_OVERLAYS: dict[str, RequirementOverlay] = {
    "pale_master": RequirementOverlay(
        conditions=[LevelCondition(min_total_level=5, label="Ability to cast 3rd level spells")],
        notes=["Necromancy specialization (recommended)"],
    ),
    "red_dragon_disciple": RequirementOverlay(
        skills={"lore": 8},
        conditions=[
            LevelCondition(
                classes=["sorcerer", "bard"],
                label="Draconic bloodline (sorcerer or bard levels)",
            ),
            LevelCondition(
                classes=CASTER_CLASSES,
                label="Ability to cast spells (spellcasting class)",
            ),
        ],
    ),
    "shadowdancer": RequirementOverlay(
        skills={"hide": 10, "move_silently": 8},
    ),
    "shifter": RequirementOverlay(
        feats=["alertness"],
        notes=["Wild Shape (granted by druid levels)"],
    ),
    "harper_scout": RequirementOverlay(
        skills={"discipline": 4, "lore": 6, "persuade": 8, "search": 4},
        feats=["alertness", "iron_will"],
    ),
    "arcane_archer": RequirementOverlay(
        base_attack_bonus=6,
        feats=["weapon_focus_longbow", "point_blank_shot"],
        race=["elf", "half_elf"],
    ),
    "assassin": RequirementOverlay(
        skills={"hide": 8, "move_silently": 8},
    ),
    "blackguard": RequirementOverlay(
        base_attack_bonus=6,
        skills={"hide": 5},
    ),
    "weapon_master": RequirementOverlay(
        base_attack_bonus=5,
        feats=["expertise", "dodge", "mobility", "spring_attack", "whirlwind_attack", "Weapon Focus"],
    ),
    "artificer": RequirementOverlay(
        conditions=[LevelCondition(classes=ARCANE_CLASSES, label="Ability to cast arcane spells")],
    ),
    "night_hunter": RequirementOverlay(
        skills={"hide": 8, "move_silently": 8, "lore": 6},
        alignment_must_exclude=["good"],
    ),
    "knight": RequirementOverlay(
        skills={"discipline": 8},
        alignment_must_include=["lawful"],
    ),
    "war_dancer": RequirementOverlay(
        skills={"tumble": 5},
        alignment_must_exclude=["lawful"],
    ),
    "spellsword": RequirementOverlay(
        skills={"concentration": 5},
        conditions=[
            LevelCondition(
                classes=ARCANE_CLASSES,
                min_total_level=5,
                label="Ability to cast 3rd level arcane spells",
            )
        ],
    ),
}


def get_overlay(class_id: str, catalog: Catalog | None = None) -> RequirementOverlay | None:
    """Overlay for a class id, preferring the catalog's entry."""
    if catalog is not None and class_id in catalog.requirement_overlays:
        return catalog.requirement_overlays[class_id]
    return REQUIREMENT_OVERLAYS.get(class_id)


__all__ = [
    "ARCANE_CLASSES",
    "CASTER_CLASSES",
    "REQUIREMENT_OVERLAYS",
    "get_overlay",
]
