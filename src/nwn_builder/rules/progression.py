"""Derived combat numbers: base attack bonus, saving throws, hit points."""

from __future__ import annotations

import math
from dataclasses import dataclass

from nwn_builder.core.constants import BAB_PER_LEVEL
from nwn_builder.models.catalog import Catalog, CharacterClass
from nwn_builder.models.character import Character
from nwn_builder.models.enums import BABProgression, SaveType
from nwn_builder.rules.attributes import final_attributes, modifier


@dataclass(frozen=True)
class SavingThrows:
    """Base saves plus ability modifiers."""

    fortitude: int
    reflex: int
    will: int


_SAVE_ABILITY = {
    SaveType.FORTITUDE: "constitution",
    SaveType.REFLEX: "dexterity",
    SaveType.WILL: "wisdom",
}


def hit_die_value(class_data: CharacterClass) -> int:
    return class_data.hit_die


def base_attack_bonus(character: Character, catalog: Catalog) -> int:
    """Sum the per-level BAB increments, flooring once at the end.

    Levels in a class missing from the catalog count as medium progression.
    """
    total = 0.0
    for entry in character.levels:
        class_data = catalog.get_class(entry.class_id)
        progression = class_data.base_attack_bonus if class_data is not None else BABProgression.MEDIUM
        total += BAB_PER_LEVEL[progression.value]
    return math.floor(total)


def good_save(levels: int) -> int:
    return 2 + levels // 2


def poor_save(levels: int) -> int:
    return levels // 3


def saving_throws(character: Character, catalog: Catalog) -> SavingThrows:
    """Compute the three saves.

    Each class contributes a good or poor base save for its own level
    count; the per-class values are summed and the ability modifiers added.
    """
    base = {save: 0 for save in SaveType}
    for class_id, levels in character.class_levels().items():
        class_data = catalog.get_class(class_id)
        good = set(class_data.primary_saves) if class_data is not None else set()
        for save in SaveType:
            base[save] += good_save(levels) if save in good else poor_save(levels)

    attributes = final_attributes(character, catalog)
    totals = {
        save: value + modifier(getattr(attributes, _SAVE_ABILITY[save]))
        for save, value in base.items()
    }
    return SavingThrows(
        fortitude=totals[SaveType.FORTITUDE],
        reflex=totals[SaveType.REFLEX],
        will=totals[SaveType.WILL],
    )


def total_hit_points(character: Character, catalog: Catalog) -> int:
    """Sum of hit points gained plus Constitution, at least 1 per level."""
    con_mod = modifier(final_attributes(character, catalog).constitution)
    return sum(max(1, entry.hit_points_gained + con_mod) for entry in character.levels)


__all__ = [
    "SavingThrows",
    "hit_die_value",
    "base_attack_bonus",
    "good_save",
    "poor_save",
    "saving_throws",
    "total_hit_points",
]
