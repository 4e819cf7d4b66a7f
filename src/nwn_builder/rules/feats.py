"""Feat slots, automatic feats, and feat eligibility.

Feats live on level entries. Chosen feats are picked by the player into
slots; automatic feats (weapon and armor proficiencies, racial feats) are
derived from the character's classes and race and merged into level 1.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from nwn_builder.core.config import get_settings
from nwn_builder.core.constants import (
    GENERAL_FEAT_INTERVAL,
    PROFICIENCY_TO_FEATS,
    SHIELD_PROFICIENCY_FEAT,
)
from nwn_builder.core.logging import get_logger
from nwn_builder.models.catalog import Catalog, CharacterClass, Feat
from nwn_builder.models.character import Character, LevelEntry
from nwn_builder.models.enums import FeatSlotType
from nwn_builder.rules.attributes import final_attributes


logger = get_logger(__name__)


# =============================================================================
# Result Records
# =============================================================================


@dataclass(frozen=True)
class FeatSlot:
    """A slot in which the player may pick one feat.

    Attributes:
        id: Unique, stable slot id.
        level: Character level granting the slot.
        type: General, bonus or class slot.
        source: What grants the slot (e.g. 'general', 'racial_human', 'fighter').
        restrictions: Feat categories accepted by the slot; empty for any.
    """

    id: str
    level: int
    type: FeatSlotType
    source: str
    restrictions: tuple[str, ...] = ()


@dataclass(frozen=True)
class FeatCheck:
    """Whether a feat can be selected, and why not."""

    can_select: bool
    reasons: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class AvailableFeat:
    """A feat offered for a slot, with its eligibility."""

    feat: Feat
    check: FeatCheck


@dataclass(frozen=True)
class FeatStats:
    """Slot usage across the whole character.

    Chosen feats are attributed to the slots of the level they were
    chosen at, not to a specific slot.
    """

    total_slots: int
    used_slots: int
    remaining_slots: int
    general_slots: int
    bonus_slots: int
    class_slots: int
    overflow: dict[int, int] = field(default_factory=dict)


# =============================================================================
# Feat Matching
# =============================================================================


def _normalize(value: str) -> str:
    return re.sub(r"[\s\-]+", "_", value.strip().lower())


def feat_matches(held_id: str, required: str, catalog: Catalog) -> bool:
    """Check whether a held feat satisfies a required feat reference.

    A reference matches by id, by catalog alias, when the held feat's name
    contains it, or when it contains the held feat's id.
    """
    if held_id == required:
        return True
    wanted = _normalize(required)
    if held_id == wanted:
        return True
    feat = catalog.get_feat(held_id)
    if feat is not None:
        if feat.name and required.lower() in feat.name.lower():
            return True
        if wanted in (_normalize(alias) for alias in feat.aliases):
            return True
    return held_id in wanted


def character_has_feat(character: Character, required: str, catalog: Catalog) -> bool:
    """Check whether any held feat satisfies a required feat reference."""
    return any(feat_matches(held, required, catalog) for held in character.all_feat_ids())


def feat_display_name(feat_ref: str, catalog: Catalog) -> str:
    """Human-readable name of a feat reference."""
    feat = catalog.find_feat(feat_ref)
    if feat is not None:
        return feat.display_name
    return feat_ref.replace("_", " ").title()


# =============================================================================
# Slots
# =============================================================================


def feat_slots(character: Character, catalog: Catalog) -> list[FeatSlot]:
    """List every feat slot the character has earned.

    General slots come at level 1 and every level divisible by 3. Bonus
    feat races get one more general slot at level 1. Classes add bonus or
    class slots at the class levels listed in their bonus feat progression.

    Args:
        character: The character.
        catalog: Rule catalog.

    Returns:
        Slots ordered by level.
    """
    rules = get_settings().rules
    slots: list[FeatSlot] = []
    class_level_counts: dict[str, int] = {}

    for entry in character.levels:
        level = entry.level
        if level == 1 or level % GENERAL_FEAT_INTERVAL == 0:
            slots.append(
                FeatSlot(id=f"general_{level}", level=level, type=FeatSlotType.GENERAL, source="general")
            )

        if level == 1 and character.race_id in rules.bonus_feat_races:
            source = f"racial_{character.race_id}"
            slots.append(
                FeatSlot(id=f"{source}_{level}", level=level, type=FeatSlotType.GENERAL, source=source)
            )

        class_level = class_level_counts.get(entry.class_id, 0) + 1
        class_level_counts[entry.class_id] = class_level
        class_data = catalog.get_class(entry.class_id)
        progression = class_data.bonus_feats if class_data is not None else None
        if progression is not None and class_level in progression.levels:
            slots.append(
                FeatSlot(
                    id=f"{entry.class_id}_{progression.type.value}_{class_level}",
                    level=level,
                    type=progression.type,
                    source=entry.class_id,
                    restrictions=tuple(progression.restrictions),
                )
            )

    return slots


def feat_stats(character: Character, catalog: Catalog) -> FeatStats:
    """Count total, used and remaining slots.

    Args:
        character: The character.
        catalog: Rule catalog.

    Returns:
        Slot statistics; ``overflow`` maps levels to chosen feats beyond
        the slots that level grants.
    """
    slots = feat_slots(character, catalog)
    slots_per_level: dict[int, int] = {}
    for slot in slots:
        slots_per_level[slot.level] = slots_per_level.get(slot.level, 0) + 1

    used = 0
    overflow: dict[int, int] = {}
    for entry in character.levels:
        available = slots_per_level.get(entry.level, 0)
        chosen = len(entry.chosen_feats)
        used += min(available, chosen)
        if chosen > available:
            overflow[entry.level] = chosen - available

    return FeatStats(
        total_slots=len(slots),
        used_slots=used,
        remaining_slots=len(slots) - used,
        general_slots=sum(1 for s in slots if s.type == FeatSlotType.GENERAL),
        bonus_slots=sum(1 for s in slots if s.type == FeatSlotType.BONUS),
        class_slots=sum(1 for s in slots if s.type == FeatSlotType.CLASS),
        overflow=overflow,
    )


# =============================================================================
# Automatic Feats
# =============================================================================


def class_proficiency_feats(class_data: CharacterClass) -> list[str]:
    """Feats granted by a class's weapon, armor and shield proficiencies."""
    feats: list[str] = []
    for weapon in class_data.proficiencies.weapons:
        feat_id = PROFICIENCY_TO_FEATS["weapons"].get(weapon.lower())
        if feat_id and feat_id not in feats:
            feats.append(feat_id)
    for armor in class_data.proficiencies.armor:
        feat_id = PROFICIENCY_TO_FEATS["armor"].get(armor.lower())
        if feat_id and feat_id not in feats:
            feats.append(feat_id)
    if class_data.proficiencies.shields and SHIELD_PROFICIENCY_FEAT not in feats:
        feats.append(SHIELD_PROFICIENCY_FEAT)
    return feats


def automatic_feats(character: Character, catalog: Catalog) -> list[str]:
    """Every proficiency feat the character's classes entitle it to.

    The default simple weapon feat is withheld when any level's class
    excludes simple weapons.

    Returns:
        Feat ids without duplicates, in a stable order.
    """
    simple_weapon_feat = get_settings().rules.simple_weapon_feat
    classes = [catalog.get_class(class_id) for class_id in character.class_levels()]
    known_classes = [c for c in classes if c is not None]

    feats: list[str] = []
    if not any(c.excludes_simple_weapons for c in known_classes):
        feats.append(simple_weapon_feat)
    for class_data in known_classes:
        for feat_id in class_proficiency_feats(class_data):
            if feat_id not in feats:
                feats.append(feat_id)
    return feats


def racial_feats(character: Character, catalog: Catalog) -> list[str]:
    """Feats the character's race grants automatically."""
    race = catalog.get_race(character.race_id)
    return list(race.racial_feats) if race is not None else []


def missing_automatic_feats(character: Character, catalog: Catalog) -> list[str]:
    """Automatic feats the character should have but no level records."""
    current: set[str] = set()
    for entry in character.levels:
        current.update(entry.automatic_feats)
    return [feat_id for feat_id in automatic_feats(character, catalog) if feat_id not in current]


def _merge_into_first_level(character: Character, feat_ids: list[str]) -> Character:
    if not character.levels or not feat_ids:
        return character
    first = character.levels[0]
    additions = [f for f in feat_ids if f not in first.automatic_feats]
    if not additions:
        return character
    updated_first = first.model_copy(update={"automatic_feats": [*first.automatic_feats, *additions]})
    return character.model_copy(update={"levels": [updated_first, *character.levels[1:]]})


def add_missing_automatic_feats(character: Character, catalog: Catalog) -> Character:
    """Record missing automatic feats on level 1.

    Idempotent: a character that already has them is returned unchanged.
    A character without levels is returned unchanged.
    """
    missing = missing_automatic_feats(character, catalog)
    if missing:
        logger.debug("Adding automatic feats", character_id=character.id, feats=missing)
    return _merge_into_first_level(character, missing)


def apply_racial_feats(character: Character, catalog: Catalog) -> Character:
    """Record the race's feats on level 1, without duplicates.

    Feats of a previous race are left in place.
    """
    return _merge_into_first_level(character, racial_feats(character, catalog))


# =============================================================================
# Eligibility
# =============================================================================


def can_select_feat(character: Character, feat: Feat, catalog: Catalog) -> FeatCheck:
    """Check whether the character may pick a feat now.

    Args:
        character: The character, at its current total level.
        feat: The candidate feat.
        catalog: Rule catalog.

    Returns:
        FeatCheck listing every failed condition.
    """
    rules = get_settings().rules
    reasons: list[str] = []
    total_level = character.total_level

    attributes = final_attributes(character, catalog)
    for attribute, minimum in feat.required_attributes.items():
        score = attributes.get(attribute)
        if score < minimum:
            reasons.append(f"{attribute.value.capitalize()} {minimum} required (current: {score})")

    for required in feat.required_feats:
        if not character_has_feat(character, required, catalog):
            reasons.append(f"Requires feat: {feat_display_name(required, catalog)}")

    if feat.is_first_level_only:
        if total_level > 1:
            reasons.append("Only available at level 1")
    elif feat.max_level is not None and total_level > feat.max_level:
        reasons.append(f"Not available above level {feat.max_level}")

    if feat.min_level is not None and total_level < feat.min_level:
        reasons.append(f"Requires level {feat.min_level} (current: {total_level})")

    if feat.is_epic and total_level < rules.epic_level:
        reasons.append(f"Epic feat requires level {rules.epic_level}")

    if feat.requires_spellcasting:
        casters = catalog.spellcasting_class_ids()
        if not any(class_id in casters for class_id in character.class_levels()):
            reasons.append("Requires a spellcasting class")

    if not feat.repeatable and character.has_feat(feat.id):
        reasons.append("Feat already taken")

    return FeatCheck(can_select=not reasons, reasons=reasons)


def available_feats_for_slot(
    character: Character,
    slot: FeatSlot,
    catalog: Catalog,
) -> list[AvailableFeat]:
    """Catalog feats accepted by a slot, each with its eligibility."""
    return [
        AvailableFeat(feat=feat, check=can_select_feat(character, feat, catalog))
        for feat in catalog.feats
        if feat.matches_restrictions(list(slot.restrictions))
    ]


# =============================================================================
# Level Edits
# =============================================================================


def add_feat_to_level(entry: LevelEntry, feat_id: str) -> LevelEntry:
    """Add a chosen feat to a level; a feat already there is a no-op."""
    if feat_id in entry.chosen_feats:
        return entry
    return entry.model_copy(update={"chosen_feats": [*entry.chosen_feats, feat_id]})


def remove_feat_from_level(entry: LevelEntry, feat_id: str) -> LevelEntry:
    """Remove a chosen feat from a level; an absent feat is a no-op."""
    if feat_id not in entry.chosen_feats:
        return entry
    return entry.model_copy(update={"chosen_feats": [f for f in entry.chosen_feats if f != feat_id]})


__all__ = [
    "FeatSlot",
    "FeatCheck",
    "AvailableFeat",
    "FeatStats",
    "feat_matches",
    "character_has_feat",
    "feat_display_name",
    "feat_slots",
    "feat_stats",
    "class_proficiency_feats",
    "automatic_feats",
    "racial_feats",
    "missing_automatic_feats",
    "add_missing_automatic_feats",
    "apply_racial_feats",
    "can_select_feat",
    "available_feats_for_slot",
    "add_feat_to_level",
    "remove_feat_from_level",
]
