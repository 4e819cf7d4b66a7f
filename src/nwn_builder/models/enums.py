"""Enumeration types for the NWN character builder.

This module defines the closed vocabularies used by the catalog and the
character model: attributes, class categories, BAB progressions, feat slot
types, and saving throws.
"""

from __future__ import annotations

from enum import StrEnum


class Attribute(StrEnum):
    """The six character attributes."""

    STRENGTH = "strength"
    DEXTERITY = "dexterity"
    CONSTITUTION = "constitution"
    INTELLIGENCE = "intelligence"
    WISDOM = "wisdom"
    CHARISMA = "charisma"

    @property
    def abbreviation(self) -> str:
        """Get the three-letter abbreviation (e.g., 'STR')."""
        return self.value[:3].upper()

    @classmethod
    def parse(cls, value: str) -> "Attribute":
        """Parse an attribute from English, French, or abbreviated names.

        Args:
            value: Name such as 'strength', 'force', 'STR' or 'dexterite'.

        Returns:
            The matching Attribute.

        Raises:
            ValueError: If the name is not recognized.
        """
        key = value.strip().lower()
        if key in _ATTRIBUTE_ALIASES:
            return _ATTRIBUTE_ALIASES[key]
        for attribute in cls:
            if key in (attribute.value, attribute.value[:3]):
                return attribute
        raise ValueError(f"Unknown attribute: {value!r}")


_ATTRIBUTE_ALIASES: dict[str, Attribute] = {
    "force": Attribute.STRENGTH,
    "dexterite": Attribute.DEXTERITY,
    "dextérité": Attribute.DEXTERITY,
    "sagesse": Attribute.WISDOM,
    "charisme": Attribute.CHARISMA,
}


class BABProgression(StrEnum):
    """Base attack bonus progression category of a class."""

    FULL = "full"
    """+1 per level (fighter, barbarian)."""

    MEDIUM = "medium"
    """+3/4 per level (cleric, rogue)."""

    LOW = "low"
    """+1/2 per level (wizard, sorcerer)."""


class ClassType(StrEnum):
    """Whether a class is always available or gated by prerequisites."""

    BASE = "base"
    PRESTIGE = "prestige"


class FeatSlotType(StrEnum):
    """Kind of feat slot a level grants."""

    GENERAL = "general"
    BONUS = "bonus"
    CLASS = "class"


class SaveType(StrEnum):
    """Saving throw categories."""

    FORTITUDE = "fortitude"
    REFLEX = "reflex"
    WILL = "will"

    @classmethod
    def parse(cls, value: str) -> "SaveType":
        """Parse a save from its full or short name ('fort', 'ref', 'will')."""
        key = value.strip().lower()
        for save in cls:
            if save.value.startswith(key[:3]):
                return save
        raise ValueError(f"Unknown saving throw: {value!r}")


class CasterType(StrEnum):
    """Source of a class's spellcasting."""

    ARCANE = "arcane"
    DIVINE = "divine"


__all__ = [
    "Attribute",
    "BABProgression",
    "ClassType",
    "FeatSlotType",
    "SaveType",
    "CasterType",
]
