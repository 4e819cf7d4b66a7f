"""Pydantic V2 schemas for the NWN character builder.

This module provides the data model layer: the read-only rule catalog and
the immutable character build.

Submodules:
    enums: Enumeration types (Attribute, BABProgression, ClassType, etc.)
    catalog: Races, classes, feats, skills and the Catalog container
    character: Attributes, LevelEntry, Character, ValidationResult

Example:
    >>> from nwn_builder.models import Character, Attributes
    >>> character = Character(name="Daelan", race_id="half_orc",
    ...                       base_attributes=Attributes(strength=16))
"""

from __future__ import annotations

# =============================================================================
# Enumerations
# =============================================================================
from nwn_builder.models.enums import (
    Attribute,
    BABProgression,
    CasterType,
    ClassType,
    FeatSlotType,
    SaveType,
)

# =============================================================================
# Catalog
# =============================================================================
from nwn_builder.models.catalog import (
    BonusFeatProgression,
    Catalog,
    CharacterClass,
    ClassRequirements,
    Feat,
    LevelCondition,
    Proficiencies,
    Race,
    RequirementOverlay,
    Skill,
    SpellcastingInfo,
    load_catalog,
)

# =============================================================================
# Character
# =============================================================================
from nwn_builder.models.character import (
    CURRENT_SCHEMA_VERSION,
    Attributes,
    Character,
    LevelEntry,
    ValidationResult,
)


__all__ = [
    # Enums
    "Attribute",
    "BABProgression",
    "CasterType",
    "ClassType",
    "FeatSlotType",
    "SaveType",
    # Catalog
    "BonusFeatProgression",
    "Catalog",
    "CharacterClass",
    "ClassRequirements",
    "Feat",
    "Proficiencies",
    "Race",
    "LevelCondition",
    "RequirementOverlay",
    "Skill",
    "SpellcastingInfo",
    "load_catalog",
    # Character
    "CURRENT_SCHEMA_VERSION",
    "Attributes",
    "Character",
    "LevelEntry",
    "ValidationResult",
]
