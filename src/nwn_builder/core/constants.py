"""Rule constants for the NWN character builder.

This module defines the fixed numbers of the progression rules: point-buy
costs, attribute bounds, the level cap, and the proficiency to feat mapping
used for automatic feats.
"""

from __future__ import annotations

# =============================================================================
# Point Buy
# =============================================================================

POINT_BUY_TOTAL = 32
"""Default points available for buying base attributes."""

ATTRIBUTE_MIN = 8
"""Minimum base attribute before racial modifiers."""

ATTRIBUTE_MAX = 18
"""Maximum base attribute before racial modifiers."""

DEFAULT_ATTRIBUTE_SCORE = 10
"""Score every attribute starts at on a fresh character."""

MAX_ATTRIBUTE_SPREAD = 10
"""Spread between highest and lowest attribute above which a warning is raised."""

# Cost of each base score, cumulative from 8
POINT_BUY_COSTS: dict[int, int] = {
    8: 0,
    9: 1,
    10: 2,
    11: 3,
    12: 4,
    13: 5,
    14: 6,
    15: 8,
    16: 10,
    17: 13,
    18: 16,
}

# =============================================================================
# Levels
# =============================================================================

MAX_CHARACTER_LEVEL = 30
"""Total level cap, including epic levels."""

EPIC_LEVEL = 21
"""First total level at which epic feats may be chosen."""

ATTRIBUTE_INCREASE_INTERVAL = 4
"""An attribute increase is granted on every level divisible by this."""

GENERAL_FEAT_INTERVAL = 3
"""A general feat slot is granted at level 1 and every level divisible by this."""

# =============================================================================
# Skills
# =============================================================================

DEFAULT_SKILL_POINTS = 2
"""Base skill points per level for classes that do not declare any."""

FIRST_LEVEL_SKILL_MULTIPLIER = 4
"""Skill points are multiplied by this at character level 1."""

CLASS_SKILL_COST = 1
"""Skill points per rank for a class skill."""

CROSS_CLASS_SKILL_COST = 2
"""Skill points per rank for a cross-class skill."""

# =============================================================================
# Automatic Feats
# =============================================================================

SIMPLE_WEAPON_FEAT = "simple_weapon_proficiency"
"""Feat everyone receives unless one of their classes excludes it."""

PROFICIENCY_TO_FEATS: dict[str, dict[str, str]] = {
    "weapons": {
        "simple": "simple_weapon_proficiency",
        "martial": "martial_weapon_proficiency",
        "exotic": "exotic_weapon_proficiency",
    },
    "armor": {
        "light": "light_armor_proficiency",
        "medium": "medium_armor_proficiency",
        "heavy": "heavy_armor_proficiency",
    },
}

SHIELD_PROFICIENCY_FEAT = "shield_proficiency"
"""Feat granted by any class proficient with shields."""

# =============================================================================
# Combat Progression
# =============================================================================

BAB_PER_LEVEL: dict[str, float] = {
    "full": 1.0,
    "medium": 0.75,
    "low": 0.5,
}


__all__ = [
    # Point buy
    "POINT_BUY_TOTAL",
    "ATTRIBUTE_MIN",
    "ATTRIBUTE_MAX",
    "DEFAULT_ATTRIBUTE_SCORE",
    "MAX_ATTRIBUTE_SPREAD",
    "POINT_BUY_COSTS",
    # Levels
    "MAX_CHARACTER_LEVEL",
    "EPIC_LEVEL",
    "ATTRIBUTE_INCREASE_INTERVAL",
    "GENERAL_FEAT_INTERVAL",
    # Skills
    "DEFAULT_SKILL_POINTS",
    "FIRST_LEVEL_SKILL_MULTIPLIER",
    "CLASS_SKILL_COST",
    "CROSS_CLASS_SKILL_COST",
    # Feats
    "SIMPLE_WEAPON_FEAT",
    "PROFICIENCY_TO_FEATS",
    "SHIELD_PROFICIENCY_FEAT",
    # Combat
    "BAB_PER_LEVEL",
]
