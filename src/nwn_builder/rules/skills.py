"""Skill point budgets, rank limits, and skill modifiers.

Each level grants a budget of skill points from the class of that level.
A rank costs 1 point for a class skill and 2 for a cross-class skill, and
the class is the one taken at the level where the ranks are bought.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from nwn_builder.core.config import get_settings
from nwn_builder.core.constants import CLASS_SKILL_COST, CROSS_CLASS_SKILL_COST
from nwn_builder.core.exceptions import ClassNotFoundError, LevelNotFoundError
from nwn_builder.models.catalog import Catalog, CharacterClass, Skill
from nwn_builder.models.character import Character, LevelEntry
from nwn_builder.rules.attributes import final_attributes, modifier


# =============================================================================
# Result Records
# =============================================================================


@dataclass(frozen=True)
class SkillPointsInfo:
    """Skill point budget of one level.

    Attributes:
        base_points: Class skill points before Intelligence.
        int_modifier: Intelligence modifier from final attributes.
        total_points: Points granted at this level.
        spent_points: Points spent at this level.
        remaining_points: Total minus spent; negative when overspent.
        is_first_level: Whether the level-1 multiplier applied.
    """

    base_points: int
    int_modifier: int
    total_points: int
    spent_points: int
    remaining_points: int
    is_first_level: bool


@dataclass(frozen=True)
class SkillInfo:
    """Rank information for one skill at one level."""

    current_ranks: int
    max_ranks: int
    is_class_skill: bool
    cost_per_rank: int
    can_increase: bool
    modifier: int


@dataclass(frozen=True)
class SpendCheck:
    """Whether ranks can be bought, and why not."""

    can_spend: bool
    reasons: list[str]


@dataclass(frozen=True)
class SkillSummaryEntry:
    """One row of a character's skill summary."""

    skill: Skill
    total_ranks: int
    modifier: int
    is_class_skill_anywhere: bool


# =============================================================================
# Class Skill Helpers
# =============================================================================


def is_class_skill(skill_id: str, class_data: CharacterClass | None) -> bool:
    """Check whether a skill is on a class's skill list."""
    if class_data is None:
        return False
    return skill_id in class_data.skills


def cost_per_rank(skill_id: str, class_data: CharacterClass | None) -> int:
    """Skill points per rank: 1 for a class skill, 2 otherwise."""
    return CLASS_SKILL_COST if is_class_skill(skill_id, class_data) else CROSS_CLASS_SKILL_COST


def max_ranks_for_skill(is_class: bool, character_level: int) -> int:
    """Rank cap: level + 3 for class skills, half that (floored) otherwise."""
    if is_class:
        return character_level + 3
    return (character_level + 3) // 2


# =============================================================================
# Ranks
# =============================================================================


def total_ranks(character: Character, skill_id: str) -> int:
    """Sum of ranks bought in a skill across all levels."""
    return sum(entry.skill_ranks_this_level.get(skill_id, 0) for entry in character.levels)


def recompute_skill_ranks(levels: Iterable[LevelEntry]) -> dict[str, int]:
    """Rebuild the aggregate rank cache from per-level contributions.

    Skills whose total is zero are omitted.
    """
    totals: dict[str, int] = {}
    for entry in levels:
        for skill_id, ranks in entry.skill_ranks_this_level.items():
            totals[skill_id] = totals.get(skill_id, 0) + ranks
    return {skill_id: ranks for skill_id, ranks in totals.items() if ranks > 0}


def spent_points_at_level(entry: LevelEntry, class_data: CharacterClass | None) -> int:
    """Points spent on ranks at one level, priced with that level's class."""
    return sum(
        ranks * cost_per_rank(skill_id, class_data)
        for skill_id, ranks in entry.skill_ranks_this_level.items()
        if ranks > 0
    )


# =============================================================================
# Budgets
# =============================================================================


def _level_and_class(
    character: Character,
    level: int,
    catalog: Catalog,
) -> tuple[LevelEntry, CharacterClass]:
    entry = character.level_entry(level)
    if entry is None:
        raise LevelNotFoundError(
            f"Level {level} not found for character",
            level=level,
            total_level=character.total_level,
        )
    class_data = catalog.get_class(entry.class_id)
    if class_data is None:
        raise ClassNotFoundError(f"Class {entry.class_id} not found", class_id=entry.class_id)
    return entry, class_data


def skill_points_for_level(character: Character, level: int, catalog: Catalog) -> SkillPointsInfo:
    """Compute the skill point budget of one level.

    Points are max(1, class points + Int modifier), plus one for bonus
    skill point races, multiplied at level 1.

    Args:
        character: The character.
        level: 1-based level.
        catalog: Rule catalog.

    Returns:
        The level's budget and spending.

    Raises:
        LevelNotFoundError: If the character has no such level.
        ClassNotFoundError: If the level's class is not in the catalog.
    """
    rules = get_settings().rules
    entry, class_data = _level_and_class(character, level, catalog)

    int_modifier = modifier(final_attributes(character, catalog).intelligence)
    base_points = class_data.skill_points if class_data.skill_points is not None else rules.default_skill_points

    total_points = max(1, base_points + int_modifier)
    if character.race_id in rules.bonus_skill_point_races:
        total_points += 1

    is_first_level = level == 1
    if is_first_level:
        total_points *= rules.first_level_skill_multiplier

    spent = spent_points_at_level(entry, class_data)
    return SkillPointsInfo(
        base_points=base_points,
        int_modifier=int_modifier,
        total_points=total_points,
        spent_points=spent,
        remaining_points=total_points - spent,
        is_first_level=is_first_level,
    )


def all_unspent_skill_points(character: Character, catalog: Catalog) -> dict[int, int]:
    """Remaining points per level, for every level of the character."""
    return {
        level: skill_points_for_level(character, level, catalog).remaining_points
        for level in range(1, len(character.levels) + 1)
    }


# =============================================================================
# Modifiers
# =============================================================================


def skill_modifier(character: Character, skill: Skill, catalog: Catalog) -> int:
    """Total skill modifier: ranks + attribute modifier + racial bonus."""
    attributes = final_attributes(character, catalog)
    race = catalog.get_race(character.race_id)
    racial_bonus = race.skill_bonuses.get(skill.id, 0) if race is not None else 0
    return total_ranks(character, skill.id) + modifier(attributes.get(skill.main_attribute)) + racial_bonus


def skill_info(character: Character, skill: Skill, level: int, catalog: Catalog) -> SkillInfo:
    """Rank details of a skill, priced with the class of ``level``.

    Raises:
        LevelNotFoundError: If the character has no such level.
    """
    entry = character.level_entry(level)
    if entry is None:
        raise LevelNotFoundError(
            f"Level {level} not found",
            level=level,
            total_level=character.total_level,
        )
    class_data = catalog.get_class(entry.class_id)
    is_class = is_class_skill(skill.id, class_data)
    current = total_ranks(character, skill.id)
    max_ranks = max_ranks_for_skill(is_class, character.total_level)
    return SkillInfo(
        current_ranks=current,
        max_ranks=max_ranks,
        is_class_skill=is_class,
        cost_per_rank=cost_per_rank(skill.id, class_data),
        can_increase=current < max_ranks,
        modifier=skill_modifier(character, skill, catalog),
    )


def can_spend_skill_points(
    character: Character,
    skill_id: str,
    ranks: int,
    level: int,
    catalog: Catalog,
) -> SpendCheck:
    """Check whether ``ranks`` more ranks can be bought at ``level``.

    Refuses when the rank cap would be exceeded, when the level's budget
    is insufficient, or when a trained-only skill is not a class skill and
    has no ranks yet.
    """
    skill = catalog.find_skill(skill_id)
    if skill is None:
        return SpendCheck(can_spend=False, reasons=[f"Skill not found: {skill_id}"])

    reasons: list[str] = []
    info = skill_info(character, skill, level, catalog)
    budget = skill_points_for_level(character, level, catalog)

    if info.current_ranks + ranks > info.max_ranks:
        reasons.append(f"Maximum ranks reached ({info.max_ranks})")

    cost = ranks * info.cost_per_rank
    if cost > budget.remaining_points:
        reasons.append(f"Not enough skill points ({cost} required, {budget.remaining_points} available)")

    if skill.trained_only and info.current_ranks == 0 and not info.is_class_skill:
        reasons.append("This skill requires training (must be a class skill)")

    return SpendCheck(can_spend=not reasons, reasons=reasons)


def skill_summary(character: Character, catalog: Catalog) -> list[SkillSummaryEntry]:
    """Skills with ranks or on any of the character's class lists."""
    class_data = [catalog.get_class(class_id) for class_id in character.class_levels()]
    summary: list[SkillSummaryEntry] = []
    for skill in catalog.skills:
        ranks = total_ranks(character, skill.id)
        anywhere = any(is_class_skill(skill.id, c) for c in class_data)
        if ranks > 0 or anywhere:
            summary.append(
                SkillSummaryEntry(
                    skill=skill,
                    total_ranks=ranks,
                    modifier=skill_modifier(character, skill, catalog),
                    is_class_skill_anywhere=anywhere,
                )
            )
    return summary


__all__ = [
    "SkillPointsInfo",
    "SkillInfo",
    "SpendCheck",
    "SkillSummaryEntry",
    "is_class_skill",
    "cost_per_rank",
    "max_ranks_for_skill",
    "total_ranks",
    "recompute_skill_ranks",
    "spent_points_at_level",
    "skill_points_for_level",
    "all_unspent_skill_points",
    "skill_modifier",
    "skill_info",
    "can_spend_skill_points",
    "skill_summary",
]
