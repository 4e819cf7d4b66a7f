"""Attribute point-buy and modifier math.

Base attributes are bought from a fixed budget with an increasing cost per
step. Final attributes add the race's fixed bonuses on top.
"""

from __future__ import annotations

from nwn_builder.core.config import get_settings
from nwn_builder.core.constants import (
    ATTRIBUTE_MAX,
    ATTRIBUTE_MIN,
    MAX_ATTRIBUTE_SPREAD,
    POINT_BUY_COSTS,
)
from nwn_builder.models.catalog import Catalog
from nwn_builder.models.character import Attributes, Character, ValidationResult
from nwn_builder.models.enums import Attribute


def point_cost(value: int) -> int:
    """Cumulative point-buy cost of a base score.

    Values outside 8-18 cost nothing here; validation reports them.
    """
    return POINT_BUY_COSTS.get(value, 0)


def total_point_cost(attrs: Attributes) -> int:
    """Sum of the point-buy cost of all six scores."""
    return sum(point_cost(score) for score in attrs.as_dict().values())


def increase_cost(value: int) -> int | None:
    """Cost of raising a score by one step.

    Returns:
        Extra points needed, or None if the score is already at the maximum.
    """
    if value >= ATTRIBUTE_MAX:
        return None
    return point_cost(value + 1) - point_cost(value)


def remaining_points(attrs: Attributes, budget: int | None = None) -> int:
    """Points left in the budget (negative when overspent)."""
    if budget is None:
        budget = get_settings().rules.point_buy_budget
    return budget - total_point_cost(attrs)


def modifier(score: int) -> int:
    """Attribute modifier, floor((score - 10) / 2)."""
    return (score - 10) // 2


def final_attributes(
    character: Character,
    catalog: Catalog,
    bonus_map: dict[Attribute, int] | None = None,
) -> Attributes:
    """Compute final scores from base scores and racial bonuses.

    Args:
        character: The character.
        catalog: Rule catalog.
        bonus_map: Resolved racial bonuses for races that let the player
            choose; replaces the race's fixed bonuses when given.

    Returns:
        Final attribute scores. An unknown race contributes no bonuses.
    """
    if bonus_map is None:
        race = catalog.get_race(character.race_id)
        bonus_map = race.attribute_bonuses if race is not None else {}
    return character.base_attributes.with_bonuses(bonus_map)


def validate_attribute_allocation(
    attrs: Attributes,
    budget: int | None = None,
) -> ValidationResult:
    """Check a point-buy allocation.

    Args:
        attrs: Base attribute scores.
        budget: Point-buy budget; defaults to the configured budget.

    Returns:
        Errors for scores outside 8-18 and for overspending; a warning
        when the spread between the highest and lowest score exceeds 10.
    """
    if budget is None:
        budget = get_settings().rules.point_buy_budget

    errors: list[str] = []
    warnings: list[str] = []
    scores = attrs.as_dict()

    for attribute, score in scores.items():
        if score < ATTRIBUTE_MIN:
            errors.append(f"{attribute.value.capitalize()} cannot be below {ATTRIBUTE_MIN} (got {score})")
        elif score > ATTRIBUTE_MAX:
            errors.append(f"{attribute.value.capitalize()} cannot exceed {ATTRIBUTE_MAX} (got {score})")

    cost = total_point_cost(attrs)
    if cost > budget:
        errors.append(f"Point cost {cost} exceeds budget of {budget}")

    spread = max(scores.values()) - min(scores.values())
    if spread > MAX_ATTRIBUTE_SPREAD:
        warnings.append(f"Large gap between highest and lowest attribute ({spread})")

    return ValidationResult.from_issues(errors, warnings)


__all__ = [
    "point_cost",
    "total_point_cost",
    "increase_cost",
    "remaining_points",
    "modifier",
    "final_attributes",
    "validate_attribute_allocation",
]
