"""Whole-character validation.

Validation is explicit: the state machine never runs it implicitly. It
reports rule violations as errors and questionable choices as warnings,
and never raises for a malformed build.
"""

from __future__ import annotations

from nwn_builder.core.config import get_settings
from nwn_builder.core.exceptions import ClassNotFoundError
from nwn_builder.core.logging import get_logger
from nwn_builder.models.catalog import Catalog
from nwn_builder.models.character import Character, ValidationResult
from nwn_builder.rules.attributes import validate_attribute_allocation
from nwn_builder.rules.feats import can_select_feat, feat_stats
from nwn_builder.rules.skills import recompute_skill_ranks, skill_points_for_level


logger = get_logger(__name__)


def _as_of_level(character: Character, level: int, without_feat: str) -> Character:
    """The character as it stood when picking a feat at ``level``."""
    levels = list(character.levels[:level])
    entry = levels[-1]
    levels[-1] = entry.model_copy(
        update={"chosen_feats": [f for f in entry.chosen_feats if f != without_feat]}
    )
    return character.model_copy(update={"levels": levels, "total_level": level})


def _structural_errors(character: Character) -> list[str]:
    errors: list[str] = []
    max_level = get_settings().rules.max_character_level

    if character.total_level > max_level:
        errors.append(f"Total level cannot exceed {max_level} (got {character.total_level})")

    if character.total_level != len(character.levels):
        errors.append(
            f"Total level ({character.total_level}) does not match "
            f"number of levels ({len(character.levels)})"
        )

    for index, entry in enumerate(character.levels, start=1):
        if entry.level != index:
            errors.append(f"Level entry {index} is numbered {entry.level}")

    cached = {k: v for k, v in character.skill_ranks.items() if v > 0}
    if cached != recompute_skill_ranks(character.levels):
        errors.append("Skill rank totals do not match the ranks bought at each level")

    return errors


def validate_character_progression(
    character: Character,
    catalog: Catalog | None = None,
) -> ValidationResult:
    """Validate a character's level progression.

    Without a catalog only structural consistency is checked. With one,
    each level's class, skill spending, and chosen feats are checked too.

    Args:
        character: The character.
        catalog: Optional rule catalog.

    Returns:
        ValidationResult with errors and warnings.
    """
    errors = _structural_errors(character)
    warnings: list[str] = []

    if catalog is None:
        return ValidationResult.from_issues(errors, warnings)

    if catalog.get_race(character.race_id) is None:
        warnings.append(f"Unknown race: {character.race_id}")

    for level, entry in enumerate(character.levels, start=1):
        if catalog.get_class(entry.class_id) is None:
            errors.append(f"Level {level}: unknown class {entry.class_id}")
            continue

        try:
            points = skill_points_for_level(character, level, catalog)
        except ClassNotFoundError:
            continue
        if points.remaining_points < 0:
            errors.append(
                f"Level {level}: {-points.remaining_points} skill points overspent "
                f"({points.spent_points} of {points.total_points})"
            )

        for feat_id in entry.chosen_feats:
            feat = catalog.get_feat(feat_id)
            if feat is None:
                warnings.append(f"Level {level}: unknown feat {feat_id}")
                continue
            check = can_select_feat(_as_of_level(character, level, feat_id), feat, catalog)
            if not check.can_select:
                warnings.append(
                    f"Level {level}: {feat.display_name} prerequisites not met "
                    f"({'; '.join(check.reasons)})"
                )

    for level, extra in feat_stats(character, catalog).overflow.items():
        warnings.append(f"Level {level}: {extra} feat(s) chosen beyond available slots")

    result = ValidationResult.from_issues(errors, warnings)
    logger.debug(
        "Character validated",
        character_id=character.id,
        errors=len(result.errors),
        warnings=len(result.warnings),
    )
    return result


def validate_character(
    character: Character,
    catalog: Catalog,
    budget: int | None = None,
) -> ValidationResult:
    """Validate attributes and progression together."""
    attributes = validate_attribute_allocation(character.base_attributes, budget)
    return attributes.merge(validate_character_progression(character, catalog))


__all__ = [
    "validate_character_progression",
    "validate_character",
]
