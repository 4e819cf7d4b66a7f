"""Prestige class prerequisite checks.

Requirements come from two places: the class's own ``requirements`` record
and a per-class overlay (see ``overlays``). Both are checked and their
missing-requirement messages merged. Base classes never have prerequisites.

A requirement category absent from the data is satisfied, and so is a
spellcasting or special predicate this module does not recognize.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from nwn_builder.models.catalog import Catalog, CharacterClass, RequirementOverlay
from nwn_builder.models.character import Character
from nwn_builder.models.enums import CasterType
from nwn_builder.rules.attributes import final_attributes
from nwn_builder.rules.feats import character_has_feat, feat_display_name
from nwn_builder.rules.overlays import get_overlay
from nwn_builder.rules.progression import base_attack_bonus
from nwn_builder.rules.skills import total_ranks


BASE_CLASS_REQUIREMENTS = "No prerequisites - base class"
UNDOCUMENTED_REQUIREMENTS = "Prerequisites not documented"

WILD_SHAPE_SPECIAL = "wild_shape_or_polymorph_spell_known"
WILD_SHAPE_CLASS = "druid"

_SPELLCASTING_PATTERN = re.compile(r"^(any|arcane|divine)_level_(\d+)$")

# Canonical alignment words and the spellings that denote them.
_ALIGNMENT_SYNONYMS: dict[str, set[str]] = {
    "lawful": {"lawful", "loyal"},
    "chaotic": {"chaotic", "chaotique"},
    "good": {"good", "bon"},
    "evil": {"evil", "mauvais"},
    "neutral": {"neutral", "neutre"},
}
_NEGATIONS = {"non", "not", "no", "never"}


@dataclass(frozen=True)
class RequirementCheck:
    """Whether a class can be taken, and what is missing."""

    can_take: bool
    missing_requirements: list[str] = field(default_factory=list)


# =============================================================================
# Alignment
# =============================================================================


def _words(text: str) -> list[str]:
    return re.findall(r"[^\W\d_]+", text.lower())


def _canonical(word: str) -> str | None:
    for canonical, spellings in _ALIGNMENT_SYNONYMS.items():
        if word in spellings:
            return canonical
    return None


def alignment_has(alignment: str | None, keyword: str) -> bool:
    """Check whether an alignment string contains a canonical alignment word."""
    if not alignment:
        return False
    spellings = _ALIGNMENT_SYNONYMS.get(keyword, {keyword})
    return any(word in spellings for word in _words(alignment))


def parse_alignment_rule(text: str) -> tuple[list[str], list[str]]:
    """Split a free-text restriction into required and forbidden words.

    Example:
        >>> parse_alignment_rule("Non-evil")
        ([], ['evil'])
        >>> parse_alignment_rule("Lawful Good")
        (['lawful', 'good'], [])
    """
    include: list[str] = []
    exclude: list[str] = []
    negate = False
    for word in _words(text):
        if word in _NEGATIONS:
            negate = True
            continue
        canonical = _canonical(word)
        if canonical is None:
            continue
        (exclude if negate else include).append(canonical)
        negate = False
    return include, exclude


def alignment_allowed(alignment: str | None, include: list[str], exclude: list[str]) -> bool:
    """Every included word present and no excluded word present."""
    return all(alignment_has(alignment, w) for w in include) and not any(
        alignment_has(alignment, w) for w in exclude
    )


# =============================================================================
# Predicates
# =============================================================================


def _caster_levels(character: Character, catalog: Catalog, caster_type: CasterType | None) -> int:
    casters = catalog.spellcasting_class_ids(caster_type)
    return sum(count for class_id, count in character.class_levels().items() if class_id in casters)


def spellcasting_satisfied(character: Character, predicate: str, catalog: Catalog) -> bool:
    """Evaluate a spellcasting predicate such as ``any_level_3``.

    Spell level N is approximated as 2N - 1 caster levels: total levels for
    ``any``, levels in classes of that caster type otherwise.
    """
    match = _SPELLCASTING_PATTERN.match(predicate.strip().lower())
    if match is None:
        return True
    kind, spell_level = match.group(1), int(match.group(2))
    needed = 2 * spell_level - 1
    if kind == "any":
        return character.total_level >= needed
    return _caster_levels(character, catalog, CasterType(kind)) >= needed


def spellcasting_text(predicate: str) -> str:
    match = _SPELLCASTING_PATTERN.match(predicate.strip().lower())
    if match is None:
        return f"Spellcasting: {predicate}"
    kind, spell_level = match.group(1), match.group(2)
    if kind == "any":
        return f"Ability to cast level {spell_level} spells"
    return f"Ability to cast level {spell_level} {kind} spells"


def special_satisfied(character: Character, special: str) -> bool:
    if special == WILD_SHAPE_SPECIAL:
        return WILD_SHAPE_CLASS in character.class_levels()
    return True


def special_text(special: str) -> str:
    if special == WILD_SHAPE_SPECIAL:
        return "Wild Shape or a known Polymorph spell"
    return special.replace("_", " ").capitalize()


# =============================================================================
# Shared Checks
# =============================================================================


def _skill_label(key: str, catalog: Catalog) -> tuple[str, str]:
    """Resolve a skill reference to (skill id, display name)."""
    skill = catalog.find_skill(key)
    if skill is not None:
        return skill.id, skill.name or skill.id
    return key, key.replace("_", " ").title()


def _race_allowed(race_id: str, races: list[str]) -> bool:
    race = race_id.lower()
    return any(allowed.lower() in race for allowed in races)


def _check_common(
    character: Character,
    catalog: Catalog,
    *,
    bab: int | None,
    skills: dict[str, int],
    feats: list[str],
    races: list[str],
) -> list[str]:
    missing: list[str] = []
    if bab:
        current = base_attack_bonus(character, catalog)
        if current < bab:
            missing.append(f"BAB +{bab} (current: +{current})")
    for key, required in skills.items():
        skill_id, name = _skill_label(key, catalog)
        current = total_ranks(character, skill_id)
        if current < required:
            missing.append(f"{name} {required} ranks (current: {current})")
    for feat_ref in feats:
        if not character_has_feat(character, feat_ref, catalog):
            missing.append(f"Feat: {feat_display_name(feat_ref, catalog)}")
    if races and not _race_allowed(character.race_id, races):
        missing.append(f"Race: {' or '.join(races)}")
    return missing


def _check_overlay(character: Character, overlay: RequirementOverlay, catalog: Catalog) -> list[str]:
    missing = _check_common(
        character,
        catalog,
        bab=overlay.base_attack_bonus,
        skills=overlay.skills,
        feats=overlay.feats,
        races=overlay.race,
    )
    for word in overlay.alignment_must_include:
        if not alignment_has(character.alignment, word):
            missing.append(f"Alignment: must be {word}")
    for word in overlay.alignment_must_exclude:
        if alignment_has(character.alignment, word):
            missing.append(f"Alignment: cannot be {word}")
    class_levels = character.class_levels()
    for condition in overlay.conditions:
        has_class = not condition.classes or any(c in class_levels for c in condition.classes)
        has_level = condition.min_total_level is None or character.total_level >= condition.min_total_level
        if not (has_class and has_level):
            missing.append(condition.label)
    return missing


def _dedupe(lines: list[str]) -> list[str]:
    return list(dict.fromkeys(lines))


# =============================================================================
# Public API
# =============================================================================


def check_class_requirements(
    character: Character,
    class_data: CharacterClass,
    catalog: Catalog,
) -> RequirementCheck:
    """Check whether a character meets a class's prerequisites.

    Args:
        character: The character.
        class_data: Candidate class.
        catalog: Rule catalog.

    Returns:
        RequirementCheck with one message per unmet requirement.
    """
    if not class_data.is_prestige:
        return RequirementCheck(can_take=True)

    reqs = class_data.requirements
    missing = _check_common(
        character,
        catalog,
        bab=reqs.base_attack_bonus,
        skills=reqs.skills,
        feats=reqs.feats,
        races=reqs.race,
    )

    attributes = final_attributes(character, catalog)
    for attribute, minimum in reqs.ability_scores.items():
        current = attributes.get(attribute)
        if current < minimum:
            missing.append(f"{attribute.value.capitalize()} {minimum}+ (current: {current})")

    for restriction in (reqs.alignment, class_data.alignment_restriction):
        if restriction:
            include, exclude = parse_alignment_rule(restriction)
            if not alignment_allowed(character.alignment, include, exclude):
                missing.append(f"Alignment: {restriction}")

    if reqs.special and not special_satisfied(character, reqs.special):
        missing.append(special_text(reqs.special))

    if reqs.spellcasting and not spellcasting_satisfied(character, reqs.spellcasting, catalog):
        missing.append(spellcasting_text(reqs.spellcasting))

    overlay = get_overlay(class_data.id, catalog)
    if overlay is not None:
        missing.extend(_check_overlay(character, overlay, catalog))

    missing = _dedupe(missing)
    return RequirementCheck(can_take=not missing, missing_requirements=missing)


def get_complete_requirements(class_data: CharacterClass, catalog: Catalog) -> list[str]:
    """List a class's prerequisites as display lines, independent of any character.

    Args:
        class_data: The class.
        catalog: Rule catalog, used for names and overlays.

    Returns:
        Display lines; a single explanatory line for base classes.
    """
    if not class_data.is_prestige:
        return [BASE_CLASS_REQUIREMENTS]

    reqs = class_data.requirements
    lines: list[str] = []

    def add_common(bab: int | None, skills: dict[str, int], feats: list[str], races: list[str]) -> None:
        if bab:
            lines.append(f"BAB +{bab}")
        for key, ranks in skills.items():
            lines.append(f"{_skill_label(key, catalog)[1]} {ranks} ranks")
        for feat_ref in feats:
            lines.append(f"Feat: {feat_display_name(feat_ref, catalog)}")
        if races:
            lines.append(f"Race: {' or '.join(races)}")

    add_common(reqs.base_attack_bonus, reqs.skills, reqs.feats, reqs.race)
    for attribute, minimum in reqs.ability_scores.items():
        lines.append(f"{attribute.value.capitalize()} {minimum}+")
    for restriction in (reqs.alignment, class_data.alignment_restriction):
        if restriction:
            lines.append(f"Alignment: {restriction}")
    if reqs.spellcasting:
        lines.append(spellcasting_text(reqs.spellcasting))
    if reqs.special:
        lines.append(special_text(reqs.special))

    overlay = get_overlay(class_data.id, catalog)
    if overlay is not None:
        add_common(overlay.base_attack_bonus, overlay.skills, overlay.feats, overlay.race)
        lines.extend(f"Alignment: must be {w}" for w in overlay.alignment_must_include)
        lines.extend(f"Alignment: cannot be {w}" for w in overlay.alignment_must_exclude)
        lines.extend(condition.label for condition in overlay.conditions)
        lines.extend(overlay.notes)

    return _dedupe(lines) or [UNDOCUMENTED_REQUIREMENTS]


__all__ = [
    "BASE_CLASS_REQUIREMENTS",
    "UNDOCUMENTED_REQUIREMENTS",
    "RequirementCheck",
    "alignment_has",
    "parse_alignment_rule",
    "alignment_allowed",
    "spellcasting_satisfied",
    "spellcasting_text",
    "special_satisfied",
    "special_text",
    "check_class_requirements",
    "get_complete_requirements",
]
