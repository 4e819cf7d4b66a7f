"""Pydantic V2 schemas for the read-only rule catalog.

The catalog holds the races, classes, feats, and skills the rules engine
reads. It is immutable and passed explicitly to every rule function that
needs it, so tests can supply small fixture catalogs.

Field aliases accept the original catalog keys (``attributeBonuses``,
``donsRaciaux``, ``conditionsCaractéristiques``, ``conditionsId``,
``niveau_min``/``niveau_max``) so raw tables load unchanged.

Example:
    >>> from nwn_builder.models.catalog import load_catalog
    >>> catalog = load_catalog()
    >>> catalog.get_class("fighter").hit_die
    10
"""

from __future__ import annotations

import json
import re
from importlib import resources
from pathlib import Path
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    PrivateAttr,
    ValidationError as PydanticValidationError,
    field_validator,
)

from nwn_builder.core.exceptions import CatalogError
from nwn_builder.core.logging import get_logger
from nwn_builder.models.enums import (
    Attribute,
    BABProgression,
    CasterType,
    ClassType,
    FeatSlotType,
    SaveType,
)


logger = get_logger(__name__)


def _normalize_attribute_map(value: Any) -> Any:
    """Convert attribute-keyed mappings to Attribute keys, dropping nulls."""
    if value is None:
        return {}
    if isinstance(value, dict):
        return {Attribute.parse(str(k)): v for k, v in value.items() if v is not None}
    return value


def _normalize_id(value: str) -> str:
    """Lowercase an identifier and collapse separators to underscores."""
    return re.sub(r"[\s\-]+", "_", value.strip().lower())


class CatalogEntry(BaseModel):
    """Base class for immutable catalog records."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        extra="ignore",
        use_enum_values=False,
    )


# =============================================================================
# Races
# =============================================================================


class Race(CatalogEntry):
    """A playable race.

    Attributes:
        id: Unique race identifier.
        name: Display name.
        attribute_bonuses: Fixed attribute deltas applied on top of base scores.
        racial_feats: Feats granted automatically at level 1.
        skill_bonuses: Flat racial bonus per skill id.
        size: Size category.
        speed: Base speed in feet.
    """

    id: str = Field(min_length=1)
    name: str = Field(default="", validation_alias=AliasChoices("name", "nom"))
    description: str = ""
    attribute_bonuses: dict[Attribute, int] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("attribute_bonuses", "attributeBonuses"),
    )
    racial_feats: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("racial_feats", "donsRaciaux"),
    )
    skill_bonuses: dict[str, int] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("skill_bonuses", "bonusCompetences"),
    )
    size: str = Field(default="medium", validation_alias=AliasChoices("size", "taille"))
    speed: int = Field(default=30, ge=0, validation_alias=AliasChoices("speed", "vitesse"))

    @field_validator("attribute_bonuses", mode="before")
    @classmethod
    def normalize_attribute_keys(cls, v: Any) -> Any:
        """Accept English or French attribute names as keys."""
        return _normalize_attribute_map(v)

    @field_validator("racial_feats", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v


# =============================================================================
# Classes
# =============================================================================


class Proficiencies(CatalogEntry):
    """Weapon, armor, and shield proficiencies a class grants."""

    weapons: list[str] = Field(default_factory=list)
    armor: list[str] = Field(default_factory=list)
    shields: bool = False


class SpellcastingInfo(CatalogEntry):
    """Spellcasting capability of a class."""

    type: CasterType
    ability: Attribute = Attribute.INTELLIGENCE

    @field_validator("ability", mode="before")
    @classmethod
    def parse_ability(cls, v: Any) -> Any:
        return Attribute.parse(v) if isinstance(v, str) else v


class ClassRequirements(CatalogEntry):
    """Schema-level prerequisites of a prestige class.

    Every field is optional; an absent category is satisfied.
    """

    base_attack_bonus: int | None = Field(default=None, ge=0)
    skills: dict[str, int] = Field(default_factory=dict)
    feats: list[str] = Field(default_factory=list)
    ability_scores: dict[Attribute, int] = Field(default_factory=dict)
    race: list[str] = Field(default_factory=list)
    alignment: str | None = None
    spellcasting: str | None = None
    special: str | None = None

    @field_validator("ability_scores", mode="before")
    @classmethod
    def normalize_attribute_keys(cls, v: Any) -> Any:
        return _normalize_attribute_map(v)

    @field_validator("skills", mode="before")
    @classmethod
    def none_skills_to_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    @field_validator("feats", "race", mode="before")
    @classmethod
    def none_list_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    @field_validator("alignment", "spellcasting", "special", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_empty(self) -> bool:
        """True when no requirement category is present."""
        return not (
            self.base_attack_bonus
            or self.skills
            or self.feats
            or self.ability_scores
            or self.race
            or self.alignment
            or self.spellcasting
            or self.special
        )


class BonusFeatProgression(CatalogEntry):
    """Extra feat slots a class grants at specific class levels.

    Attributes:
        levels: Class levels (not character levels) granting a slot.
        type: Slot type, bonus or class.
        restrictions: Feat type keywords the chosen feat must match.
    """

    levels: list[int] = Field(default_factory=list)
    type: FeatSlotType = FeatSlotType.BONUS
    restrictions: list[str] = Field(default_factory=list)


class CharacterClass(CatalogEntry):
    """A base or prestige class.

    Attributes:
        id: Unique class identifier.
        name: Display name.
        type: Base or prestige.
        hit_die: Hit die size (accepts 'd10' or 10).
        skill_points: Base skill points per level before Intelligence.
        base_attack_bonus: BAB progression category.
        proficiencies: Weapon/armor/shield proficiencies.
        skills: Class skill ids.
        primary_saves: Saves with the good progression.
        spellcasting: Spellcasting info, None for non-casters.
        alignment_restriction: Free-text alignment restriction.
        requirements: Prestige prerequisites.
        excludes_simple_weapons: Withholds the default simple weapon feat.
        bonus_feats: Extra feat slots granted by class level.
    """

    id: str = Field(min_length=1)
    name: str = Field(default="", validation_alias=AliasChoices("name", "nom"))
    description: str = ""
    type: ClassType = ClassType.BASE
    hit_die: int = Field(default=8, ge=1, le=20)
    skill_points: int | None = Field(default=None, ge=0)
    base_attack_bonus: BABProgression = BABProgression.MEDIUM
    proficiencies: Proficiencies = Field(default_factory=Proficiencies)
    skills: list[str] = Field(default_factory=list)
    primary_saves: list[SaveType] = Field(default_factory=list)
    spellcasting: SpellcastingInfo | None = None
    alignment_restriction: str | None = None
    requirements: ClassRequirements = Field(default_factory=ClassRequirements)
    excludes_simple_weapons: bool = False
    bonus_feats: BonusFeatProgression | None = None

    @field_validator("hit_die", mode="before")
    @classmethod
    def parse_hit_die(cls, v: Any) -> Any:
        """Convert dice notation ('d10') to its size."""
        if isinstance(v, str):
            match = re.fullmatch(r"\s*d?(\d+)\s*", v.lower())
            if match is None:
                raise ValueError(f"Invalid hit die: {v!r}")
            return int(match.group(1))
        return v

    @field_validator("primary_saves", mode="before")
    @classmethod
    def parse_saves(cls, v: Any) -> Any:
        if v is None:
            return []
        return [SaveType.parse(s) if isinstance(s, str) else s for s in v]

    @field_validator("requirements", "proficiencies", mode="before")
    @classmethod
    def none_to_default(cls, v: Any) -> Any:
        return {} if v is None else v

    @property
    def is_prestige(self) -> bool:
        return self.type == ClassType.PRESTIGE

    @property
    def is_spellcaster(self) -> bool:
        return self.spellcasting is not None


# =============================================================================
# Feats
# =============================================================================


class Feat(CatalogEntry):
    """A feat.

    Attributes:
        id: Unique feat identifier.
        name: Display name.
        type: Comma-separated categories (e.g. 'General, Fighter').
        required_attributes: Minimum final attribute scores.
        required_feats: Feats that must already be held.
        min_level: Minimum total level, if any.
        max_level: Maximum total level, if any (1 means level-1 only).
        aliases: Alternative identifiers used in prerequisite lists.
        repeatable: Whether the feat may be taken more than once.
    """

    id: str = Field(min_length=1)
    name: str = Field(default="", validation_alias=AliasChoices("name", "nom"))
    type: str = ""
    description: str = ""
    required_attributes: dict[Attribute, int] = Field(
        default_factory=dict,
        validation_alias=AliasChoices(
            "required_attributes", "conditionsCaractéristiques", "conditionsCaracteristiques"
        ),
    )
    required_feats: list[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("required_feats", "conditionsId"),
    )
    min_level: int | None = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("min_level", "niveau_min"),
    )
    max_level: int | None = Field(
        default=None,
        ge=1,
        validation_alias=AliasChoices("max_level", "niveau_max"),
    )
    aliases: list[str] = Field(default_factory=list)
    repeatable: bool = False

    @field_validator("required_attributes", mode="before")
    @classmethod
    def normalize_attribute_keys(cls, v: Any) -> Any:
        return _normalize_attribute_map(v)

    @field_validator("required_feats", "aliases", mode="before")
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        if v is None:
            return []
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    @property
    def categories(self) -> list[str]:
        """Lowercased feat categories."""
        return [part.strip().lower() for part in self.type.split(",") if part.strip()]

    @property
    def is_epic(self) -> bool:
        return any(cat in ("epic", "épique", "epique") for cat in self.categories)

    @property
    def is_first_level_only(self) -> bool:
        return self.max_level == 1

    @property
    def requires_spellcasting(self) -> bool:
        """Metamagic and arcane feats need a spellcasting class level."""
        keywords = ("metamagic", "métamagie", "metamagie", "arcane")
        return any(kw in cat for cat in self.categories for kw in keywords)

    @property
    def display_name(self) -> str:
        return self.name or self.id.replace("_", " ").title()

    def matches_restrictions(self, restrictions: list[str]) -> bool:
        """Check whether the feat belongs to any of the restricted categories.

        Args:
            restrictions: Category keywords; an empty list matches everything.
        """
        if not restrictions:
            return True
        wanted = [r.lower() for r in restrictions]
        return any(r in cat for cat in self.categories for r in wanted)


# =============================================================================
# Skills
# =============================================================================


class Skill(CatalogEntry):
    """A skill.

    Attributes:
        id: Unique skill identifier.
        name: Display name.
        main_attribute: Attribute whose modifier applies.
        trained_only: Requires at least one rank to be usable.
        armor_check_penalty: Whether armor penalties apply.
    """

    id: str = Field(min_length=1)
    name: str = Field(default="", validation_alias=AliasChoices("name", "nom"))
    main_attribute: Attribute = Field(
        validation_alias=AliasChoices("main_attribute", "attributPrincipal"),
    )
    description: str = ""
    trained_only: bool = Field(
        default=False,
        validation_alias=AliasChoices("trained_only", "formation"),
    )
    armor_check_penalty: bool = Field(
        default=False,
        validation_alias=AliasChoices("armor_check_penalty", "armureAppliquee"),
    )

    @field_validator("main_attribute", mode="before")
    @classmethod
    def parse_attribute(cls, v: Any) -> Any:
        return Attribute.parse(v) if isinstance(v, str) else v


# =============================================================================
# Requirement Overlays
# =============================================================================


class LevelCondition(CatalogEntry):
    """A class-membership and/or total-level condition with its message.

    Satisfied when the character has a level in one of ``classes`` (if
    any are listed) and at least ``min_total_level`` levels (if set).
    """

    classes: list[str] = Field(default_factory=list)
    min_total_level: int | None = Field(default=None, ge=1)
    label: str = Field(min_length=1)


class RequirementOverlay(CatalogEntry):
    """Extra prerequisites for a named prestige class.

    Overlays capture requirements that the generic class schema cannot
    express. They are merged with the schema-derived checks.

    Attributes:
        skills: Minimum ranks per skill id.
        feats: Feats that must be held.
        base_attack_bonus: Minimum BAB.
        alignment_must_include: Alignment words that must all be present.
        alignment_must_exclude: Alignment words that must be absent.
        conditions: Class or level conditions, each with its own message.
        race: Allowed races.
        notes: Display-only lines for the full requirement list.
    """

    skills: dict[str, int] = Field(default_factory=dict)
    feats: list[str] = Field(default_factory=list)
    base_attack_bonus: int | None = Field(default=None, ge=0)
    alignment_must_include: list[str] = Field(default_factory=list)
    alignment_must_exclude: list[str] = Field(default_factory=list)
    conditions: list[LevelCondition] = Field(default_factory=list)
    race: list[str] = Field(default_factory=list)
    notes: list[str] = Field(default_factory=list)


# =============================================================================
# Catalog Container
# =============================================================================


class Catalog(BaseModel):
    """The complete read-only rule catalog.

    Lookups are indexed once at construction. Instances are frozen and safe
    to share between any number of readers.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    races: list[Race] = Field(default_factory=list)
    classes: list[CharacterClass] = Field(default_factory=list)
    feats: list[Feat] = Field(default_factory=list)
    skills: list[Skill] = Field(default_factory=list)
    requirement_overlays: dict[str, RequirementOverlay] = Field(default_factory=dict)

    _races_by_id: dict[str, Race] = PrivateAttr(default_factory=dict)
    _classes_by_id: dict[str, CharacterClass] = PrivateAttr(default_factory=dict)
    _feats_by_id: dict[str, Feat] = PrivateAttr(default_factory=dict)
    _skills_by_id: dict[str, Skill] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        """Build the id indexes."""
        self._races_by_id = {r.id: r for r in self.races}
        self._classes_by_id = {c.id: c for c in self.classes}
        self._feats_by_id = {f.id: f for f in self.feats}
        self._skills_by_id = {s.id: s for s in self.skills}

    def get_race(self, race_id: str) -> Race | None:
        return self._races_by_id.get(race_id)

    def get_class(self, class_id: str) -> CharacterClass | None:
        return self._classes_by_id.get(class_id)

    def get_feat(self, feat_id: str) -> Feat | None:
        return self._feats_by_id.get(feat_id)

    def get_skill(self, skill_id: str) -> Skill | None:
        return self._skills_by_id.get(skill_id)

    def find_skill(self, key: str) -> Skill | None:
        """Find a skill by id or display name (case-insensitive).

        Args:
            key: Skill id ('move_silently') or name ('Move Silently').

        Returns:
            The skill, or None if nothing matches.
        """
        skill = self._skills_by_id.get(key)
        if skill is not None:
            return skill
        normalized = _normalize_id(key)
        for skill in self.skills:
            if skill.id == normalized or _normalize_id(skill.name) == normalized:
                return skill
        return None

    def find_feat(self, key: str) -> Feat | None:
        """Find a feat by id, alias, or display name."""
        feat = self._feats_by_id.get(key)
        if feat is not None:
            return feat
        normalized = _normalize_id(key)
        for feat in self.feats:
            if normalized in (_normalize_id(a) for a in feat.aliases):
                return feat
            if feat.name and _normalize_id(feat.name) == normalized:
                return feat
        return None

    def spellcasting_class_ids(self, caster_type: CasterType | None = None) -> set[str]:
        """Ids of classes that cast spells, optionally of one caster type."""
        return {
            c.id
            for c in self.classes
            if c.spellcasting is not None
            and (caster_type is None or c.spellcasting.type == caster_type)
        }

    def classes_of_type(self, class_type: ClassType) -> list[CharacterClass]:
        return [c for c in self.classes if c.type == class_type]


# =============================================================================
# Loading
# =============================================================================


BUNDLED_CATALOG = "catalog.json"


def _read_catalog_text(path: Path | None) -> tuple[str, str]:
    """Read catalog JSON from a path or the bundled package data."""
    if path is not None:
        return path.read_text(encoding="utf-8"), str(path)
    resource = resources.files("nwn_builder.data").joinpath(BUNDLED_CATALOG)
    return resource.read_text(encoding="utf-8"), f"nwn_builder.data/{BUNDLED_CATALOG}"


def load_catalog(path: str | Path | None = None) -> Catalog:
    """Load the rule catalog from JSON.

    Args:
        path: Catalog file. If None, the configured catalog path is used,
            falling back to the catalog bundled with the package.

    Returns:
        The parsed Catalog.

    Raises:
        CatalogError: If the file cannot be read or does not match the schema.
    """
    if path is None:
        from nwn_builder.core.config import get_settings

        path = get_settings().storage.catalog_path
    catalog_path = Path(path) if path is not None else None

    try:
        text, source = _read_catalog_text(catalog_path)
    except OSError as exc:
        raise CatalogError(
            f"Unable to read catalog: {exc}",
            source_file=str(catalog_path),
        ) from exc

    try:
        data = json.loads(text)
        catalog = Catalog.model_validate(data)
    except json.JSONDecodeError as exc:
        raise CatalogError(f"Catalog is not valid JSON: {exc}", source_file=source) from exc
    except (PydanticValidationError, ValueError) as exc:
        raise CatalogError(f"Catalog does not match schema: {exc}", source_file=source) from exc

    logger.info(
        "Catalog loaded",
        source=source,
        races=len(catalog.races),
        classes=len(catalog.classes),
        feats=len(catalog.feats),
        skills=len(catalog.skills),
    )
    return catalog


__all__ = [
    "Race",
    "Proficiencies",
    "SpellcastingInfo",
    "ClassRequirements",
    "BonusFeatProgression",
    "CharacterClass",
    "Feat",
    "Skill",
    "LevelCondition",
    "RequirementOverlay",
    "Catalog",
    "load_catalog",
]
