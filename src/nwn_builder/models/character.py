"""Character build models.

A Character is an immutable snapshot: the state machine produces a new
instance for every accepted command. Levels are only ever appended, and
``skill_ranks`` is a cache of the per-level rank contributions that the
command handlers keep in sync.

Example:
    >>> character = Character(name="Aribeth", race_id="human")
    >>> character.total_level
    0
"""

from __future__ import annotations

from collections import Counter
from datetime import UTC, datetime
from typing import Annotated, Any, Self
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from nwn_builder.core.constants import DEFAULT_ATTRIBUTE_SCORE, MAX_CHARACTER_LEVEL
from nwn_builder.models.enums import Attribute


# =============================================================================
# Type Definitions
# =============================================================================


CharacterLevel = Annotated[int, Field(ge=1, le=MAX_CHARACTER_LEVEL, description="Character level (1-30)")]
SkillRanks = Annotated[int, Field(ge=0, description="Ranks in a skill")]

CURRENT_SCHEMA_VERSION = 1


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _new_character_id() -> str:
    return uuid4().hex


# =============================================================================
# Attributes
# =============================================================================


class Attributes(BaseModel):
    """The six attribute scores.

    Used both for the point-buy base scores and for final scores after
    racial modifiers. Range checks live in the validator, not here, so an
    out-of-range build can still be represented and reported.
    """

    model_config = ConfigDict(frozen=True)

    strength: int = DEFAULT_ATTRIBUTE_SCORE
    dexterity: int = DEFAULT_ATTRIBUTE_SCORE
    constitution: int = DEFAULT_ATTRIBUTE_SCORE
    intelligence: int = DEFAULT_ATTRIBUTE_SCORE
    wisdom: int = DEFAULT_ATTRIBUTE_SCORE
    charisma: int = DEFAULT_ATTRIBUTE_SCORE

    @model_validator(mode="before")
    @classmethod
    def normalize_keys(cls, data: Any) -> Any:
        """Accept French or abbreviated attribute names as keys."""
        if isinstance(data, dict):
            return {Attribute.parse(str(k)).value: v for k, v in data.items()}
        return data

    def get(self, attribute: Attribute) -> int:
        """Get the score of one attribute."""
        return getattr(self, attribute.value)

    def as_dict(self) -> dict[Attribute, int]:
        return {attribute: self.get(attribute) for attribute in Attribute}

    def with_updates(self, partial: dict[Attribute, int] | dict[str, int]) -> Attributes:
        """Return a copy with some scores replaced.

        Args:
            partial: Attribute (or attribute name) to new score.

        Returns:
            New Attributes instance.
        """
        update = {Attribute.parse(str(k)).value: int(v) for k, v in partial.items()}
        return self.model_copy(update=update)

    def with_bonuses(self, bonuses: dict[Attribute, int]) -> Attributes:
        """Return a copy with deltas added to each listed attribute."""
        update = {attr.value: self.get(attr) + delta for attr, delta in bonuses.items()}
        return self.model_copy(update=update)


# =============================================================================
# Levels
# =============================================================================


class LevelEntry(BaseModel):
    """Decisions taken at one character level.

    Attributes:
        level: 1-based character level.
        class_id: Class taken at this level.
        hit_points_gained: Hit die roll, within [1, hit die].
        skill_ranks_this_level: Ranks bought at this level per skill id.
        unspent_skill_points: Skill points left unspent at this level.
        chosen_feats: Feats picked by the player (no duplicates).
        automatic_feats: Feats granted automatically (proficiencies, racial).
        attribute_increase: Attribute raised on levels divisible by 4.
    """

    model_config = ConfigDict(frozen=True)

    level: CharacterLevel
    class_id: str = Field(min_length=1)
    hit_points_gained: int = Field(default=1, ge=1)
    skill_ranks_this_level: dict[str, SkillRanks] = Field(default_factory=dict)
    unspent_skill_points: int = Field(default=0, ge=0)
    chosen_feats: list[str] = Field(default_factory=list)
    automatic_feats: list[str] = Field(default_factory=list)
    attribute_increase: Attribute | None = None

    @field_validator("chosen_feats", "automatic_feats", mode="after")
    @classmethod
    def deduplicate(cls, v: list[str]) -> list[str]:
        """Drop repeated feat ids while keeping insertion order."""
        return list(dict.fromkeys(v))

    @property
    def all_feats(self) -> list[str]:
        return [*self.automatic_feats, *(f for f in self.chosen_feats if f not in self.automatic_feats)]


# =============================================================================
# Character
# =============================================================================


class Character(BaseModel):
    """A character build.

    Attributes:
        id: Unique character identifier.
        name: Character name.
        race_id: Catalog race id.
        base_attributes: Point-buy scores before racial modifiers.
        levels: One entry per character level, in order.
        total_level: Number of levels taken (0-30).
        skill_ranks: Cached sum of ranks per skill across all levels.
        alignment: Free-text alignment (e.g. 'Lawful Good').
        description: Free-text background.
        created_at: Creation time (UTC).
        modified_at: Last change time (UTC).
        schema_version: Version of the stored layout.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=_new_character_id, min_length=1)
    name: str = ""
    race_id: str = Field(min_length=1)
    base_attributes: Attributes = Field(default_factory=Attributes)
    levels: list[LevelEntry] = Field(default_factory=list)
    total_level: int = Field(default=0, ge=0, le=MAX_CHARACTER_LEVEL)
    skill_ranks: dict[str, SkillRanks] = Field(default_factory=dict)
    alignment: str | None = None
    description: str = ""
    created_at: datetime = Field(default_factory=_utcnow)
    modified_at: datetime = Field(default_factory=_utcnow)
    schema_version: int = CURRENT_SCHEMA_VERSION

    def class_levels(self) -> dict[str, int]:
        """Count levels per class id, in the order classes were first taken."""
        return dict(Counter(entry.class_id for entry in self.levels))

    def all_feat_ids(self) -> set[str]:
        """Every feat held, chosen or automatic, across all levels."""
        feats: set[str] = set()
        for entry in self.levels:
            feats.update(entry.chosen_feats)
            feats.update(entry.automatic_feats)
        return feats

    def has_feat(self, feat_id: str) -> bool:
        return feat_id in self.all_feat_ids()

    def level_entry(self, level: int) -> LevelEntry | None:
        """Get the entry of a 1-based level, or None if it does not exist."""
        if 1 <= level <= len(self.levels):
            return self.levels[level - 1]
        return None

    def touch(self, now: datetime, **update: Any) -> Self:
        """Return a copy with fields replaced and ``modified_at`` set to ``now``."""
        return self.model_copy(update={**update, "modified_at": now})


# =============================================================================
# Validation Result
# =============================================================================


class ValidationResult(BaseModel):
    """Outcome of validating a character.

    Errors make a build illegal. Warnings flag questionable but allowed
    choices.
    """

    model_config = ConfigDict(frozen=True)

    valid: bool = True
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @classmethod
    def from_issues(cls, errors: list[str], warnings: list[str] | None = None) -> ValidationResult:
        return cls(valid=not errors, errors=list(errors), warnings=list(warnings or []))

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Combine two results; the merged result is valid only if both are."""
        return ValidationResult(
            valid=self.valid and other.valid,
            errors=[*self.errors, *other.errors],
            warnings=[*self.warnings, *other.warnings],
        )


__all__ = [
    "CURRENT_SCHEMA_VERSION",
    "CharacterLevel",
    "SkillRanks",
    "Attributes",
    "LevelEntry",
    "Character",
    "ValidationResult",
]
