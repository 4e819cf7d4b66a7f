"""Commands accepted by the character builder state machine.

Every change to a character is expressed as one of these immutable
commands. Each carries a ``timestamp`` so that applying it is a pure
function of (state, command, catalog). Commands can be parsed from plain
dicts through the ``Command`` discriminated union.

Example:
    >>> command = parse_command({"type": "add_level", "class_id": "fighter",
    ...                          "hit_points_gained": 10})
    >>> isinstance(command, AddLevel)
    True
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

from nwn_builder.models.character import (
    Attributes,
    Character,
    CharacterLevel,
    SkillRanks,
    ValidationResult,
)
from nwn_builder.models.enums import Attribute


def _utcnow() -> datetime:
    return datetime.now(UTC)


class BaseCommand(BaseModel):
    """Common fields of every command."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime = Field(default_factory=_utcnow, description="When the command was issued")


# =============================================================================
# Lifecycle Commands
# =============================================================================


class CreateCharacter(BaseCommand):
    """Start a new, level-less character."""

    type: Literal["create_character"] = "create_character"
    name: str
    race_id: str = Field(min_length=1)
    character_id: str | None = Field(default=None, description="Id to use; generated if omitted")
    base_attributes: Attributes | None = None


class LoadCharacter(BaseCommand):
    """Replace the current character with a stored one."""

    type: Literal["load_character"] = "load_character"
    character: Character


class ResetCharacter(BaseCommand):
    """Drop the current character."""

    type: Literal["reset_character"] = "reset_character"


class SetValidation(BaseCommand):
    """Store a validation result; does not mark the character modified."""

    type: Literal["set_validation"] = "set_validation"
    result: ValidationResult | None


# =============================================================================
# Identity Commands
# =============================================================================


class UpdateAttributes(BaseCommand):
    """Merge new base attribute scores."""

    type: Literal["update_attributes"] = "update_attributes"
    attributes: dict[Attribute, int]

    @field_validator("attributes", mode="before")
    @classmethod
    def normalize_keys(cls, v: Any) -> Any:
        if isinstance(v, dict):
            return {Attribute.parse(str(k)): score for k, score in v.items()}
        return v


class UpdateRace(BaseCommand):
    """Change the character's race."""

    type: Literal["update_race"] = "update_race"
    race_id: str = Field(min_length=1)


class UpdateDetails(BaseCommand):
    """Change name, alignment or description; omitted fields are kept."""

    type: Literal["update_details"] = "update_details"
    name: str | None = None
    alignment: str | None = None
    description: str | None = None


# =============================================================================
# Level Commands
# =============================================================================


class AddLevel(BaseCommand):
    """Append a level in a class."""

    type: Literal["add_level"] = "add_level"
    class_id: str = Field(min_length=1)
    hit_points_gained: int


class SetAttributeIncrease(BaseCommand):
    """Choose the attribute raised at a level divisible by 4."""

    type: Literal["set_attribute_increase"] = "set_attribute_increase"
    level: CharacterLevel
    attribute: Attribute

    @field_validator("attribute", mode="before")
    @classmethod
    def parse_attribute(cls, v: Any) -> Any:
        return Attribute.parse(v) if isinstance(v, str) else v


class UpdateSkills(BaseCommand):
    """Merge rank purchases into the latest level."""

    type: Literal["update_skills"] = "update_skills"
    skills: dict[str, SkillRanks]


class UpdateLevelSkills(BaseCommand):
    """Merge rank purchases into a given level and record its unspent points."""

    type: Literal["update_level_skills"] = "update_level_skills"
    level: int
    skills: dict[str, SkillRanks]
    remaining_points: int


class AddFeatToLevel(BaseCommand):
    """Add a chosen feat to a level."""

    type: Literal["add_feat_to_level"] = "add_feat_to_level"
    level: int
    feat_id: str = Field(min_length=1)


class RemoveFeatFromLevel(BaseCommand):
    """Remove a chosen feat from a level."""

    type: Literal["remove_feat_from_level"] = "remove_feat_from_level"
    level: int
    feat_id: str = Field(min_length=1)


class UpdateLevelFeats(BaseCommand):
    """Replace the chosen feats of a level."""

    type: Literal["update_level_feats"] = "update_level_feats"
    level: int
    feats: list[str]


class ApplyAutomaticFeats(BaseCommand):
    """Record any missing automatic and racial feats on level 1."""

    type: Literal["apply_automatic_feats"] = "apply_automatic_feats"


# =============================================================================
# Discriminated Union
# =============================================================================


Command = Annotated[
    CreateCharacter
    | LoadCharacter
    | ResetCharacter
    | SetValidation
    | UpdateAttributes
    | UpdateRace
    | UpdateDetails
    | AddLevel
    | SetAttributeIncrease
    | UpdateSkills
    | UpdateLevelSkills
    | AddFeatToLevel
    | RemoveFeatFromLevel
    | UpdateLevelFeats
    | ApplyAutomaticFeats,
    Field(discriminator="type", description="A character builder command"),
]
"""Discriminated union of all builder commands, keyed on ``type``."""

_COMMAND_ADAPTER: TypeAdapter[Command] = TypeAdapter(Command)


def parse_command(data: dict[str, Any]) -> Command:
    """Build a command from a plain dict with a ``type`` key.

    Raises:
        pydantic.ValidationError: If the type is unknown or fields are invalid.
    """
    return _COMMAND_ADAPTER.validate_python(data)


__all__ = [
    "BaseCommand",
    "CreateCharacter",
    "LoadCharacter",
    "ResetCharacter",
    "SetValidation",
    "UpdateAttributes",
    "UpdateRace",
    "UpdateDetails",
    "AddLevel",
    "SetAttributeIncrease",
    "UpdateSkills",
    "UpdateLevelSkills",
    "AddFeatToLevel",
    "RemoveFeatFromLevel",
    "UpdateLevelFeats",
    "ApplyAutomaticFeats",
    "Command",
    "parse_command",
]
