"""Character builder engine: commands, reducer, and session.

Exports:
    Commands: CreateCharacter, AddLevel, UpdateLevelSkills, ... and the
        ``Command`` discriminated union with ``parse_command``.
    BuilderState: Immutable builder snapshot.
    apply_command: Pure reducer.
    CharacterBuilder: Session object with validation and persistence.
"""

from __future__ import annotations

from nwn_builder.engine.commands import (
    AddFeatToLevel,
    AddLevel,
    ApplyAutomaticFeats,
    BaseCommand,
    Command,
    CreateCharacter,
    LoadCharacter,
    RemoveFeatFromLevel,
    ResetCharacter,
    SetAttributeIncrease,
    SetValidation,
    UpdateAttributes,
    UpdateDetails,
    UpdateLevelFeats,
    UpdateLevelSkills,
    UpdateRace,
    UpdateSkills,
    parse_command,
)
from nwn_builder.engine.state_machine import (
    BuilderPhase,
    BuilderState,
    CharacterBuilder,
    apply_command,
)


__all__ = [
    # Commands
    "BaseCommand",
    "Command",
    "parse_command",
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
    # State machine
    "BuilderPhase",
    "BuilderState",
    "apply_command",
    "CharacterBuilder",
]
