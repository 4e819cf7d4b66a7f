"""Command-driven character builder state machine.

``apply_command`` is a pure reducer: given a state, a command, and the
catalog it returns the next state and touches nothing else. Commands that
make no structural sense (a level that does not exist, an unknown class,
the level cap) return the state unchanged and log why.

The state machine has two phases. While no character exists
(Uninitialized) only CreateCharacter, LoadCharacter and ResetCharacter
have an effect. Once a character exists (Active) every command applies
to it. Validation never runs implicitly.

``CharacterBuilder`` wraps the reducer in a small session object that
also owns validation and persistence.
"""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict

from nwn_builder.core.config import get_settings
from nwn_builder.core.constants import ATTRIBUTE_INCREASE_INTERVAL
from nwn_builder.core.exceptions import PersistenceError
from nwn_builder.core.logging import character_context, configure_logging, get_logger
from nwn_builder.engine.commands import (
    AddFeatToLevel,
    AddLevel,
    ApplyAutomaticFeats,
    BaseCommand,
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
)
from nwn_builder.models.catalog import Catalog
from nwn_builder.models.character import Attributes, Character, LevelEntry, ValidationResult
from nwn_builder.models.enums import Attribute
from nwn_builder.rules.feats import (
    add_feat_to_level,
    add_missing_automatic_feats,
    apply_racial_feats,
    remove_feat_from_level,
)
from nwn_builder.rules.skills import recompute_skill_ranks
from nwn_builder.rules.validation import validate_character
from nwn_builder.storage.repository import CharacterRepository, StorageResult


logger = get_logger(__name__)

DEFAULT_ATTRIBUTE_INCREASE = Attribute.STRENGTH


# =============================================================================
# State
# =============================================================================


class BuilderPhase(StrEnum):
    """Lifecycle phase of the builder."""

    UNINITIALIZED = "uninitialized"
    ACTIVE = "active"


class BuilderState(BaseModel):
    """Snapshot of the builder.

    Attributes:
        character: The character being built, None before creation.
        validation: Last stored validation result.
        is_modified: Whether the character changed since it was loaded or saved.
    """

    model_config = ConfigDict(frozen=True)

    character: Character | None = None
    validation: ValidationResult | None = None
    is_modified: bool = False

    @property
    def phase(self) -> BuilderPhase:
        if self.character is None:
            return BuilderPhase.UNINITIALIZED
        return BuilderPhase.ACTIVE


# =============================================================================
# Helpers
# =============================================================================


def _ignored(state: BuilderState, command: BaseCommand, reason: str, **context: Any) -> BuilderState:
    logger.info("Command ignored", command=getattr(command, "type", None), reason=reason, **context)
    return state


def _commit(state: BuilderState, character: Character, command: BaseCommand) -> BuilderState:
    """Store a changed character, stamping it with the command time."""
    return state.model_copy(
        update={
            "character": character.touch(command.timestamp),
            "is_modified": True,
        }
    )


def _replace_level(character: Character, index: int, entry: LevelEntry) -> Character:
    levels = list(character.levels)
    levels[index] = entry
    return character.model_copy(update={"levels": levels})


def _with_skill_cache(character: Character) -> Character:
    return character.model_copy(update={"skill_ranks": recompute_skill_ranks(character.levels)})


def _level_index(character: Character, level: int) -> int | None:
    index = level - 1
    if 0 <= index < len(character.levels):
        return index
    return None


# =============================================================================
# Handlers
# =============================================================================


def _create_character(state: BuilderState, command: CreateCharacter, catalog: Catalog) -> BuilderState:
    if catalog.get_race(command.race_id) is None:
        return _ignored(state, command, "unknown race", race_id=command.race_id)
    fields: dict[str, Any] = {
        "name": command.name,
        "race_id": command.race_id,
        "base_attributes": command.base_attributes or Attributes(),
        "created_at": command.timestamp,
        "modified_at": command.timestamp,
    }
    if command.character_id:
        fields["id"] = command.character_id
    character = Character(**fields)
    logger.info("Character created", character_id=character.id, race_id=character.race_id)
    return BuilderState(character=character, validation=None, is_modified=True)


def _load_character(state: BuilderState, command: LoadCharacter, catalog: Catalog) -> BuilderState:
    return BuilderState(character=command.character, validation=None, is_modified=False)


def _reset_character(state: BuilderState, command: ResetCharacter, catalog: Catalog) -> BuilderState:
    return BuilderState()


def _set_validation(state: BuilderState, command: SetValidation, catalog: Catalog) -> BuilderState:
    return state.model_copy(update={"validation": command.result})


def _update_attributes(state: BuilderState, command: UpdateAttributes, catalog: Catalog) -> BuilderState:
    character = state.character
    updated = character.model_copy(
        update={"base_attributes": character.base_attributes.with_updates(command.attributes)}
    )
    return _commit(state, updated, command)


def _update_race(state: BuilderState, command: UpdateRace, catalog: Catalog) -> BuilderState:
    if catalog.get_race(command.race_id) is None:
        return _ignored(state, command, "unknown race", race_id=command.race_id)
    updated = state.character.model_copy(update={"race_id": command.race_id})
    # Feats of the previous race stay on level 1.
    updated = apply_racial_feats(updated, catalog)
    return _commit(state, updated, command)


def _update_details(state: BuilderState, command: UpdateDetails, catalog: Catalog) -> BuilderState:
    update = {
        key: value
        for key, value in (
            ("name", command.name),
            ("alignment", command.alignment),
            ("description", command.description),
        )
        if value is not None
    }
    if not update:
        return state
    return _commit(state, state.character.model_copy(update=update), command)


def _add_level(state: BuilderState, command: AddLevel, catalog: Catalog) -> BuilderState:
    character = state.character
    max_level = get_settings().rules.max_character_level
    if character.total_level >= max_level:
        return _ignored(state, command, "level cap reached", total_level=character.total_level)

    class_data = catalog.get_class(command.class_id)
    if class_data is None:
        return _ignored(state, command, "unknown class", class_id=command.class_id)

    new_level = len(character.levels) + 1
    hit_points = min(max(command.hit_points_gained, 1), class_data.hit_die)
    entry = LevelEntry(
        level=new_level,
        class_id=command.class_id,
        hit_points_gained=hit_points,
        attribute_increase=(
            DEFAULT_ATTRIBUTE_INCREASE if new_level % ATTRIBUTE_INCREASE_INTERVAL == 0 else None
        ),
    )
    updated = character.model_copy(
        update={"levels": [*character.levels, entry], "total_level": new_level}
    )
    updated = add_missing_automatic_feats(updated, catalog)
    updated = apply_racial_feats(updated, catalog)

    logger.info(
        "Level added",
        character_id=character.id,
        level=new_level,
        class_id=command.class_id,
        hit_points=hit_points,
    )
    return _commit(state, updated, command)


def _set_attribute_increase(
    state: BuilderState, command: SetAttributeIncrease, catalog: Catalog
) -> BuilderState:
    character = state.character
    index = _level_index(character, command.level)
    if index is None or command.level % ATTRIBUTE_INCREASE_INTERVAL != 0:
        return _ignored(state, command, "no attribute increase at this level", level=command.level)
    entry = character.levels[index].model_copy(update={"attribute_increase": command.attribute})
    return _commit(state, _replace_level(character, index, entry), command)


def _merge_skills(
    character: Character,
    index: int,
    skills: dict[str, int],
    remaining_points: int | None = None,
) -> Character:
    entry = character.levels[index]
    update: dict[str, Any] = {"skill_ranks_this_level": {**entry.skill_ranks_this_level, **skills}}
    if remaining_points is not None:
        update["unspent_skill_points"] = max(0, remaining_points)
    return _with_skill_cache(_replace_level(character, index, entry.model_copy(update=update)))


def _update_skills(state: BuilderState, command: UpdateSkills, catalog: Catalog) -> BuilderState:
    character = state.character
    if not character.levels:
        return _ignored(state, command, "character has no levels")
    updated = _merge_skills(character, len(character.levels) - 1, command.skills)
    return _commit(state, updated, command)


def _update_level_skills(
    state: BuilderState, command: UpdateLevelSkills, catalog: Catalog
) -> BuilderState:
    character = state.character
    index = _level_index(character, command.level)
    if index is None:
        return _ignored(state, command, "level out of range", level=command.level)
    updated = _merge_skills(character, index, command.skills, command.remaining_points)
    return _commit(state, updated, command)


def _add_feat(state: BuilderState, command: AddFeatToLevel, catalog: Catalog) -> BuilderState:
    character = state.character
    index = _level_index(character, command.level)
    if index is None:
        return _ignored(state, command, "level out of range", level=command.level)
    entry = character.levels[index]
    updated_entry = add_feat_to_level(entry, command.feat_id)
    if updated_entry is entry:
        return state
    return _commit(state, _replace_level(character, index, updated_entry), command)


def _remove_feat(state: BuilderState, command: RemoveFeatFromLevel, catalog: Catalog) -> BuilderState:
    character = state.character
    index = _level_index(character, command.level)
    if index is None:
        return _ignored(state, command, "level out of range", level=command.level)
    entry = character.levels[index]
    updated_entry = remove_feat_from_level(entry, command.feat_id)
    if updated_entry is entry:
        return state
    return _commit(state, _replace_level(character, index, updated_entry), command)


def _update_level_feats(state: BuilderState, command: UpdateLevelFeats, catalog: Catalog) -> BuilderState:
    character = state.character
    index = _level_index(character, command.level)
    if index is None:
        return _ignored(state, command, "level out of range", level=command.level)
    entry = character.levels[index].model_copy(
        update={"chosen_feats": list(dict.fromkeys(command.feats))}
    )
    return _commit(state, _replace_level(character, index, entry), command)


def _apply_automatic_feats(
    state: BuilderState, command: ApplyAutomaticFeats, catalog: Catalog
) -> BuilderState:
    character = state.character
    updated = apply_racial_feats(add_missing_automatic_feats(character, catalog), catalog)
    if updated is character:
        return state
    return _commit(state, updated, command)


Handler = Callable[[BuilderState, Any, Catalog], BuilderState]

_HANDLERS: dict[type[BaseCommand], Handler] = {
    CreateCharacter: _create_character,
    LoadCharacter: _load_character,
    ResetCharacter: _reset_character,
    SetValidation: _set_validation,
    UpdateAttributes: _update_attributes,
    UpdateRace: _update_race,
    UpdateDetails: _update_details,
    AddLevel: _add_level,
    SetAttributeIncrease: _set_attribute_increase,
    UpdateSkills: _update_skills,
    UpdateLevelSkills: _update_level_skills,
    AddFeatToLevel: _add_feat,
    RemoveFeatFromLevel: _remove_feat,
    UpdateLevelFeats: _update_level_feats,
    ApplyAutomaticFeats: _apply_automatic_feats,
}

_LIFECYCLE_COMMANDS = (CreateCharacter, LoadCharacter, ResetCharacter)


# =============================================================================
# Reducer
# =============================================================================


def apply_command(state: BuilderState, command: BaseCommand, catalog: Catalog) -> BuilderState:
    """Apply one command to a state.

    Args:
        state: Current builder state.
        command: The command to apply.
        catalog: Rule catalog.

    Returns:
        The next state; the same state when the command has no effect.
    """
    handler = _HANDLERS.get(type(command))
    if handler is None:
        return _ignored(state, command, "unknown command")
    if state.character is None and not isinstance(command, _LIFECYCLE_COMMANDS):
        return _ignored(state, command, "no character")
    return handler(state, command, catalog)


# =============================================================================
# Session
# =============================================================================


class CharacterBuilder:
    """Session object around the reducer.

    Holds the catalog, the current state, and a repository. All character
    changes go through ``dispatch``.

    Example:
        >>> builder = CharacterBuilder(catalog, InMemoryCharacterStore())
        >>> builder.dispatch(CreateCharacter(name="Linu", race_id="elf"))
        >>> builder.dispatch(AddLevel(class_id="cleric", hit_points_gained=8))
        >>> builder.character.total_level
        1
    """

    def __init__(
        self,
        catalog: Catalog,
        repository: CharacterRepository | None = None,
        state: BuilderState | None = None,
    ) -> None:
        """Initialize the builder.

        Args:
            catalog: Rule catalog.
            repository: Character store. If None, a SQLite store at the
                configured path is created on first use.
            state: Initial state; empty if omitted.
        """
        configure_logging()
        self.catalog = catalog
        self._repository = repository
        self._state = state or BuilderState()

    @property
    def state(self) -> BuilderState:
        return self._state

    @property
    def character(self) -> Character | None:
        return self._state.character

    @property
    def repository(self) -> CharacterRepository:
        if self._repository is None:
            from nwn_builder.storage.sqlite_store import SqliteCharacterStore

            self._repository = SqliteCharacterStore()
        return self._repository

    def dispatch(self, command: BaseCommand) -> BuilderState:
        """Apply a command and keep the resulting state."""
        self._state = apply_command(self._state, command, self.catalog)
        return self._state

    def validate(self, budget: int | None = None) -> ValidationResult:
        """Validate the current character and store the result.

        Returns:
            The validation result; an error result when no character exists.
        """
        if self.character is None:
            return ValidationResult.from_issues(["No character to validate"])
        result = validate_character(self.character, self.catalog, budget)
        self.dispatch(SetValidation(result=result))
        return result

    async def save(self) -> StorageResult[None]:
        """Persist the current character; clears ``is_modified`` on success."""
        character = self.character
        if character is None:
            return StorageResult.failure(PersistenceError("No character to save"))
        with character_context(character.id):
            result = await self.repository.save(character)
        if result.ok and self._state.character is character:
            self._state = self._state.model_copy(update={"is_modified": False})
        return result

    async def load(self, character_id: str) -> StorageResult[Character]:
        """Load a stored character into the builder."""
        with character_context(character_id):
            result = await self.repository.load(character_id)
        if result.ok and result.value is not None:
            self.dispatch(LoadCharacter(character=result.value))
        return result


__all__ = [
    "BuilderPhase",
    "BuilderState",
    "apply_command",
    "CharacterBuilder",
]
