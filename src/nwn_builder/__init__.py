"""NWN character builder rules engine.

Character progression rules for a Neverwinter Nights style build planner:
attribute point-buy, per-level skill budgets, feat slots and eligibility,
automatic proficiency feats, prestige class prerequisites, a command-driven
state machine, a whole-character validator, and an async persistence port.

Example:
    >>> from nwn_builder import CharacterBuilder, load_catalog
    >>> from nwn_builder.engine import AddLevel, CreateCharacter
    >>>
    >>> builder = CharacterBuilder(load_catalog())
    >>> builder.dispatch(CreateCharacter(name="Sharwyn", race_id="human"))
    >>> builder.dispatch(AddLevel(class_id="bard", hit_points_gained=6))
    >>> builder.validate().valid
    True

Modules:
    core: Configuration, logging, constants, and exceptions.
    models: Catalog and character schemas.
    rules: Pure rule computations and validation.
    engine: Commands, reducer, and builder session.
    storage: Async persistence port and implementations.
"""

from __future__ import annotations

# Core
from nwn_builder.core.config import Settings, get_settings
from nwn_builder.core.exceptions import NwnBuilderError
from nwn_builder.core.logging import configure_logging, get_logger

# Models
from nwn_builder.models.catalog import Catalog, load_catalog
from nwn_builder.models.character import Attributes, Character, LevelEntry, ValidationResult

# Engine
from nwn_builder.engine.state_machine import BuilderState, CharacterBuilder, apply_command

# Storage
from nwn_builder.storage import InMemoryCharacterStore, SqliteCharacterStore, StorageResult


__version__ = "0.1.0"
__all__ = [
    # Version info
    "__version__",
    # Core
    "NwnBuilderError",
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    # Models
    "Catalog",
    "load_catalog",
    "Attributes",
    "Character",
    "LevelEntry",
    "ValidationResult",
    # Engine
    "BuilderState",
    "CharacterBuilder",
    "apply_command",
    # Storage
    "StorageResult",
    "SqliteCharacterStore",
    "InMemoryCharacterStore",
]
