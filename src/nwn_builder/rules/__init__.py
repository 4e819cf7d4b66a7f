"""Pure rule computations for the NWN character builder.

Every function here takes its inputs explicitly (character, catalog) and
returns a value without side effects.

Submodules:
    attributes: Point-buy costs, modifiers, final attributes
    skills: Per-level skill point budgets and rank limits
    feats: Feat slots, automatic feats, feat eligibility
    progression: Base attack bonus, saving throws, hit points
    requirements: Prestige class prerequisite checks
    overlays: Built-in per-class prerequisite table
    validation: Whole-character validation
"""

from __future__ import annotations

from nwn_builder.rules.attributes import (
    final_attributes,
    increase_cost,
    modifier,
    point_cost,
    remaining_points,
    total_point_cost,
    validate_attribute_allocation,
)
from nwn_builder.rules.feats import (
    FeatCheck,
    FeatSlot,
    FeatStats,
    add_feat_to_level,
    add_missing_automatic_feats,
    apply_racial_feats,
    automatic_feats,
    available_feats_for_slot,
    can_select_feat,
    feat_slots,
    feat_stats,
    missing_automatic_feats,
    racial_feats,
    remove_feat_from_level,
)
from nwn_builder.rules.overlays import REQUIREMENT_OVERLAYS
from nwn_builder.rules.progression import (
    SavingThrows,
    base_attack_bonus,
    hit_die_value,
    saving_throws,
    total_hit_points,
)
from nwn_builder.rules.requirements import (
    RequirementCheck,
    check_class_requirements,
    get_complete_requirements,
)
from nwn_builder.rules.skills import (
    SkillInfo,
    SkillPointsInfo,
    SpendCheck,
    all_unspent_skill_points,
    can_spend_skill_points,
    cost_per_rank,
    is_class_skill,
    max_ranks_for_skill,
    recompute_skill_ranks,
    skill_info,
    skill_modifier,
    skill_points_for_level,
    skill_summary,
    total_ranks,
)
from nwn_builder.rules.validation import (
    validate_character,
    validate_character_progression,
)


__all__ = [
    # Attributes
    "point_cost",
    "total_point_cost",
    "increase_cost",
    "remaining_points",
    "modifier",
    "final_attributes",
    "validate_attribute_allocation",
    # Skills
    "SkillPointsInfo",
    "SkillInfo",
    "SpendCheck",
    "skill_points_for_level",
    "cost_per_rank",
    "is_class_skill",
    "max_ranks_for_skill",
    "total_ranks",
    "recompute_skill_ranks",
    "skill_modifier",
    "skill_info",
    "can_spend_skill_points",
    "all_unspent_skill_points",
    "skill_summary",
    # Feats
    "FeatSlot",
    "FeatCheck",
    "FeatStats",
    "feat_slots",
    "feat_stats",
    "automatic_feats",
    "racial_feats",
    "missing_automatic_feats",
    "add_missing_automatic_feats",
    "apply_racial_feats",
    "can_select_feat",
    "available_feats_for_slot",
    "add_feat_to_level",
    "remove_feat_from_level",
    # Progression
    "SavingThrows",
    "base_attack_bonus",
    "saving_throws",
    "total_hit_points",
    "hit_die_value",
    # Requirements
    "REQUIREMENT_OVERLAYS",
    "RequirementCheck",
    "check_class_requirements",
    "get_complete_requirements",
    # Validation
    "validate_character_progression",
    "validate_character",
]
