"""Working-tree reconciliation: categorize, partition, commit, scan."""

from .categorize import GitFile, categorize, categorize_entries
from .partition import (
    Action,
    CleanupItem,
    CommitError,
    CommitPlan,
    cycle_action,
    default_action,
    generate_commit_message,
    partition,
)
from .rules import Category, default_category_rules, validate_pattern

__all__ = [
    "Action",
    "Category",
    "CleanupItem",
    "CommitError",
    "CommitPlan",
    "GitFile",
    "categorize",
    "categorize_entries",
    "cycle_action",
    "default_action",
    "default_category_rules",
    "generate_commit_message",
    "partition",
    "validate_pattern",
]
