"""Value types for the directory sync domain."""

from dataclasses import dataclass


@dataclass
class ReconciliationStats:
    """Mutation counts from one reconciliation pass."""

    created: int = 0
    updated: int = 0
    deactivated: int = 0
    failed: int = 0
