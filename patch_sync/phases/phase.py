"""
Base types shared by all sync phases.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class PhaseState(Enum):
    """Lifecycle of a phase. FAILED is reachable from any other state."""

    IDLE = "idle"
    FETCHED = "fetched"
    RANGE_RESOLVED = "range-resolved"
    FILTERED = "filtered"
    BRANCH_CREATED = "branch-created"
    APPLYING = "applying"
    DONE = "done"
    FAILED = "failed"


@dataclass
class SyncResult:
    """Result of a phase, kept up to date while it runs."""

    applied: dict[str, str] = field(default_factory=dict)  # source_hash -> dest_hash
    skipped: list[str] = field(default_factory=list)  # empty after filtering
    unresolved: list[str] = field(default_factory=list)
    branch: str | None = None

    @property
    def commits_synced(self) -> int:
        return len(self.applied)


class Phase(ABC):
    """One step of a sync pipeline."""

    readable_name: str = "Unnamed phase"

    def __init__(self):
        self.state = PhaseState.IDLE
        self.result = SyncResult()

    @abstractmethod
    def run(self) -> SyncResult:
        """Run the phase to completion, raising on any fatal condition."""
