"""
Precondition checks run before any history is written.
"""

from ..repo import GitRepository
from .phase import Phase, PhaseState, SyncResult


class VerifyCleanPhase(Phase):
    """Fails when a checkout has uncommitted or untracked changes."""

    def __init__(self, repo: GitRepository):
        super().__init__()
        self.repo = repo
        self.readable_name = f"Verifying {repo.path} is clean"

    def run(self) -> SyncResult:
        try:
            self.repo.ensure_clean()
        except Exception:
            self.state = PhaseState.FAILED
            raise
        self.state = PhaseState.DONE
        return self.result
