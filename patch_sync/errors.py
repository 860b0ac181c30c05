"""
Exception hierarchy for patch_sync.

Every fatal condition raised by the sync engine derives from SyncError so
callers (the pipeline and the CLI) can report it uniformly.
"""


class SyncError(Exception):
    """Base class for all sync failures."""


class ShellCommandError(SyncError):
    """An external command exited with a non-zero status."""

    def __init__(self, command: list[str], exit_status: int, stdout: str, stderr: str):
        self.command = command
        self.exit_status = exit_status
        self.stdout = stdout
        self.stderr = stderr
        super().__init__(
            f"Command '{' '.join(command)}' failed with exit status {exit_status}: "
            f"{stderr.strip()}"
        )


class RepositoryError(SyncError):
    """A repository operation could not be completed."""


class FetchError(RepositoryError):
    """The remote is unreachable or the requested ref does not exist."""


class MergeBaseError(RepositoryError):
    """Two revisions share no common ancestor."""


class BranchExistsError(RepositoryError):
    """A branch with the generated name already exists."""

    def __init__(self, branch: str):
        self.branch = branch
        super().__init__(
            f"Branch '{branch}' already exists; delete or rename it before re-running"
        )


class DirtyWorkingTreeError(RepositoryError):
    """The checkout has uncommitted or untracked changes."""


class PatchApplyError(RepositoryError):
    """A commit's patch does not apply cleanly to the current tree."""

    def __init__(self, commit_id: str, stderr: str):
        self.commit_id = commit_id
        self.stderr = stderr
        super().__init__(f"Patch for {commit_id[:8]} does not apply: {stderr.strip()}")


class LinearHistoryError(SyncError):
    """A merge commit was found in the change set to replay."""

    def __init__(self, commit_id: str, applied: dict[str, str]):
        self.commit_id = commit_id
        # source hash -> new hash for everything applied before the failure
        self.applied = dict(applied)
        super().__init__(
            f"Unrecoverable error, merge commit {commit_id} found in change set. "
            "A linear git history is required"
        )
