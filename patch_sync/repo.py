"""
Repository abstraction for patch_sync.

A GitRepository is bound to one physical checkout and exposes two capability
sets: reading history (fetching, walking ancestry, resolving commits) and
writing history (creating branches, applying commits as patches). The same
checkout can be the reader in one phase and the writer in another.
"""

import re
import tempfile
from pathlib import Path
from typing import Protocol

from git import Repo
from git.exc import InvalidGitRepositoryError, NoSuchPathError

from .commit import HEADER_FORMAT, Commit, parse_header, split_diff
from .errors import (
    BranchExistsError,
    DirtyWorkingTreeError,
    FetchError,
    MergeBaseError,
    PatchApplyError,
)
from .shell import ProcessRunner

# Diff options shared by every payload-producing command
DIFF_OPTIONS = ("--binary", "--no-color", "--no-renames", "--no-ext-diff")


class HistoryReader(Protocol):
    """Read-side capabilities used by a sync phase."""

    def fetch_ref(self, remote: str, refspec: str) -> None: ...

    def merge_base(self, a: str, b: str) -> str: ...

    def rev_parse(self, revision: str) -> str | None: ...

    def ancestor_slice(self, base: str, head: str) -> list[str] | None: ...

    def full_history(self, head: str) -> list[str]: ...

    def resolve_commit(self, revision: str) -> Commit | None: ...

    def find_last_synced_revision(self, marker: str, branch: str | None = None) -> str | None: ...


class HistoryWriter(Protocol):
    """Write-side capabilities used by a sync phase."""

    def is_clean(self) -> bool: ...

    def checkout_branch(self, name: str, start_point: str | None = None) -> None: ...

    def switch_branch(self, name: str) -> None: ...

    def apply_patch(self, commit: Commit) -> str: ...


class GitRepository:
    """A git checkout usable as a history reader and a history writer."""

    def __init__(self, path: Path, verbose: bool = False):
        """Bind to a checkout, failing early if it is not a git repository."""
        self.path = Path(path).resolve()
        try:
            Repo(self.path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise ValueError(f"Not a valid git repository: {self.path}") from e
        self.runner = ProcessRunner(self.path, verbose=verbose)

    def __repr__(self) -> str:
        return f"GitRepository({str(self.path)!r})"

    # Reader role

    def fetch_ref(self, remote: str, refspec: str) -> None:
        """Fetch a remote ref into FETCH_HEAD."""
        result = self.runner.git("fetch", remote, refspec, check=False)
        if not result.ok:
            raise FetchError(
                f"Could not fetch '{refspec}' from '{remote}': {result.stderr.strip()}"
            )

    def merge_base(self, a: str, b: str) -> str:
        """Return the nearest common ancestor of two revisions."""
        result = self.runner.git("merge-base", a, b, check=False)
        base = result.stdout.strip()
        if not result.ok or not base:
            raise MergeBaseError(f"No common ancestor between '{a}' and '{b}'")
        return base

    def rev_parse(self, revision: str) -> str | None:
        """Resolve a revision to a full commit hash, or None if unknown."""
        result = self.runner.git(
            "rev-parse", "--verify", "--quiet", f"{revision}^{{commit}}", check=False
        )
        return result.stdout.strip() if result.ok else None

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        result = self.runner.git(
            "merge-base", "--is-ancestor", ancestor, descendant, check=False
        )
        return result.ok

    def ancestor_slice(self, base: str, head: str) -> list[str] | None:
        """
        Get the revisions between base (exclusive) and head (inclusive).

        Returns the path oldest first, or None when head does not descend
        from base.
        """
        if not self.is_ancestor(base, head):
            return None
        result = self.runner.git(
            "rev-list", "--reverse", "--topo-order", "--ancestry-path", f"{base}..{head}"
        )
        return result.stdout.split()

    def full_history(self, head: str) -> list[str]:
        """Get every ancestor of head, oldest first."""
        result = self.runner.git("rev-list", "--reverse", "--topo-order", head)
        return result.stdout.split()

    def resolve_commit(self, revision: str) -> Commit | None:
        """Build a Commit for a revision, or None if it cannot be resolved."""
        shown = self.runner.git(
            "show", "-s", f"--format={HEADER_FORMAT}", f"{revision}^{{commit}}", check=False
        )
        if not shown.ok:
            return None
        header = parse_header(shown.stdout)

        if header.parents:
            # Payload is always relative to the first parent
            diff = self.runner.git(
                "-c", "core.quotepath=off", "diff", *DIFF_OPTIONS,
                header.parents[0], header.id,
            )
        else:
            diff = self.runner.git(
                "-c", "core.quotepath=off", "show", "--format=", *DIFF_OPTIONS, header.id
            )

        return Commit(header=header, diffs=split_diff(diff.stdout))

    def find_last_synced_revision(
        self,
        marker: str,
        branch: str | None = None,
        max_count: int = 100,
    ) -> str | None:
        """
        Find the last source revision recorded by a '<marker>: <hash>' trailer.

        Searches the most recent commits of branch (HEAD by default). Returns
        None if no synced commits are found.
        """
        result = self.runner.git(
            "log", f"--max-count={max_count}", "--format=%B%x00", branch or "HEAD", check=False
        )
        if not result.ok:
            return None

        pattern = re.compile(rf"^{re.escape(marker)}:\s*([a-f0-9]{{40}})\s*$", re.MULTILINE)
        for message in result.stdout.split("\x00"):
            match = pattern.search(message)
            if match:
                return match.group(1)
        return None

    # Writer role

    def current_branch(self) -> str:
        return self.runner.git("rev-parse", "--abbrev-ref", "HEAD").stdout.strip()

    def head_revision(self) -> str:
        return self.runner.git("rev-parse", "HEAD").stdout.strip()

    def is_clean(self) -> bool:
        """Check there are no uncommitted changes or untracked files."""
        return not self.runner.git("status", "--porcelain").stdout.strip()

    def ensure_clean(self) -> None:
        if not self.is_clean():
            raise DirtyWorkingTreeError(f"Working tree is not clean: {self.path}")

    def branch_exists(self, name: str) -> bool:
        result = self.runner.git(
            "rev-parse", "--verify", "--quiet", f"refs/heads/{name}", check=False
        )
        return result.ok

    def checkout_branch(self, name: str, start_point: str | None = None) -> None:
        """Create a new branch and switch to it, refusing to reuse a name."""
        if self.branch_exists(name):
            raise BranchExistsError(name)
        args = ["checkout", "--quiet", "-b", name]
        if start_point:
            args.append(start_point)
        self.runner.git(*args)

    def switch_branch(self, name: str) -> None:
        """Switch to an existing branch."""
        self.runner.git("checkout", "--quiet", name)

    def apply_patch(self, commit: Commit) -> str:
        """
        Apply a commit's payload and record it as a new commit.

        The original author, author date and message are preserved. Returns
        the hash of the new commit.
        """
        with tempfile.TemporaryDirectory() as tmpdir:
            patch_file = Path(tmpdir) / f"{commit.id}.patch"
            patch_file.write_bytes(commit.patch.encode("utf-8", errors="surrogateescape"))
            applied = self.runner.git(
                "apply", "--index", "--whitespace=nowarn", str(patch_file), check=False
            )
        if not applied.ok:
            raise PatchApplyError(commit.id, applied.stderr)

        header = commit.header
        self.runner.git(
            "commit",
            "--quiet",
            "--no-verify",
            "--allow-empty-message",
            "-m", header.message,
            "--author", header.author,
            "--date", header.timestamp.isoformat(),
        )
        return self.head_revision()
