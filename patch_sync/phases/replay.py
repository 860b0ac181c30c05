"""
Commit replay shared by the import and export phases.

A replay phase resolves a range of revisions in its reader repository, turns
them into filtered Commits and applies them one by one to its writer
repository. Subclasses decide how the range is found and which branch of the
writer receives the patches.
"""

from abc import abstractmethod

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from ..commit import Commit
from ..errors import DirtyWorkingTreeError, LinearHistoryError
from ..filters import Filter
from ..repo import HistoryReader, HistoryWriter
from .phase import Phase, PhaseState, SyncResult

console = Console()


class ReplayPhase(Phase):
    """Replays a linear slice of history from a reader onto a writer."""

    def __init__(self, reader: HistoryReader, writer: HistoryWriter, commit_filter: Filter):
        super().__init__()
        self.reader = reader
        self.writer = writer
        self.commit_filter = commit_filter

    @abstractmethod
    def resolve_range(self) -> list[str]:
        """Return the revisions to replay, oldest first."""

    @abstractmethod
    def prepare_writer(self) -> None:
        """Put the writer on the branch that receives the patches."""

    def get_source_commits(self) -> list[Commit]:
        """Resolve the range to Commits, deduplicated and in range order."""
        commits: dict[str, Commit] = {}
        for revision in self.resolve_range():
            commit = self.reader.resolve_commit(revision)
            if commit is None:
                self.result.unresolved.append(revision)
                console.print(f"  [yellow]⚠ Skipping unresolvable revision {revision}[/yellow]")
                continue
            commits.setdefault(commit.id, commit)
        return list(commits.values())

    def get_filtered_commits(self) -> list[Commit]:
        commits = [self.commit_filter(commit) for commit in self.get_source_commits()]
        self.state = PhaseState.FILTERED
        return commits

    def run(self) -> SyncResult:
        try:
            if not self.writer.is_clean():
                raise DirtyWorkingTreeError(f"Working tree is not clean: {self.writer!r}")

            commits = self.get_filtered_commits()
            if not commits:
                console.print("[green]No commits to sync.[/green]")
                self.state = PhaseState.DONE
                return self.result

            self.prepare_writer()
            self.state = PhaseState.BRANCH_CREATED

            self._apply_commits(commits)
            self.state = PhaseState.DONE
            return self.result
        except Exception:
            self.state = PhaseState.FAILED
            raise

    def _apply_commits(self, commits: list[Commit]) -> None:
        self.state = PhaseState.APPLYING
        console.print(f"\n[bold]Applying {len(commits)} commits...[/bold]\n")

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Applying commits...", total=len(commits))

            for commit in commits:
                progress.update(task, description=f"Applying {commit.short_id}...")

                if commit.is_merge:
                    raise LinearHistoryError(commit.id, self.result.applied)

                if commit.is_valid():
                    new_hash = self.writer.apply_patch(commit)
                    self.result.applied[commit.id] = new_hash
                    files = len(commit.paths)
                    console.print(
                        f"  [green]✓[/green] {commit.short_id} → {new_hash[:8]}"
                        f" ({files} file{'' if files == 1 else 's'})"
                    )
                else:
                    self.result.skipped.append(commit.id)
                    console.print(f"  [dim]Skipped {commit.short_id}: no changes after filtering[/dim]")

                progress.advance(task)
