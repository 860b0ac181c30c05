"""
Export of monorepo commits to the public mirror.
"""

from rich.console import Console

from ..config import ExportConfig
from .phase import PhaseState
from .replay import ReplayPhase

console = Console()


class ExportSyncPhase(ReplayPhase):
    """
    Replays new monorepo commits onto the public mirror's branch.

    The last exported source commit is read back from the tracking trailer in
    the mirror's history, so every run continues where the previous one
    stopped. Without a trailer the whole source history is considered.
    """

    def __init__(self, config: ExportConfig):
        super().__init__(config.reader, config.writer, config.filter)
        self.config = config
        self.readable_name = (
            f"Exporting {config.source_branch} to {config.destination_branch}"
        )

    def resolve_range(self) -> list[str]:
        last_synced = self.config.writer.find_last_synced_revision(
            self.config.marker, self.config.destination_branch
        )
        head = self.reader.rev_parse(self.config.source_branch) or self.config.source_branch

        if last_synced:
            console.print(f"[dim]Last synced commit: {last_synced[:8]}[/dim]")
            revisions = self.reader.ancestor_slice(last_synced, head)
            if revisions is None:
                console.print(
                    f"[yellow]⚠ {last_synced[:8]} is not an ancestor of "
                    f"{self.config.source_branch}, nothing to export[/yellow]"
                )
        else:
            console.print("[dim]No previous sync found - will sync all matching commits[/dim]")
            revisions = self.reader.full_history(head)

        self.state = PhaseState.RANGE_RESOLVED
        return revisions or []

    def prepare_writer(self) -> None:
        self.writer.switch_branch(self.config.destination_branch)
        self.result.branch = self.config.destination_branch
