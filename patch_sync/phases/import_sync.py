"""
Import of a public pull request into the private monorepo.
"""

from rich.console import Console

from ..config import ImportConfig
from .phase import PhaseState
from .replay import ReplayPhase

console = Console()


class ImportSyncPhase(ReplayPhase):
    """
    Replays the commits of a pull request onto a new monorepo branch.

    The pull request ref is fetched into the public checkout, the commits
    between its merge-base with the base branch and its head are filtered,
    and each one is applied as a patch on a freshly created branch named
    after the pull request.
    """

    def __init__(self, config: ImportConfig):
        super().__init__(config.reader, config.writer, config.filter)
        self.config = config
        self.readable_name = f"Syncing changes from pull request #{config.pull_request_number}"

    def resolve_range(self) -> list[str]:
        self.reader.fetch_ref(self.config.remote, self.config.refspec)
        self.state = PhaseState.FETCHED

        # Pin FETCH_HEAD so later fetches cannot move the range
        head = self.reader.rev_parse("FETCH_HEAD") or "FETCH_HEAD"
        merge_base = self.reader.merge_base(head, self.config.base_branch)
        console.print(f"[dim]Merge base with {self.config.base_branch}: {merge_base[:8]}[/dim]")

        revisions = self.reader.ancestor_slice(merge_base, head)
        self.state = PhaseState.RANGE_RESOLVED
        return revisions or []

    def prepare_writer(self) -> None:
        branch = self.config.branch_name
        self.writer.checkout_branch(branch, self.config.target_branch)
        self.result.branch = branch
        console.print(f"[dim]Created branch {branch} from {self.config.target_branch}[/dim]")
