"""
Sequential execution of sync phases.
"""

from collections.abc import Sequence

from rich.console import Console

from .errors import SyncError
from .phases import Phase, SyncResult

console = Console()


def run_pipeline(phases: Sequence[Phase]) -> list[SyncResult]:
    """
    Run phases one after another, stopping at the first failure.

    Errors are reported and re-raised unchanged; cleaning up a partially
    applied branch is left to the caller.
    """
    results: list[SyncResult] = []
    for phase in phases:
        console.print(f"\n[bold]{phase.readable_name}[/bold]")
        try:
            results.append(phase.run())
        except SyncError as e:
            _print_failure(phase, e)
            raise

    _print_summary(results)
    return results


def _print_failure(phase: Phase, error: SyncError) -> None:
    console.print(f"\n[red]✗ {phase.readable_name} failed:[/red] {error}")
    applied = phase.result.applied
    if applied:
        console.print(f"  Commits applied before the failure: {len(applied)}")
        for source, dest in applied.items():
            console.print(f"    • {source[:8]} → {dest[:8]}")
    if phase.result.branch:
        console.print(f"  Branch left in place: [cyan]{phase.result.branch}[/cyan]")


def _print_summary(results: list[SyncResult]) -> None:
    console.print("\n[bold]Sync Summary:[/bold]")
    synced = sum(r.commits_synced for r in results)
    skipped = sum(len(r.skipped) for r in results)
    unresolved = sum(len(r.unresolved) for r in results)

    console.print(f"  [green]✓ Synced {synced} commits[/green]")
    if skipped:
        console.print(f"  [dim]Skipped (empty after filtering): {skipped}[/dim]")
    if unresolved:
        console.print(f"  [yellow]Unresolvable revisions: {unresolved}[/yellow]")
    for result in results:
        if result.branch:
            console.print(f"  Branch: [cyan]{result.branch}[/cyan]")
