"""
CLI entry point for patch_sync.

Provides commands to import public pull requests into the private monorepo
and to export monorepo commits to the public mirror.
"""

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from .config import SyncConfig, create_default_config
from .errors import SyncError
from .phases import ExportSyncPhase, ImportSyncPhase, VerifyCleanPhase
from .pipeline import run_pipeline

console = Console()

config_option = click.option(
    "--config",
    "-c",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=Path("patch_sync.yaml"),
    help="Path to the sync configuration file",
)


def load_config(config_path: Path) -> SyncConfig:
    try:
        return SyncConfig.from_yaml(config_path)
    except FileNotFoundError:
        console.print(f"[red]Config file not found: {config_path}[/red]")
        console.print("Run 'patch-sync init' to create a configuration file.")
        raise SystemExit(1)
    except Exception as e:
        console.print(f"[red]Error loading config: {e}[/red]")
        raise SystemExit(1)


@click.group()
@click.version_option(package_name="patch-sync")
def cli():
    """patch-sync - Replay commits between a private monorepo and its public mirror."""
    pass


@cli.command()
@click.option(
    "--source-repo",
    "-s",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    required=True,
    help="Path to the private monorepo checkout",
)
@click.option(
    "--destination-repo",
    "-d",
    type=click.Path(exists=True, file_okay=False, dir_okay=True, path_type=Path),
    required=True,
    help="Path to the public mirror checkout",
)
@click.option(
    "--project",
    "-j",
    "projects",
    multiple=True,
    help="Project (directory) path to sync (can be specified multiple times)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    default=Path("patch_sync.yaml"),
    help="Output config file path",
)
def init(
    source_repo: Path,
    destination_repo: Path,
    projects: tuple[str, ...],
    output: Path,
):
    """Initialize a new sync configuration file."""
    config = create_default_config(
        source_repo_path=source_repo,
        destination_repo_path=destination_repo,
        projects=list(projects) if projects else None,
    )

    config.to_yaml(output)
    console.print(f"[green]Created configuration file: {output}[/green]")
    if projects:
        console.print(f"  Projects: {len(projects)}")
    console.print("\nEdit this file to add more projects and customize settings.")


@cli.command(name="import-pr")
@config_option
@click.argument("pull_request_number", type=int)
def import_pr(config_path: Path, pull_request_number: int):
    """Import the commits of a public pull request into a new monorepo branch."""
    config = load_config(config_path)

    try:
        import_config = config.import_config(pull_request_number)
        run_pipeline([
            VerifyCleanPhase(import_config.writer),
            ImportSyncPhase(import_config),
        ])
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    except SyncError:
        raise SystemExit(1)


@cli.command()
@config_option
def export(config_path: Path):
    """Export new monorepo commits to the public mirror."""
    config = load_config(config_path)

    try:
        export_config = config.export_config()
        run_pipeline([
            VerifyCleanPhase(export_config.writer),
            ExportSyncPhase(export_config),
        ])
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)
    except SyncError:
        raise SystemExit(1)


@cli.command()
@config_option
@click.argument("pull_request_number", type=int)
def preview(config_path: Path, pull_request_number: int):
    """Preview the commits a pull request import would apply."""
    config = load_config(config_path)

    try:
        phase = ImportSyncPhase(config.import_config(pull_request_number))
        commits = phase.get_filtered_commits()
    except (SyncError, ValueError) as e:
        console.print(f"[red]{e}[/red]")
        raise SystemExit(1)

    if not commits:
        console.print("[green]No commits to sync.[/green]")
        return

    table = Table(title=f"Pending Commits ({len(commits)})")
    table.add_column("Hash", style="cyan", width=10)
    table.add_column("Date", style="green", width=20)
    table.add_column("Author", style="yellow", width=25)
    table.add_column("Status", width=10)
    table.add_column("Message", style="white")

    for commit in commits:
        first_line = commit.header.message.split("\n")[0]
        message = first_line[:60] + ("..." if len(first_line) > 60 else "")
        if commit.is_merge:
            status = "[red]merge[/red]"
        elif commit.is_valid():
            status = "apply"
        else:
            status = "[dim]skip[/dim]"
        table.add_row(
            commit.short_id,
            commit.header.timestamp.strftime("%Y-%m-%d %H:%M"),
            commit.header.author_name,
            status,
            message,
        )

    console.print(table)
    console.print(f"\nBranch: [cyan]{phase.config.branch_name}[/cyan]")


if __name__ == "__main__":
    cli()
