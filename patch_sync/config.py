"""
Configuration handling for patch_sync.

Defines the YAML-backed configuration schema and the runtime bindings that
tie physical repositories to the reader and writer roles of a sync phase.
"""

from dataclasses import dataclass
from pathlib import Path

import yaml
from pydantic import BaseModel, Field

from .filters import (
    Filter,
    add_tracking_trailer,
    compose,
    identity,
    keep_paths,
    move_directories,
    prefix_message,
    strip_paths,
)
from .repo import GitRepository


class ProjectMapping(BaseModel):
    """Mapping configuration for a single project to sync."""

    # Path relative to private repo root
    private_path: str = Field(
        ..., description="Path to the project in the private monorepo"
    )
    # Path relative to public repo root (defaults to same as private_path)
    public_path: str | None = Field(
        None,
        description="Path in the public repo (defaults to same as private_path)",
    )
    enabled: bool = Field(default=True, description="Whether to sync this project")
    exclude_patterns: list[str] = Field(
        default_factory=list,
        description="Glob patterns, relative to the project, for files to exclude from sync",
    )

    @property
    def resolved_public_path(self) -> str:
        """Get the public path, defaulting to private path if not set."""
        return self.public_path or self.private_path


@dataclass
class ImportConfig:
    """Role bindings for importing a pull request into the monorepo."""

    pull_request_number: int
    # Public mirror checkout, where the pull request ref is fetched
    reader: GitRepository
    # Private monorepo checkout, where the patches are applied
    writer: GitRepository
    remote: str = "origin"
    base_branch: str = "main"
    target_branch: str = "main"
    branch_prefix: str = "patch-sync"
    source_kind: str = "github-pr"
    filter: Filter = identity

    @property
    def refspec(self) -> str:
        return f"refs/pull/{self.pull_request_number}/head"

    @property
    def branch_name(self) -> str:
        return f"{self.branch_prefix}-import-{self.source_kind}-{self.pull_request_number}"


@dataclass
class ExportConfig:
    """Role bindings for exporting monorepo commits to the public mirror."""

    # Private monorepo checkout
    reader: GitRepository
    # Public mirror checkout
    writer: GitRepository
    source_branch: str = "main"
    destination_branch: str = "main"
    marker: str = "synced_from"
    filter: Filter = identity


class SyncConfig(BaseModel):
    """Main configuration for patch_sync."""

    source_repo_path: Path = Field(
        ..., description="Path to the private monorepo checkout"
    )
    source_branch: str = Field(
        default="main", description="Default branch in the private repo"
    )

    destination_repo_path: Path = Field(
        ..., description="Path to the local checkout of the public mirror"
    )
    destination_remote: str = Field(
        default="origin",
        description="Remote of the public checkout that hosts pull request refs",
    )
    destination_branch: str = Field(
        default="main", description="Default branch in the public repo"
    )

    projects: list[ProjectMapping] = Field(
        default_factory=list, description="List of projects to synchronize"
    )

    # Global exclude patterns (applied to all projects)
    global_exclude_patterns: list[str] = Field(
        default_factory=lambda: [
            ".env",
            ".env.*",
            "*.secret",
            "*.secrets",
            ".secrets/",
            "__pycache__/",
            "*.pyc",
            "node_modules/",
        ],
        description="Patterns to exclude from all projects",
    )

    branch_prefix: str = Field(
        default="patch-sync",
        description="Prefix for branches created when importing pull requests",
    )
    source_kind: str = Field(
        default="github-pr",
        description="Kind of external change being imported, used in branch names",
    )
    commit_prefix: str = Field(
        default="[sync]",
        description="Prefix to add to commit messages when exporting",
    )
    tracking_marker: str = Field(
        default="synced_from",
        description="Trailer key recording the source commit of an exported commit",
    )
    verbose: bool = Field(
        default=False, description="Echo every git command that is run"
    )

    @classmethod
    def from_yaml(cls, path: Path) -> "SyncConfig":
        """Load configuration from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.model_validate(data)

    def to_yaml(self, path: Path) -> None:
        """Save configuration to a YAML file."""
        with open(path, "w") as f:
            yaml.dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                sort_keys=False,
            )

    def get_enabled_projects(self) -> list[ProjectMapping]:
        """Get only the enabled projects."""
        return [p for p in self.projects if p.enabled]

    def _project_excludes(self, public: bool) -> list[str]:
        patterns = []
        for project in self.get_enabled_projects():
            root = project.resolved_public_path if public else project.private_path
            root = root.strip("/")
            patterns += [f"{root}/{pattern}" for pattern in project.exclude_patterns]
        return patterns

    def export_filter(self) -> Filter:
        """Filter applied to monorepo commits on their way to the public mirror."""
        projects = self.get_enabled_projects()
        return compose(
            keep_paths(p.private_path for p in projects),
            strip_paths(self.global_exclude_patterns),
            strip_paths(self._project_excludes(public=False)),
            move_directories({p.private_path: p.resolved_public_path for p in projects}),
            prefix_message(self.commit_prefix),
            add_tracking_trailer(self.tracking_marker),
        )

    def import_filter(self) -> Filter:
        """Filter applied to pull request commits on their way into the monorepo."""
        projects = self.get_enabled_projects()
        return compose(
            keep_paths(p.resolved_public_path for p in projects),
            strip_paths(self.global_exclude_patterns),
            strip_paths(self._project_excludes(public=True)),
            move_directories({p.resolved_public_path: p.private_path for p in projects}),
        )

    def import_config(self, pull_request_number: int) -> ImportConfig:
        return ImportConfig(
            pull_request_number=pull_request_number,
            reader=GitRepository(self.destination_repo_path, verbose=self.verbose),
            writer=GitRepository(self.source_repo_path, verbose=self.verbose),
            remote=self.destination_remote,
            base_branch=self.destination_branch,
            target_branch=self.source_branch,
            branch_prefix=self.branch_prefix,
            source_kind=self.source_kind,
            filter=self.import_filter(),
        )

    def export_config(self) -> ExportConfig:
        return ExportConfig(
            reader=GitRepository(self.source_repo_path, verbose=self.verbose),
            writer=GitRepository(self.destination_repo_path, verbose=self.verbose),
            source_branch=self.source_branch,
            destination_branch=self.destination_branch,
            marker=self.tracking_marker,
            filter=self.export_filter(),
        )


def create_default_config(
    source_repo_path: Path,
    destination_repo_path: Path,
    projects: list[str] | None = None,
) -> SyncConfig:
    """Create a default configuration with sensible defaults."""
    project_mappings = []
    if projects:
        for project in projects:
            project_mappings.append(ProjectMapping(private_path=project))

    return SyncConfig(
        source_repo_path=source_repo_path,
        destination_repo_path=destination_repo_path,
        projects=project_mappings,
    )
