"""
Commit filters.

A filter is a pure, total function from Commit to Commit. Filters adapt a
commit when it crosses between the private monorepo and the public mirror:
dropping paths that must not leave the monorepo, moving directories to their
counterpart location, and rewriting messages.
"""

import fnmatch
from collections.abc import Callable, Iterable, Mapping
from pathlib import PurePosixPath

from .commit import DIFF_MARKER, Commit, FileDiff, format_path

Filter = Callable[[Commit], Commit]


def identity(commit: Commit) -> Commit:
    return commit


def compose(*filters: Filter) -> Filter:
    """Chain filters left to right."""

    def composed(commit: Commit) -> Commit:
        for commit_filter in filters:
            commit = commit_filter(commit)
        return commit

    return composed


def _as_dir(prefix: str) -> str:
    prefix = prefix.strip("/")
    return f"{prefix}/" if prefix else ""


def matches_pattern(path: str, pattern: str) -> bool:
    """Match a glob against the whole path or any single path component."""
    clean_pattern = pattern.rstrip("/")
    if fnmatch.fnmatch(path, pattern) or fnmatch.fnmatch(path, clean_pattern):
        return True
    return any(
        fnmatch.fnmatch(part, pattern) or fnmatch.fnmatch(part, clean_pattern)
        for part in PurePosixPath(path).parts
    )


def strip_paths(patterns: Iterable[str]) -> Filter:
    """Drop file diffs whose path matches any of the glob patterns."""
    patterns = tuple(patterns)

    def strip(commit: Commit) -> Commit:
        return commit.with_diffs(
            diff
            for diff in commit.diffs
            if not any(matches_pattern(diff.path, p) for p in patterns)
        )

    return strip


def keep_paths(prefixes: Iterable[str]) -> Filter:
    """
    Keep only file diffs under one of the directory prefixes.

    With no prefixes nothing is kept; pass identity to keep everything.
    """
    prefixes = tuple(_as_dir(p) for p in prefixes)

    def keep(commit: Commit) -> Commit:
        return commit.with_diffs(
            diff
            for diff in commit.diffs
            if any(diff.path.startswith(p) or diff.path == p.rstrip("/") for p in prefixes)
        )

    return keep


def _rewrite_header(body: str, new_path: str) -> str:
    lines = []
    in_header = True
    for line in body.splitlines(keepends=True):
        if line.startswith("@@") or line.startswith("GIT binary patch"):
            in_header = False
        if in_header:
            if line.startswith(DIFF_MARKER):
                line = f"{DIFF_MARKER}{format_path('a/', new_path)} {format_path('b/', new_path)}\n"
            elif line.startswith(("--- a/", '--- "a/')):
                line = f"--- {format_path('a/', new_path)}\n"
            elif line.startswith(("+++ b/", '+++ "b/')):
                line = f"+++ {format_path('b/', new_path)}\n"
        lines.append(line)
    return "".join(lines)


def move_directories(mapping: Mapping[str, str]) -> Filter:
    """
    Move file diffs from one directory to another.

    Keys and values are directory prefixes; the first key that matches a
    path wins. Paths matching no key are left where they are.
    """
    moves = [(_as_dir(old), _as_dir(new)) for old, new in mapping.items()]

    def move_diff(diff: FileDiff) -> FileDiff:
        for old, new in moves:
            if diff.path.startswith(old):
                new_path = new + diff.path[len(old):]
                if new_path == diff.path:
                    return diff
                return FileDiff(new_path, _rewrite_header(diff.body, new_path))
        return diff

    def move(commit: Commit) -> Commit:
        return commit.with_diffs(move_diff(diff) for diff in commit.diffs)

    return move


def prefix_message(prefix: str) -> Filter:
    """Prepend a marker such as '[sync]' to the commit message."""

    def add_prefix(commit: Commit) -> Commit:
        message = commit.header.message
        if not prefix or message.startswith(prefix):
            return commit
        return commit.with_message(f"{prefix} {message}")

    return add_prefix


def add_tracking_trailer(marker: str) -> Filter:
    """Append '<marker>: <source hash>' so later syncs know where to resume."""

    def add_trailer(commit: Commit) -> Commit:
        return commit.with_message(f"{commit.header.message}\n\n{marker}: {commit.id}")

    return add_trailer
