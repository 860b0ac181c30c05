"""
Process execution for patch_sync.

All interaction with the git executable goes through ProcessRunner, which
wraps GitPython's command executor and returns captured output.
"""

from dataclasses import dataclass
from pathlib import Path

from git.cmd import Git
from rich.console import Console

from .errors import ShellCommandError

console = Console()


def _decode(value: bytes | str) -> str:
    if isinstance(value, bytes):
        # surrogateescape keeps non-UTF-8 patch bytes intact for write-back
        return value.decode("utf-8", errors="surrogateescape")
    return value


@dataclass(frozen=True)
class CommandResult:
    """Captured result of a finished process."""

    stdout: str
    stderr: str
    exit_status: int

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


class ProcessRunner:
    """Runs commands synchronously inside a working directory."""

    def __init__(self, cwd: Path, verbose: bool = False):
        self.cwd = Path(cwd)
        self.verbose = verbose
        self._git = Git(self.cwd)

    def run(self, executable: str, *args: str, check: bool = True) -> CommandResult:
        """
        Run a command to completion and capture its output.

        Args:
            executable: Program to run (e.g. "git")
            *args: Arguments passed to the program
            check: Raise ShellCommandError on a non-zero exit status

        Returns:
            CommandResult with stdout, stderr and the exit status
        """
        command = [executable, *args]
        if self.verbose:
            console.print(f"[dim]$ {' '.join(command)}[/dim]")

        status, stdout, stderr = self._git.execute(
            command,
            with_extended_output=True,
            with_exceptions=False,
            stdout_as_string=False,
            strip_newline_in_stdout=False,
        )
        result = CommandResult(
            stdout=_decode(stdout),
            stderr=_decode(stderr),
            exit_status=status,
        )

        if check and not result.ok:
            raise ShellCommandError(command, result.exit_status, result.stdout, result.stderr)
        return result

    def git(self, *args: str, check: bool = True) -> CommandResult:
        """Shorthand for running git."""
        return self.run("git", *args, check=check)
