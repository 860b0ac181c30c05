"""Tests for the process runner, the verify phase and the pipeline."""

from pathlib import Path

import pytest

from patch_sync.errors import DirtyWorkingTreeError, ShellCommandError, SyncError
from patch_sync.phases import Phase, PhaseState, SyncResult, VerifyCleanPhase
from patch_sync.pipeline import run_pipeline
from patch_sync.repo import GitRepository
from patch_sync.shell import ProcessRunner


class RecordingPhase(Phase):
    """Phase that records its execution order and optionally fails."""

    def __init__(self, name: str, calls: list[str], error: SyncError | None = None):
        super().__init__()
        self.readable_name = name
        self.calls = calls
        self.error = error

    def run(self) -> SyncResult:
        self.calls.append(self.readable_name)
        if self.error:
            self.result.applied["a" * 40] = "b" * 40
            self.state = PhaseState.FAILED
            raise self.error
        self.state = PhaseState.DONE
        return self.result


class TestProcessRunner:
    """Tests for ProcessRunner."""

    def test_run_captures_output(self, monorepo: Path):
        result = ProcessRunner(monorepo).git("rev-parse", "--abbrev-ref", "HEAD")
        assert result.ok
        assert result.exit_status == 0
        assert result.stdout == "main\n"

    def test_failure_raises_with_stderr(self, monorepo: Path):
        """Test a non-zero exit status surfaces the captured stderr."""
        with pytest.raises(ShellCommandError) as exc_info:
            ProcessRunner(monorepo).git("rev-parse", "--verify", "no-such-branch")

        error = exc_info.value
        assert error.exit_status != 0
        assert error.command[:2] == ["git", "rev-parse"]
        assert error.stderr

    def test_failure_without_check(self, monorepo: Path):
        """Test callers can inspect a failure instead of raising."""
        result = ProcessRunner(monorepo).git("rev-parse", "--verify", "no-such-branch", check=False)
        assert not result.ok
        assert result.exit_status != 0


class TestVerifyCleanPhase:
    """Tests for VerifyCleanPhase."""

    def test_clean_repo(self, monorepo: Path):
        phase = VerifyCleanPhase(GitRepository(monorepo))
        phase.run()
        assert phase.state is PhaseState.DONE

    def test_dirty_repo(self, monorepo: Path):
        (monorepo / "README.md").write_text("changed")
        phase = VerifyCleanPhase(GitRepository(monorepo))

        with pytest.raises(DirtyWorkingTreeError):
            phase.run()
        assert phase.state is PhaseState.FAILED


class TestRunPipeline:
    """Tests for run_pipeline."""

    def test_runs_phases_in_order(self):
        calls: list[str] = []
        results = run_pipeline([RecordingPhase("first", calls), RecordingPhase("second", calls)])

        assert calls == ["first", "second"]
        assert len(results) == 2

    def test_stops_at_first_failure(self):
        """Test the failing phase's error propagates unchanged."""
        calls: list[str] = []
        error = SyncError("boom")

        with pytest.raises(SyncError) as exc_info:
            run_pipeline([
                RecordingPhase("first", calls),
                RecordingPhase("second", calls, error=error),
                RecordingPhase("third", calls),
            ])

        assert exc_info.value is error
        assert calls == ["first", "second"]
