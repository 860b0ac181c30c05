"""Pytest configuration and fixtures for patch_sync tests."""

import tempfile
from pathlib import Path

import pytest
from git import Actor, Repo


def _init_repo(repo_path: Path, readme: str) -> Repo:
    repo_path.mkdir()

    # Initialize git repo
    repo = Repo.init(repo_path)

    # Configure git user
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    # Create initial commit
    (repo_path / "README.md").write_text(readme)
    repo.index.add(["README.md"])
    repo.index.commit("Initial commit")
    repo.git.branch("-M", "main")
    return repo


def _commit_file(
    repo: Repo,
    rel_path: str,
    content: str,
    message: str,
    author: Actor | None = None,
) -> str:
    """Write a file, commit it on the current branch and return the hash."""
    path = Path(repo.working_tree_dir) / rel_path
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([rel_path])
    return repo.index.commit(message, author=author, committer=author).hexsha


def _open_pull_request(repo: Repo, number: int, head: str) -> None:
    """Point refs/pull/<number>/head at a commit, the way GitHub does."""
    repo.git.update_ref(f"refs/pull/{number}/head", head)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def commit_file():
    return _commit_file


@pytest.fixture
def open_pull_request():
    return _open_pull_request


@pytest.fixture
def github_repo(temp_dir: Path):
    """Create the hosted public repository: a root commit plus one commit on main."""
    repo_path = temp_dir / "github"
    repo = _init_repo(repo_path, "# Public Repo")
    _commit_file(repo, "base.txt", "base\n", "Add base file")
    yield repo_path


@pytest.fixture
def mirror_repo(temp_dir: Path, github_repo: Path):
    """Clone the hosted repository to act as the local public checkout."""
    repo_path = temp_dir / "mirror"
    repo = Repo.clone_from(str(github_repo), str(repo_path))
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()
    yield repo_path


@pytest.fixture
def monorepo(temp_dir: Path):
    """Create a temporary git repository to act as the private monorepo."""
    repo_path = temp_dir / "monorepo"
    _init_repo(repo_path, "# Private Repo")
    yield repo_path


@pytest.fixture
def public_repo(temp_dir: Path):
    """Create a standalone public repository without a remote."""
    repo_path = temp_dir / "public"
    _init_repo(repo_path, "# Public Repo")
    yield repo_path
