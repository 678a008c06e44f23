"""Pytest fixtures for git-wt tests"""
import io
import tempfile
from pathlib import Path

import git
import pytest
from rich.console import Console

from git_wt.config import Config
from git_wt.models.worktree import GitRepository


@pytest.fixture
def temp_dir():
    """Create a temporary directory for testing."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def repo_root(temp_dir):
    """Root of the <owner>/<repo> layout."""
    root = temp_dir / "ghq"
    root.mkdir()
    return root


@pytest.fixture
def test_config(temp_dir, repo_root):
    """Configuration pointing every path into the temp directory."""
    return Config(
        repo_root=str(repo_root),
        global_hooks_dir=str(temp_dir / "hooks"),
        hook_shell="sh",
        github_token="test_token",
        command_timeout=30,
        hook_timeout=30,
    )


def _commit_file(repo: git.Repo, name: str, content: str, message: str) -> None:
    path = Path(repo.working_dir) / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)
    repo.index.add([name])
    repo.index.commit(message)


@pytest.fixture
def origin_repo(temp_dir):
    """Create a bare repository acting as the 'origin' remote."""
    repo = git.Repo.init(temp_dir / "origin.git", bare=True)
    yield repo
    repo.close()


@pytest.fixture
def git_repo(repo_root, origin_repo):
    """Create a real repository at <root>/test/test-repo with main pushed to origin."""
    repo_path = repo_root / "test" / "test-repo"
    repo_path.mkdir(parents=True)

    repo = git.Repo.init(repo_path)
    repo.config_writer().set_value("user", "name", "Test User").release()
    repo.config_writer().set_value("user", "email", "test@example.com").release()

    _commit_file(repo, "README.md", "# Test Repository\n", "Initial commit")
    repo.git.branch("-M", "main")

    repo.create_remote("origin", origin_repo.git_dir)
    repo.git.push("-u", "origin", "main")

    yield repo

    repo.close()


@pytest.fixture
def remote_only_branch(git_repo):
    """Push a branch to origin and delete its local copy. Returns the branch name."""
    name = "feature/remote-only"
    git_repo.git.checkout("-b", name)
    _commit_file(git_repo, "remote.txt", "remote\n", "Remote-only work")
    git_repo.git.push("origin", name)
    git_repo.git.checkout("main")
    git_repo.git.branch("-D", name)
    return name


@pytest.fixture
def repository(git_repo):
    """GitRepository record for git_repo."""
    return GitRepository(path=git_repo.working_dir, name=Path(git_repo.working_dir).name)


@pytest.fixture
def output():
    """Console writing to a buffer; read it with output.file.getvalue()."""
    return Console(file=io.StringIO(), width=200, force_terminal=False)
