"""Shared fixtures: real git repositories in tmp_path, isolated from user config."""

import subprocess
from pathlib import Path

import pytest


def git(repo: Path, *args: str) -> str:
    """Run git in repo for test setup; fail the test on error."""
    result = subprocess.run(
        ["git", "-C", str(repo), *args],
        capture_output=True,
        text=True,
    )
    assert result.returncode == 0, f"git {' '.join(args)} failed: {result.stderr}"
    return result.stdout


def init_repo(path: Path, bare: bool = False) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    git(path, "init", "-q", *(["--bare"] if bare else []))
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    return path


def commit_file(repo: Path, name: str, content: str, message: str | None = None) -> str:
    """Write a file, stage it, commit it; return the new HEAD hash."""
    target = repo / name
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content)
    git(repo, "add", "--", name)
    git(repo, "commit", "-q", "-m", message or f"Update {name}")
    return git(repo, "rev-parse", "HEAD").strip()


def head(repo: Path) -> str:
    return git(repo, "rev-parse", "HEAD").strip()


@pytest.fixture(autouse=True)
def isolated_git_env(tmp_path_factory, monkeypatch):
    """Give every test a fixed identity and keep ~/.gitconfig out of the picture."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(home / ".config"))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.delenv("GITWAPP_CONFIG_DIR", raising=False)
    monkeypatch.delenv("SSH_AUTH_SOCK", raising=False)
    return home


@pytest.fixture
def repo(tmp_path) -> Path:
    """A repository on main with one commit containing README.md."""
    path = init_repo(tmp_path / "work")
    commit_file(path, "README.md", "hello\n", "Initial commit")
    return path.resolve()


@pytest.fixture
def empty_repo(tmp_path) -> Path:
    """A freshly initialized repository with no commits."""
    return init_repo(tmp_path / "empty").resolve()


@pytest.fixture
def origin(tmp_path) -> Path:
    """A bare repository to serve as origin."""
    return init_repo(tmp_path / "origin.git", bare=True).resolve()


@pytest.fixture
def cloned(repo, origin) -> Path:
    """repo with origin configured and main pushed, so both start at the same commit."""
    git(repo, "remote", "add", "origin", str(origin))
    git(repo, "push", "-q", "origin", "main")
    return repo


@pytest.fixture
def second_clone(tmp_path, cloned, origin) -> Path:
    """Another clone of origin, for producing commits the first clone hasn't fetched."""
    path = tmp_path / "other"
    subprocess.run(
        ["git", "clone", "-q", str(origin), str(path)],
        capture_output=True,
        check=True,
    )
    git(path, "checkout", "-q", "main")
    return path.resolve()
