"""Shared fixtures: isolated config home and throwaway git repositories."""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Callable

import pytest


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep tests away from the real config and from any enclosing git repository."""
    monkeypatch.setenv("ZER0_HOME", str(tmp_path / ".zer0"))
    monkeypatch.delenv("ZER0_AGENT_TOKEN", raising=False)
    monkeypatch.setenv("GIT_CEILING_DIRECTORIES", str(tmp_path.parent))


@pytest.fixture
def git(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Callable[..., str]:
    """Return a helper that runs git with a fixed identity and no user config."""
    home = tmp_path / "git-home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")

    def run(cwd: Path, *args: str) -> str:
        result = subprocess.run(
            ["git", "-c", "commit.gpgsign=false", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()

    return run


@pytest.fixture
def make_repo(git: Callable[..., str]) -> Callable[..., Path]:
    """Create a repository on branch ``main`` with the given commit subjects."""

    def create(path: Path, *subjects: str) -> Path:
        path.mkdir(parents=True, exist_ok=True)
        git(path, "init", "-q")
        git(path, "symbolic-ref", "HEAD", "refs/heads/main")
        for index, subject in enumerate(subjects):
            (path / f"file{index}.txt").write_text(subject)
            git(path, "add", ".")
            git(path, "commit", "-q", "-m", subject)
        return path

    return create
