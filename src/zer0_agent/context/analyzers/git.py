"""Git analyzer for extracting repository identity and working-tree activity."""

from __future__ import annotations

import os
import re
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from zer0_agent.monitoring.logging import get_logger

logger = get_logger(__name__)

GIT_TIMEOUT_SECONDS = 5
COMMIT_LIMIT = 5

# Keep `git status` from refreshing the index and never wait on credential prompts
GIT_ENV_OVERRIDES = {
    "GIT_OPTIONAL_LOCKS": "0",
    "GIT_TERMINAL_PROMPT": "0",
}

# https://host/owner/repo.git, git@host:owner/repo.git, git@host:repo
_REPO_NAME_PATTERN = re.compile(r"[/:]([^/:]+?)(?:\.git)?/*$", re.IGNORECASE)


@dataclass
class VcsSignal:
    """Raw, unredacted signals read from a git working tree."""

    repo_name: Optional[str] = None
    branch: Optional[str] = None
    recent_commits: List[str] = field(default_factory=list)
    dirty_file_count: int = 0
    commits_ahead: int = 0


class GitAnalyzer:
    """Runs read-only git queries against a directory.

    Every query is bounded by ``GIT_TIMEOUT_SECONDS``. A query that fails,
    times out, or cannot start only loses its own field.
    """

    def __init__(self, root_path: Path, timeout: float = GIT_TIMEOUT_SECONDS, commit_limit: int = COMMIT_LIMIT):
        """Initialize the git analyzer.

        Args:
            root_path: Directory to query
            timeout: Per-query timeout in seconds
            commit_limit: Maximum number of recent commit subjects to fetch
        """
        self.root_path = Path(root_path)
        self.timeout = timeout
        self.commit_limit = commit_limit

    def _run_git(self, *args: str) -> Optional[str]:
        """Run a git command and return its stripped stdout, or None on any failure."""
        env = {**os.environ, **GIT_ENV_OVERRIDES}
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.root_path,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                env=env,
                check=True,
            )
        except subprocess.CalledProcessError as e:
            logger.debug("context.git.command_failed", command=args[0], returncode=e.returncode)
            return None
        except subprocess.TimeoutExpired:
            logger.debug("context.git.timeout", command=args[0], timeout=self.timeout)
            return None
        except FileNotFoundError:
            logger.debug("context.git.not_found")
            return None
        except OSError as e:
            logger.debug("context.git.os_error", command=args[0], error=type(e).__name__)
            return None
        return result.stdout.strip()

    def is_git_repo(self) -> bool:
        return self._run_git("rev-parse", "--is-inside-work-tree") == "true"

    def analyze(self) -> VcsSignal:
        """Collect git signals for the directory.

        Returns:
            VcsSignal, empty when the directory is not inside a work tree
        """
        signal = VcsSignal()

        if not self.is_git_repo():
            logger.debug("context.git.not_a_repo")
            return signal

        signal.repo_name = self._get_repo_name()
        signal.branch = self._run_git("branch", "--show-current") or None
        signal.recent_commits = self._get_recent_commits()
        signal.dirty_file_count = self._count_dirty_files()
        if signal.branch:
            signal.commits_ahead = self._count_commits_ahead()

        logger.debug(
            "context.git.complete",
            has_branch=signal.branch is not None,
            commits=len(signal.recent_commits),
            dirty=signal.dirty_file_count,
            ahead=signal.commits_ahead,
        )
        return signal

    def _get_repo_name(self) -> Optional[str]:
        """Name the repository after its origin remote, else its top-level directory."""
        remote = self._run_git("remote", "get-url", "origin")
        if remote:
            name = repo_name_from_url(remote)
            if name:
                return name

        top_level = self._run_git("rev-parse", "--show-toplevel")
        if top_level:
            return Path(top_level).name or None
        return None

    def _get_recent_commits(self) -> List[str]:
        """Recent commit subjects with relative dates, newest first."""
        log_output = self._run_git(
            "log",
            "--no-decorate",
            f"-{self.commit_limit}",
            "--format=%s (%cr)",
        )
        if not log_output:
            return []
        return [line for line in log_output.split("\n") if line.strip()]

    def _count_dirty_files(self) -> int:
        # One porcelain line per path: staged, unstaged and untracked alike
        status = self._run_git("status", "--porcelain")
        if not status:
            return 0
        return len([line for line in status.split("\n") if line.strip()])

    def _count_commits_ahead(self) -> int:
        ahead = self._run_git("rev-list", "--count", "@{upstream}..HEAD")
        if not ahead:
            return 0
        try:
            return max(int(ahead), 0)
        except ValueError:
            return 0


def repo_name_from_url(url: str) -> Optional[str]:
    """Extract the repository name from a remote URL, without a ``.git`` suffix."""
    match = _REPO_NAME_PATTERN.search(url.strip())
    if not match:
        return None
    return match.group(1) or None


def gather_vcs(cwd: Optional[Path] = None) -> VcsSignal:
    """Collect git signals for ``cwd`` (default: the current directory). Never raises."""
    return GitAnalyzer(Path(cwd) if cwd is not None else Path.cwd()).analyze()
