"""Context extractor that assembles the sanitized, size-bounded check-in payload."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from zer0_agent.context.analyzers import GitAnalyzer, ManifestAnalyzer, TodoAnalyzer
from zer0_agent.context.analyzers.git import VcsSignal
from zer0_agent.context.privacy import sanitize, sanitize_array
from zer0_agent.monitoring.logging import get_logger

logger = get_logger(__name__)

MAX_PAYLOAD_BYTES = 2000
TRUNCATED_LIST_LENGTH = 3

DEFAULT_BRANCHES = ("main", "master")
_BRANCH_PREFIX = re.compile(r"^(?:feat|feature|fix|chore|refactor|hotfix)/", re.IGNORECASE)
_BRANCH_SEPARATORS = re.compile(r"[-_]")


@dataclass(frozen=True)
class Context:
    """The only structure that leaves the machine.

    Absent signals are ``None``; a field is never an empty string, an empty
    sequence or zero. Free-text fields are already redacted.
    """

    personality: str
    project_name: Optional[str] = None
    recent_commits: Optional[Tuple[str, ...]] = None
    active_todos: Optional[Tuple[str, ...]] = None
    stack: Optional[Tuple[str, ...]] = None
    dirty_files: Optional[int] = None
    commits_ahead: Optional[int] = None
    status_hint: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready mapping with absent fields omitted."""
        data: Dict[str, Any] = {}
        if self.project_name:
            data["project_name"] = self.project_name
        if self.recent_commits:
            data["recent_commits"] = list(self.recent_commits)
        if self.active_todos:
            data["active_todos"] = list(self.active_todos)
        if self.stack:
            data["stack"] = list(self.stack)
        if self.dirty_files:
            data["dirty_files"] = self.dirty_files
        if self.commits_ahead:
            data["commits_ahead"] = self.commits_ahead
        if self.status_hint:
            data["status_hint"] = self.status_hint
        data["personality"] = self.personality
        return data

    def payload_size(self) -> int:
        """Size in bytes of the compact UTF-8 JSON encoding."""
        return len(json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False).encode("utf-8"))

    @property
    def is_empty(self) -> bool:
        """True when nothing about the project was collected."""
        return not (self.project_name or self.recent_commits or self.active_todos or self.stack)

    def format_preview(self) -> str:
        """Format the payload as aligned ``key: value`` lines for a dry run."""
        lines = []
        if self.project_name:
            lines.append(f"  project:    {self.project_name}")
        if self.stack:
            lines.append(f"  stack:      {', '.join(self.stack)}")
        if self.dirty_files:
            lines.append(f"  changed:    {self.dirty_files} files")
        if self.commits_ahead:
            lines.append(f"  ahead:      {self.commits_ahead} commits")
        if self.recent_commits:
            lines.append("  commits:")
            lines.extend(f"    - {commit}" for commit in self.recent_commits)
        if self.active_todos:
            lines.append("  todos:")
            lines.extend(f"    - {todo}" for todo in self.active_todos)
        if self.status_hint:
            lines.append(f"  status:     {self.status_hint}")
        lines.append(f"  personality: {self.personality}")
        return "\n".join(lines)


def humanize_branch(branch: str) -> str:
    """``feature/improve-caching_layer`` -> ``improve caching layer``."""
    return _BRANCH_SEPARATORS.sub(" ", _BRANCH_PREFIX.sub("", branch))


def build_status_hint(git: VcsSignal) -> Optional[str]:
    """Summarize branch, dirty files and upstream divergence in one line."""
    hints = []
    if git.branch and git.branch not in DEFAULT_BRANCHES:
        hints.append(f"Working on: {humanize_branch(git.branch)}")
    if git.dirty_file_count > 0:
        hints.append(f"{git.dirty_file_count} files changed")
    if git.commits_ahead > 0:
        hints.append(f"{git.commits_ahead} commits ahead of upstream")
    if not hints:
        return None
    return sanitize(", ".join(hints))


def _non_empty(items: List[str]) -> Optional[Tuple[str, ...]]:
    return tuple(items) if items else None


def enforce_budget(context: Context, max_bytes: int = MAX_PAYLOAD_BYTES) -> Context:
    """Cut commits and todos to their first entries when the payload is too large.

    A single truncation pass; the result is not re-measured.
    """
    size = context.payload_size()
    if size <= max_bytes:
        return context

    logger.debug("context.budget.truncated", size=size, limit=max_bytes)
    return replace(
        context,
        recent_commits=_non_empty(list(context.recent_commits or ())[:TRUNCATED_LIST_LENGTH]),
        active_todos=_non_empty(list(context.active_todos or ())[:TRUNCATED_LIST_LENGTH]),
    )


class ContextExtractor:
    """Runs the collectors for a directory and assembles a ``Context``.

    Collectors never raise and share no state, so extraction always returns a
    (possibly sparse) context. Nothing is cached between calls.
    """

    def __init__(self, root_path: Path):
        self.root_path = Path(root_path)

    def extract(self, personality: str) -> Context:
        """Collect, redact and bound the context for this directory.

        Args:
            personality: Persona label chosen by the user, passed through verbatim

        Returns:
            Redacted Context within the payload budget
        """
        git = GitAnalyzer(self.root_path).analyze()
        manifest = ManifestAnalyzer(self.root_path).analyze()
        todos = TodoAnalyzer(self.root_path).analyze()

        project_name = manifest.name or git.repo_name

        context = Context(
            personality=personality,
            project_name=sanitize(project_name) if project_name else None,
            recent_commits=_non_empty(sanitize_array(git.recent_commits)),
            active_todos=_non_empty(sanitize_array(todos)),
            stack=_non_empty(manifest.stack),
            dirty_files=git.dirty_file_count if git.dirty_file_count > 0 else None,
            commits_ahead=git.commits_ahead if git.commits_ahead > 0 else None,
            status_hint=build_status_hint(git),
        )
        context = enforce_budget(context)

        logger.debug(
            "context.extract.complete",
            fields=sorted(context.to_dict()),
            size=context.payload_size(),
        )
        return context


def gather_context(cwd: Path, personality: str) -> Context:
    """Build the redacted, size-bounded context for ``cwd``. Never raises."""
    return ContextExtractor(cwd).extract(personality)
