"""Task list analyzer for open checklist items in well-known TODO files."""

from __future__ import annotations

import os
import re
import stat
from pathlib import Path
from typing import List, Optional, Set, Tuple

from zer0_agent.monitoring.logging import get_logger

logger = get_logger(__name__)

TODO_FILES = (
    "TODO.md",
    "TODO",
    "todo.md",
    "tasks/todo.md",
    "tasks/TODO.md",
    "TASKS.md",
    ".todo",
)

MAX_TODOS = 10
MAX_TODO_LENGTH = 200
MAX_FILE_BYTES = 512 * 1024

# No final symlink, and a FIFO swapped in after the checks must not block the read
_OPEN_FLAGS = os.O_RDONLY | getattr(os, "O_NOFOLLOW", 0) | getattr(os, "O_NONBLOCK", 0)

_CHECKBOX_PREFIX = re.compile(r"^[-*]\s*\[ \]\s*")
_BULLET_PREFIX = re.compile(r"^[-*]\s*")


def parse_todo_line(line: str) -> Optional[str]:
    """Return the text of an open list item, or None if the line is not one.

    Accepts ``- [ ] item``, ``* [ ] item`` and bare ``- item``; checked
    ``- [x] item`` lines are not open items.
    """
    trimmed = line.strip()
    is_open = (
        trimmed.startswith("- [ ]")
        or trimmed.startswith("* [ ]")
        or (trimmed.startswith("- ") and not trimmed.lower().startswith("- [x]"))
    )
    if not is_open:
        return None

    item = _CHECKBOX_PREFIX.sub("", trimmed)
    item = _BULLET_PREFIX.sub("", item).strip()
    if 0 < len(item) < MAX_TODO_LENGTH:
        return item
    return None


class TodoAnalyzer:
    """Scans candidate task files inside the project for open items.

    Only regular files are read. Symlinks, oversized files and anything whose
    real path leaves the project directory are skipped without being opened.
    """

    def __init__(self, root_path: Path, candidates: tuple = TODO_FILES, limit: int = MAX_TODOS):
        self.root_path = Path(root_path)
        self.candidates = candidates
        self.limit = limit

    def analyze(self) -> List[str]:
        todos: List[str] = []
        try:
            root = Path(os.path.realpath(self.root_path))
        except OSError:
            return todos

        seen: Set[Path] = set()
        for candidate in self.candidates:
            if len(todos) >= self.limit:
                break

            checked = self._safe_path(root, candidate)
            if checked is None:
                continue
            real, info = checked
            if real in seen:
                continue
            seen.add(real)

            for item in self._read_items(candidate, info):
                todos.append(item)
                if len(todos) >= self.limit:
                    break

        logger.debug("context.todos.complete", todos=len(todos), files=len(seen))
        return todos

    def _safe_path(self, root: Path, candidate: str) -> Optional[Tuple[Path, os.stat_result]]:
        """Resolve a candidate to a regular file inside ``root``.

        Returns:
            The real path and its ``lstat`` result, or None if the candidate is unsafe
        """
        path = self.root_path / candidate
        try:
            info = path.lstat()
        except OSError:
            return None

        if stat.S_ISLNK(info.st_mode):
            logger.debug("context.todos.rejected", candidate=candidate, reason="symlink")
            return None
        if not stat.S_ISREG(info.st_mode):
            return None
        if info.st_size > MAX_FILE_BYTES:
            logger.debug("context.todos.rejected", candidate=candidate, reason="too_large")
            return None

        real = Path(os.path.realpath(path))
        if real != root and root not in real.parents:
            logger.debug("context.todos.rejected", candidate=candidate, reason="outside_root")
            return None
        return real, info

    def _read_items(self, candidate: str, checked: os.stat_result) -> List[str]:
        """Read open items from the file that passed ``_safe_path``.

        The descriptor is opened without following a final symlink and must be
        the same inode that was checked, so a file swapped in after the check
        is never read.
        """
        try:
            fd = os.open(self.root_path / candidate, _OPEN_FLAGS)
        except OSError as e:
            logger.debug("context.todos.rejected", candidate=candidate, reason="open_failed", error=type(e).__name__)
            return []

        with os.fdopen(fd, "r", encoding="utf-8", errors="replace") as f:
            info = os.fstat(f.fileno())
            if (info.st_dev, info.st_ino) != (checked.st_dev, checked.st_ino) or not stat.S_ISREG(info.st_mode):
                logger.debug("context.todos.rejected", candidate=candidate, reason="changed")
                return []
            if info.st_size > MAX_FILE_BYTES:
                logger.debug("context.todos.rejected", candidate=candidate, reason="too_large")
                return []
            try:
                content = f.read(MAX_FILE_BYTES)
            except OSError as e:
                logger.debug("context.todos.read_error", error=type(e).__name__)
                return []

        items = []
        for line in content.split("\n"):
            item = parse_todo_line(line)
            if item is not None:
                items.append(item)
                if len(items) >= self.limit:
                    break
        return items


def gather_todos(cwd: Path) -> List[str]:
    """Collect up to ``MAX_TODOS`` open items from task files in ``cwd``. Never raises."""
    return TodoAnalyzer(cwd).analyze()
