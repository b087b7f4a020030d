"""Signal collectors, one per kind of local source."""

from zer0_agent.context.analyzers.git import GitAnalyzer, VcsSignal, gather_vcs
from zer0_agent.context.analyzers.manifest import ManifestAnalyzer, ManifestSignal, gather_manifest
from zer0_agent.context.analyzers.todos import TodoAnalyzer, gather_todos

__all__ = [
    "GitAnalyzer",
    "ManifestAnalyzer",
    "ManifestSignal",
    "TodoAnalyzer",
    "VcsSignal",
    "gather_manifest",
    "gather_todos",
    "gather_vcs",
]
