"""Privacy-preserving project context extraction.

This package gathers local signals and turns them into a payload that is safe
to send off the machine:
- Git activity (branch, recent commit subjects, dirty files, upstream divergence)
- Project manifest (name, technology stack)
- Open items from TODO files

Every free-text field is redacted and the payload is size-bounded before it is
returned.

Example usage:
    from zer0_agent.context import gather_context

    context = gather_context(Path.cwd(), personality="observer")
    print(context.format_preview())
"""

from zer0_agent.context.extractor import Context, ContextExtractor, gather_context
from zer0_agent.context.privacy import sanitize, sanitize_array

__all__ = [
    "Context",
    "ContextExtractor",
    "gather_context",
    "sanitize",
    "sanitize_array",
]
