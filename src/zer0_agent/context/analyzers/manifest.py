"""Manifest analyzer for inferring the project name and technology stack."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from zer0_agent.monitoring.logging import get_logger

logger = get_logger(__name__)

MANIFEST_FILE = "package.json"

# Dependency name -> stack label. Stack order follows this table, not the manifest.
FRAMEWORK_DEPS: Dict[str, str] = {
    "next": "Next.js",
    "react": "React",
    "vue": "Vue",
    "svelte": "Svelte",
    "solid-js": "SolidJS",
    "express": "Express",
    "fastify": "Fastify",
    "hono": "Hono",
    "tailwindcss": "Tailwind",
    "prisma": "Prisma",
    "drizzle": "Drizzle",
    "drizzle-orm": "Drizzle",
    "firebase": "Firebase",
    "supabase": "Supabase",
    "stripe": "Stripe",
    "openai": "OpenAI",
    "@anthropic-ai/sdk": "Anthropic",
    "langchain": "LangChain",
    "tensorflow": "TensorFlow",
    "pytorch": "PyTorch",
    "electron": "Electron",
    "tauri": "Tauri",
    "react-native": "React Native",
    "expo": "Expo",
    "typescript": "TypeScript",
    "graphql": "GraphQL",
    "trpc": "tRPC",
    "@trpc/server": "tRPC",
    "vite": "Vite",
    "turbo": "Turborepo",
    "docker": "Docker",
    "redis": "Redis",
    "ioredis": "Redis",
    "mongoose": "MongoDB",
    "pg": "PostgreSQL",
}


@dataclass
class ManifestSignal:
    """Declared project name and detected stack labels."""

    name: Optional[str] = None
    stack: List[str] = field(default_factory=list)


class ManifestAnalyzer:
    """Reads the project manifest and maps its dependencies to stack labels."""

    def __init__(self, root_path: Path):
        self.root_path = Path(root_path)

    def analyze(self) -> ManifestSignal:
        """Parse the manifest if present.

        Returns:
            ManifestSignal, empty when the manifest is absent or malformed
        """
        manifest_path = self.root_path / MANIFEST_FILE
        if not manifest_path.is_file():
            return ManifestSignal()

        try:
            data = json.loads(manifest_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, ValueError) as e:
            logger.debug("context.manifest.parse_error", error=type(e).__name__)
            return ManifestSignal()

        if not isinstance(data, dict):
            logger.debug("context.manifest.not_an_object")
            return ManifestSignal()

        name = data.get("name")
        signal = ManifestSignal(
            name=name if isinstance(name, str) and name.strip() else None,
            stack=detect_stack(data),
        )
        logger.debug("context.manifest.complete", has_name=signal.name is not None, stack=len(signal.stack))
        return signal


def _dependency_names(section: Any) -> set:
    return set(section) if isinstance(section, dict) else set()


def detect_stack(manifest: Dict[str, Any]) -> List[str]:
    """Map runtime and dev dependencies to deduplicated stack labels."""
    declared = _dependency_names(manifest.get("dependencies")) | _dependency_names(manifest.get("devDependencies"))

    stack: List[str] = []
    for dependency, label in FRAMEWORK_DEPS.items():
        if dependency in declared and label not in stack:
            stack.append(label)
    return stack


def gather_manifest(cwd: Path) -> ManifestSignal:
    """Read the manifest in ``cwd``. Never raises."""
    return ManifestAnalyzer(cwd).analyze()
