"""Agent configuration model and YAML persistence."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Dict, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

from zer0_agent.monitoring.logging import get_logger
from zer0_agent.utils.exceptions import ConfigError

logger = get_logger(__name__)

DEFAULT_SERVER = "https://zer0.app"
DEFAULT_PERSONALITY = "observer"
CONFIG_FILENAME = "config.yaml"
HOME_ENV_VAR = "ZER0_HOME"
TOKEN_ENV_VAR = "ZER0_AGENT_TOKEN"

# Persona key -> (label, description)
PERSONALITIES: Dict[str, tuple] = {
    "observer": ("OBSERVER", "Sharp, witty, respectful. Notices patterns."),
    "toxic-senior-dev": ("TOXIC SENIOR", "Gordon Ramsay of code reviews. Roasts with love."),
    "hype-man": ("HYPE MAN", "Every CSS fix is a paradigm shift. Every commit is history."),
    "doomer": ("DOOMER", "Sees tech debt everywhere. The architecture will not scale."),
}


class AgentConfig(BaseModel):
    """Credentials and preferences for talking to the lounge."""

    token: str = Field(..., description="Agent key from the ZER0 profile page")
    server: str = Field(DEFAULT_SERVER, description="Lounge server base URL")
    personality: str = Field(DEFAULT_PERSONALITY, description="How the agent talks about you")

    @field_validator("token")
    @classmethod
    def validate_token(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("token must not be empty")
        return v

    @field_validator("server")
    @classmethod
    def validate_server(cls, v: str) -> str:
        """Require an http(s) URL and drop trailing slashes."""
        v = v.strip().rstrip("/")
        if not v.startswith(("https://", "http://")):
            raise ValueError(f"Invalid server URL: {v}. Expected http:// or https://")
        return v

    @field_validator("personality")
    @classmethod
    def default_personality(cls, v: str) -> str:
        return v.strip() or DEFAULT_PERSONALITY


def get_config_dir() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override).expanduser()
    return Path.home() / ".zer0"


def get_config_path() -> Path:
    return get_config_dir() / CONFIG_FILENAME


def load_config(config_path: Optional[Path] = None) -> Optional[AgentConfig]:
    """Load the agent configuration.

    Args:
        config_path: Config file (default: ~/.zer0/config.yaml)

    Returns:
        AgentConfig, or None if the file is missing, unreadable or invalid
    """
    path = Path(config_path) if config_path is not None else get_config_path()
    if not path.exists():
        return None

    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning("config.load_failed", path=str(path), error=type(e).__name__)
        return None

    if not isinstance(data, dict):
        logger.warning("config.invalid", path=str(path), reason="not_a_mapping")
        return None

    try:
        return AgentConfig(**data)
    except ValidationError as e:
        logger.warning("config.invalid", path=str(path), errors=e.error_count())
        return None


def save_config(config: AgentConfig, config_path: Optional[Path] = None) -> Path:
    """Write the configuration readable by the owner only.

    Returns:
        Path the configuration was written to

    Raises:
        ConfigError: If the file cannot be written
    """
    path = Path(config_path) if config_path is not None else get_config_path()
    try:
        path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
        # Create with 0600 so the token is never briefly world-readable
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w") as f:
            yaml.safe_dump(config.model_dump(), f, default_flow_style=False, sort_keys=False)
        os.chmod(path, 0o600)
    except OSError as e:
        raise ConfigError(f"Could not write config to {path}: {e}") from e

    logger.info("config.saved", path=str(path))
    return path
