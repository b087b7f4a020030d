"""Exceptions raised by the configuration, transport and CLI layers."""


class Zer0AgentError(Exception):
    """Base class for agent errors surfaced to the CLI."""


class ConfigError(Zer0AgentError):
    """Agent configuration is missing or invalid."""


class TransportError(Zer0AgentError):
    """Request to the lounge server failed."""


class InsecureTransportError(TransportError):
    """Refused to send the agent token over plain HTTP to a remote host."""
