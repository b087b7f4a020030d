"""Local agent that sends a sanitized summary of your project to the ZER0 lounge."""

__version__ = "0.1.1"
