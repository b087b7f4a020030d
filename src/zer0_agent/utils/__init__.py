"""Configuration, display helpers and exceptions shared by the CLI."""
