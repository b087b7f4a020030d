"""Command line interface and lounge API client."""
