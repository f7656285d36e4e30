"""Composite Signal Picks MCP Server."""

import os


def get_server_version() -> str:
    """Get version with fallback for dev mode."""
    if version := os.environ.get("SERVER_VERSION"):
        return version
    try:
        from importlib.metadata import version as pkg_version

        return pkg_version("picks-mcp")
    except Exception:
        return "dev"


SERVER_VERSION = get_server_version()
# Bump when output schema changes materially (new fields, renamed fields, structure changes)
# v1: Initial schema
# v2: Added market_state and data_sources to get_picks
# v3: Added invalid_symbols to get_picks; malformed symbols no longer fail the batch
SCHEMA_VERSION = "3"
