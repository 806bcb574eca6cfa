"""
Shared constants for contexts.

This module provides a single source of truth for default values
used by the settings model and the command-line interface.
"""

ENV_PREFIX = "CONTEXTS_"
"""Prefix for environment variables read by Settings."""

DEFAULT_OUTPUT_FORMAT = "yaml"
"""Default format for printing collapsed views and values."""

OUTPUT_FORMATS = ("yaml", "json")
"""Supported output formats."""

DEFAULT_LOG_LEVEL = "WARNING"
"""Default logging level for the CLI."""
