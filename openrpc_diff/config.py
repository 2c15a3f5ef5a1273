"""
Configuration module for openrpc-diff.

Holds the process-wide output settings. Values set by the CLI can be
overridden through environment variables (which may come from a ``.env``
file loaded by the CLI).
"""

import os
from typing import Optional

OUTPUT_FORMATS = ("yaml", "json", "text")
DEFAULT_OUTPUT_FORMAT = "yaml"
DEFAULT_LOG_LEVEL = "WARNING"

# These will be set by the CLI via main.py
_output_format: str = DEFAULT_OUTPUT_FORMAT
_log_level: str = DEFAULT_LOG_LEVEL


def set_output_format(output_format: str):
    """
    Set the report output format.

    Args:
        output_format: One of 'yaml', 'json' or 'text'

    Raises:
        ValueError: If the format is not supported
    """
    global _output_format
    _output_format = _validate_output_format(output_format)


def get_output_format() -> str:
    """
    Get the report output format.

    Returns:
        The configured format, or the OPENRPC_DIFF_FORMAT override if set
    """
    env_format = os.getenv("OPENRPC_DIFF_FORMAT")
    if env_format:
        return _validate_output_format(env_format)
    return _output_format


def set_log_level(level: str):
    """
    Set the logging level name used by the CLI.

    Args:
        level: A standard logging level name such as 'INFO' or 'DEBUG'
    """
    global _log_level
    _log_level = level.upper()


def get_log_level() -> str:
    """
    Get the logging level name.

    Returns:
        The configured level, or the OPENRPC_DIFF_LOG_LEVEL override if set
    """
    env_level = os.getenv("OPENRPC_DIFF_LOG_LEVEL")
    if env_level:
        return env_level.upper()
    return _log_level


def reset_config(output_format: Optional[str] = None):
    """Reset configuration to defaults (used by tests)."""
    global _output_format, _log_level
    _output_format = output_format or DEFAULT_OUTPUT_FORMAT
    _log_level = DEFAULT_LOG_LEVEL


def _validate_output_format(output_format: str) -> str:
    normalized = output_format.strip().lower()
    if normalized not in OUTPUT_FORMATS:
        raise ValueError(f"Invalid output format: {output_format}. Valid options: {', '.join(OUTPUT_FORMATS)}")
    return normalized
