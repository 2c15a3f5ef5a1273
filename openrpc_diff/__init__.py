"""
OpenRPC Specification Compatibility Checker

This package provides tools to:
- Load OpenRPC documents and normalize their schema references
- Pair method signatures between two document versions
- Classify structural schema differences into a stable change taxonomy
- Render a compatibility summary as YAML, JSON or indented text
"""

__version__ = "0.1.0"
