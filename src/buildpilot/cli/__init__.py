"""
Command-line interface for the buildpilot package.

This module provides the main CLI entry point for running project tests.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
