"""
Command-line interface module for campaignflow.

This module provides the CLI entry point and command implementations
for validating, inspecting and exporting campaign documents.
"""

from campaignflow.cli.main import main

__all__ = ["main"]
