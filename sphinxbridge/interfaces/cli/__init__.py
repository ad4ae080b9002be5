"""
CLI Interface - Command-line tools for SphinxBridge.

Provides commands for:
- Inspecting how a search is translated
- Version information
"""

from .main import app, main

__all__ = ["app", "main"]
