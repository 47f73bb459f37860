"""Backtracking command-line syntax matcher with completion support."""

from __future__ import annotations

__version__ = "0.1.0"
