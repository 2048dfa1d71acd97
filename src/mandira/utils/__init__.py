"""Shared utilities for Mandira."""

from mandira.utils.html import html_escape

__all__ = ["html_escape"]
