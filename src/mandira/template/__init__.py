"""Mandira Template package: parsed templates ready for rendering."""

from mandira.template.core import Template

__all__ = ["Template"]
