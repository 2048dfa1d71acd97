"""Command-line interface: render a template file against a JSON context.

Usage:
    mandira page.mnd context.json > page.html

Exit codes:
    0  rendered (or --help / --version)
    1  the template or context could not be read or parsed
    2  bad command-line arguments
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from collections.abc import Sequence

from mandira import __version__, parse_file
from mandira.environment import terminal
from mandira.environment.exceptions import TemplateError


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="mandira",
        description="Render a Mandira template with a JSON context.",
    )
    parser.add_argument("template", help="path to the template file")
    parser.add_argument("context", help="path to a JSON file holding the render context")
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="log lookups and filters that render as empty text",
    )
    parser.add_argument("--no-color", action="store_true", help="disable coloured diagnostics")
    return parser


def _error(message: str) -> int:
    print(f"{terminal.colorize('Error:', 'red', 'bold')} {message}", file=sys.stderr)
    return 1


def main(argv: Sequence[str] | None = None) -> int:
    """Run the CLI and return the process exit code."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    if args.no_color:
        terminal.set_color_enabled(False)

    try:
        template = parse_file(args.template)
    except TemplateError as e:
        return _error(e.format_compact())
    except (OSError, UnicodeDecodeError) as e:
        return _error(str(e))

    try:
        with open(args.context, encoding="utf-8") as f:
            context = json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        return _error(str(e))
    except json.JSONDecodeError as e:
        return _error(f"{args.context}: invalid JSON: {e}")

    try:
        output = template.render(context)
    except TemplateError as e:
        return _error(e.format_compact())

    sys.stdout.write(output)
    sys.stdout.flush()
    return 0


if __name__ == "__main__":
    sys.exit(main())
