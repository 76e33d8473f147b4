#!/usr/bin/env python3
"""Command-line access to the ffchain filter catalog.

Usage:
    ffchain list [--category video]
    ffchain show fade
    ffchain search blur
    ffchain catalog fade crop scale -o my_filters.yaml
    ffchain doctor
"""

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import Optional

from .filters.help_parser import parse_filter_help
from .filters.registry import FilterCategory, FilterSpec, get_registry
from .filters.yaml_loader import dump_catalog

logger = logging.getLogger("ffchain")


def check_dependencies() -> list[str]:
    """Check if required executables and libraries are available."""
    issues = []

    if not shutil.which("ffmpeg"):
        issues.append("FFmpeg not found in PATH. Please install FFmpeg.")

    try:
        import yaml  # noqa: F401
    except ImportError:
        issues.append("PyYAML not installed. Run: pip install pyyaml")

    try:
        import pydantic  # noqa: F401
    except ImportError:
        issues.append("pydantic not installed. Run: pip install pydantic")

    return issues


def _print_spec(spec: FilterSpec) -> None:
    print(f"{spec.name} ({spec.category.value})")
    if spec.description:
        print(f"  {spec.description}")
    if spec.aliases:
        print(f"  aliases: {', '.join(spec.aliases)}")
    for option in spec.options:
        details = option.type.value
        if option.choices:
            details += f", one of {'|'.join(option.choices)}"
        if option.min_value is not None or option.max_value is not None:
            low = "" if option.min_value is None else option.min_value
            high = "" if option.max_value is None else option.max_value
            details += f", {low}..{high}"
        if option.default is not None:
            details += f", default={option.default}"
        print(f"  - {option.name} ({details}): {option.description}")


def cmd_list(args: argparse.Namespace) -> int:
    registry = get_registry()
    if args.category:
        specs = registry.list_by_category(FilterCategory(args.category))
    else:
        specs = registry.list_all()
    for spec in sorted(specs, key=lambda s: s.name):
        print(spec.name)
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    spec = get_registry().get(args.name)
    if spec is None:
        print(f"Unknown filter: {args.name}", file=sys.stderr)
        return 1
    _print_spec(spec)
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    for spec in get_registry().search(args.query):
        print(f"{spec.name:<20} {spec.description}")
    return 0


def cmd_catalog(args: argparse.Namespace) -> int:
    from .core.process_manager import ProcessManager

    manager = ProcessManager(ffmpeg_path=args.ffmpeg)
    specs = []
    for name in args.names:
        spec = parse_filter_help(manager.filter_help(name))
        if spec is None:
            logger.warning("FFmpeg has no filter named '%s'", name)
            continue
        specs.append(spec)

    if not specs:
        return 1

    text = dump_catalog(specs, header="Generated from `ffmpeg -h filter=NAME`.")
    if args.output:
        Path(args.output).write_text(text, encoding="utf-8")
        print(f"Wrote {len(specs)} filter(s) to {args.output}")
    else:
        sys.stdout.write(text)
    return 0


def cmd_doctor(args: argparse.Namespace) -> int:
    issues = check_dependencies()
    for issue in issues:
        print(f"  - {issue}")
    if not issues:
        print(f"OK: {len(get_registry())} filters in catalog")
    return 1 if issues else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ffchain", description=__doc__.splitlines()[0])
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("list", help="list catalog filters")
    p.add_argument("--category", choices=[c.value for c in FilterCategory])
    p.set_defaults(func=cmd_list)

    p = sub.add_parser("show", help="show a filter and its options")
    p.add_argument("name")
    p.set_defaults(func=cmd_show)

    p = sub.add_parser("search", help="search filters by name, description or option")
    p.add_argument("query")
    p.set_defaults(func=cmd_search)

    p = sub.add_parser("catalog", help="generate catalog YAML from the local ffmpeg")
    p.add_argument("names", nargs="+", metavar="NAME")
    p.add_argument("-o", "--output", help="write to this file instead of stdout")
    p.add_argument("--ffmpeg", help="path to the ffmpeg executable")
    p.set_defaults(func=cmd_catalog)

    p = sub.add_parser("doctor", help="check for ffmpeg and required libraries")
    p.set_defaults(func=cmd_doctor)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
