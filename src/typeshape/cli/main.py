# Copyright 2026 Typeshape Contributors
# SPDX-License-Identifier: Apache-2.0

"""Entry point for the typeshape command-line interface."""

import argparse
import json
import logging
import sys
from pathlib import Path

from yachalk import chalk

from typeshape.matching.matcher import MatchOptions, matches_value
from typeshape.reflection.refs import TypeRef
from typeshape.settings.config import CONFIG_FILE_NAME, MatchConfig, MatchConfigError, load_match_config
from typeshape.wire.artifact import ArtifactError, read_artifact

# ###############
# Public Interface
# ###############


def main() -> None:
    """Run the typeshape CLI."""
    parser = argparse.ArgumentParser(
        prog="typeshape",
        description="typeshape: inspect type artifacts and check values against them",
    )
    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")

    # show subcommand
    show_parser = subparsers.add_parser(
        "show",
        help="List the types stored in an artifact",
        description="Print every named type of an artifact with its kind.",
    )
    show_parser.add_argument("artifact", help="Path to the JSON type artifact")

    # check subcommand
    check_parser = subparsers.add_parser(
        "check",
        help="Check a JSON value against a type",
        description="Check whether a JSON value structurally matches a type from an artifact.",
    )
    check_parser.add_argument("artifact", help="Path to the JSON type artifact")
    check_parser.add_argument("value", help="JSON text of the value to check, or @FILE to read it from a file")
    check_parser.add_argument(
        "--type",
        dest="type_name",
        default=None,
        help="Name of the artifact type to check against (default: the only type, or 'default-type' from the config)",
    )
    check_parser.add_argument(
        "--config",
        default=None,
        help=f"Path to a match configuration file (default: {CONFIG_FILE_NAME} in the current directory, if present)",
    )
    check_parser.add_argument("--exact", action="store_true", help="Reject object members the type does not declare")
    check_parser.add_argument("--trace", action="store_true", help="Log every structural check")

    args = parser.parse_args()
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    sys.exit(_dispatch(args))


# ################
# Implementation
# ################


def _dispatch(args: argparse.Namespace) -> int:
    """Dispatch to the appropriate subcommand handler."""
    if args.command == "show":
        return _cmd_show(args)
    if args.command == "check":
        return _cmd_check(args)
    return 0


def _cmd_show(args: argparse.Namespace) -> int:
    """Handle the show subcommand."""
    try:
        types = read_artifact(Path(args.artifact))
    except (ArtifactError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if not types:
        print("No types found in the artifact.")
        return 0
    for name, ref in types.items():
        print(f"{chalk.bold(name)} ({ref.kind}): {ref}")
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    """Handle the check subcommand."""
    try:
        config = _load_config(args.config)
        types = read_artifact(Path(args.artifact))
    except (ArtifactError, MatchConfigError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    try:
        value = _load_value(args.value)
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except json.JSONDecodeError as exc:
        print(f"Error: value is not valid JSON: {exc}", file=sys.stderr)
        return 1

    if args.trace or config.trace:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    ref = _select_type(types, args.type_name or config.default_type)
    if ref is None:
        return 1

    errors: list[str] = []
    options = MatchOptions.from_config(config, errors=errors)
    if args.exact:
        options = MatchOptions(errors=errors, exact_objects=True)

    if matches_value(ref, value, options=options):
        print(chalk.green("MATCH"))
        return 0

    print(chalk.red("NO MATCH"))
    for error in errors:
        print(f"  {error}")
    return 1


def _load_config(path: str | None) -> MatchConfig:
    if path is not None:
        return load_match_config(Path(path))
    default = Path.cwd() / CONFIG_FILE_NAME
    return load_match_config(default) if default.exists() else MatchConfig()


def _load_value(text: str) -> object:
    if text.startswith("@"):
        text = Path(text[1:]).read_text(encoding="utf-8")
    return json.loads(text)


def _select_type(types: dict[str, TypeRef], name: str | None) -> TypeRef | None:
    if name is not None:
        if name not in types:
            print(f"Error: type '{name}' not found in the artifact.", file=sys.stderr)
            return None
        return types[name]
    if len(types) != 1:
        print(
            f"Error: the artifact holds {len(types)} types; choose one with --type.",
            file=sys.stderr,
        )
        return None
    return next(iter(types.values()))
