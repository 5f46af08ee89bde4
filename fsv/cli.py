#!/usr/bin/env python3
"""
fsv - filtered string views from the command line

Applies character predicates to text and prints the filtered result,
its segments or a window of it. Composes with pipes: pass `-` as the
text to read standard input.
"""
import sys
import argparse
import json
import logging
from pathlib import Path
from typing import Callable, List, Optional

from rich.console import Console
from rich.table import Table

from fsv.algorithms import compose, split, substr
from fsv.config import ConfigError, FsvConfig, get_config, init_config
from fsv.core import View
from fsv.predicates import CompoundPredicate, drop, keep
from fsv.registry import PredicateRegistry

logger = logging.getLogger(__name__)


console = Console()


def setup_logging(level: str, verbose: bool = False):
    """Configure root logging for the command line."""
    if verbose:
        level = "DEBUG"
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.WARNING),
        format="%(levelname)s: %(message)s",
    )


def build_registry(config: FsvConfig) -> PredicateRegistry:
    """Registry with built-ins plus any configured predicate definitions."""
    registry = PredicateRegistry()

    predicates_dir = config.get_predicates_dir()
    if predicates_dir.is_dir():
        registry.load_directory(predicates_dir)

    if config.predicates_file:
        registry.load_file(config.predicates_file)

    config.check_default_predicate(registry)
    return registry


def resolve_predicate(registry: PredicateRegistry, spec: str) -> Callable[[str], bool]:
    """
    Turn a command line predicate spec into a predicate.

    Forms: a registered name, `keep:<chars>` or `drop:<chars>`.
    """
    if spec.startswith("keep:"):
        return keep(spec[len("keep:"):])
    if spec.startswith("drop:"):
        return drop(spec[len("drop:"):])
    return registry.get(spec)


def resolve_predicates(
    registry: PredicateRegistry,
    specs: Optional[List[str]],
    default: Optional[str] = None,
) -> Optional[Callable[[str], bool]]:
    """Combine several predicate specs with AND; None keeps everything."""
    if not specs:
        if default:
            return resolve_predicate(registry, default)
        return None
    predicates = [resolve_predicate(registry, spec) for spec in specs]
    if len(predicates) == 1:
        return predicates[0]
    return CompoundPredicate("all", predicates)


def read_text(text: str) -> str:
    """Return the text argument, reading stdin for '-'."""
    if text == "-":
        data = sys.stdin.read()
        if data.endswith("\n"):
            data = data[:-1]
        return data
    return text


def make_view(args, registry: Optional[PredicateRegistry] = None) -> View:
    config = get_config()
    if registry is None:
        registry = build_registry(config)
    predicate = resolve_predicates(registry, args.predicate, config.default_predicate)
    return View(read_text(args.text), predicate)


def output_views(views: List[View], format: str = "plain", title: str = "Segments"):
    """Output one or more views in the specified format."""
    config = get_config()

    if format == "json":
        print(json.dumps([str(v) for v in views]))
    elif format == "table":
        table = Table(title=title)
        table.add_column("#", style="cyan")
        table.add_column("Text", style="green")
        table.add_column("Size", style="magenta")
        table.add_column("Raw", style="yellow")

        for index, view in enumerate(views[:config.max_display]):
            table.add_row(str(index), repr(str(view)), str(view.size()), repr(view.raw()))

        console.print(table)
        if len(views) > config.max_display:
            console.print(f"[dim]... {len(views) - config.max_display} more[/dim]")
    else:
        for view in views:
            print(view)


def output_value(key: str, value, format: str = "plain"):
    """Output a single named value."""
    if format == "json":
        print(json.dumps({key: value}))
    elif format == "table":
        table = Table(show_header=False)
        table.add_column("Key", style="cyan")
        table.add_column("Value", style="green")
        table.add_row(key, str(value))
        console.print(table)
    else:
        print(value)


def cmd_show(args):
    """Print the filtered text."""
    view = make_view(args)
    output_views([view], args.output, title="View")


def cmd_size(args):
    """Print the filtered length."""
    view = make_view(args)
    if args.output == "json":
        print(json.dumps({"size": view.size(), "raw_size": view.raw_size()}))
    else:
        output_value("size", view.size(), args.output)


def cmd_at(args):
    """Print one filtered character."""
    view = make_view(args)
    output_value("char", view.at(args.index), args.output)


def cmd_split(args):
    """Split the filtered text on a token."""
    config = get_config()
    registry = build_registry(config)
    view = make_view(args, registry)
    token_predicate = resolve_predicates(registry, args.token_predicate)
    token = View(args.token, token_predicate)
    output_views(split(view, token), args.output)


def cmd_substr(args):
    """Print a window of the filtered text."""
    view = make_view(args)
    output_views([substr(view, args.pos, args.count)], args.output, title="Substring")


def cmd_compose(args):
    """Filter the raw text through every given predicate."""
    config = get_config()
    registry = build_registry(config)
    predicates = [resolve_predicate(registry, spec) for spec in args.predicate]
    view = compose(View(read_text(args.text)), predicates)
    output_views([view], args.output, title="Composed")


def cmd_predicates(args):
    """Inspect the predicate registry."""
    config = get_config()
    registry = build_registry(config)

    if args.predicates_command == "list":
        info = registry.info()
        if args.output == "json":
            print(json.dumps(info["predicates"], indent=2))
            return

        table = Table(title=f"Predicates ({info['total_predicates']})")
        table.add_column("Name", style="cyan")
        table.add_column("Description", style="green")
        table.add_column("Built-in", style="yellow")
        for entry in info["predicates"]:
            table.add_row(entry["name"], entry["description"], "yes" if entry["builtin"] else "")
        console.print(table)

    elif args.predicates_command == "info":
        metadata = registry.get_metadata(args.name) if registry.has(args.name) else {}
        details = {
            "name": args.name,
            "expression": registry.describe(args.name),
            "description": metadata.get("description", ""),
            "builtin": metadata.get("builtin", False),
        }
        if args.output == "json":
            print(json.dumps(details, indent=2))
        else:
            for key, value in details.items():
                console.print(f"[cyan]{key}[/cyan]: {value}")


def cmd_config(args):
    """Show or change configuration."""
    config = get_config()

    if args.config_command == "show":
        for key, value in vars(config).items():
            console.print(f"[cyan]{key}[/cyan] = {value!r}")

    elif args.config_command == "get":
        if not hasattr(config, args.key):
            raise KeyError(f"Unknown config key: {args.key}")
        print(getattr(config, args.key))

    elif args.config_command == "set":
        config.set_value(args.key, args.value)
        config.save(Path(args.file) if args.file else None)
        console.print(f"[green]Set {args.key} = {getattr(config, args.key)!r}[/green]")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fsv",
        description="fsv - filtered string views: apply character predicates to text",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  fsv show "Malamute" -p vowels
  fsv at "Malamute" 2 -p vowels
  fsv split "0xDEADBEEF / 0xdeadbeef" " / " -p "keep:ABCDEFabcdef /"
  fsv substr "c / c++" --pos 0 --count 3 -p "keep:c+/"
  fsv compose "you think so?" -p keep:you -p keep:uvwxyz
  echo "some text" | fsv show - -p non_space

Predicates:
  A registered name (see `fsv predicates list`), keep:<chars> or drop:<chars>.
  Repeated -p options are combined: a character must satisfy all of them.

Configuration:
  Config file: ~/.config/fsv/config.toml or ./fsv.toml
  Environment: FSV_OUTPUT_FORMAT, FSV_PREDICATES_FILE, FSV_LOG_LEVEL
        """
    )

    # Global options
    parser.add_argument("--config", help="Config file path")
    parser.add_argument("--predicates", help="YAML file with predicate definitions")
    parser.add_argument("-o", "--output", choices=["plain", "json", "table"],
                        help="Output format")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    parser.add_argument("-q", "--quiet", action="store_true", help="Minimal output")

    subparsers = parser.add_subparsers(dest="command", required=True, help="Commands")

    def add_text(sub, predicate_required: bool = False):
        sub.add_argument("text", help="Text to view, or - for stdin")
        sub.add_argument("-p", "--predicate", action="append", required=predicate_required,
                         help="Predicate name, keep:<chars> or drop:<chars> (repeatable)")

    show = subparsers.add_parser("show", help="Print the filtered text")
    add_text(show)
    show.set_defaults(func=cmd_show)

    size = subparsers.add_parser("size", help="Print the filtered length")
    add_text(size)
    size.set_defaults(func=cmd_size)

    at = subparsers.add_parser("at", help="Print the character at a filtered index")
    add_text(at)
    at.add_argument("index", type=int, help="Logical index into the filtered text")
    at.set_defaults(func=cmd_at)

    split_parser = subparsers.add_parser("split", help="Split the filtered text on a token")
    add_text(split_parser)
    split_parser.add_argument("token", help="Separator text")
    split_parser.add_argument("--token-predicate", action="append",
                              help="Predicate applied to the separator (repeatable)")
    split_parser.set_defaults(func=cmd_split)

    substr_parser = subparsers.add_parser("substr", help="Print a window of the filtered text")
    add_text(substr_parser)
    substr_parser.add_argument("--pos", type=int, default=0, help="Logical start position")
    substr_parser.add_argument("--count", type=int, default=0,
                               help="Characters to take (0 takes the rest)")
    substr_parser.set_defaults(func=cmd_substr)

    compose_parser = subparsers.add_parser("compose", help="Filter the raw text through predicates")
    add_text(compose_parser, predicate_required=True)
    compose_parser.set_defaults(func=cmd_compose)

    predicates_parser = subparsers.add_parser("predicates", help="Predicate registry")
    predicates_sub = predicates_parser.add_subparsers(dest="predicates_command", required=True)
    predicates_sub.add_parser("list", help="List predicates")
    predicates_info = predicates_sub.add_parser("info", help="Show a predicate")
    predicates_info.add_argument("name", help="Predicate name")
    predicates_parser.set_defaults(func=cmd_predicates)

    config_parser = subparsers.add_parser("config", help="Configuration")
    config_sub = config_parser.add_subparsers(dest="config_command", required=True)
    config_sub.add_parser("show", help="Show effective configuration")
    config_get = config_sub.add_parser("get", help="Print one config value")
    config_get.add_argument("key", help="Config key")
    config_set = config_sub.add_parser("set", help="Set and save a config value")
    config_set.add_argument("key", help="Config key")
    config_set.add_argument("value", help="Config value")
    config_set.add_argument("--file", help="Config file to write (default: user config)")
    config_parser.set_defaults(func=cmd_config)

    return parser


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    # Initialize configuration with CLI overrides
    config_args = {}
    if args.output:
        config_args["output_format"] = args.output
    if args.predicates:
        config_args["predicates_file"] = args.predicates
    if args.config:
        config_args["config_file"] = Path(args.config)

    try:
        config = init_config(**config_args)
    except (ConfigError, FileNotFoundError) as e:
        console.print(f"[red]Config error: {e}[/red]")
        sys.exit(1)
    console.no_color = not config.color_output

    setup_logging("ERROR" if args.quiet else config.log_level, args.verbose)

    # Set default output format if not specified
    if not args.output:
        args.output = config.output_format

    # Execute command
    try:
        args.func(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted[/yellow]")
        sys.exit(130)
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        console.print(f"[red]Error: {e}[/red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
