"""CLI entrypoints for protowrap commands."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Mapping, NoReturn, Sequence

from . import __version__
from .config import DEFAULT_PARALLELISM, DEFAULT_PROTOC_COMMAND, load_config
from .errors import ConfigurationError, CycleError, ProtowrapError
from .flags import split_args
from .logging import configure_logging
from .wrapper import Wrapper

EXIT_CONFIG = 1
EXIT_CYCLES = 2
EXIT_GENERATION = 3

# Custom flags layered on top of protoc's; True means a value is required.
PROTOWRAP_FLAGS: Mapping[str, bool] = {
    "parallelism": True,
    "print_structure": False,
    "protoc_command": True,
    "only_specified_files": False,
    "print_only": False,
    "verbose": False,
    "config": True,
    "protowrap_version": False,
}

CYCLECHECK_FLAGS: Mapping[str, bool] = {
    "print_structure": False,
    "protoc_command": True,
    "only_specified_files": False,
    "verbose": False,
    "config": True,
}

_TRUE_VALUES = {"", "t", "T", "true", "True", "1"}
_FALSE_VALUES = {"f", "F", "false", "False", "0"}


class _FlagParser(argparse.ArgumentParser):
    """Argument parser that reports problems as configuration errors."""

    def error(self, message: str) -> NoReturn:
        raise ConfigurationError(message)


def _parse_bool(value: str) -> bool:
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise argparse.ArgumentTypeError(f"cannot parse boolean from {value!r}")


def _add_bool_option(parser: argparse.ArgumentParser, name: str, help_text: str) -> None:
    # Values must be attached with "="; a separate word is read as a proto file.
    parser.add_argument(
        f"--{name}",
        nargs="?",
        const=True,
        default=None,
        type=_parse_bool,
        metavar="=true|false",
        help=f"{help_text} (--{name} or --{name}=true|false)",
    )


def _build_parser(prog: str, custom: Mapping[str, bool]) -> argparse.ArgumentParser:
    parser = _FlagParser(
        prog=prog,
        usage="%(prog)s [flags] [protofiles]",
        description="Run protoc once per Go package, after checking for package import cycles.",
        add_help=False,
        allow_abbrev=False,
    )
    if "parallelism" in custom:
        parser.add_argument(
            "--parallelism",
            type=int,
            default=None,
            help=f"parallelism when generating (default {DEFAULT_PARALLELISM})",
        )
    parser.add_argument(
        "--protoc_command",
        default=None,
        help=f"command to use to call protoc (default {DEFAULT_PROTOC_COMMAND!r})",
    )
    _add_bool_option(
        parser,
        "only_specified_files",
        "if true, don't search the nearest import path ancestor for other .proto files",
    )
    _add_bool_option(parser, "print_structure", "if true, print out computed package structure")
    if "print_only" in custom:
        _add_bool_option(
            parser, "print_only", "if true, print protoc commandlines instead of generating protos"
        )
    _add_bool_option(parser, "verbose", "increase log verbosity for troubleshooting")
    parser.add_argument(
        "--config",
        default=None,
        help="path to a .protowrap.yml file (default: current directory)",
    )
    if "protowrap_version" in custom:
        _add_bool_option(parser, "protowrap_version", "print version and exit")
    return parser


def _usage_and_exit(parser: argparse.ArgumentParser, message: str) -> NoReturn:
    parser.exit(EXIT_CONFIG, f"Error: {message}\n{parser.format_help()}")


def _run(prog: str, custom: Mapping[str, bool], argv: Sequence[str], *, generate: bool) -> None:
    parser = _build_parser(prog, custom)
    try:
        split = split_args(argv, custom)
        options = parser.parse_args(split.custom_args)
    except ConfigurationError as exc:
        _usage_and_exit(parser, str(exc))

    if getattr(options, "protowrap_version", None):
        print(__version__)
        return
    if not split.import_dirs:
        _usage_and_exit(parser, "at least one import directory (-I) needed")

    try:
        config = load_config(Path(options.config) if options.config else Path.cwd())
    except ConfigurationError as exc:
        parser.exit(EXIT_CONFIG, f"Error: {exc}\n")

    configure_logging(verbose=bool(options.verbose), log_file=config.log_file)

    no_expand = options.only_specified_files
    if no_expand is None:
        no_expand = bool(config.only_specified_files)
    parallelism = getattr(options, "parallelism", None)
    if parallelism is None:
        parallelism = config.parallelism if config.parallelism is not None else DEFAULT_PARALLELISM

    wrapper = Wrapper(
        import_dirs=split.import_dirs,
        proto_files=split.protos,
        protoc_flags=split.protoc_flags,
        protoc_command=options.protoc_command or config.protoc_command or DEFAULT_PROTOC_COMMAND,
        parallelism=parallelism,
        no_expand=no_expand,
        print_only=bool(getattr(options, "print_only", None)),
    )
    try:
        wrapper.init()
    except ProtowrapError as exc:
        parser.exit(EXIT_CONFIG, f"Error: {exc}\n")

    if options.print_structure:
        wrapper.print_structure(sys.stdout)

    try:
        wrapper.check_cycles()
    except CycleError as exc:
        parser.exit(EXIT_CYCLES, f"Error: {exc}")

    if not generate:
        return
    try:
        wrapper.generate()
    except ProtowrapError as exc:
        parser.exit(EXIT_GENERATION, f"Error generating protos: {exc}\n")


def main(argv: Sequence[str] | None = None) -> None:
    """Generate Go code for the given protos, one protoc call per package."""
    _run("protowrap", PROTOWRAP_FLAGS, sys.argv[1:] if argv is None else argv, generate=True)


def cyclecheck_main(argv: Sequence[str] | None = None) -> None:
    """Only report .proto imports that would produce Go package cycles."""
    _run(
        "protowrap-cyclecheck",
        CYCLECHECK_FLAGS,
        sys.argv[1:] if argv is None else argv,
        generate=False,
    )


if __name__ == "__main__":
    main(sys.argv[1:])
