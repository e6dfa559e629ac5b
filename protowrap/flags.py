"""Split protoc-style command lines into custom flags, protoc flags and inputs."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Mapping, Sequence

from .errors import ConfigurationError

# Flags protoc accepts without a value; see protobuf's command_line_interface.cc.
NO_VALUE_FLAGS = frozenset(
    {
        "-h",
        "--help",
        "--disallow_services",
        "--include_imports",
        "--include_source_info",
        "--version",
        "--decode_raw",
        "--print_free_field_numbers",
    }
)


@dataclass
class SplitArgs:
    """Result of splitting a protoc-style command line.

    ``custom_args`` are normalised to ``--name`` or ``--name=value`` so they
    can be handed to an argparse parser; everything in ``protoc_flags`` is
    passed through to protoc verbatim.
    """

    custom_args: List[str] = field(default_factory=list)
    protoc_flags: List[str] = field(default_factory=list)
    protos: List[str] = field(default_factory=list)
    import_dirs: List[str] = field(default_factory=list)


def split_args(args: Sequence[str], custom: Mapping[str, bool]) -> SplitArgs:
    """Split ``args`` according to protoc's flag grammar.

    ``custom`` maps custom flag names (without dashes, always written with
    two) to whether they require a value.
    """
    result = SplitArgs()
    next_is_flag = False
    next_is_import_dir = False
    custom_name: str | None = None

    for arg in args:
        if arg in ("", "-", "--"):
            raise ConfigurationError(f"flag {arg!r} not allowed")

        if custom_name is not None:
            result.custom_args.append(f"--{custom_name}={arg}")
            custom_name = None
            continue
        if next_is_flag:
            result.protoc_flags.append(arg)
            next_is_flag = False
            if next_is_import_dir:
                result.import_dirs.append(arg)
                next_is_import_dir = False
            continue
        if arg in NO_VALUE_FLAGS:
            result.protoc_flags.append(arg)
            continue
        if not arg.startswith("-"):
            result.protos.append(arg)
            continue

        if arg.startswith("--"):
            name, has_value, _ = arg[2:].partition("=")
            if name in custom:
                if has_value:
                    result.custom_args.append(arg)
                elif custom[name]:
                    custom_name = name
                else:
                    result.custom_args.append(f"--{name}")
                continue
            result.protoc_flags.append(arg)
            next_is_flag = not has_value
            continue

        # Single dash: either "-X value" or "-Xvalue".
        result.protoc_flags.append(arg)
        if len(arg) == 2:
            next_is_flag = True
            next_is_import_dir = arg[1] == "I"
            continue
        if arg[1] == "I":
            result.import_dirs.append(arg[2:])

    if next_is_flag or custom_name is not None:
        raise ConfigurationError(f"{args[-1]!r} flag with no value")
    return result


__all__ = ["NO_VALUE_FLAGS", "SplitArgs", "split_args"]
