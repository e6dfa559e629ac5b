"""Subprocess plumbing shared by the protoc adapters."""

from __future__ import annotations

import subprocess
from typing import Callable, Sequence

Runner = Callable[[Sequence[str]], "subprocess.CompletedProcess[str]"]


def run_command(args: Sequence[str]) -> "subprocess.CompletedProcess[str]":
    """Run ``args`` capturing stdout and stderr together."""
    return subprocess.run(
        list(args),
        check=False,
        text=True,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
    )


def failure_message(args: Sequence[str], returncode: int, output: str | None) -> str:
    cmdline = " ".join(args)
    return (
        f"error running {cmdline}\nexit status {returncode}\n"
        f"Output:\n======\n{output or ''}======\n"
    )


__all__ = ["Runner", "failure_message", "run_command"]
