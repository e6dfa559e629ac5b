"""Invoke protoc once per package to generate its code."""

from __future__ import annotations

import sys
import threading
from typing import List, Sequence, TextIO

from ..errors import GenerationError
from ..models import PackageUnit
from .process import Runner, failure_message, run_command


class ProtocGenerator:
    """Runs protoc with the passthrough flags followed by a package's files."""

    def __init__(
        self,
        protoc_command: str = "protoc",
        protoc_flags: Sequence[str] = (),
        *,
        print_only: bool = False,
        runner: Runner | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.protoc_command = protoc_command
        self.protoc_flags = list(protoc_flags)
        self.print_only = print_only
        self._runner = runner or run_command
        self._stream = stream
        self._stream_lock = threading.Lock()

    def command_for(self, package: PackageUnit) -> List[str]:
        return [self.protoc_command, *self.protoc_flags, *package.member_paths()]

    def generate(self, package: PackageUnit) -> None:
        """Generate ``package``; in print-only mode write the command line instead."""
        args = self.command_for(package)
        if self.print_only:
            stream = self._stream or sys.stdout
            with self._stream_lock:
                print(" ".join(args), file=stream)
            return

        key = package.computed_package
        try:
            completed = self._runner(args)
        except FileNotFoundError as exc:
            raise GenerationError(
                f"error generating package {key}: unable to locate '{self.protoc_command}'",
                package=key,
            ) from exc
        if completed.returncode != 0:
            raise GenerationError(
                f"error generating package {key}: "
                + failure_message(args, completed.returncode, completed.stdout),
                package=key,
            )


__all__ = ["ProtocGenerator"]
