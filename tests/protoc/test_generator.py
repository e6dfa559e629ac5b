"""Tests for the per-package protoc generator."""

from __future__ import annotations

import io
import subprocess
from typing import Sequence

import pytest

from protowrap.errors import GenerationError
from protowrap.models import FileUnit, PackageUnit
from protowrap.protoc.generator import ProtocGenerator


def _package() -> PackageUnit:
    members = (
        FileUnit(name="p/b.proto", computed_package="p;p", full_path="protos/p/b.proto"),
        FileUnit(name="p/a.proto", computed_package="p;p", full_path="protos/p/a.proto"),
    )
    return PackageUnit(computed_package="p;p", members=members)


def test_generate_prepends_flags_and_sorts_files() -> None:
    calls: list[list[str]] = []

    def runner(args: Sequence[str]) -> "subprocess.CompletedProcess[str]":
        calls.append(list(args))
        return subprocess.CompletedProcess(list(args), 0, stdout="")

    generator = ProtocGenerator("protoc", ["-Iprotos", "--go_out=out"], runner=runner)
    generator.generate(_package())

    assert calls == [["protoc", "-Iprotos", "--go_out=out", "protos/p/a.proto", "protos/p/b.proto"]]


def test_print_only_writes_command_line_without_running() -> None:
    stream = io.StringIO()

    def runner(args: Sequence[str]) -> "subprocess.CompletedProcess[str]":  # pragma: no cover - must not run
        raise AssertionError("runner should not be called in print-only mode")

    generator = ProtocGenerator("protoc", ["--go_out=out"], print_only=True, runner=runner, stream=stream)
    generator.generate(_package())

    assert stream.getvalue() == "protoc --go_out=out protos/p/a.proto protos/p/b.proto\n"


def test_generate_failure_carries_package_and_output() -> None:
    def runner(args: Sequence[str]) -> "subprocess.CompletedProcess[str]":
        return subprocess.CompletedProcess(list(args), 1, stdout="protoc-gen-go: program not found\n")

    generator = ProtocGenerator("protoc", ["--go_out=out"], runner=runner)

    with pytest.raises(GenerationError) as excinfo:
        generator.generate(_package())

    assert excinfo.value.package == "p;p"
    message = str(excinfo.value)
    assert message.startswith("error generating package p;p: error running protoc --go_out=out")
    assert "protoc-gen-go: program not found" in message
