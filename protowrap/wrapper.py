"""Pipeline orchestration: discover, resolve, cycle-check and generate."""

from __future__ import annotations

import os
import sys
from typing import Callable, List, Optional, Sequence, TextIO

from .config import DEFAULT_PARALLELISM, DEFAULT_PROTOC_COMMAND
from .cycles import check_cycles
from .errors import ConfigurationError, ProtowrapError
from .finding import PROTO_SUFFIX, disjoint, import_dirs_used, in_import_dir, protos_below
from .logging import get_logger
from .models import PackageGraph, PackageUnit
from .protoc import DescriptorCollector, ProtocGenerator
from .resolver import build_graph
from .scheduler import GenerationScheduler

GeneratorFactory = Callable[["Wrapper"], Callable[[PackageUnit], None]]


class Wrapper:
    """Coordinates a protowrap run over a set of requested .proto files.

    ``init`` must be called before any other operation.
    """

    def __init__(
        self,
        *,
        import_dirs: Sequence[str],
        proto_files: Sequence[str],
        protoc_flags: Sequence[str] = (),
        protoc_command: str = DEFAULT_PROTOC_COMMAND,
        parallelism: int = DEFAULT_PARALLELISM,
        no_expand: bool = False,
        print_only: bool = False,
        collector: DescriptorCollector | None = None,
        generator_factory: GeneratorFactory | None = None,
        output: TextIO | None = None,
    ) -> None:
        self.import_dirs = list(import_dirs)
        self.proto_files = list(proto_files)
        self.protoc_flags = list(protoc_flags)
        self.protoc_command = protoc_command or DEFAULT_PROTOC_COMMAND
        self.parallelism = parallelism
        self.no_expand = no_expand
        self.print_only = print_only
        self.collector = collector or DescriptorCollector(self.protoc_command)
        self._generator_factory = generator_factory or _default_generator
        self.output = output
        self.logger = get_logger("wrapper")

        self.all_protos: List[str] = []
        self.graph: Optional[PackageGraph] = None

    def init(self) -> PackageGraph:
        """Validate inputs, collect descriptors and build the package graph."""
        self._validate()

        expanded: List[str] = []
        if not self.no_expand:
            dirs = import_dirs_used(self.import_dirs, self.proto_files)
            expanded = disjoint(self.proto_files, protos_below(dirs))
            self.logger.debug("Found %d additional .proto files alongside inputs", len(expanded))
        self.all_protos = [*self.proto_files, *expanded]

        descriptions = self.collector.collect(self.import_dirs, self.all_protos)
        self.graph = build_graph(
            descriptions,
            all_protos=self.all_protos,
            requested=self.proto_files,
            import_dirs=self.import_dirs,
        )
        return self.graph

    def print_structure(self, stream: TextIO | None = None) -> None:
        """Dump the computed package structure for debugging."""
        stream = stream or self.output or sys.stdout
        if self.graph is None:
            print("[Not initialized]", file=stream)
            return
        print("> Structure:", file=stream)
        for pkg in self.graph.needed_packages():
            print(f"> {pkg.computed_package}", file=stream)
            print(">   files:", file=stream)
            for member in pkg.members:
                print(f">     {member.name} ({member.full_path})", file=stream)
            print(">   deps:", file=stream)
            for dep in pkg.external_deps:
                if dep.full_path:
                    print(f">     {dep.name} ({dep.full_path})", file=stream)
                else:
                    print(f">     {dep.name}", file=stream)

    def check_cycles(self) -> None:
        """Raise ``CycleError`` when needed packages import each other circularly."""
        check_cycles(self._require_graph())

    def generate(self) -> None:
        """Generate every needed package, raising the first failure."""
        graph = self._require_graph()
        scheduler = GenerationScheduler(self._generator_factory(self), self.parallelism)
        scheduler.run(graph.needed_packages())

    # ------------------------------------------------------------------
    # Internals

    def _require_graph(self) -> PackageGraph:
        if self.graph is None:
            raise ProtowrapError("init() must be called before generating or checking cycles")
        return self.graph

    def _validate(self) -> None:
        if not self.import_dirs:
            raise ConfigurationError("at least one import directory required")
        for import_dir in self.import_dirs:
            if not os.path.exists(import_dir):
                raise ConfigurationError(f"Nonexistent import directory: {import_dir!r}")
            if not os.path.isdir(import_dir):
                raise ConfigurationError(f"Non-directory import directory: {import_dir!r}")

        if not self.proto_files:
            raise ConfigurationError("at least one input .proto file is required")
        for proto in self.proto_files:
            if not proto.endswith(PROTO_SUFFIX):
                raise ConfigurationError(f"non-proto input file: {proto!r}")
            if not any(in_import_dir(proto, import_dir) for import_dir in self.import_dirs):
                raise ConfigurationError(
                    f"proto file {proto!r} must have a lexicographical prefix of one of the import directories"
                )
            if not os.path.exists(proto):
                raise ConfigurationError(f"input {proto!r} does not exist")

        if self.parallelism < 1:
            raise ConfigurationError(f"parallelism cannot be < 1; got {self.parallelism}")


def _default_generator(wrapper: Wrapper) -> Callable[[PackageUnit], None]:
    generator = ProtocGenerator(
        wrapper.protoc_command,
        wrapper.protoc_flags,
        print_only=wrapper.print_only,
        stream=wrapper.output,
    )
    return generator.generate


__all__ = ["GeneratorFactory", "Wrapper"]
