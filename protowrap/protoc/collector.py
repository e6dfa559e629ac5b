"""Collect FileDescriptorProtos for a set of .proto files by running protoc."""

from __future__ import annotations

import os
import tempfile
from typing import Dict, List, Sequence

from google.protobuf import descriptor_pb2
from google.protobuf.message import DecodeError

from ..errors import CollectionError, ConfigurationError
from ..logging import get_logger
from ..models import FileDescription
from .process import Runner, failure_message, run_command

_DESCRIPTOR_SET_NAME = "all.pb"


class DescriptorCollector:
    """Runs ``protoc --descriptor_set_out`` and decodes the result."""

    def __init__(self, protoc_command: str = "protoc", runner: Runner | None = None) -> None:
        self.protoc_command = protoc_command
        self._runner = runner or run_command
        self.logger = get_logger("collector")

    def collect(
        self, import_dirs: Sequence[str], protos: Sequence[str]
    ) -> Dict[str, FileDescription]:
        """Return descriptions for ``protos`` and everything they import, keyed by name."""
        if not import_dirs:
            raise ConfigurationError("cannot collect descriptors without import directories")
        if not protos:
            raise ConfigurationError("cannot collect descriptors without .proto files")

        with tempfile.TemporaryDirectory(prefix="filedescriptors") as workdir:
            descriptor_path = os.path.join(workdir, _DESCRIPTOR_SET_NAME)
            args = self._build_args(import_dirs, protos, descriptor_path)
            self.logger.info("Collecting file descriptors...")
            try:
                completed = self._runner(args)
            except FileNotFoundError as exc:
                raise CollectionError(
                    f"Unable to locate '{self.protoc_command}'. Install protoc or pass --protoc_command."
                ) from exc
            if completed.returncode != 0:
                raise CollectionError(
                    failure_message(args, completed.returncode, completed.stdout)
                )
            try:
                with open(descriptor_path, "rb") as handle:
                    payload = handle.read()
            except OSError as exc:
                raise CollectionError(f"protoc wrote no descriptor set: {exc}") from exc

        return parse_descriptor_set(payload)

    def _build_args(
        self, import_dirs: Sequence[str], protos: Sequence[str], descriptor_path: str
    ) -> List[str]:
        args = [self.protoc_command]
        for import_dir in import_dirs:
            args.extend(["-I", import_dir])
        args.append(f"--descriptor_set_out={descriptor_path}")
        args.append("--include_imports")
        args.extend(protos)
        return args


def parse_descriptor_set(payload: bytes) -> Dict[str, FileDescription]:
    """Decode a serialized FileDescriptorSet into ``FileDescription`` records."""
    descriptor_set = descriptor_pb2.FileDescriptorSet()
    try:
        descriptor_set.ParseFromString(payload)
    except DecodeError as exc:
        raise CollectionError(f"cannot decode file descriptor set: {exc}") from exc

    descriptions: Dict[str, FileDescription] = {}
    for proto in descriptor_set.file:
        descriptions[proto.name] = FileDescription(
            name=proto.name,
            package=proto.package,
            go_package=proto.options.go_package,
            dependencies=tuple(proto.dependency),
        )
    return descriptions


__all__ = ["DescriptorCollector", "parse_descriptor_set"]
