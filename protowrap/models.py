"""Core data models shared across protowrap components."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class FileDescription:
    """What protoc reports about a single .proto file."""

    name: str
    package: str = ""
    go_package: str = ""
    dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class FileUnit:
    """A .proto file together with the Go package it generates into.

    ``computed_package`` is always of the form ``path;name``.
    """

    name: str
    computed_package: str
    full_path: str = ""
    declared_package: str = ""
    target_annotation: str = ""
    dependencies: Tuple[str, ...] = ()


@dataclass(frozen=True)
class PackageUnit:
    """All files sharing a computed package, plus the files they import from elsewhere."""

    computed_package: str
    members: Tuple[FileUnit, ...]
    external_deps: Tuple[FileUnit, ...] = ()

    def member_paths(self) -> List[str]:
        """Full paths of the member files, sorted, as passed to protoc."""
        return sorted(member.full_path or member.name for member in self.members)

    def imported_packages(self) -> List[str]:
        """Keys of the other packages this package imports, sorted."""
        keys = {dep.computed_package for dep in self.external_deps}
        keys.discard(self.computed_package)
        return sorted(keys)


@dataclass
class PackageGraph:
    """Resolved files and packages for one run.

    ``needed`` holds the keys of packages containing explicitly requested
    files and is always a subset of ``packages``.
    """

    files: Dict[str, FileUnit]
    packages: Dict[str, PackageUnit]
    needed: Tuple[str, ...] = ()

    def needed_packages(self) -> List[PackageUnit]:
        return [self.packages[key] for key in sorted(self.needed)]


__all__ = ["FileDescription", "FileUnit", "PackageGraph", "PackageUnit"]
