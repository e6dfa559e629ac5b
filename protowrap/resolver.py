"""Package resolution: decide which Go package every .proto file generates into."""

from __future__ import annotations

import posixpath
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from .errors import CollectionError, ResolutionError
from .logging import get_logger
from .models import FileDescription, FileUnit, PackageGraph, PackageUnit

_PATH_SEPARATOR = "/"
_NAME_SEPARATOR = ";"

logger = get_logger("resolver")


def compute_package(
    name: str, declared_package: str = "", target_annotation: str = ""
) -> Tuple[str, Optional[str]]:
    """Return the ``path;name`` key for a file and an optional warning.

    An annotation containing a slash is an import path: it is used verbatim
    when it already names the package after ``;``, otherwise the last path
    element becomes the package name. Without such an annotation the file's
    directory is the path, and the name comes from the annotation, the
    declared package, or the file's base name (with a warning), in that order.
    """
    slash = target_annotation.rfind(_PATH_SEPARATOR)
    if slash > 0:
        if _NAME_SEPARATOR in target_annotation:
            return target_annotation, None
        short_name = target_annotation[slash + 1 :]
        return f"{target_annotation}{_NAME_SEPARATOR}{short_name}", None

    warning = None
    declared = target_annotation or declared_package
    if not declared:
        declared = base_name(name)
        warning = f"file {name!r} has no go_package and no package"
    directory = posixpath.dirname(name) or "."
    return f"{directory}{_NAME_SEPARATOR}{sanitize_identifier(declared)}", warning


def sanitize_identifier(value: str) -> str:
    """Replace every character that cannot appear in a Go identifier with ``_``."""
    return "".join(ch if ch == "_" or ch.isalpha() or ch.isdecimal() else "_" for ch in value)


def base_name(name: str) -> str:
    """Return the last path element of ``name`` with its final dotted suffix removed."""
    tail = name.rsplit(_PATH_SEPARATOR, 1)[-1]
    stem, dot, _ = tail.rpartition(".")
    return stem if dot else tail


def descriptor_name(proto_file: str, import_dirs: Sequence[str]) -> str:
    """Return the import-dir-relative name protoc reports for ``proto_file``."""
    is_abs = posixpath.isabs(proto_file)
    for import_dir in import_dirs:
        # FileDescriptorProtos for files under "." carry no "./" prefix.
        if import_dir == "." and not is_abs:
            if proto_file.startswith("./"):
                return proto_file[2:]
            return proto_file
        if proto_file.startswith(import_dir):
            relative = proto_file[len(import_dir) :]
            if relative.startswith("/") and import_dir != "/":
                return relative[1:]
            return relative
    raise ResolutionError(f"Unable to find import dir for {proto_file!r}")


def full_path_index(protos: Iterable[str], import_dirs: Sequence[str]) -> Dict[str, str]:
    """Map descriptor names to the paths the files were given or found at."""
    return {descriptor_name(proto, import_dirs): proto for proto in protos}


def resolve_files(
    descriptions: Mapping[str, FileDescription],
    full_paths: Mapping[str, str] | None = None,
) -> Tuple[Dict[str, FileUnit], List[str]]:
    """Build a ``FileUnit`` for every described file.

    Returns the units keyed by name and the warnings raised for files that
    fell back to their base name.
    """
    full_paths = full_paths or {}
    missing = sorted(name for name in full_paths if name not in descriptions)
    if missing:
        raise CollectionError(f"Unable to find file information for {missing[0]!r}")

    files: Dict[str, FileUnit] = {}
    warnings: List[str] = []
    for name in sorted(descriptions):
        description = descriptions[name]
        computed, warning = compute_package(
            description.name, description.package, description.go_package
        )
        if warning:
            logger.warning("Warning: %s.", warning)
            warnings.append(warning)
        files[name] = FileUnit(
            name=description.name,
            computed_package=computed,
            full_path=full_paths.get(name, ""),
            declared_package=description.package,
            target_annotation=description.go_package,
            dependencies=tuple(sorted(set(description.dependencies))),
        )
    return files, warnings


def collect_packages(files: Mapping[str, FileUnit]) -> Dict[str, PackageUnit]:
    """Group files by computed package and attach each group's external imports."""
    buckets: Dict[str, List[FileUnit]] = {}
    for name in sorted(files):
        unit = files[name]
        buckets.setdefault(unit.computed_package, []).append(unit)

    packages: Dict[str, PackageUnit] = {}
    for key, members in buckets.items():
        deps: Dict[str, FileUnit] = {}
        for member in members:
            for dep_name in member.dependencies:
                dep = files.get(dep_name)
                if dep is None:
                    raise ResolutionError(
                        f"{member.name!r} imports {dep_name!r}, which was not collected"
                    )
                if dep.computed_package != key:
                    deps[dep.name] = dep
        packages[key] = PackageUnit(
            computed_package=key,
            members=tuple(members),
            external_deps=tuple(deps[name] for name in sorted(deps)),
        )
    return packages


def build_graph(
    descriptions: Mapping[str, FileDescription],
    *,
    all_protos: Sequence[str],
    requested: Sequence[str],
    import_dirs: Sequence[str],
) -> PackageGraph:
    """Resolve every described file and group them into the run's package graph."""
    full_paths = full_path_index(all_protos, import_dirs)
    files, _ = resolve_files(descriptions, full_paths)
    packages = collect_packages(files)

    needed = set()
    for proto in requested:
        unit = files.get(descriptor_name(proto, import_dirs))
        if unit is None:
            raise CollectionError(f"missing file info for {proto!r}")
        needed.add(unit.computed_package)

    logger.debug(
        "Resolved %d files into %d packages (%d needed)",
        len(files),
        len(packages),
        len(needed),
    )
    return PackageGraph(
        files=files,
        packages=packages,
        needed=tuple(sorted(needed)),
    )


__all__ = [
    "base_name",
    "build_graph",
    "collect_packages",
    "compute_package",
    "descriptor_name",
    "full_path_index",
    "resolve_files",
    "sanitize_identifier",
]
