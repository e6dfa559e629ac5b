"""Locate candidate .proto files and the import directories that hold them."""

from __future__ import annotations

import os
from typing import Iterable, List, Sequence

PROTO_SUFFIX = ".proto"


def protos_below(dirs: Iterable[str]) -> List[str]:
    """Return every .proto file in or below ``dirs``, walking in lexical order."""
    protos: List[str] = []
    for directory in dirs:
        for root, subdirs, files in os.walk(directory):
            subdirs.sort()
            for filename in sorted(files):
                if not filename.endswith(PROTO_SUFFIX):
                    continue
                path = os.path.join(root, filename)
                # Paths under "." carry no "./" prefix.
                protos.append(os.path.normpath(path) if directory == "." else path)
    return protos


def in_import_dir(proto: str, import_dir: str) -> bool:
    """Report whether ``proto`` lies under ``import_dir`` by path prefix."""
    if import_dir == "." and not os.path.isabs(proto):
        return True
    return proto.startswith(import_dir)


def import_dirs_used(import_dirs: Sequence[str], protos: Sequence[str]) -> List[str]:
    """Return the import directories that contain at least one proto."""
    return [
        import_dir
        for import_dir in import_dirs
        if any(in_import_dir(proto, import_dir) for proto in protos)
    ]


def disjoint(existing: Sequence[str], additional: Iterable[str]) -> List[str]:
    """Return the entries of ``additional`` not in ``existing``, deduplicated, in order."""
    seen = set(existing)
    result: List[str] = []
    for proto in additional:
        if proto in seen:
            continue
        seen.add(proto)
        result.append(proto)
    return result


__all__ = ["PROTO_SUFFIX", "disjoint", "in_import_dir", "import_dirs_used", "protos_below"]
