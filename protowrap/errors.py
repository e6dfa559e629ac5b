"""Exception taxonomy for protowrap runs."""

from __future__ import annotations

from typing import Sequence, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing aid
    from .models import PackageUnit


class ProtowrapError(RuntimeError):
    """Base class for all fatal protowrap errors."""


class ConfigurationError(ProtowrapError):
    """Raised when inputs, flags or settings are unusable before analysis starts."""


class ResolutionError(ConfigurationError):
    """Raised when a name cannot be resolved against the discovered input set."""


class CollectionError(ProtowrapError):
    """Raised when file descriptors cannot be collected from protoc."""


class CycleError(ProtowrapError):
    """Raised when the package graph contains import cycles."""

    def __init__(self, explanation: str, components: Sequence[Sequence["PackageUnit"]]) -> None:
        super().__init__(explanation)
        self.explanation = explanation
        self.components = [list(component) for component in components]


class GenerationError(ProtowrapError):
    """Raised when generating a single package fails."""

    def __init__(self, message: str, *, package: str | None = None) -> None:
        super().__init__(message)
        self.package = package


__all__ = [
    "CollectionError",
    "ConfigurationError",
    "CycleError",
    "GenerationError",
    "ProtowrapError",
    "ResolutionError",
]
