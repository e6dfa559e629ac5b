"""Adapters around the external protoc process."""

from .collector import DescriptorCollector
from .generator import ProtocGenerator

__all__ = ["DescriptorCollector", "ProtocGenerator"]
