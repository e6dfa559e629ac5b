"""Group .proto files into Go packages, check for import cycles and drive protoc."""

__version__ = "0.1.0"

__all__ = ["__version__"]
