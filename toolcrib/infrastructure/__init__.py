"""Infrastructure layer implementations."""

from toolcrib.infrastructure import storage

__all__ = ["storage"]
