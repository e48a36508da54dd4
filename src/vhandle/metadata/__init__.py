"""Identifier metadata synchronization."""
from __future__ import annotations

from vhandle.metadata.synchronizer import MetadataSynchronizer

__all__ = ["MetadataSynchronizer"]
