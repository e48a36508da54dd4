"""CLI package.

The ``cli`` sub-package contains the Click application and all
command implementations.  Commands operate on a YAML workspace file
backed by the in-memory stores.
"""
from __future__ import annotations
