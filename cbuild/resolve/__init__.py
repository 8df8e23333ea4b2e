"""Package resolution engines."""

from __future__ import annotations

from .base import PackageFilter, PackageResolver
from .node import NodeResolver

__all__ = [
    "NodeResolver",
    "PackageFilter",
    "PackageResolver",
]
