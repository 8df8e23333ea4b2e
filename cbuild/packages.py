"""Records dependency packages resolved during a build session."""

from __future__ import annotations

import os
import re
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .errors import InternalModuleError
from .logging import get_logger
from .models import BuildSession, PackageSpec
from .paths import path_to_url, relative_url, url_to_path
from .resolve.base import PackageResolver


def grouping_key(root_path: str, container: str = "node_modules") -> str:
    """Return the outermost ``container`` directory enclosing ``root_path``.

    Paths without a ``container`` segment are their own key.
    """
    pattern = re.compile(r"((?:/|^)" + re.escape(container) + r")/.*", re.IGNORECASE)
    return pattern.sub(r"\1", root_path, count=1)


class PackageMapper:
    """Resolves package names and records them into a :class:`BuildSession`."""

    def __init__(
        self,
        base_path: str,
        resolver: PackageResolver,
        session: BuildSession,
        *,
        container: str = "node_modules",
    ) -> None:
        self.base_path = base_path
        self.resolver = resolver
        self.session = session
        self.container = container
        self.logger = get_logger("packages")

    async def resolve_package(self, name: str, requesting_path: str) -> str:
        """Resolve ``name`` as required from ``requesting_path`` and record it.

        Returns the resolved file relative to the base directory in URL form.
        Raises :class:`InternalModuleError` for built-in modules; resolver
        errors propagate.
        """
        seen: List[Tuple[Optional[str], str]] = []

        def _capture(descriptor: Dict[str, Any], root: str) -> None:
            value = descriptor.get("name")
            seen.append((value if isinstance(value, str) else None, root))

        resolved = await self.resolver.resolve(
            name, filename=url_to_path(requesting_path), package_filter=_capture
        )
        if resolved == name:
            raise InternalModuleError(name)

        declared_name, root = _owning_package(seen, resolved)
        spec = PackageSpec(
            name=name,
            root_path=relative_url(self.base_path, root),
            path=relative_url(self.base_path, resolved),
        )
        if declared_name == name:
            spec.entry_path = path_to_url(os.path.relpath(resolved, root))

        self.session.packages[name] = spec
        key = grouping_key(spec.root_path, self.container)
        self.session.repositories.setdefault(key, set()).add(name)
        self.logger.debug("Mapped package %s to %s", name, spec.path)
        return spec.path


def _owning_package(
    seen: Sequence[Tuple[Optional[str], str]], resolved: str
) -> Tuple[Optional[str], str]:
    # The resolver may read descriptors of candidates it later abandons.
    target = os.path.abspath(resolved)
    for declared_name, root in reversed(seen):
        base = os.path.abspath(root)
        if os.path.commonpath([base, target]) == base:
            return declared_name, root
    return None, os.path.dirname(resolved)


__all__ = ["PackageMapper", "grouping_key"]
