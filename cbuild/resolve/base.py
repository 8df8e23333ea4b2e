"""Base classes for package resolution engines."""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional

PackageFilter = Callable[[Dict[str, Any], str], Optional[Dict[str, Any]]]


class PackageResolver(ABC):
    """Contract for engines that map a package name to a concrete file."""

    @abstractmethod
    async def resolve(
        self,
        name: str,
        *,
        filename: str,
        package_filter: Optional[PackageFilter] = None,
    ) -> str:
        """Return the file ``name`` resolves to when required from ``filename``.

        ``package_filter`` is called with every package descriptor read along
        the lookup and the directory holding it; a returned mapping replaces
        the descriptor. Built-in modules resolve to ``name`` itself.
        """
