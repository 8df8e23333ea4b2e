"""Browser-aware ``node_modules`` package resolution."""

from __future__ import annotations

import asyncio
import functools
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

from ..errors import ResolutionError
from ..logging import get_logger
from .base import PackageFilter, PackageResolver
from .utils import (
    CORE_MODULES,
    browser_entry,
    is_path_specifier,
    load_package_descriptor,
    split_package_name,
)

_Override = Union[None, bool, Tuple[str, Path]]


class NodeResolver(PackageResolver):
    """Resolves specifiers the way a browser-targeting Node bundler does.

    Package descriptors are honoured in this order: the requester's own
    ``browser`` object may rename or exclude a bare specifier, a package's
    ``browser`` string replaces its ``main``, and a package's ``browser``
    object remaps files inside that package.
    """

    DEFAULT_EXTENSIONS = (".js", ".json")

    def __init__(self, extensions: Sequence[str] = DEFAULT_EXTENSIONS) -> None:
        self.extensions = tuple(extensions)
        self.logger = get_logger("resolve")

    async def resolve(
        self,
        name: str,
        *,
        filename: str,
        package_filter: Optional[PackageFilter] = None,
    ) -> str:
        loop = asyncio.get_running_loop()
        lookup = functools.partial(
            self.resolve_sync, name, filename=filename, package_filter=package_filter
        )
        return await loop.run_in_executor(None, lookup)

    def resolve_sync(
        self,
        name: str,
        *,
        filename: str,
        package_filter: Optional[PackageFilter] = None,
    ) -> str:
        """Blocking form of :meth:`resolve`."""
        basedir = Path(filename).parent
        specifier = name

        if not is_path_specifier(specifier):
            override = self._requester_override(specifier, basedir)
            if override is False:
                raise ResolutionError(name, str(basedir), "excluded by browser field")
            if isinstance(override, tuple):
                specifier, basedir = override
                self.logger.debug("Browser field maps %s to %s", name, specifier)

        if not is_path_specifier(specifier) and specifier in CORE_MODULES:
            return specifier

        if is_path_specifier(specifier):
            target = basedir / specifier
            found = self._load_file(target, None) or self._load_directory(
                target, package_filter
            )
        else:
            found = self._load_node_modules(specifier, basedir, package_filter)

        if found is None:
            raise ResolutionError(name, str(basedir))
        return str(found)

    # ------------------------------------------------------------------
    # Internal helpers

    def _requester_override(self, name: str, basedir: Path) -> _Override:
        for directory in (basedir, *basedir.parents):
            descriptor = load_package_descriptor(directory)
            if descriptor is None:
                continue
            browser = descriptor.get("browser")
            if not isinstance(browser, dict) or name not in browser:
                return None
            replacement = browser[name]
            if replacement is False:
                return False
            if isinstance(replacement, str) and replacement != name:
                if is_path_specifier(replacement):
                    return replacement, directory
                return replacement, basedir
            return None
        return None

    def _load_node_modules(
        self, name: str, basedir: Path, package_filter: Optional[PackageFilter]
    ) -> Optional[Path]:
        package_name, subpath = split_package_name(name)
        for directory in (basedir, *basedir.parents):
            if directory.name == "node_modules":
                continue
            package_dir = directory / "node_modules" / package_name
            if not package_dir.is_dir():
                continue
            descriptor = self._read_descriptor(package_dir, package_filter)
            if subpath:
                target = package_dir / subpath
                found = self._load_file(target, (package_dir, descriptor))
                if found is None:
                    found = self._load_directory(target, package_filter)
            else:
                found = self._load_package(package_dir, descriptor)
            if found is not None:
                return found
        return None

    def _load_package(
        self, package_dir: Path, descriptor: Optional[Dict[str, Any]]
    ) -> Optional[Path]:
        if descriptor:
            entry = browser_entry(descriptor)
            if entry:
                target = package_dir / entry
                found = self._load_file(target, (package_dir, descriptor))
                if found is None:
                    found = self._load_index(target)
                if found is not None:
                    return found
        return self._load_index(package_dir)

    def _load_directory(
        self, directory: Path, package_filter: Optional[PackageFilter]
    ) -> Optional[Path]:
        if not directory.is_dir():
            return None
        descriptor = self._read_descriptor(directory, package_filter)
        return self._load_package(directory, descriptor)

    def _load_file(
        self,
        target: Path,
        package: Optional[Tuple[Path, Optional[Dict[str, Any]]]],
    ) -> Optional[Path]:
        candidates = [target] + [
            target.with_name(target.name + extension) for extension in self.extensions
        ]
        for candidate in candidates:
            if candidate.is_file():
                return self._apply_browser_map(candidate, package)
        return None

    def _load_index(self, directory: Path) -> Optional[Path]:
        for extension in self.extensions:
            candidate = directory / f"index{extension}"
            if candidate.is_file():
                return candidate
        return None

    def _apply_browser_map(
        self,
        found: Path,
        package: Optional[Tuple[Path, Optional[Dict[str, Any]]]],
    ) -> Path:
        if package is None:
            return found
        package_dir, descriptor = package
        browser = descriptor.get("browser") if descriptor else None
        if not isinstance(browser, dict):
            return found

        relative = found.relative_to(package_dir).as_posix()
        keys = [f"./{relative}", relative]
        for extension in self.extensions:
            if relative.endswith(extension):
                stem = relative[: -len(extension)]
                keys.extend([f"./{stem}", stem])

        for key in keys:
            if key not in browser:
                continue
            replacement = browser[key]
            if replacement is False:
                raise ResolutionError(key, str(package_dir), "excluded by browser field")
            if isinstance(replacement, str):
                mapped = self._load_file(package_dir / replacement, None)
                if mapped is not None:
                    return mapped
        return found

    @staticmethod
    def _read_descriptor(
        directory: Path, package_filter: Optional[PackageFilter]
    ) -> Optional[Dict[str, Any]]:
        descriptor = load_package_descriptor(directory)
        if descriptor is not None and package_filter is not None:
            filtered = package_filter(descriptor, str(directory))
            if filtered is not None:
                descriptor = filtered
        return descriptor


__all__ = ["NodeResolver"]
