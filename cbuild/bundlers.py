"""Bundling engine interface and plugin discovery."""

from __future__ import annotations

import importlib
from importlib import metadata
from typing import Any, Callable, Iterable, Mapping, Optional, Protocol

from .errors import BundlerError
from .models import BuildResult

_ENTRY_POINT_GROUP = "cbuild.bundlers"


class Loader(Protocol):
    """Module loader whose ``normalize`` hook cbuild wraps during a build."""

    map: Optional[Mapping[str, str]]

    async def normalize(
        self, name: str, parent_name: Optional[str], parent_address: Optional[str]
    ) -> str:
        ...


class Bundler(Protocol):
    """Bundling engine driven by :func:`cbuild.builder.build`."""

    loader: Loader

    async def bundle(
        self, source_url: str, output_path: Optional[str], options: Mapping[str, Any]
    ) -> BuildResult:
        ...

    async def build_static(
        self, source_url: str, output_path: Optional[str], options: Mapping[str, Any]
    ) -> BuildResult:
        ...


BundlerFactory = Callable[[str, str], Bundler]


def load_bundler_factory(spec: str | None = None) -> BundlerFactory:
    """Return a bundler factory from ``module:attr`` or the installed plugins."""
    if spec:
        return _import_factory(spec)

    for entry in _iter_entry_points():
        try:
            loaded = entry.load()
        except Exception as exc:  # pragma: no cover - broken third-party plugin
            raise BundlerError(f"Failed to load bundler entry point '{entry.name}': {exc}") from exc
        return _coerce_factory(loaded, entry.name)

    raise BundlerError(
        "No bundling engine available. Pass --bundler module:factory or install a "
        f"package exposing the '{_ENTRY_POINT_GROUP}' entry point group."
    )


def _import_factory(spec: str) -> BundlerFactory:
    module_name, _, attr = spec.partition(":")
    if not module_name or not attr:
        raise BundlerError(f"Bundler must be given as module:attr, got '{spec}'")
    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise BundlerError(f"Cannot import bundler module '{module_name}': {exc}") from exc
    try:
        loaded = getattr(module, attr)
    except AttributeError as exc:
        raise BundlerError(f"Module '{module_name}' has no attribute '{attr}'") from exc
    return _coerce_factory(loaded, spec)


def _coerce_factory(obj: object, name: str) -> BundlerFactory:
    if not callable(obj):
        raise BundlerError(f"Bundler '{name}' is not callable")
    return obj  # type: ignore[return-value]


def _iter_entry_points() -> Iterable[metadata.EntryPoint]:
    return metadata.entry_points().select(group=_ENTRY_POINT_GROUP)


__all__ = ["Bundler", "BundlerFactory", "Loader", "load_bundler_factory"]
