"""Exception types raised by cbuild components."""

from __future__ import annotations


class CBuildError(RuntimeError):
    """Base class for cbuild failures."""


class InternalModuleError(CBuildError):
    """Raised when a specifier resolves to a platform built-in instead of a file."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Internal module: {name}")
        self.name = name


class ResolutionError(CBuildError):
    """Raised when a package cannot be found from the requesting file."""

    def __init__(self, name: str, basedir: str, reason: str | None = None) -> None:
        message = f"Cannot find module '{name}' from '{basedir}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.name = name
        self.basedir = basedir


class ConfigError(CBuildError):
    """Raised when the configuration file cannot be parsed."""


class BundlerError(CBuildError):
    """Raised when no bundling engine can be loaded."""


__all__ = [
    "BundlerError",
    "CBuildError",
    "ConfigError",
    "InternalModuleError",
    "ResolutionError",
]
