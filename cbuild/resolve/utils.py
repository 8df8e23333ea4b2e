"""Shared helpers for reading package descriptors."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

DESCRIPTOR_NAME = "package.json"

CORE_MODULES = frozenset(
    {
        "assert",
        "buffer",
        "child_process",
        "cluster",
        "console",
        "constants",
        "crypto",
        "dgram",
        "dns",
        "domain",
        "events",
        "fs",
        "http",
        "https",
        "module",
        "net",
        "os",
        "path",
        "process",
        "punycode",
        "querystring",
        "readline",
        "repl",
        "stream",
        "string_decoder",
        "sys",
        "timers",
        "tls",
        "tty",
        "url",
        "util",
        "vm",
        "zlib",
    }
)


def read_package_descriptor(path: Path) -> Dict[str, Any]:
    """Return the parsed descriptor at ``path``; read and parse errors propagate."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data


def load_package_descriptor(directory: Path) -> Optional[Dict[str, Any]]:
    """Return the descriptor in ``directory``, or None when absent or unreadable."""
    descriptor = directory / DESCRIPTOR_NAME
    if not descriptor.is_file():
        return None
    try:
        return read_package_descriptor(descriptor)
    except (OSError, ValueError):
        return None


def browser_entry(descriptor: Dict[str, Any]) -> Optional[str]:
    """Return the entry file named by ``browser`` (string form) or ``main``."""
    browser = descriptor.get("browser")
    if isinstance(browser, str) and browser:
        return browser
    main = descriptor.get("main")
    if isinstance(main, str) and main:
        return main
    return None


def split_package_name(name: str) -> tuple[str, str]:
    """Split a bare specifier into its package name and sub-path."""
    parts = name.split("/")
    if name.startswith("@") and len(parts) > 1:
        return "/".join(parts[:2]), "/".join(parts[2:])
    return parts[0], "/".join(parts[1:])


def is_path_specifier(name: str) -> bool:
    return name.startswith(("./", "../", "/")) or name in {".", ".."}


__all__ = [
    "CORE_MODULES",
    "DESCRIPTOR_NAME",
    "browser_entry",
    "is_path_specifier",
    "load_package_descriptor",
    "read_package_descriptor",
    "split_package_name",
]
