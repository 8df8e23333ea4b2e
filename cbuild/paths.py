"""Conversions between native filesystem paths and loader file URLs."""

from __future__ import annotations

import os
import re

_FILE_SCHEME = re.compile(r"^file://")
_DRIVE_URL = re.compile(r"^/[0-9A-Za-z]+:/")
_DRIVE_PATH = re.compile(r"^[0-9A-Za-z]+:/")


def url_to_path(url: str, sep: str = os.sep) -> str:
    """Return the native path for a ``file://`` URL (or a bare URL path)."""
    native = _FILE_SCHEME.sub("", url)
    if sep != "/":
        if _DRIVE_URL.match(native):
            native = native[1:]
        native = native.replace("/", sep)
    return native


def path_to_url(path: str, sep: str = os.sep) -> str:
    """Return the URL form of a native path.

    Absolute paths gain the ``file:///`` scheme; relative paths only have
    their separators rewritten.
    """
    url = path
    if sep != "/":
        url = url.replace(sep, "/")
        if _DRIVE_PATH.match(url):
            url = "/" + url
    if url.startswith("/"):
        url = "file:///" + url[1:]
    return url


def relative_url(base_path: str, path: str, sep: str = os.sep) -> str:
    """Return ``path`` relative to ``base_path`` in URL form."""
    return path_to_url(os.path.relpath(path, base_path), sep)


def dot_relative(base_path: str, path: str) -> str:
    """Return a ``./``-prefixed, slash-separated path relative to ``base_path``."""
    relative = os.path.relpath(path, base_path).replace(os.sep, "/")
    return "./" + relative


__all__ = ["dot_relative", "path_to_url", "relative_url", "url_to_path"]
