"""Fallback chain wrapped around a bundler loader's normalize hook."""

from __future__ import annotations

import asyncio
import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Awaitable, Callable, Iterator, Optional

from .errors import InternalModuleError, ResolutionError
from .logging import get_logger
from .packages import PackageMapper
from .paths import dot_relative, url_to_path

NormalizeFn = Callable[[str, Optional[str], Optional[str]], Awaitable[str]]


@dataclass(frozen=True)
class StageResult:
    """Outcome of one fallback stage: a resolved path, or None to continue."""

    path: Optional[str] = None

    @property
    def resolved(self) -> bool:
        return self.path is not None


PASS = StageResult()


def resolved(path: str) -> StageResult:
    return StageResult(path=path)


async def _is_file(path: str) -> bool:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, os.path.isfile, path)


class NormalizeInterceptor:
    """Extends a loader's normalizer to find directory indexes and packages.

    Stages run in order: the original normalizer, an existence probe, the
    ``/index.js`` fallback, then the loader alias map or package resolution.
    When nothing matches, the original normalizer's answer is returned so the
    bundler reports the failure itself.
    """

    def __init__(
        self,
        loader: object,
        original: NormalizeFn,
        mapper: PackageMapper,
        base_path: str,
    ) -> None:
        self.loader = loader
        self.original = original
        self.mapper = mapper
        self.base_path = base_path
        self.logger = get_logger("normalize")

    async def normalize(
        self,
        name: str,
        parent_name: Optional[str] = None,
        parent_address: Optional[str] = None,
    ) -> str:
        candidate = await self.original(name, parent_name, parent_address)

        result = await self.probe(candidate)
        if not result.resolved:
            result = await self.index_fallback(candidate)
        if not result.resolved:
            result = await self.package_fallback(name, parent_name, parent_address)
        return result.path if result.resolved else candidate

    async def probe(self, candidate: str) -> StageResult:
        if await _is_file(url_to_path(candidate)):
            return resolved(candidate)
        return PASS

    async def index_fallback(self, candidate: str) -> StageResult:
        if not candidate.endswith(".js"):
            return PASS
        index = candidate[: -len(".js")] + "/index.js"
        if not await _is_file(url_to_path(index)):
            return PASS

        old_path = dot_relative(self.base_path, url_to_path(candidate))
        new_path = dot_relative(self.base_path, url_to_path(index))
        self.mapper.session.fixes[old_path] = new_path
        self.logger.debug("Rewrote %s to %s", old_path, new_path)
        return resolved(index)

    async def package_fallback(
        self,
        name: str,
        parent_name: Optional[str],
        parent_address: Optional[str],
    ) -> StageResult:
        alias_map = getattr(self.loader, "map", None) or {}
        other = alias_map.get(name)
        if other and other != name:
            # Aliases go through the original normalizer only.
            return resolved(await self.original(other, parent_name, parent_address))

        try:
            requester = parent_name or os.path.join(self.base_path, "package.json")
            path = await self.mapper.resolve_package(name, requester)
        except (InternalModuleError, ResolutionError, OSError) as exc:
            self.logger.debug("Leaving %s unresolved: %s", name, exc)
            return PASS
        return resolved(path)


@contextmanager
def intercept_normalize(
    loader: object, mapper: PackageMapper, base_path: str
) -> Iterator[NormalizeInterceptor]:
    """Install a :class:`NormalizeInterceptor` on ``loader`` for the block's duration."""
    original = getattr(loader, "normalize")
    interceptor = NormalizeInterceptor(loader, original, mapper, base_path)
    setattr(loader, "normalize", interceptor.normalize)
    try:
        yield interceptor
    finally:
        setattr(loader, "normalize", original)


__all__ = [
    "NormalizeInterceptor",
    "PASS",
    "StageResult",
    "intercept_normalize",
    "resolved",
]
