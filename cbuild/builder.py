"""Build orchestration: run a bundler with package-aware normalization."""

from __future__ import annotations

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from .bundlers import BundlerFactory
from .emit import write_config
from .logging import get_logger
from .models import BuildOptions, BuildResult, BuildSession
from .normalize import intercept_normalize
from .packages import PackageMapper
from .paths import path_to_url, relative_url
from .resolve import NodeResolver, PackageResolver
from .resolve.utils import DESCRIPTOR_NAME, browser_entry, read_package_descriptor

logger = get_logger("builder")


@dataclass
class BuildOutcome:
    """Result of a build together with the tables gathered while running it."""

    result: BuildResult
    session: BuildSession
    config_path: Optional[Path] = None


def default_source_path(base_path: str) -> str:
    """Return the entry file named by the base directory's package descriptor."""
    descriptor = read_package_descriptor(Path(base_path) / DESCRIPTOR_NAME)
    entry = browser_entry(descriptor) or "index.js"
    return os.path.normpath(os.path.join(base_path, entry))


def shim_module_name(options: BuildOptions) -> str:
    shim = "process-dev.js" if options.debug else "process.js"
    return f"{options.shim_package}/{shim}"


async def map_packages(
    mapper: PackageMapper,
    names: Sequence[str],
    requesting_path: str,
    *,
    concurrency: int = 4,
) -> list[str]:
    """Resolve and record ``names`` with at most ``concurrency`` lookups in flight."""
    semaphore = asyncio.Semaphore(max(1, concurrency))

    async def _map(name: str) -> str:
        async with semaphore:
            return await mapper.resolve_package(name, requesting_path)

    return list(await asyncio.gather(*(_map(name) for name in names)))


async def build(
    base_path: str,
    options: BuildOptions | None = None,
    *,
    bundler_factory: BundlerFactory,
    resolver: PackageResolver | None = None,
) -> BuildOutcome:
    """Bundle the package in ``base_path`` according to ``options``.

    The bundler's loader normalizer is wrapped only while the bundler runs.
    Extra ``map_packages`` are recorded afterwards and, when
    ``out_config_path`` is set, a loader config is written.
    """
    options = options or BuildOptions()
    base_path = os.path.abspath(base_path)
    resolver = resolver or NodeResolver()
    session = BuildSession()
    mapper = PackageMapper(base_path, resolver, session, container=options.container)
    descriptor_path = os.path.join(base_path, DESCRIPTOR_NAME)

    source_path = options.source_path or default_source_path(base_path)
    source_url = path_to_url(source_path)
    logger.info("Bundling %s", source_path)

    bundler = bundler_factory(path_to_url(base_path), "config.js")
    run = bundler.build_static if options.sfx else bundler.bundle
    with intercept_normalize(bundler.loader, mapper, base_path):
        result = await run(source_url, options.bundle_path, {})
    logger.debug("Bundler reported %d modules", len(result.modules))

    if options.map_packages:
        await map_packages(
            mapper,
            options.map_packages,
            descriptor_path,
            concurrency=options.concurrency,
        )

    config_path = None
    if options.out_config_path:
        shim = await resolver.resolve(shim_module_name(options), filename=descriptor_path)
        config_path = write_config(options, session, relative_url(base_path, shim))

    logger.info(
        "Build finished: %d packages, %d path fixes",
        len(session.packages),
        len(session.fixes),
    )
    return BuildOutcome(result=result, session=session, config_path=config_path)


__all__ = ["BuildOutcome", "build", "default_source_path", "map_packages", "shim_module_name"]
