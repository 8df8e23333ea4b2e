"""In-memory bundling engine used to drive builds in tests."""

from __future__ import annotations

import posixpath
from collections import deque
from typing import Any, Dict, List, Mapping, Optional

from cbuild.models import BuildItem, BuildResult


class FakeLoader:
    """Loader that only understands relative specifiers and the alias map."""

    def __init__(self, base_url: str) -> None:
        self.base_url = base_url
        self.map: Dict[str, str] = {}
        self.calls: List[tuple[str, Optional[str]]] = []

    async def normalize(
        self, name: str, parent_name: Optional[str] = None, parent_address: Optional[str] = None
    ) -> str:
        self.calls.append((name, parent_name))
        if name.startswith("file://"):
            url = name
        elif name.startswith(("./", "../")) and parent_name:
            parent = parent_name[len("file://"):]
            url = "file://" + posixpath.normpath(posixpath.join(posixpath.dirname(parent), name))
        else:
            url = f"{self.base_url}/{name}"
        if not url.endswith((".js", ".json")):
            url += ".js"
        return url


class FakeBundler:
    """Traces `imports` (relative file -> specifiers) through the loader."""

    def __init__(
        self,
        base_url: str,
        imports: Mapping[str, List[str]] | None = None,
        *,
        error: Exception | None = None,
    ) -> None:
        self.base_url = base_url
        self.imports = dict(imports or {})
        self.error = error
        self.loader = FakeLoader(base_url)
        self.calls: List[Dict[str, Any]] = []

    async def bundle(
        self, source_url: str, output_path: Optional[str], options: Mapping[str, Any]
    ) -> BuildResult:
        tree = await self._trace("bundle", source_url, output_path)
        return BuildResult(
            source="/* bundle */",
            modules=list(tree),
            entry_points=[source_url],
            tree=tree,
        )

    async def build_static(
        self, source_url: str, output_path: Optional[str], options: Mapping[str, Any]
    ) -> BuildResult:
        tree = await self._trace("build_static", source_url, output_path)
        return BuildResult(source="/* sfx */", modules=list(tree), entry_points=None, tree=tree)

    async def _trace(
        self, method: str, source_url: str, output_path: Optional[str]
    ) -> Dict[str, BuildItem]:
        self.calls.append(
            {
                "method": method,
                "source_url": source_url,
                "output_path": output_path,
                "normalize": self.loader.normalize,
            }
        )
        if self.error is not None:
            raise self.error

        tree: Dict[str, BuildItem] = {}
        queue = deque([source_url])
        while queue:
            url = queue.popleft()
            if url in tree:
                continue
            relative = url[len(self.base_url) + 1:] if url.startswith(self.base_url) else url
            specifiers = self.imports.get(relative, [])
            dep_map = {}
            for specifier in specifiers:
                dep_map[specifier] = await self.loader.normalize(specifier, url, url)
            tree[url] = BuildItem(name=url, deps=list(specifiers), dep_map=dep_map)
            queue.extend(dep_map.values())
        return tree


class FakeBundlerFactory:
    """Callable factory recording every bundler it creates."""

    def __init__(self, imports: Mapping[str, List[str]] | None = None, **kwargs: Any) -> None:
        self.imports = imports
        self.kwargs = kwargs
        self.created: List[FakeBundler] = []

    def __call__(self, base_url: str, config_path: str) -> FakeBundler:
        bundler = FakeBundler(base_url, self.imports, **self.kwargs)
        self.created.append(bundler)
        return bundler


def create_bundler(base_url: str, config_path: str) -> FakeBundler:
    """Module-level factory for `--bundler tests._fixtures.bundler:create_bundler`."""
    return FakeBundler(base_url, {"main.js": []})


__all__ = ["FakeBundler", "FakeBundlerFactory", "FakeLoader", "create_bundler"]
