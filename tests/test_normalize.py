"""Tests for the normalization fallback chain."""

from __future__ import annotations

import asyncio

import pytest

from cbuild.models import BuildSession
from cbuild.normalize import PASS, NormalizeInterceptor, intercept_normalize, resolved
from cbuild.packages import PackageMapper
from cbuild.paths import path_to_url
from tests._fixtures.bundler import FakeLoader
from tests._fixtures.project_builder import ProjectBuilder
from tests._fixtures.resolver import StubResolver


def _interceptor(
    project_builder: ProjectBuilder, resolver: StubResolver | None = None
) -> NormalizeInterceptor:
    base = str(project_builder.path())
    loader = FakeLoader(path_to_url(base))
    mapper = PackageMapper(base, resolver or StubResolver(), BuildSession())
    return NormalizeInterceptor(loader, loader.normalize, mapper, base)


def _parent(project_builder: ProjectBuilder) -> str:
    return path_to_url(str(project_builder.path("src/main.js")))


def test_stage_results() -> None:
    assert not PASS.resolved
    assert resolved("file:///a.js").resolved
    assert resolved("file:///a.js").path == "file:///a.js"


def test_existing_file_is_returned_unchanged(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/util.js": ""})
    resolver = StubResolver()
    interceptor = _interceptor(project_builder, resolver)

    result = asyncio.run(interceptor.normalize("./util", _parent(project_builder)))

    assert result == path_to_url(str(project_builder.path("src/util.js")))
    assert interceptor.mapper.session.fixes == {}
    assert resolver.calls == []


def test_directory_index_fallback_records_one_fix(project_builder: ProjectBuilder) -> None:
    project_builder.write({"src/widgets/index.js": ""})
    resolver = StubResolver()
    interceptor = _interceptor(project_builder, resolver)

    result = asyncio.run(interceptor.normalize("./widgets", _parent(project_builder)))

    assert result == path_to_url(str(project_builder.path("src/widgets/index.js")))
    assert interceptor.mapper.session.fixes == {"./src/widgets.js": "./src/widgets/index.js"}
    assert resolver.calls == []


def test_package_fallback_runs_once_on_double_miss(project_builder: ProjectBuilder) -> None:
    root = project_builder.path("node_modules/kit")
    resolver = StubResolver(
        {"kit": (str(root / "index.js"), [({"name": "kit"}, str(root))])}
    )
    interceptor = _interceptor(project_builder, resolver)
    parent = _parent(project_builder)

    result = asyncio.run(interceptor.normalize("kit", parent))

    assert result == "node_modules/kit/index.js"
    assert resolver.calls == [("kit", str(project_builder.path("src/main.js")))]
    assert interceptor.mapper.session.fixes == {}
    assert "kit" in interceptor.mapper.session.packages


def test_failed_package_fallback_returns_original_candidate(project_builder: ProjectBuilder) -> None:
    resolver = StubResolver()
    interceptor = _interceptor(project_builder, resolver)

    result = asyncio.run(interceptor.normalize("ghost", _parent(project_builder)))

    assert result == path_to_url(str(project_builder.path("ghost.js")))
    assert len(resolver.calls) == 1
    assert interceptor.mapper.session.packages == {}


def test_builtin_module_returns_original_candidate(project_builder: ProjectBuilder) -> None:
    interceptor = _interceptor(project_builder, StubResolver({"fs": ("fs", [])}))

    result = asyncio.run(interceptor.normalize("fs", _parent(project_builder)))

    assert result == path_to_url(str(project_builder.path("fs.js")))
    assert interceptor.mapper.session.packages == {}


def test_alias_map_uses_original_normalizer(project_builder: ProjectBuilder) -> None:
    resolver = StubResolver()
    interceptor = _interceptor(project_builder, resolver)
    interceptor.loader.map["jquery"] = "vendor/jquery"

    result = asyncio.run(interceptor.normalize("jquery", _parent(project_builder)))

    assert result == path_to_url(str(project_builder.path("vendor/jquery.js")))
    assert resolver.calls == []


def test_top_level_requests_resolve_from_package_descriptor(project_builder: ProjectBuilder) -> None:
    resolver = StubResolver()
    interceptor = _interceptor(project_builder, resolver)

    asyncio.run(interceptor.normalize("ghost"))

    assert resolver.calls == [("ghost", str(project_builder.path("package.json")))]


def test_intercept_normalize_restores_hook_on_error(project_builder: ProjectBuilder) -> None:
    base = str(project_builder.path())
    loader = FakeLoader(path_to_url(base))
    original = loader.normalize
    mapper = PackageMapper(base, StubResolver(), BuildSession())

    with pytest.raises(RuntimeError, match="engine failed"):
        with intercept_normalize(loader, mapper, base) as interceptor:
            assert loader.normalize == interceptor.normalize
            raise RuntimeError("engine failed")

    assert loader.normalize == original
