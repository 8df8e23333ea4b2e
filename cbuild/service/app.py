"""FastAPI application entrypoint for cbuild service mode."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from ..builder import build
from ..bundlers import BundlerFactory, load_bundler_factory
from ..config import load_config
from ..errors import CBuildError
from ..models import BuildResult
from ..report import make_tree


class BuildRequest(BaseModel):
    path: str
    source_path: Optional[str] = None
    bundle_path: Optional[str] = None
    out_config_path: Optional[str] = None
    include_config_list: List[str] = Field(default_factory=list)
    map_packages: List[str] = Field(default_factory=list)
    debug: Optional[bool] = None
    sfx: Optional[bool] = None


class BuildResponse(BaseModel):
    modules: List[str]
    entry_points: Optional[List[str]] = None
    tree: List[Any]
    packages: Dict[str, str]
    config_path: Optional[str] = None


class TreeRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    modules: List[str] = Field(default_factory=list)
    entry_points: Optional[List[str]] = Field(default=None, alias="entryPoints")
    tree: Dict[str, Dict[str, Any]] = Field(default_factory=dict)


class TreeResponse(BaseModel):
    tree: List[Any]


class HealthResponse(BaseModel):
    status: str


def create_app(bundler_factory: BundlerFactory | None = None) -> FastAPI:
    """Create the FastAPI application exposing cbuild operations."""
    app = FastAPI(title="cbuild Service", version="1.0.0")

    @app.get("/health", response_model=HealthResponse)
    async def health() -> HealthResponse:
        return HealthResponse(status="ok")

    @app.post("/build", response_model=BuildResponse)
    async def build_package(payload: BuildRequest) -> BuildResponse:
        config = load_config(Path(payload.path))
        options = config.to_options(
            debug=payload.debug,
            sfx=payload.sfx,
            bundle_path=payload.bundle_path,
            source_path=payload.source_path,
            out_config_path=payload.out_config_path,
            include_config_list=list(payload.include_config_list),
            map_packages=list(payload.map_packages),
        )
        # Each request gets its own bundler since the normalize hook is swapped per build.
        factory = bundler_factory or load_bundler_factory(config.bundler)
        outcome = await build(payload.path, options, bundler_factory=factory)
        return BuildResponse(
            modules=outcome.result.modules,
            entry_points=outcome.result.entry_points,
            tree=make_tree(outcome.result).to_list(),
            packages={name: spec.path for name, spec in sorted(outcome.session.packages.items())},
            config_path=str(outcome.config_path) if outcome.config_path else None,
        )

    @app.post("/tree", response_model=TreeResponse)
    async def dependency_tree(payload: TreeRequest) -> TreeResponse:
        result = BuildResult.from_dict(payload.model_dump())
        return TreeResponse(tree=make_tree(result).to_list())

    @app.exception_handler(FileNotFoundError)
    async def file_not_found_handler(
        _: Any, exc: FileNotFoundError
    ) -> JSONResponse:  # pragma: no cover - simple mapping
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(CBuildError)
    async def cbuild_error_handler(_: Any, exc: CBuildError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(ValueError)
    async def value_error_handler(_: Any, exc: ValueError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    return app


def run_service(
    host: str = "0.0.0.0", port: int = 8000
) -> None:  # pragma: no cover - integration path
    app = create_app()
    uvicorn.run(app, host=host, port=port)
