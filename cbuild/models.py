"""Core data models shared across cbuild components."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set


@dataclass
class BuildOptions:
    """Options for a single build invocation."""

    debug: bool = False
    sfx: bool = False
    bundle_path: Optional[str] = None
    source_path: Optional[str] = None
    out_config_path: Optional[str] = None
    include_config_list: List[str] = field(default_factory=list)
    map_packages: List[str] = field(default_factory=list)
    container: str = "node_modules"
    shim_package: str = "cbuild"
    concurrency: int = 4


@dataclass
class PackageSpec:
    """Location of a dependency package recorded during normalization."""

    name: str
    root_path: str
    path: str
    entry_path: Optional[str] = None


@dataclass
class BuildSession:
    """Tables accumulated while one build runs."""

    packages: Dict[str, PackageSpec] = field(default_factory=dict)
    repositories: Dict[str, Set[str]] = field(default_factory=dict)
    fixes: Dict[str, str] = field(default_factory=dict)


@dataclass
class BuildItem:
    """Bundler diagnostics for one module."""

    name: str
    deps: List[str] = field(default_factory=list)
    dep_map: Dict[str, str] = field(default_factory=dict)


@dataclass
class BuildResult:
    """Bundler output for a whole bundle."""

    source: str = ""
    modules: List[str] = field(default_factory=list)
    entry_points: Optional[List[str]] = None
    tree: Dict[str, BuildItem] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "BuildResult":
        """Build a result from the engine's JSON shape (camelCase keys accepted)."""
        tree: Dict[str, BuildItem] = {}
        raw_tree = payload.get("tree") or {}
        if isinstance(raw_tree, Mapping):
            for name, raw in raw_tree.items():
                if not isinstance(raw, Mapping):
                    continue
                dep_map = raw.get("dep_map", raw.get("depMap")) or {}
                tree[str(name)] = BuildItem(
                    name=str(raw.get("name") or name),
                    deps=[str(dep) for dep in raw.get("deps") or []],
                    dep_map={str(key): str(value) for key, value in dict(dep_map).items()},
                )

        entry_points = payload.get("entry_points", payload.get("entryPoints"))
        return cls(
            source=str(payload.get("source") or ""),
            modules=[str(name) for name in payload.get("modules") or []],
            entry_points=(
                [str(name) for name in entry_points] if entry_points is not None else None
            ),
            tree=tree,
        )


@dataclass
class Branch:
    """One node of the shortest-import-chain tree; the root has an empty name."""

    name: str
    children: List["Branch"] = field(default_factory=list)

    def to_list(self) -> List[Any]:
        """Return the nested ``[name, child, ...]`` list form."""
        return [self.name, *(child.to_list() for child in self.children)]
