"""Package-aware bundling and loader config generation."""

from .builder import BuildOutcome, build
from .errors import CBuildError, InternalModuleError, ResolutionError
from .models import Branch, BuildItem, BuildOptions, BuildResult, PackageSpec
from .report import format_tree, make_tree

__version__ = "0.1.0"

__all__ = [
    "Branch",
    "BuildItem",
    "BuildOptions",
    "BuildOutcome",
    "BuildResult",
    "CBuildError",
    "InternalModuleError",
    "PackageSpec",
    "ResolutionError",
    "build",
    "format_tree",
    "make_tree",
]
