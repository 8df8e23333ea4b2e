"""Shortest import chain trees extracted from bundle results."""

from __future__ import annotations

from collections import deque
from typing import Deque, Dict, List, Set

from .models import Branch, BuildResult


def infer_entry_points(result: BuildResult) -> List[str]:
    """Return modules of ``result.tree`` that no other module imports."""
    imported: Set[str] = set()
    for item in result.tree.values():
        for dep in item.deps:
            target = item.dep_map.get(dep)
            if target is not None:
                imported.add(target)
    return [name for name in result.tree if name not in imported]


def make_tree(result: BuildResult) -> Branch:
    """Return a nameless root branch holding the shortest import chain to each module.

    Breadth-first search from the entry points attaches every module once,
    under the first module found to import it. Static (sfx) bundles report no
    entry points, so they are inferred from the module table.
    """
    root = Branch(name="")
    found: Dict[str, Branch] = {}
    queue: Deque[str] = deque()

    def report(name: str, parent: Branch) -> None:
        if name in found:
            return
        leaf = Branch(name=name)
        found[name] = leaf
        parent.children.append(leaf)
        queue.append(name)

    entry_points = result.entry_points
    if entry_points is None:
        entry_points = infer_entry_points(result)

    for name in entry_points:
        report(name, root)

    while queue:
        name = queue.popleft()
        item = result.tree.get(name)
        if item is None:
            continue
        branch = found[name]
        for dep in item.deps:
            target = item.dep_map.get(dep)
            if target is not None:
                report(target, branch)

    return root


def format_tree(root: Branch, indent: str = "  ") -> str:
    """Render ``root``'s descendants one per line, indented by depth."""
    lines: List[str] = []
    stack = [(child, 0) for child in reversed(root.children)]
    while stack:
        branch, depth = stack.pop()
        lines.append(f"{indent * depth}{branch.name}")
        stack.extend((child, depth + 1) for child in reversed(branch.children))
    return "\n".join(lines)


__all__ = ["format_tree", "infer_entry_points", "make_tree"]
