"""Serialization of session tables into a ``System.config`` loader file."""

from __future__ import annotations

from pathlib import Path
from typing import List, Sequence

from .logging import get_logger
from .models import BuildOptions, BuildSession

_SHIM_GLOBAL = "process"

logger = get_logger("emit")


def _map_section(session: BuildSession) -> str:
    entries = []
    for name in sorted(session.packages):
        spec = session.packages[name]
        target = spec.root_path if spec.entry_path else spec.path
        entries.append(f'\t\t"{name}": "{target}"')
    return "\tmap: {\n" + ",\n".join(entries) + "\n\t}"


def _meta_section(session: BuildSession, shim_path: str) -> str:
    # Every file under a dependency root gets the shim injected as a global.
    entries = [
        f'\t\t"{key}/*": {{ globals: {{ {_SHIM_GLOBAL}: "{shim_path}" }} }}'
        for key in sorted(session.repositories)
    ]
    return "\tmeta: {\n" + ",\n".join(entries) + "\n\t}"


def _packages_section(session: BuildSession) -> str | None:
    entries: List[str] = []
    for name in sorted(session.packages):
        spec = session.packages[name]
        if spec.entry_path:
            entries.append(f'\t\t"{spec.root_path}": {{ main: "{spec.entry_path}" }}')

    if session.fixes:
        fixes = ",\n".join(
            f'\t\t\t\t"{old}": "{session.fixes[old]}"' for old in sorted(session.fixes)
        )
        entries.append('\t\t".": {\n\t\t\tmap: {\n' + fixes + "\n\t\t\t}\n\t\t}")

    if not entries:
        return None
    return "\tpackages: {\n" + ",\n".join(entries) + "\n\t}"


def render_config(
    session: BuildSession, shim_path: str, *, fragments: Sequence[str] = ()
) -> str:
    """Return loader configuration text for ``session``.

    ``fragments`` are prepended verbatim, joined by newlines. Output depends
    only on table contents, never on insertion order.
    """
    sections = [_map_section(session), _meta_section(session, shim_path)]
    packages = _packages_section(session)
    if packages is not None:
        sections.append(packages)

    config = "System.config({\n" + ",\n".join(sections) + "\n});\n"
    return "\n".join(fragments) + config


def write_config(options: BuildOptions, session: BuildSession, shim_path: str) -> Path:
    """Render ``session`` with the included fragments and write ``out_config_path``."""
    if not options.out_config_path:
        raise ValueError("out_config_path is required to write a loader config")

    fragments = [
        Path(path).read_text(encoding="utf-8") for path in options.include_config_list
    ]
    output = Path(options.out_config_path)
    output.write_text(render_config(session, shim_path, fragments=fragments), encoding="utf-8")
    logger.info("Loader config written to %s", output)
    return output


__all__ = ["render_config", "write_config"]
