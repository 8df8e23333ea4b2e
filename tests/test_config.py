"""Tests for cbuild.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from cbuild.config import CBuildConfig, load_config
from cbuild.errors import ConfigError
from cbuild.models import BuildOptions


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, CBuildConfig)
    assert config.root == tmp_path.resolve()
    assert config.debug is False
    assert config.sfx is False
    assert config.source_path is None
    assert config.include_config_list == []
    assert config.map_packages == []
    assert config.bundler is None
    assert config.to_options() == BuildOptions()


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".cbuild.yml"
    config_file.write_text(
        """
debug: true
sfx: "yes"
source: src/main.js
bundle: dist/bundle.js
out_config: dist/config.js
include_config:
  - config/base.js
  - config/paths.js
map_packages: [react, "lodash/fp"]
container: deps
shim_package: my-shims
concurrency: 2
bundler: "systemjs_bridge:create"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)
    root = tmp_path.resolve()

    assert config.debug is True
    assert config.sfx is True
    assert config.source_path == str(root / "src" / "main.js")
    assert config.bundle_path == str(root / "dist" / "bundle.js")
    assert config.out_config_path == str(root / "dist" / "config.js")
    assert config.include_config_list == [
        str(root / "config" / "base.js"),
        str(root / "config" / "paths.js"),
    ]
    assert config.map_packages == ["react", "lodash/fp"]
    assert config.container == "deps"
    assert config.shim_package == "my-shims"
    assert config.concurrency == 2
    assert config.bundler == "systemjs_bridge:create"

    options = config.to_options()
    assert options.container == "deps"
    assert options.concurrency == 2
    assert options.debug is True


def test_overrides_win_over_file_values(tmp_path: Path) -> None:
    (tmp_path / ".cbuild.yml").write_text(
        "source: src/main.js\nmap_packages: [react]\n", encoding="utf-8"
    )

    options = load_config(tmp_path).to_options(
        source_path="/elsewhere/entry.js",
        map_packages=[],
        debug=None,
    )

    assert options.source_path == "/elsewhere/entry.js"
    assert options.map_packages == ["react"]
    assert options.debug is False


def test_non_mapping_root_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".cbuild.yml").write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)


def test_invalid_yaml_is_rejected(tmp_path: Path) -> None:
    (tmp_path / ".cbuild.yml").write_text("debug: [unclosed\n", encoding="utf-8")

    with pytest.raises(ConfigError, match="Failed to parse .cbuild.yml"):
        load_config(tmp_path)
