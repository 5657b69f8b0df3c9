from __future__ import annotations

"""
Unit tests for Configuration Domain Logic.

Verifies:
1. Default configuration generation.
2. Loading a JSON configuration file over the defaults.
3. Error reporting for unreadable or malformed files.
"""

import json
import os
from pathlib import Path

import pytest

from incgraph.domain.config import CONFIG_KEYS, get_default_config, load_config, save_config
from incgraph.domain.errors import ConfigurationError


def test_default_config_structure() -> None:
    cfg = get_default_config()

    assert set(cfg) == set(CONFIG_KEYS)
    assert cfg["scan_dir"] == os.getcwd()
    assert cfg["project_root"] == ""
    assert cfg["whitelist_wildcards"] == ["*"]
    assert "*.hpp" in cfg["cxx_wildcards"]
    assert "build" in cfg["skip_root_dirs"]
    assert cfg["output_format"] == "json"
    assert cfg["indent"] == "\t"
    assert cfg["create_reverse_dependencies"] is True


def test_default_config_lists_are_independent() -> None:
    a = get_default_config()
    a["cxx_wildcards"].append("*.cc")
    assert "*.cc" not in get_default_config()["cxx_wildcards"]


def test_load_config_without_path_returns_defaults() -> None:
    assert load_config(None) == get_default_config()


def test_load_config_overlays_known_keys(tmp_path: Path) -> None:
    path = tmp_path / "incgraph.json"
    path.write_text(json.dumps({"pretty_print": False, "bogus": 1}), encoding="utf-8")

    cfg = load_config(str(path))

    assert cfg["pretty_print"] is False
    assert "bogus" not in cfg
    assert cfg["output_format"] == "json"


def test_load_config_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError) as exc:
        load_config(str(tmp_path / "nope.json"))
    assert exc.value.path == str(tmp_path / "nope.json")


@pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
def test_load_config_rejects_bad_content(tmp_path: Path, content: str) -> None:
    path = tmp_path / "bad.json"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_config(str(path))


def test_save_then_load(tmp_path: Path) -> None:
    path = tmp_path / "nested" / "cfg.json"
    cfg = get_default_config()
    cfg["blacklist_wildcards"] = ["*.bak"]

    save_config(cfg, str(path))

    assert load_config(str(path))["blacklist_wildcards"] == ["*.bak"]
