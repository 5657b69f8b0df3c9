from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

1. Path manipulation to ensure the 'src' directory is importable.
2. Helpers to lay out small source trees under tmp_path.
3. Isolation from the INCGRAPH_ROOT environment variable.
"""

import os
import sys
from pathlib import Path
from typing import Any, Callable, Dict

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def _isolate_root_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's INCGRAPH_ROOT from leaking into the tests."""
    monkeypatch.delenv("INCGRAPH_ROOT", raising=False)


def _write_layout(base: Path, layout: Dict[str, Any]) -> None:
    for name, content in layout.items():
        target = base / name
        if isinstance(content, dict):
            target.mkdir(parents=True, exist_ok=True)
            _write_layout(target, content)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                target.write_bytes(content)
            else:
                target.write_text(content, encoding="utf-8")


@pytest.fixture
def make_tree(tmp_path: Path) -> Callable[..., Path]:
    """
    Return a factory that writes a nested {name: content | {...}} layout.

    Paths with '/' in a key are created as nested directories.
    """

    def _make(layout: Dict[str, Any], name: str = "project") -> Path:
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        _write_layout(root, layout)
        return root

    return _make


@pytest.fixture
def base_config() -> Callable[[Path], Dict[str, Any]]:
    """Return a factory for a run configuration rooted at a project directory."""

    def _config(project: Path, **extra: Any) -> Dict[str, Any]:
        cfg: Dict[str, Any] = {
            "scan_dir": str(project),
            "project_root": str(project),
            "create_reverse_dependencies": True,
        }
        cfg.update(extra)
        return cfg

    return _config
