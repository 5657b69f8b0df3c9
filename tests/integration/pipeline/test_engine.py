from __future__ import annotations

"""
Integration tests for the scan pipeline.

Verifies the whole run from a raw configuration to the written document,
and that a failing run writes nothing.
"""

import io
import json
import os
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from incgraph.core.pipeline.engine import build_tree, run_pipeline
from incgraph.domain.errors import InvariantViolation, ScanIOError


def _project(make_tree) -> Path:
    return make_tree({
        "a.hpp": '#include "sub/b.hpp"\n#include <missing.h>\n',
        "sub": {"b.hpp": ""},
        "build": {"ignored.hpp": ""},
    })


def test_run_writes_document_to_stream(make_tree, base_config) -> None:
    project = _project(make_tree)
    out = io.StringIO()

    result = run_pipeline(base_config(project), stream=out)

    assert result.ok is True
    assert result.output_path == ""
    assert result.node_count == 4
    assert result.edge_count == 1
    assert result.stats.includes_dropped == 1
    assert json.loads(out.getvalue()) == {
        "a.hpp": {"$meta": {"deps": ["sub/b.hpp"]}},
        "sub": {"b.hpp": {"$meta": {"rdeps": ["a.hpp"]}}},
    }


def test_run_writes_output_file(make_tree, base_config, tmp_path: Path) -> None:
    project = _project(make_tree)
    target = tmp_path / "deps.json"

    result = run_pipeline(base_config(project, output_path=str(target), pretty_print=False))

    assert result.ok is True
    assert result.output_path == str(target)
    text = target.read_text(encoding="utf-8")
    assert "\n" not in text
    assert json.loads(text)["a.hpp"]["$meta"]["deps"] == ["sub/b.hpp"]


def test_run_without_reverse_dependencies(make_tree, base_config) -> None:
    project = _project(make_tree)
    out = io.StringIO()

    run_pipeline(base_config(project, create_reverse_dependencies=False), stream=out)

    assert json.loads(out.getvalue())["sub"]["b.hpp"] == {}


def test_build_tree_returns_validated_config(make_tree, base_config) -> None:
    project = _project(make_tree)
    tree, stats, cfg = build_tree(base_config(project))

    assert tree.navigate("sub/b.hpp") is not None
    assert stats.files == 2
    assert cfg["include_dirs"] == [str(project)]


def test_configuration_error_is_reported(make_tree, base_config) -> None:
    project = _project(make_tree)
    out = io.StringIO()

    result = run_pipeline(base_config(project, output_format="yaml"), stream=out)

    assert result.ok is False
    assert result.error_kind == "configuration"
    assert "yaml" in result.error
    assert out.getvalue() == ""


def test_io_error_writes_nothing(make_tree, base_config, tmp_path: Path) -> None:
    project = _project(make_tree)
    target = tmp_path / "deps.json"

    with patch(
        "incgraph.core.pipeline.engine.scan_filesystem_tree",
        side_effect=ScanIOError("Failed to list directory", str(project / "sub")),
    ):
        result = run_pipeline(base_config(project, output_path=str(target)))

    assert result.ok is False
    assert result.error_kind == "io"
    assert result.error_path == str(project / "sub")
    assert not target.exists()


def test_unwritable_output_is_reported(make_tree, base_config, tmp_path: Path) -> None:
    project = _project(make_tree)
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    result = run_pipeline(base_config(project, output_path=str(blocker / "deps.json")))

    assert result.ok is False
    assert result.error_kind == "io"
    assert result.error_path == str(blocker / "deps.json")


def test_invariant_violation_is_reported(make_tree, base_config) -> None:
    project = _project(make_tree)

    with patch(
        "incgraph.core.pipeline.engine.scan_filesystem_tree",
        side_effect=InvariantViolation("Node name must not be empty"),
    ):
        result = run_pipeline(base_config(project), stream=io.StringIO())

    assert result.ok is False
    assert result.error_kind == "invariant"


# -----------------------------------------------------------------------------
# Undecodable file names
# -----------------------------------------------------------------------------

needs_raw_names = pytest.mark.skipif(sys.platform != "linux", reason="needs byte-transparent file names")


def _project_with_raw_name(make_tree) -> Path:
    project = make_tree({"a.hpp": ""})
    raw = os.path.join(os.fsencode(str(project)), b"\xff.hpp")
    fd = os.open(raw, os.O_CREAT | os.O_WRONLY, 0o644)
    try:
        os.write(fd, b'#include "a.hpp"\n')
    finally:
        os.close(fd)
    return project


@needs_raw_names
def test_undecodable_name_written_as_raw_bytes(make_tree, base_config, tmp_path: Path) -> None:
    project = _project_with_raw_name(make_tree)
    target = tmp_path / "deps.json"

    result = run_pipeline(base_config(project, output_path=str(target), pretty_print=False))

    assert result.ok is True, result.error
    data = target.read_bytes()
    assert b'"\xff.hpp":{"$meta":{"deps":["a.hpp"]}}' in data
    assert b'"rdeps":["\xff.hpp"]' in data


@needs_raw_names
def test_undecodable_name_written_to_binary_backed_stream(make_tree, base_config) -> None:
    project = _project_with_raw_name(make_tree)
    raw = io.BytesIO()
    out = io.TextIOWrapper(raw, encoding="utf-8")

    result = run_pipeline(base_config(project, pretty_print=False), stream=out)

    assert result.ok is True, result.error
    assert b'"\xff.hpp"' in raw.getvalue()


def test_encoding_failure_keeps_existing_output(make_tree, base_config, tmp_path: Path) -> None:
    project = _project(make_tree)
    target = tmp_path / "deps.json"
    target.write_text("previous", encoding="utf-8")

    with patch("incgraph.core.pipeline.engine.render", return_value='{"\ud800":{}}'):
        result = run_pipeline(base_config(project, output_path=str(target)))

    assert result.ok is False
    assert "encode" in result.error
    assert target.read_text(encoding="utf-8") == "previous"
