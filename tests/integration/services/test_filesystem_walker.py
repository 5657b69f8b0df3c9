from __future__ import annotations

"""
Integration tests for the Filesystem Walker.

Verifies:
1. Mirroring of the directory layout into the tree.
2. Classification of parsed files.
3. Top-level skip list pruning.
4. Abort on unreadable directories and files.
"""

import os
from pathlib import Path
from unittest.mock import patch

import pytest

from incgraph.core.services.walker import read_includes, scan_filesystem_tree
from incgraph.domain.dep_tree import DepTree
from incgraph.domain.errors import ScanIOError
from incgraph.domain.scan_models import ScanParams


def _names(tree: DepTree, path: str = "") -> list:
    node = tree.root if not path else tree.navigate(path)
    return [c.name for c in tree.children(node)]


def test_basic_include_round_trip(make_tree) -> None:
    project = make_tree({
        "a.hpp": '#include "sub/b.hpp"\n',
        "sub": {"b.hpp": ""},
    })
    tree, stats = scan_filesystem_tree(ScanParams.typical(str(project)))

    a = tree.navigate("a.hpp")
    b = tree.navigate("sub/b.hpp")
    assert tree.dependencies(a) == [b]
    assert tree.dependents(b) == [a]
    assert stats.files == 2
    assert stats.parsed_files == 2
    assert stats.includes_found == 1
    assert stats.includes_dropped == 0


def test_layout_is_mirrored_in_byte_order(make_tree) -> None:
    project = make_tree({
        "b.txt": "",
        "A.cpp": "",
        "docs": {"readme.md": ""},
        "empty_dir": {},
    })
    tree, stats = scan_filesystem_tree(ScanParams.typical(str(project)))

    assert _names(tree) == ["A.cpp", "b.txt", "docs", "empty_dir"]
    assert _names(tree, "docs") == ["readme.md"]
    assert _names(tree, "empty_dir") == []
    # Only the C++ file is parsed
    assert stats.parsed_files == 1
    assert stats.directories == 3


def test_skip_list_applies_to_top_level_only(make_tree) -> None:
    project = make_tree({
        "build": {"gen.hpp": '#include "../a.hpp"\n'},
        "libs": {"build": {"keep.hpp": ""}},
        "a.hpp": "",
    })
    tree, _ = scan_filesystem_tree(ScanParams.typical(str(project)))

    assert tree.find_child(tree.root, "build") is None
    assert tree.navigate("libs/build/keep.hpp") is not None
    assert tree.dependents(tree.navigate("a.hpp")) == []


def test_empty_source_is_a_leaf_without_edges(make_tree) -> None:
    project = make_tree({"empty.cpp": ""})
    tree, stats = scan_filesystem_tree(ScanParams.typical(str(project)))

    node = tree.navigate("empty.cpp")
    assert node is not None
    assert not node.has_edges
    assert stats.parsed_files == 1


def test_files_under_include_dir_are_parsed(make_tree) -> None:
    project = make_tree({
        "include": {"vector": "#include <detail.h>\n", "detail.h": ""},
        "notes": {"vector": "#include <include/detail.h>\n"},
    })
    params = ScanParams(
        scan_dir=str(project),
        project_root=str(project),
        include_dirs=(str(project / "include"), str(project)),
        root_dirs=(str(project),),
    )
    tree, stats = scan_filesystem_tree(params)

    target = tree.navigate("include/detail.h")
    assert tree.dependencies(tree.navigate("include/vector")) == [target]
    assert tree.navigate("notes/vector").dependencies == []
    assert stats.parsed_files == 2


def test_blacklist_excludes_from_parsing(make_tree) -> None:
    project = make_tree({
        "a.cpp": "#include <b.h>\n",
        "b.h": "",
    })
    params = ScanParams(
        scan_dir=str(project),
        project_root=str(project),
        include_dirs=(str(project),),
        root_dirs=(str(project),),
        blacklist_wildcards=("*.cpp",),
    )
    tree, _ = scan_filesystem_tree(params)

    # Still recorded, just not parsed
    assert tree.navigate("a.cpp") is not None
    assert tree.edge_count() == 0


def test_dropped_includes_are_counted(make_tree) -> None:
    project = make_tree({"a.cpp": "#include <vector>\n#include \"b.h\"\n", "b.h": ""})
    tree, stats = scan_filesystem_tree(ScanParams.typical(str(project)))

    assert stats.includes_found == 2
    assert stats.includes_dropped == 1
    assert tree.edge_count() == 1


def test_cyclic_includes(make_tree) -> None:
    project = make_tree({
        "a.h": '#include "b.h"\n',
        "b.h": '#include "a.h"\n',
    })
    tree, _ = scan_filesystem_tree(ScanParams.typical(str(project)))

    a, b = tree.navigate("a.h"), tree.navigate("b.h")
    assert tree.dependencies(a) == [b]
    assert tree.dependencies(b) == [a]


@pytest.mark.skipif(os.name == "nt", reason="symlinks required")
def test_symlinked_directory_is_not_descended(make_tree) -> None:
    project = make_tree({"real": {"x.hpp": ""}})
    os.symlink("real", project / "alias", target_is_directory=True)
    tree, _ = scan_filesystem_tree(ScanParams.typical(str(project)))

    assert tree.navigate("alias") is not None
    assert _names(tree, "alias") == []
    assert _names(tree, "real") == ["x.hpp"]


def test_missing_scan_dir_raises(tmp_path: Path) -> None:
    params = ScanParams.typical(str(tmp_path), scan_dir=str(tmp_path / "nope"))
    with pytest.raises(ScanIOError) as exc:
        scan_filesystem_tree(params)
    assert exc.value.path == str(tmp_path / "nope")


def test_unlistable_subdirectory_aborts_walk(make_tree) -> None:
    project = make_tree({"a.cpp": "", "locked": {"x.h": ""}})
    locked = str(project / "locked")
    real_scandir = os.scandir

    def fake_scandir(path="."):
        if os.fspath(path) == locked:
            raise PermissionError(13, "Permission denied", locked)
        return real_scandir(path)

    with patch("os.scandir", side_effect=fake_scandir):
        with pytest.raises(ScanIOError) as exc:
            scan_filesystem_tree(ScanParams.typical(str(project)))

    assert exc.value.path == locked


def test_unreadable_source_aborts_walk(make_tree) -> None:
    project = make_tree({"a.cpp": "#include <b.h>\n"})

    with patch("incgraph.core.services.walker.open", side_effect=PermissionError(13, "Permission denied"), create=True):
        with pytest.raises(ScanIOError) as exc:
            scan_filesystem_tree(ScanParams.typical(str(project)))

    assert exc.value.path.endswith("a.cpp")


def test_read_includes_of_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "e.h"
    path.write_bytes(b"")
    assert read_includes(str(path)) == []
