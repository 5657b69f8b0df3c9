from __future__ import annotations

"""
Filesystem Walker Service.

Walks the scan directory, mirrors every visited entry into the dependency
tree, classifies files and feeds C/C++ sources through the include scanner
and resolver. Any unreadable directory or source file aborts the walk.
"""

import logging
import mmap
import os
from typing import List, Optional, Tuple

from incgraph.core.analysis.include_resolver import IncludeResolver
from incgraph.core.analysis.include_scanner import iter_includes
from incgraph.core.components.filters import is_candidate, is_cxx_file
from incgraph.domain.dep_tree import DepNode, DepTree
from incgraph.domain.errors import ScanIOError
from incgraph.domain.scan_models import IncludeDirective, ScanParams, ScanStats

logger = logging.getLogger(__name__)


# ==============================================================================
# PUBLIC API
# ==============================================================================

def scan_filesystem_tree(params: ScanParams, tree: Optional[DepTree] = None) -> Tuple[DepTree, ScanStats]:
    """
    Build the dependency tree of a directory.

    Args:
        params: Fully resolved scan parameters.
        tree: Tree to populate. A new one is created if omitted.

    Returns:
        Tuple[DepTree, ScanStats]: The populated tree and walk statistics.

    Raises:
        ScanIOError: If a directory cannot be listed or a source file cannot be read.
    """
    walker = FilesystemWalker(params, tree if tree is not None else DepTree())
    return walker.tree, walker.run()


class FilesystemWalker:
    """
    Single-pass walker over the scan directory.

    Top-level entries named in 'skip_root_dirs' are pruned. Symbolic links
    to directories are recorded but not descended into.
    """

    def __init__(self, params: ScanParams, tree: DepTree) -> None:
        self.params = params
        self.tree = tree
        self.resolver = IncludeResolver(params, tree)
        self._directories = 0
        self._files = 0
        self._parsed = 0
        self._includes = 0

    def run(self) -> ScanStats:
        scan_dir = os.path.abspath(self.params.scan_dir)
        skip = set(self.params.skip_root_dirs)
        logger.info(f"Scanning directory tree: {scan_dir}")

        for root, dirs, files in os.walk(scan_dir, onerror=_raise_walk_error):
            rel_root = os.path.relpath(root, scan_dir)
            if rel_root == ".":
                rel_root = ""
                # In-place pruning stops os.walk from descending
                dirs[:] = [d for d in dirs if d not in skip]
                files = [f for f in files if f not in skip]
            dirs.sort()
            files.sort()

            self._directories += 1
            logger.debug(f"Visiting '{rel_root or '.'}': {len(dirs)} dirs, {len(files)} files")

            dir_node = self._dir_node(rel_root)
            for dir_name in dirs:
                self.tree.get_or_create_child(dir_node, dir_name)

            for file_name in files:
                self._visit_file(dir_node, root, rel_root, file_name)

        stats = ScanStats(
            directories=self._directories,
            files=self._files,
            parsed_files=self._parsed,
            includes_found=self._includes,
            includes_dropped=self.resolver.dropped,
        )
        logger.debug(f"Walk finished: {stats}")
        return stats

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _dir_node(self, rel_root: str) -> DepNode:
        if not rel_root:
            return self.tree.root
        return self.tree.add_nested_child(rel_root, os.sep)

    def _visit_file(self, dir_node: DepNode, root: str, rel_root: str, file_name: str) -> None:
        self._files += 1
        node = self.tree.get_or_create_child(dir_node, file_name)
        full_path = os.path.join(root, file_name)

        # Broken links, sockets and the like are recorded but never parsed
        if not os.path.isfile(full_path):
            return

        p = self.params
        if not is_candidate(file_name, p.whitelist_wildcards, p.blacklist_wildcards):
            return
        if not is_cxx_file(full_path, p.cxx_wildcards):
            return

        self._parsed += 1
        directives = read_includes(full_path)
        self._includes += len(directives)

        including_dir = rel_root.replace(os.sep, "/")
        for directive in directives:
            self.resolver.add_include(node, directive, including_dir)


def read_includes(path: str) -> List[IncludeDirective]:
    """
    Map a source file read-only and collect its include directives.

    Empty files cannot be mapped and have nothing to scan.

    Raises:
        ScanIOError: If the file cannot be opened or mapped.
    """
    try:
        if os.path.getsize(path) == 0:
            return []
        with open(path, "rb") as fh:
            with mmap.mmap(fh.fileno(), 0, access=mmap.ACCESS_READ) as region:
                return list(iter_includes(region))
    except (OSError, ValueError) as e:
        raise ScanIOError(f"Failed to open file for parsing ({e})", path) from e


def _raise_walk_error(error: OSError) -> None:
    """os.walk error hook: listing failures abort the whole walk."""
    raise ScanIOError(f"Failed to list directory ({error.strerror or error})", error.filename or "") from error
