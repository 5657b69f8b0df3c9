from __future__ import annotations

"""
Include Path Resolver.

Turns the raw header text of an include directive into a canonical tree node
of the dependency graph. Probes the including directory (quoted includes
only) and then the search path in order, peels symbolic links segment by
segment from a trusted directory, and drops headers that cannot be found or
that live outside every root directory.
"""

import logging
import os
from typing import Iterator, List, Optional, Tuple

from incgraph.domain.dep_tree import DepNode, DepTree
from incgraph.domain.scan_models import IncludeDirective, ScanParams
from incgraph.infra.fs import (
    canonical_dir,
    find_containing_root,
    is_descendant,
    resolve_beneath,
    to_node_path,
)

logger = logging.getLogger(__name__)


class IncludeResolver:
    """
    Resolves include directives of the files of one scan into tree edges.

    The scan directory, search directories and root directories are
    canonicalized once here; they are the trusted starting points for symlink
    peeling.

    Attributes:
        scan_dir: Canonical scan directory.
        include_dirs: Canonical search directories, in search order.
        root_dirs: Canonical root directories bounding trackable headers.
        dropped: Number of includes dropped so far.
    """

    def __init__(self, params: ScanParams, tree: DepTree) -> None:
        self.tree = tree
        self.scan_dir = canonical_dir(params.scan_dir)
        self.include_dirs: List[str] = [canonical_dir(d) for d in params.include_dirs]
        self.root_dirs: List[str] = [canonical_dir(d) for d in params.root_dirs]
        self.create_reverse_dependencies = params.create_reverse_dependencies
        self.dropped = 0

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def resolve(self, header: str, angled: bool, including_dir: str) -> Optional[str]:
        """
        Find the file an include refers to.

        Args:
            header: Header text as written between the delimiters.
            angled: True for <...> includes, which skip the including directory.
            including_dir: Directory of the including file, relative to the scan directory.

        Returns:
            Optional[str]: Canonical absolute path of the first regular file found,
                           or None if no probe succeeds.
        """
        for base, relative in self._probes(header, angled, including_dir):
            candidate = resolve_beneath(base, relative)
            if candidate is not None and os.path.isfile(candidate):
                return candidate
        return None

    def node_path_for(self, resolved: str) -> Optional[str]:
        """
        Map a canonical file path to its tree path.

        Files under the scan directory are named relative to it; other tracked
        files relative to the first root directory containing them.

        Returns:
            Optional[str]: '/'-separated tree path, or None if the file is outside every root.
        """
        root = find_containing_root(resolved, self.root_dirs)
        if root is None:
            return None
        if is_descendant(self.scan_dir, resolved):
            return to_node_path(resolved, self.scan_dir)
        return to_node_path(resolved, root)

    def add_include(self, node: DepNode, directive: IncludeDirective, including_dir: str) -> Optional[DepNode]:
        """
        Resolve one directive of 'node' and record the edge.

        Args:
            node: Tree node of the including file.
            directive: Raw directive produced by the scanner.
            including_dir: Directory of the including file, relative to the scan directory.

        Returns:
            Optional[DepNode]: Target node, or None if the include was dropped.
        """
        header = os.fsdecode(directive.header)
        if not header:
            self.dropped += 1
            return None

        resolved = self.resolve(header, directive.angled, including_dir)
        if resolved is None:
            logger.debug(f"Dropping unresolved include '{header}' in '{self.tree.full_name(node)}'")
            self.dropped += 1
            return None

        node_path = self.node_path_for(resolved)
        if node_path is None:
            logger.debug(f"Dropping external include '{header}' -> '{resolved}'")
            self.dropped += 1
            return None

        target = self.tree.add_nested_child(node_path)
        self.tree.add_dependency(node, target)
        if self.create_reverse_dependencies:
            self.tree.add_dependent(target, node)
        return target

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _probes(self, header: str, angled: bool, including_dir: str) -> Iterator[Tuple[str, str]]:
        """Yield (trusted base, relative path) pairs in probing order."""
        if not angled:
            if including_dir:
                yield self.scan_dir, os.path.join(including_dir, header)
            else:
                yield self.scan_dir, header
        for include_dir in self.include_dirs:
            yield include_dir, header
