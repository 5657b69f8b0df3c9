from __future__ import annotations

"""
Dependency Tree Data Model.

Stores every discovered directory, file and referenced header as a node of a
hierarchical namespace, plus two parallel edge sets (dependencies and
reverse dependencies) over the same nodes.

Nodes live in an arena owned by the tree and are addressed by a stable
integer index. Children, parents and edges only hold indices, so a node never
owns another node and the whole structure is released together with the tree.
"""

from bisect import bisect_left
from typing import Iterator, List, Optional

from incgraph.domain.errors import InvariantViolation
from incgraph.domain.path_segments import DEFAULT_SEPARATOR, iter_path_segments

NodeId = int

ROOT_ID: NodeId = 0


def name_key(name: str) -> bytes:
    """
    Return the byte-wise ordering key of a node name.

    Names decoded with os.fsdecode round-trip through 'surrogateescape', so the
    key is the exact byte string the filesystem reported.
    """
    return name.encode("utf-8", "surrogateescape")


# -----------------------------------------------------------------------------
# NODE
# -----------------------------------------------------------------------------

class DepNode:
    """
    One path segment of the tree.

    Attributes:
        index: Stable arena index of the node.
        name: Segment name. Empty only for the root.
        parent: Arena index of the parent, None for the root.
        dependencies: Sorted, duplicate-free indices of included nodes.
        dependents: Sorted, duplicate-free indices of including nodes.
    """

    __slots__ = ("index", "name", "parent", "_child_keys", "_child_ids", "dependencies", "dependents")

    def __init__(self, index: NodeId, name: str, parent: Optional[NodeId]) -> None:
        self.index = index
        self.name = name
        self.parent = parent
        # Parallel lists, ordered by the byte-wise name key
        self._child_keys: List[bytes] = []
        self._child_ids: List[NodeId] = []
        self.dependencies: List[NodeId] = []
        self.dependents: List[NodeId] = []

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def child_count(self) -> int:
        return len(self._child_ids)

    @property
    def has_edges(self) -> bool:
        return bool(self.dependencies or self.dependents)

    def _lookup(self, key: bytes) -> int:
        pos = bisect_left(self._child_keys, key)
        if pos < len(self._child_keys) and self._child_keys[pos] == key:
            return pos
        return -1

    def __repr__(self) -> str:
        return f"DepNode(index={self.index}, name={self.name!r})"


# -----------------------------------------------------------------------------
# TREE
# -----------------------------------------------------------------------------

class DepTree:
    """
    Node store for the dependency graph.

    Creation operations are idempotent: asking for an existing node returns
    it. Nodes are never removed individually.
    """

    def __init__(self) -> None:
        self._nodes: List[DepNode] = [DepNode(ROOT_ID, "", None)]

    # --- Arena access ---

    @property
    def root(self) -> DepNode:
        return self._nodes[ROOT_ID]

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[DepNode]:
        return iter(self._nodes)

    def node(self, index: NodeId) -> DepNode:
        return self._nodes[index]

    def parent(self, node: DepNode) -> Optional[DepNode]:
        self._check_owned(node)
        if node.parent is None:
            return None
        return self._nodes[node.parent]

    def root_of(self, node: DepNode) -> DepNode:
        """Walk the parent chain of a node up to the root."""
        self._check_owned(node)
        current = node
        while current.parent is not None:
            current = self._nodes[current.parent]
        return current

    def children(self, node: DepNode) -> Iterator[DepNode]:
        """Iterate over the children of a node in byte-wise name order."""
        self._check_owned(node)
        for child_id in node._child_ids:
            yield self._nodes[child_id]

    # --- Containment ---

    def find_child(self, node: DepNode, name: str) -> Optional[DepNode]:
        self._check_owned(node)
        pos = node._lookup(name_key(name))
        if pos < 0:
            return None
        return self._nodes[node._child_ids[pos]]

    def get_or_create_child(self, node: DepNode, name: str) -> DepNode:
        """
        Return the child with the given name, creating it if needed.

        Args:
            node: Parent node.
            name: Non-empty child name.

        Returns:
            DepNode: The existing or newly created child.

        Raises:
            InvariantViolation: If the name is empty.
        """
        if not name:
            raise InvariantViolation("Node name must not be empty")
        self._check_owned(node)

        key = name_key(name)
        pos = bisect_left(node._child_keys, key)
        if pos < len(node._child_keys) and node._child_keys[pos] == key:
            return self._nodes[node._child_ids[pos]]

        child = DepNode(len(self._nodes), name, node.index)
        self._nodes.append(child)
        node._child_keys.insert(pos, key)
        node._child_ids.insert(pos, child.index)
        return child

    def navigate(
            self,
            path: str,
            separator: str = DEFAULT_SEPARATOR,
            start: Optional[DepNode] = None,
    ) -> Optional[DepNode]:
        """
        Follow an existing path of nodes without creating anything.

        Args:
            path: Separator-delimited, non-empty path.
            separator: Path separator.
            start: Node to start from. Defaults to the root.

        Returns:
            Optional[DepNode]: The final node, or None at the first missing segment.
        """
        node = start if start is not None else self.root
        found_any = False
        for name in iter_path_segments(path, separator):
            found_any = True
            child = self.find_child(node, name)
            if child is None:
                return None
            node = child
        if not found_any:
            raise InvariantViolation("Node path must not be empty")
        return node

    def add_nested_child(
            self,
            path: str,
            separator: str = DEFAULT_SEPARATOR,
            start: Optional[DepNode] = None,
    ) -> DepNode:
        """
        Follow a path of nodes, creating every missing segment.

        Args:
            path: Separator-delimited, non-empty path.
            separator: Path separator.
            start: Node to start from. Defaults to the root.

        Returns:
            DepNode: The leaf node of the path.
        """
        node = start if start is not None else self.root
        created_any = False
        for name in iter_path_segments(path, separator):
            created_any = True
            node = self.get_or_create_child(node, name)
        if not created_any:
            raise InvariantViolation("Node path must not be empty")
        return node

    # --- Edges ---

    def add_dependency(self, node: DepNode, target: DepNode) -> bool:
        """
        Record that 'node' includes 'target'.

        Returns:
            bool: True if the edge was new, False if it already existed.
        """
        self._check_owned(node)
        self._check_owned(target)
        return _insert_sorted_unique(node.dependencies, target.index)

    def add_dependent(self, node: DepNode, source: DepNode) -> bool:
        """Record that 'node' is included by 'source'."""
        self._check_owned(node)
        self._check_owned(source)
        return _insert_sorted_unique(node.dependents, source.index)

    def add_dependency_path(self, node: DepNode, path: str, separator: str = DEFAULT_SEPARATOR) -> DepNode:
        """Create the target by its path from the root and add a dependency edge to it."""
        target = self.add_nested_child(path, separator, start=self.root_of(node))
        self.add_dependency(node, target)
        return target

    def add_dependent_path(self, node: DepNode, path: str, separator: str = DEFAULT_SEPARATOR) -> DepNode:
        source = self.add_nested_child(path, separator, start=self.root_of(node))
        self.add_dependent(node, source)
        return source

    def dependencies(self, node: DepNode) -> List[DepNode]:
        self._check_owned(node)
        return [self._nodes[i] for i in node.dependencies]

    def dependents(self, node: DepNode) -> List[DepNode]:
        self._check_owned(node)
        return [self._nodes[i] for i in node.dependents]

    def edge_count(self) -> int:
        return sum(len(n.dependencies) for n in self._nodes)

    # --- Naming ---

    def full_name(self, node: DepNode, separator: str = DEFAULT_SEPARATOR) -> str:
        """
        Join the names from the root (excluded) down to the node.

        The root itself has an empty full name.
        """
        self._check_owned(node)
        names: List[str] = []
        current = node
        while current.parent is not None:
            names.append(current.name)
            current = self._nodes[current.parent]
        names.reverse()
        return separator.join(names)

    # --- Internals ---

    def _check_owned(self, node: DepNode) -> None:
        index = node.index
        if index >= len(self._nodes) or self._nodes[index] is not node:
            raise InvariantViolation(f"{node!r} does not belong to this tree")


def _insert_sorted_unique(items: List[NodeId], value: NodeId) -> bool:
    pos = bisect_left(items, value)
    if pos < len(items) and items[pos] == value:
        return False
    items.insert(pos, value)
    return True


# -----------------------------------------------------------------------------
# TREE-WIDE OPERATIONS
# -----------------------------------------------------------------------------

def reconstruct_reverse_dependencies(tree: DepTree) -> int:
    """
    Rebuild the dependent lists from the dependency lists.

    Used when a tree was built, or loaded, without reverse tracking.

    Returns:
        int: Number of reverse edges that were added.
    """
    added = 0
    for node in tree:
        for target in tree.dependencies(node):
            if tree.add_dependent(target, node):
                added += 1
    return added


