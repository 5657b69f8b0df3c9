from __future__ import annotations

"""
JSON Serialization of the Dependency Tree.

The document is a nested object keyed by node names, in byte-wise name
order. A node with edges gets a reserved '$meta' entry holding 'deps' and,
when enabled, 'rdeps' arrays of full node names sorted by name. A node with
no children and no edges is an empty object.

A child whose name collides with the reserved key ('$meta', '$$meta', ...)
is written with one extra leading '$', so the key stays unambiguous.

Names that are not valid UTF-8 carry lone surrogates (os.fsdecode); they are
encoded back to the original filesystem bytes by encode_document.

Also reads such a document back into a tree.
"""

import json
import re
from typing import IO, Any, Dict, List, Optional

from incgraph.domain.constants import DEFAULT_INDENT, DEPS_KEY, META_KEY, RDEPS_KEY
from incgraph.domain.dep_tree import DepNode, DepTree, name_key

Document = Dict[str, Any]

_RESERVED_KEY_RE = re.compile(r"\$+" + re.escape(META_KEY[1:]))

# -----------------------------------------------------------------------------
# SERIALIZATION
# -----------------------------------------------------------------------------

def to_document(tree: DepTree, with_rdeps: bool = True) -> Document:
    """
    Convert the tree into the nested dictionary that is written as JSON.

    Args:
        tree: Finished dependency tree. It is only read.
        with_rdeps: Include reverse dependencies.

    Returns:
        Document: Ordered dictionary structure for the root node.
    """
    return _node_document(tree, tree.root, with_rdeps)


def serialize_json(
        tree: DepTree,
        stream: IO[str],
        with_rdeps: bool = True,
        pretty_print: bool = True,
        indent: str = DEFAULT_INDENT,
) -> None:
    """
    Write the tree as a JSON document.

    Args:
        tree: Finished dependency tree.
        stream: Text stream receiving the document.
        with_rdeps: Include reverse dependencies.
        pretty_print: One entry per line with the given indent and a trailing
                      newline. Otherwise no whitespace at all.
        indent: Indentation unit for pretty printing.
    """
    stream.write(dumps_json(tree, with_rdeps=with_rdeps, pretty_print=pretty_print, indent=indent))
    stream.flush()


def dumps_json(
        tree: DepTree,
        with_rdeps: bool = True,
        pretty_print: bool = True,
        indent: str = DEFAULT_INDENT,
) -> str:
    document = to_document(tree, with_rdeps)
    if pretty_print:
        return json.dumps(document, ensure_ascii=False, indent=indent, separators=(",", ": ")) + "\n"
    return json.dumps(document, ensure_ascii=False, separators=(",", ":"))


def encode_document(text: str) -> bytes:
    """
    Encode a rendered document as UTF-8, restoring undecodable name bytes.

    Raises:
        UnicodeEncodeError: If the text holds a surrogate that did not come
                            from os.fsdecode.
    """
    return text.encode("utf-8", "surrogateescape")


def _node_document(tree: DepTree, node: DepNode, with_rdeps: bool) -> Document:
    doc: Document = {}
    for child in tree.children(node):
        doc[_escape_key(child.name)] = _node_document(tree, child, with_rdeps)

    meta: Document = {}
    if node.dependencies:
        meta[DEPS_KEY] = _sorted_names(tree, tree.dependencies(node))
    if with_rdeps and node.dependents:
        meta[RDEPS_KEY] = _sorted_names(tree, tree.dependents(node))
    if meta:
        doc[META_KEY] = meta

    return doc


def _sorted_names(tree: DepTree, nodes: List[DepNode]) -> List[str]:
    return sorted((tree.full_name(n) for n in nodes), key=name_key)


def _escape_key(name: str) -> str:
    if _RESERVED_KEY_RE.fullmatch(name):
        return "$" + name
    return name


def _unescape_key(key: str) -> str:
    if key.startswith("$$") and _RESERVED_KEY_RE.fullmatch(key):
        return key[1:]
    return key

# -----------------------------------------------------------------------------
# DESERIALIZATION
# -----------------------------------------------------------------------------

def deserialize_json(document: Document, tree: Optional[DepTree] = None) -> DepTree:
    """
    Rebuild a tree from a parsed document.

    Edge targets are created on demand, so forward references are fine.

    Args:
        document: Parsed JSON object of the root node.
        tree: Tree to populate. A new one is created if omitted.

    Returns:
        DepTree: The populated tree.

    Raises:
        ValueError: If the document does not have the expected shape.
    """
    if tree is None:
        tree = DepTree()
    _load_node(tree, tree.root, document, "")
    return tree


def load_json(stream: IO[str]) -> DepTree:
    return deserialize_json(json.load(stream))


def _load_node(tree: DepTree, node: DepNode, doc: Any, where: str) -> None:
    if not isinstance(doc, dict):
        raise ValueError(f"Malformed dependency document at '{where or '/'}': expected an object")

    for key, value in doc.items():
        if key == META_KEY:
            continue
        child = tree.get_or_create_child(node, _unescape_key(key))
        _load_node(tree, child, value, f"{where}/{key}")

    meta = doc.get(META_KEY)
    if meta is None:
        return
    if not isinstance(meta, dict):
        raise ValueError(f"Malformed '{META_KEY}' at '{where or '/'}': expected an object")

    for path in _string_list(meta.get(DEPS_KEY), where):
        tree.add_dependency_path(node, path)
    for path in _string_list(meta.get(RDEPS_KEY), where):
        tree.add_dependent_path(node, path)


def _string_list(value: Any, where: str) -> List[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(v, str) and v for v in value):
        raise ValueError(f"Malformed edge list at '{where or '/'}': expected non-empty strings")
    return value
