from __future__ import annotations

"""
FileSystem Infrastructure Layer.

Path normalization, symlink peeling relative to trusted directories,
containment checks and project root discovery. Acts as an abstraction over
the 'os' module so the analysis core never touches raw path strings.
"""

import logging
import os
from collections import deque
from typing import Deque, Iterable, List, Optional, Sequence

from incgraph.domain.constants import DEFAULT_ROOT_MARKERS, ROOT_ENV_VAR

logger = logging.getLogger(__name__)

# Same limit as the kernel's ELOOP threshold
MAX_SYMLINK_HOPS = 40

# -----------------------------------------------------------------------------
# PATH NORMALIZATION API
# -----------------------------------------------------------------------------

def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Normalize a path string into an absolute filesystem path.

    Handles environment variable expansion ($VAR/%VAR%) and user home
    shortcuts (~/). Reverts to fallback if the input is empty.

    Args:
        path: Raw input path string.
        fallback: Default path to use if the input is empty.

    Returns:
        str: Normalized absolute path.
    """
    p = (path or "").strip()
    if not p:
        p = fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def canonical_dir(path: str) -> str:
    """Return the fully symlink-resolved absolute form of a trusted directory."""
    return os.path.realpath(os.path.abspath(path))


def split_components(path: str) -> List[str]:
    """Split a relative path on both '/' and the native separator, dropping empty parts."""
    if os.altsep:
        path = path.replace(os.altsep, os.sep)
    if os.sep != "/":
        path = path.replace("/", os.sep)
    return [p for p in path.split(os.sep) if p]

# -----------------------------------------------------------------------------
# SYMLINK PEELING
# -----------------------------------------------------------------------------

def resolve_beneath(base: str, relative: str) -> Optional[str]:
    """
    Resolve 'relative' against the trusted directory 'base', peeling symlinks.

    Walks the relative path one segment at a time. Every segment that is a
    symbolic link is replaced by its target before the walk continues, so a
    link on an intermediate directory is followed exactly like one on the
    final component. '.' and '..' are applied to the physical path reached so
    far. 'base' itself is trusted and is not inspected.

    Args:
        base: Canonical absolute directory the walk starts from.
        relative: Path to resolve. Absolute paths restart from their anchor.

    Returns:
        Optional[str]: The peeled absolute path (which may not exist), or None
                       on a symlink loop or an unreadable link.
    """
    if os.path.isabs(relative):
        drive, rest = os.path.splitdrive(relative)
        current = drive + os.sep
        pending: Deque[str] = deque(split_components(rest))
    else:
        current = base
        pending = deque(split_components(relative))

    hops = 0
    while pending:
        segment = pending.popleft()
        if segment == ".":
            continue
        if segment == "..":
            current = os.path.dirname(current)
            continue

        candidate = os.path.join(current, segment)
        if not os.path.islink(candidate):
            current = candidate
            continue

        hops += 1
        if hops > MAX_SYMLINK_HOPS:
            logger.debug(f"Too many levels of symbolic links at '{candidate}'")
            return None
        try:
            target = os.readlink(candidate)
        except OSError as e:
            logger.debug(f"Cannot read symbolic link '{candidate}': {e}")
            return None

        if os.path.isabs(target):
            drive, rest = os.path.splitdrive(target)
            current = drive + os.sep
            target = rest
        pending.extendleft(reversed(split_components(target)))

    return current


def is_descendant(parent: str, descendant: str) -> bool:
    """
    Test whether 'descendant' lies inside 'parent' (or is 'parent' itself).

    The comparison is made on whole path components, so '/a/bc' is not a
    descendant of '/a/b'.
    """
    p = os.path.normcase(os.path.abspath(parent))
    d = os.path.normcase(os.path.abspath(descendant))
    if p == d:
        return True
    if not p.endswith(os.sep):
        p += os.sep
    return d.startswith(p)


def find_containing_root(path: str, roots: Iterable[str]) -> Optional[str]:
    """Return the first root that contains 'path', or None."""
    for root in roots:
        if is_descendant(root, path):
            return root
    return None


def to_node_path(path: str, base: str) -> str:
    """Express 'path' relative to 'base' using '/' separators, as used for tree node names."""
    rel = os.path.relpath(path, base)
    if os.sep != "/":
        rel = rel.replace(os.sep, "/")
    return rel

# -----------------------------------------------------------------------------
# PROJECT ROOT DISCOVERY
# -----------------------------------------------------------------------------

def has_root_markers(directory: str, markers: Sequence[str]) -> bool:
    """Check that every marker name exists in the directory."""
    if not markers:
        return False
    return all(os.path.exists(os.path.join(directory, m)) for m in markers)


def find_project_root(
        start: Optional[str] = None,
        markers: Sequence[str] = DEFAULT_ROOT_MARKERS,
) -> Optional[str]:
    """
    Locate the project root directory.

    The INCGRAPH_ROOT environment variable takes precedence. Otherwise the
    directory tree is walked upward from 'start' until a directory holding
    every marker is found.

    Args:
        start: Directory to start from. Defaults to the current directory.
        markers: Names that must all exist in the root directory.

    Returns:
        Optional[str]: Absolute root path, or None if nothing matched.
    """
    env_root = os.environ.get(ROOT_ENV_VAR)
    if env_root:
        return os.path.abspath(env_root)

    current = os.path.abspath(start or os.getcwd())
    while True:
        if has_root_markers(current, markers):
            return current
        parent = os.path.dirname(current)
        if parent == current:
            return None
        current = parent
