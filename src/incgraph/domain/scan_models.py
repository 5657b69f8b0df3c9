from __future__ import annotations

"""
Scan Domain Data Models.

Defines the immutable parameter set handed to the analysis core, the raw
include directive produced by the scanner, and the result object returned
to the interface layer.
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, NamedTuple, Optional, Tuple

from incgraph.domain.constants import (
    ALL_FILES_WILDCARDS,
    DEFAULT_CXX_WILDCARDS,
    DEFAULT_SKIP_ROOT_DIRS,
)

# -----------------------------------------------------------------------------
# SCANNER OUTPUT
# -----------------------------------------------------------------------------

class IncludeDirective(NamedTuple):
    """
    One lexically valid include directive.

    Attributes:
        header: Raw bytes between the delimiters.
        angled: True for <...>, False for "...".
    """
    header: bytes
    angled: bool

# -----------------------------------------------------------------------------
# SCAN PARAMETERS
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ScanParams:
    """
    Fully resolved configuration of one scan.

    Attributes:
        scan_dir: Directory that is walked. Its contents become the top-level nodes.
        project_root: Root of the analysed project.
        include_dirs: Ordered search path for included headers.
        root_dirs: Subtrees within which a resolved header is tracked.
        whitelist_wildcards: A file must match one of these to be a candidate.
        blacklist_wildcards: A file matching one of these is never a candidate.
        cxx_wildcards: Candidates matching one of these are parsed as C++.
        skip_root_dirs: Top-level entry names that are not visited.
        create_reverse_dependencies: Whether to record reverse edges.
    """
    scan_dir: str
    project_root: str
    include_dirs: Tuple[str, ...] = ()
    root_dirs: Tuple[str, ...] = ()
    whitelist_wildcards: Tuple[str, ...] = ALL_FILES_WILDCARDS
    blacklist_wildcards: Tuple[str, ...] = ()
    cxx_wildcards: Tuple[str, ...] = DEFAULT_CXX_WILDCARDS
    skip_root_dirs: Tuple[str, ...] = DEFAULT_SKIP_ROOT_DIRS
    create_reverse_dependencies: bool = True

    @classmethod
    def typical(cls, project_root: str, scan_dir: Optional[str] = None) -> "ScanParams":
        """Parameters that scan a whole project with its root as the only search path."""
        root = os.path.abspath(project_root)
        return cls(
            scan_dir=os.path.abspath(scan_dir) if scan_dir else root,
            project_root=root,
            include_dirs=(root,),
            root_dirs=(root,),
        )

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "ScanParams":
        """
        Build parameters from a validated configuration dictionary.

        Args:
            config: Output of validate_config.

        Returns:
            ScanParams: Immutable parameter set.
        """
        project_root = config["project_root"]
        include_dirs = list(config.get("include_dirs") or [])
        root_dirs = list(config.get("root_dirs") or [])
        return cls(
            scan_dir=config["scan_dir"],
            project_root=project_root,
            include_dirs=tuple(include_dirs or [project_root]),
            root_dirs=tuple(root_dirs or [project_root]),
            whitelist_wildcards=tuple(config["whitelist_wildcards"]),
            blacklist_wildcards=tuple(config["blacklist_wildcards"]),
            cxx_wildcards=tuple(config["cxx_wildcards"]),
            skip_root_dirs=tuple(config["skip_root_dirs"]),
            create_reverse_dependencies=bool(config["create_reverse_dependencies"]),
        )

# -----------------------------------------------------------------------------
# RUN RESULT
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class ScanStats:
    directories: int = 0
    files: int = 0
    parsed_files: int = 0
    includes_found: int = 0
    includes_dropped: int = 0


@dataclass(frozen=True)
class ScanResult:
    """
    Outcome of a complete run, consumed by the CLI.

    Attributes:
        ok: Flag indicating success.
        error: Human-readable diagnostic on failure.
        error_kind: Category of the failure ('configuration', 'io', 'invariant').
        error_path: Offending path, if any.
        output_path: Destination that received the document, empty for stdout.
        node_count: Number of tree nodes, root included.
        edge_count: Number of dependency edges.
        stats: Walk statistics.
    """
    ok: bool
    error: str = ""
    error_kind: str = ""
    error_path: str = ""
    output_path: str = ""
    node_count: int = 0
    edge_count: int = 0
    stats: ScanStats = field(default_factory=ScanStats)
