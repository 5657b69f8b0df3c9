from __future__ import annotations

"""
File Filtering and Classification Engine.

Implements the restricted filename wildcards used by the walker and decides
which files are candidates and which of those are parsed as C++ sources.
"""

import os
from typing import Iterable, List, Sequence

from incgraph.domain.constants import INCLUDE_DIR_NAME
from incgraph.domain.errors import ConfigurationError

# -----------------------------------------------------------------------------
# WILDCARD MATCHING
# -----------------------------------------------------------------------------

def validate_wildcard(wildcard: str) -> str:
    """
    Reject patterns the single-pass matcher cannot honour.

    Args:
        wildcard: Raw filename pattern.

    Returns:
        str: The pattern, unchanged.

    Raises:
        ConfigurationError: If the pattern contains '*?'.
    """
    if "*?" in wildcard:
        raise ConfigurationError(f"Incorrect filename pattern specified: {wildcard}")
    return wildcard


def validate_wildcards(wildcards: Iterable[str]) -> List[str]:
    return [validate_wildcard(w) for w in wildcards]


def filename_match(filename: str, wildcard: str) -> bool:
    """
    Match a whole filename against a restricted glob.

    '?' matches exactly one character. '*' skips ahead to the first
    occurrence of the literal character that follows it in the pattern (or to
    the end of the name if '*' is last). There is no backtracking, so 'a*c'
    does not match 'acbc'. Matching is case-sensitive.

    Args:
        filename: Name to test, without directory.
        wildcard: Pattern.

    Returns:
        bool: True if the name matches the pattern.
    """
    f, f_end = 0, len(filename)
    w, w_end = 0, len(wildcard)

    while f < f_end and w < w_end:
        wc = wildcard[w]
        w += 1
        if wc == "?":
            f += 1
        elif wc == "*":
            while w < w_end and wildcard[w] == "*":
                w += 1
            if w == w_end:
                f = f_end
            else:
                lookup = wildcard[w]
                if lookup == "?":
                    raise ConfigurationError(f"Incorrect filename pattern specified: {wildcard}")
                found = filename.find(lookup, f)
                f = found if found >= 0 else f_end
        else:
            if wc != filename[f]:
                return False
            f += 1

    # A trailing '*' also matches the empty rest of the name
    while w < w_end and wildcard[w] == "*":
        w += 1

    return f == f_end and w == w_end


def matches_any(filename: str, wildcards: Iterable[str]) -> bool:
    return any(filename_match(filename, w) for w in wildcards)

# -----------------------------------------------------------------------------
# FILE CLASSIFICATION LOGIC
# -----------------------------------------------------------------------------

def is_candidate(filename: str, whitelist: Sequence[str], blacklist: Sequence[str]) -> bool:
    """A file is a candidate if it matches the whitelist and nothing in the blacklist."""
    return matches_any(filename, whitelist) and not matches_any(filename, blacklist)


def is_cxx_file(path: str, cxx_wildcards: Sequence[str]) -> bool:
    """
    Decide whether a candidate file is parsed as C++.

    Either the file name matches a C++ wildcard, or one of its ancestor
    directories is named exactly 'include' (headers without an extension
    live in such directories).

    Args:
        path: Absolute path of the file.
        cxx_wildcards: Patterns for C++ file names.

    Returns:
        bool: True if the file should be scanned for includes.
    """
    directory, filename = os.path.split(path)
    if matches_any(filename, cxx_wildcards):
        return True

    while True:
        parent, segment = os.path.split(directory)
        if segment == INCLUDE_DIR_NAME:
            return True
        if not segment or parent == directory:
            return False
        directory = parent
