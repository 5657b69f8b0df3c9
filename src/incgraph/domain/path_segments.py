from __future__ import annotations

"""
Path Segmentation.

Splits separator-delimited node paths into the name segments used to address
nested tree nodes.
"""

from typing import Iterator, List

DEFAULT_SEPARATOR = "/"


def iter_path_segments(path: str, separator: str = DEFAULT_SEPARATOR) -> Iterator[str]:
    """
    Lazily yield the non-empty segments of a path.

    Consecutive separators are treated as one and leading or trailing
    separators are ignored, so an empty segment is never produced.

    Args:
        path: Separator-delimited path.
        separator: Single separator character.

    Yields:
        str: Each name segment, in order.
    """
    if len(separator) != 1:
        raise ValueError(f"Separator must be a single character, got {separator!r}")

    pos = 0
    end = len(path)
    while pos < end:
        sep = path.find(separator, pos)
        if sep < 0:
            sep = end
        if sep > pos:
            yield path[pos:sep]
        pos = sep + 1


def split_path(path: str, separator: str = DEFAULT_SEPARATOR) -> List[str]:
    """Eager variant of iter_path_segments."""
    return list(iter_path_segments(path, separator))
