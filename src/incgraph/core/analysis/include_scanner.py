from __future__ import annotations

"""
C/C++ Include Scanner.

Lexical pass over the raw bytes of a source file that reports every
'#include' directive while skipping comments, string and character literals
and line continuations. It is not a preprocessor: directives inside disabled
'#if 0' blocks are reported too.

The scanner only looks at ASCII punctuation and never decodes the input, so
it works on any ASCII-compatible encoding and on memory-mapped files.
"""

import mmap
from typing import Iterator, List, Optional, Tuple, Union

from incgraph.domain.scan_models import IncludeDirective

Buffer = Union[bytes, bytearray, mmap.mmap]

# -----------------------------------------------------------------------------
# BYTE CONSTANTS
# -----------------------------------------------------------------------------

_NL = 0x0A
_CR = 0x0D
_TAB = 0x09
_VT = 0x0B
_FF = 0x0C
_SPACE = 0x20
_BACKSLASH = 0x5C
_SLASH = 0x2F
_STAR = 0x2A
_HASH = 0x23
_DQUOTE = 0x22
_SQUOTE = 0x27
_LT = 0x3C
_GT = 0x3E

_BLANKS = (_SPACE, _TAB)
_WHITESPACE = (_SPACE, _TAB, _CR, _VT, _FF)

_INCLUDE = b"include"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def iter_includes(buf: Buffer) -> Iterator[IncludeDirective]:
    """
    Yield the include directives of a source file in file order.

    Duplicates are reported as often as they appear.

    Args:
        buf: Raw file contents. Any object supporting len(), integer indexing,
             slicing and find() over bytes (bytes, mmap).

    Yields:
        IncludeDirective: Header text and whether it was written in angle brackets.
    """
    end = len(buf)
    pos = 0
    at_line_start = True

    while pos < end:
        c = buf[pos]

        if c == _BACKSLASH:
            after = _continuation_end(buf, pos, end)
            if after >= 0:
                # Glue the physical lines; the line-start state is unchanged
                pos = after
                continue
            pos += 1
            at_line_start = False
            continue

        if c == _NL:
            at_line_start = True
            pos += 1
            continue

        if c in _WHITESPACE:
            pos += 1
            continue

        if c == _SLASH and pos + 1 < end:
            nxt = buf[pos + 1]
            if nxt == _SLASH:
                pos = _skip_line_comment(buf, pos + 2, end)
                continue
            if nxt == _STAR:
                # A block comment counts as whitespace
                pos = _skip_block_comment(buf, pos + 2, end)
                continue

        if c == _DQUOTE or c == _SQUOTE:
            pos = _skip_literal(buf, pos + 1, end, c)
            at_line_start = False
            continue

        if c == _HASH and at_line_start:
            at_line_start = False
            pos, directive = _parse_directive(buf, pos + 1, end)
            if directive is not None:
                yield directive
            continue

        pos += 1
        at_line_start = False


def scan_includes(buf: Buffer) -> List[IncludeDirective]:
    """Eager variant of iter_includes."""
    return list(iter_includes(buf))

# -----------------------------------------------------------------------------
# LEXICAL HELPERS
# -----------------------------------------------------------------------------

def _continuation_end(buf: Buffer, pos: int, end: int) -> int:
    """
    Check for a line continuation at 'pos' (which holds a backslash).

    Spaces and tabs are tolerated between the backslash and the line break.

    Returns:
        int: Position after the line feed, or -1 if this is not a continuation.
    """
    p = pos + 1
    while p < end and buf[p] in _BLANKS:
        p += 1
    if p < end and buf[p] == _CR:
        p += 1
    if p < end and buf[p] == _NL:
        return p + 1
    return -1


def _is_continued(buf: Buffer, start: int, nl: int) -> bool:
    """Whether the line feed at 'nl' is preceded by a continuation backslash."""
    p = nl - 1
    if p >= start and buf[p] == _CR:
        p -= 1
    while p >= start and buf[p] in _BLANKS:
        p -= 1
    return p >= start and buf[p] == _BACKSLASH


def _skip_line_comment(buf: Buffer, pos: int, end: int) -> int:
    """Return the position of the line feed ending the comment, honouring continuations."""
    while True:
        nl = buf.find(b"\n", pos)
        if nl < 0:
            return end
        if not _is_continued(buf, pos, nl):
            return nl
        pos = nl + 1


def _skip_block_comment(buf: Buffer, pos: int, end: int) -> int:
    close = buf.find(b"*/", pos)
    if close < 0:
        return end
    return close + 2


def _skip_literal(buf: Buffer, pos: int, end: int, quote: int) -> int:
    """
    Skip a string or character literal whose opening quote precedes 'pos'.

    A backslash escapes the following byte, so an escaped quote never closes
    the literal. Unterminated literals run to the end of the buffer.

    Returns:
        int: Position after the closing quote.
    """
    while pos < end:
        c = buf[pos]
        if c == _BACKSLASH:
            pos += 2
            continue
        pos += 1
        if c == quote:
            return pos
    return end


def _skip_blanks(buf: Buffer, pos: int, end: int) -> int:
    """Skip spaces, tabs and line continuations."""
    while pos < end:
        c = buf[pos]
        if c in _BLANKS:
            pos += 1
        elif c == _BACKSLASH:
            after = _continuation_end(buf, pos, end)
            if after < 0:
                break
            pos = after
        else:
            break
    return pos


def _match_keyword(buf: Buffer, pos: int, end: int, keyword: bytes) -> int:
    """
    Match a keyword that may be split by line continuations.

    Returns:
        int: Position after the keyword, or -1 if it does not match.
    """
    for expected in keyword:
        while pos < end and buf[pos] == _BACKSLASH:
            after = _continuation_end(buf, pos, end)
            if after < 0:
                break
            pos = after
        if pos >= end or buf[pos] != expected:
            return -1
        pos += 1
    return pos


def _parse_directive(buf: Buffer, pos: int, end: int) -> Tuple[int, Optional[IncludeDirective]]:
    """
    Parse what follows a '#' at the start of a logical line.

    Returns:
        Tuple[int, Optional[IncludeDirective]]: Resume position and the
        directive, or None when this is not a well-formed include.
    """
    pos = _skip_blanks(buf, pos, end)
    after_kw = _match_keyword(buf, pos, end, _INCLUDE)
    if after_kw < 0:
        return pos, None

    pos = _skip_blanks(buf, after_kw, end)
    if pos >= end:
        return pos, None

    opener = buf[pos]
    if opener == _LT:
        closer = _GT
    elif opener == _DQUOTE:
        closer = _DQUOTE
    else:
        return pos, None

    return _read_header_name(buf, pos + 1, end, closer, opener == _LT)


def _read_header_name(
        buf: Buffer,
        pos: int,
        end: int,
        closer: int,
        angled: bool,
) -> Tuple[int, Optional[IncludeDirective]]:
    """
    Collect the header name up to the unescaped closing delimiter.

    Line continuations inside the name are removed. A name that is not closed
    on its logical line is rejected and scanning resumes at the line feed.
    """
    text = bytearray()
    while pos < end:
        c = buf[pos]
        if c == _BACKSLASH:
            after = _continuation_end(buf, pos, end)
            if after >= 0:
                pos = after
                continue
            text.append(c)
            pos += 1
            if pos < end and buf[pos] != _NL:
                text.append(buf[pos])
                pos += 1
            continue
        if c == _NL:
            return pos, None
        if c == closer:
            return pos + 1, IncludeDirective(bytes(text), angled)
        text.append(c)
        pos += 1
    return end, None
