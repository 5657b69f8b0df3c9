from __future__ import annotations

"""
Unit tests for the C/C++ Include Scanner.

Verifies:
1. Recognition of angled and quoted directives in file order.
2. Immunity to comments, string and character literals.
3. Line continuation and CRLF handling.
4. Rejection of malformed or non-include directives.
"""

import mmap
from pathlib import Path

import pytest

from incgraph.core.analysis.include_scanner import iter_includes, scan_includes
from incgraph.domain.scan_models import IncludeDirective


def headers(src: bytes):
    return [(d.header, d.angled) for d in scan_includes(src)]


# -----------------------------------------------------------------------------
# Basic recognition
# -----------------------------------------------------------------------------

def test_angled_and_quoted_in_file_order() -> None:
    src = b'#include <vector>\n#include "local.hpp"\n#include <boost/config.hpp>\n'
    assert headers(src) == [
        (b"vector", True),
        (b"local.hpp", False),
        (b"boost/config.hpp", True),
    ]


def test_returns_include_directives() -> None:
    assert scan_includes(b"#include <a>") == [IncludeDirective(b"a", True)]


def test_duplicates_are_reported_each_time() -> None:
    src = b'#include "a.h"\n#include "a.h"\n'
    assert headers(src) == [(b"a.h", False), (b"a.h", False)]


def test_whitespace_around_hash_and_keyword() -> None:
    src = b'  \t#  \tinclude\t  <x.h>\n'
    assert headers(src) == [(b"x.h", True)]


def test_no_space_between_keyword_and_header() -> None:
    assert headers(b'#include<x.h>\n#include"y.h"') == [(b"x.h", True), (b"y.h", False)]


def test_empty_input() -> None:
    assert scan_includes(b"") == []


def test_disabled_blocks_are_still_reported() -> None:
    """The scanner is not a preprocessor."""
    src = b"#if 0\n#include <never.h>\n#endif\n"
    assert headers(src) == [(b"never.h", True)]


def test_iter_includes_is_lazy() -> None:
    it = iter_includes(b"#include <a>\n#include <b>\n")
    assert next(it).header == b"a"


# -----------------------------------------------------------------------------
# Comments and literals
# -----------------------------------------------------------------------------

def test_line_comment_hides_directive() -> None:
    src = b"// #include <hidden.h>\n#include <shown.h>\n"
    assert headers(src) == [(b"shown.h", True)]


def test_block_comment_hides_directive() -> None:
    src = b"/*\n#include <hidden.h>\n*/\n#include <shown.h>\n"
    assert headers(src) == [(b"shown.h", True)]


def test_block_comment_before_hash_keeps_line_start() -> None:
    assert headers(b"/* note */ #include <a.h>\n") == [(b"a.h", True)]


def test_unterminated_block_comment() -> None:
    assert headers(b"#include <a.h>\n/* #include <b.h>\n") == [(b"a.h", True)]


def test_continued_line_comment() -> None:
    src = b"// comment \\\n#include <hidden.h>\n#include <shown.h>\n"
    assert headers(src) == [(b"shown.h", True)]


def test_string_literal_hides_directive() -> None:
    src = b'const char* s = "\\n#include <x>";\n'
    assert headers(src) == []


def test_escaped_quote_does_not_end_string() -> None:
    src = b'"a\\"#include <x>\\""\n'
    assert headers(src) == []


def test_escaped_backslash_ends_string() -> None:
    src = b's = "\\\\";\n#include <after.h>\n'
    assert headers(src) == [(b"after.h", True)]


def test_character_literals() -> None:
    src = b"char c = '\"'; char d = '\\'';\n#include <ok.h>\n"
    assert headers(src) == [(b"ok.h", True)]


def test_hash_in_middle_of_line_is_ignored() -> None:
    assert headers(b"int x; #include <no.h>\n") == []


# -----------------------------------------------------------------------------
# Continuations and line endings
# -----------------------------------------------------------------------------

def test_continuation_inside_keyword() -> None:
    assert headers(b"#inc\\\nlude <a.h>\n") == [(b"a.h", True)]


def test_continuation_between_keyword_and_header() -> None:
    assert headers(b"#include \\\n  <a.h>\n") == [(b"a.h", True)]


def test_continuation_inside_header_name() -> None:
    assert headers(b'#include "sub/\\\nb.h"\n') == [(b"sub/b.h", False)]


def test_continued_previous_line_is_not_a_line_start() -> None:
    src = b"#define X 1 \\\n#include <no.h>\n#include <yes.h>\n"
    assert headers(src) == [(b"yes.h", True)]


def test_crlf_line_endings() -> None:
    src = b"#include <a.h>\r\n#include \"b.h\"\r\n// c\r\n#include <c.h>\r\n"
    assert headers(src) == [(b"a.h", True), (b"b.h", False), (b"c.h", True)]


def test_crlf_continuation() -> None:
    assert headers(b"#include \\\r\n<a.h>\r\n") == [(b"a.h", True)]


# -----------------------------------------------------------------------------
# Malformed directives
# -----------------------------------------------------------------------------

@pytest.mark.parametrize(
    "src",
    [
        b"#include_next <x.h>\n",
        b"#includes <x.h>\n",
        b"#include MACRO_HEADER\n",
        b"#include\n<x.h>\n",
        b"#import <x.h>\n",
        b"#pragma once\n",
    ],
)
def test_non_include_directives_are_ignored(src: bytes) -> None:
    assert scan_includes(src) == []


def test_header_must_close_on_its_line() -> None:
    src = b'#include "broken.h\n#include <next.h>\n'
    assert headers(src) == [(b"next.h", True)]


def test_unclosed_header_at_end_of_input() -> None:
    assert scan_includes(b"#include <eof.h") == []


def test_scans_memory_mapped_file(tmp_path: Path) -> None:
    path = tmp_path / "a.cpp"
    path.write_bytes(b"// x\n#include \"a.hpp\"\n")
    with open(path, "rb") as fh:
        with mmap.mmap(fh.fileno(), 0, access=mmap.ACCESS_READ) as region:
            assert headers(region) == [(b"a.hpp", False)]
