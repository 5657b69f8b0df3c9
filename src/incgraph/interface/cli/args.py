from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line interface schema and translates the parsed
namespace into configuration overrides.
"""

import argparse
from typing import Any, Dict, List, Optional

from incgraph.domain.constants import APP_NAME, SUPPORTED_FORMATS

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the incgraph CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Build a JSON map of the #include dependencies of a C/C++ source tree.",
    )

    # --- Input ---
    p.add_argument(
        "scan_dir_pos",
        metavar="SCAN_DIR",
        nargs="?",
        default=None,
        help="directory to scan (current directory by default)",
    )
    p.add_argument(
        "-s", "--scan-dir",
        dest="scan_dir",
        default=None,
        help="directory to scan, same as the positional argument",
    )
    p.add_argument(
        "-I", "--include",
        dest="include_dirs",
        action="append",
        default=None,
        metavar="DIR",
        help="directory to search included headers in, searched before the project root (repeatable)",
    )
    p.add_argument(
        "--project-root",
        dest="project_root",
        default=None,
        help="project root directory (discovered from root markers by default)",
    )
    p.add_argument(
        "--root-dir",
        dest="root_dirs",
        action="append",
        default=None,
        metavar="DIR",
        help="directory whose headers are tracked (repeatable, project root by default)",
    )

    # --- Classification ---
    p.add_argument("--whitelist", dest="whitelist", default=None, help="comma-separated candidate file wildcards")
    p.add_argument("--blacklist", dest="blacklist", default=None, help="comma-separated excluded file wildcards")
    p.add_argument("--cxx", dest="cxx", default=None, help="comma-separated wildcards of files parsed as C++")
    p.add_argument("--skip-dir", dest="skip_dirs", default=None, help="comma-separated top-level directories to skip")

    # --- Output ---
    p.add_argument(
        "-o", "--output",
        dest="output_path",
        default=None,
        help="output file (stdout by default)",
    )
    p.add_argument(
        "-f", "--format",
        dest="output_format",
        default=None,
        help=f"output format, one of: {', '.join(SUPPORTED_FORMATS)} (json by default)",
    )
    p.add_argument(
        "--no-rdeps",
        action="store_true",
        help="do not record reverse dependencies",
    )
    p.add_argument(
        "--compact",
        action="store_true",
        help="write the document without whitespace",
    )
    p.add_argument(
        "--indent",
        default=None,
        help="indentation unit for pretty output (a number of spaces or a literal string, tab by default)",
    )

    # --- Configuration and Diagnostics ---
    p.add_argument("--config", dest="config_file", default=None, help="JSON configuration file")
    p.add_argument("--dump-config", action="store_true", help="print the effective configuration and exit")
    p.add_argument("--debug", action="store_true", help="elevate logging verbosity to DEBUG")
    p.add_argument("--log-file", dest="log_file", default=None, help="also write the log to this file")

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into configuration overrides.

    Only options that were given appear with a non-None value.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Dict[str, Any]: Configuration overrides subset.
    """
    overrides: Dict[str, Any] = {}

    overrides["scan_dir"] = args.scan_dir or args.scan_dir_pos
    overrides["project_root"] = args.project_root
    overrides["include_dirs"] = args.include_dirs
    overrides["root_dirs"] = args.root_dirs
    overrides["output_path"] = args.output_path
    overrides["output_format"] = args.output_format

    overrides["whitelist_wildcards"] = _split_csv(args.whitelist)
    overrides["blacklist_wildcards"] = _split_csv(args.blacklist)
    overrides["cxx_wildcards"] = _split_csv(args.cxx)
    overrides["skip_root_dirs"] = _split_csv(args.skip_dirs)

    if args.no_rdeps:
        overrides["create_reverse_dependencies"] = False
    if args.compact:
        overrides["pretty_print"] = False
    if args.indent is not None:
        overrides["indent"] = _parse_indent(args.indent)

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """
    Convert a comma-separated string into a list of sanitized strings.
    """
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]


def _parse_indent(value: str) -> str:
    """'4' means four spaces, '\\t' a tab; anything else is used literally."""
    if value.isdigit():
        return " " * int(value)
    return value.replace("\\t", "\t")
