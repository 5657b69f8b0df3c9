from __future__ import annotations

"""
Application Constants.

Default wildcard sets, skip lists and serialization keys shared by the
configuration layer and the serializer.
"""

from typing import List, Tuple

APP_NAME = "incgraph"
ROOT_ENV_VAR = "INCGRAPH_ROOT"

# -----------------------------------------------------------------------------
# FILE CLASSIFICATION DEFAULTS
# -----------------------------------------------------------------------------

ALL_FILES_WILDCARDS: Tuple[str, ...] = ("*",)

DEFAULT_CXX_WILDCARDS: Tuple[str, ...] = (
    "*.hpp",
    "*.cpp",
    "*.h",
    "*.ipp",
)

# Directories at the top of the scan root that are never visited
DEFAULT_SKIP_ROOT_DIRS: Tuple[str, ...] = (
    "boost",
    ".git",
    "bin.v2",
    "stage",
    "build",
)

# Files and directories which must all exist for a directory to be the project root
DEFAULT_ROOT_MARKERS: Tuple[str, ...] = (
    "Jamroot",
    "libs",
)

# Files under a directory with this exact name are always parsed as C++
INCLUDE_DIR_NAME = "include"

# -----------------------------------------------------------------------------
# OUTPUT
# -----------------------------------------------------------------------------

FORMAT_JSON = "json"
SUPPORTED_FORMATS: List[str] = [FORMAT_JSON]

META_KEY = "$meta"
DEPS_KEY = "deps"
RDEPS_KEY = "rdeps"

DEFAULT_INDENT = "\t"
