from __future__ import annotations

"""
Configuration Domain Management.

Defines the default run configuration and reads or writes it as JSON. The
dictionary produced here is validated by the pipeline before it is turned
into immutable scan parameters.
"""

import json
import logging
import os
from typing import Any, Dict, List, Optional

from incgraph.domain.constants import (
    ALL_FILES_WILDCARDS,
    DEFAULT_CXX_WILDCARDS,
    DEFAULT_INDENT,
    DEFAULT_ROOT_MARKERS,
    DEFAULT_SKIP_ROOT_DIRS,
    FORMAT_JSON,
)
from incgraph.domain.errors import ConfigurationError

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
CONFIG_KEYS: List[str] = [
    "scan_dir",
    "project_root",
    "include_dirs",
    "root_dirs",
    "whitelist_wildcards",
    "blacklist_wildcards",
    "cxx_wildcards",
    "skip_root_dirs",
    "root_markers",
    "create_reverse_dependencies",
    "output_path",
    "output_format",
    "pretty_print",
    "indent",
]


def get_default_config() -> Dict[str, Any]:
    """
    Generate the default run configuration.

    An empty 'project_root' means it is discovered from the root markers.
    Empty 'include_dirs' / 'root_dirs' fall back to the project root.

    Returns:
        Dict[str, Any]: Default configuration values.
    """
    return {
        # Input
        "scan_dir": os.getcwd(),
        "project_root": "",
        "include_dirs": [],
        "root_dirs": [],

        # Classification
        "whitelist_wildcards": list(ALL_FILES_WILDCARDS),
        "blacklist_wildcards": [],
        "cxx_wildcards": list(DEFAULT_CXX_WILDCARDS),
        "skip_root_dirs": list(DEFAULT_SKIP_ROOT_DIRS),
        "root_markers": list(DEFAULT_ROOT_MARKERS),

        # Graph
        "create_reverse_dependencies": True,

        # Output
        "output_path": "",
        "output_format": FORMAT_JSON,
        "pretty_print": True,
        "indent": DEFAULT_INDENT,
    }


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_config(path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load a configuration file and overlay it on the defaults.

    Unknown keys are ignored with a warning.

    Args:
        path: JSON file to read. Defaults only when omitted.

    Returns:
        Dict[str, Any]: Merged configuration (not yet validated).

    Raises:
        ConfigurationError: If the file cannot be read or is not a JSON object.
    """
    config = get_default_config()
    if not path:
        return config

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigurationError(f"Failed to load configuration file ({e})", path) from e

    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must contain a JSON object", path)

    for key, value in data.items():
        if key in CONFIG_KEYS:
            config[key] = value
        else:
            logger.warning(f"Ignoring unknown configuration key '{key}' in {path}")

    logger.debug(f"Configuration loaded from {path}")
    return config


def save_config(config: Dict[str, Any], path: str) -> None:
    """
    Persist the known keys of a configuration to disk.

    Args:
        config: The configuration dictionary to save.
        path: Target JSON file.
    """
    data = {k: config[k] for k in CONFIG_KEYS if k in config}
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=4)
    logger.debug(f"Configuration saved to {path}")
