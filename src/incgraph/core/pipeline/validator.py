from __future__ import annotations

"""
Configuration Validation Service.

Acts as the gatekeeper for a scan run, ensuring that the configuration
dictionary conforms to the expected schema. Handles type coercion, path
normalization, project root discovery and default value injection.
Unsupported output formats and invalid wildcards are always fatal.
"""

import logging
import os
from typing import Any, Dict, List, Tuple

from incgraph.core.components.filters import validate_wildcards
from incgraph.domain.config import get_default_config
from incgraph.domain.constants import SUPPORTED_FORMATS
from incgraph.domain.errors import ConfigurationError
from incgraph.infra.fs import find_project_root, normalize_path

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize the provided configuration dictionary.

    Converts untrusted inputs (CLI, config files) into strictly typed
    parameters and fills missing keys with defaults. All directories come out
    absolute; the project root is discovered when not given, falling back to
    the scan directory; user search directories are followed by the project
    root.

    Args:
        config: Raw configuration data (usually a dictionary).
        strict: If True, raises ConfigurationError on type mismatch instead of coercing.

    Returns:
        Tuple[Dict[str, Any], List[str]]: The normalized configuration and a list of warnings.

    Raises:
        ConfigurationError: On an unsupported output format, an invalid
                            wildcard, or any type mismatch in strict mode.
    """
    warnings: List[str] = []
    defaults = get_default_config()

    # 1. Base Type Validation
    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Using defaults.")
        config = {}

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    # 2. Schema Definition
    string_fields = ["scan_dir", "project_root", "output_path", "output_format"]
    bool_fields = ["create_reverse_dependencies", "pretty_print"]
    list_fields = [
        "include_dirs", "root_dirs",
        "whitelist_wildcards", "blacklist_wildcards", "cxx_wildcards",
        "skip_root_dirs", "root_markers",
    ]

    # 3. Field Processing
    for field in string_fields:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)
    for field in bool_fields:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)
    for field in list_fields:
        merged[field] = _as_list_str(merged.get(field), defaults[field], field, warnings, strict)

    # Indentation may legitimately be whitespace only
    indent = merged.get("indent")
    if not isinstance(indent, str):
        msg = f"Invalid field 'indent': expected str, received {type(indent).__name__}."
        if strict:
            raise ConfigurationError(msg)
        warnings.append(f"{msg} Using fallback.")
        merged["indent"] = defaults["indent"]

    # 4. Fatal Checks
    fmt = merged["output_format"].lower()
    if fmt not in SUPPORTED_FORMATS:
        raise ConfigurationError(f"Unsupported output format: {merged['output_format']}")
    merged["output_format"] = fmt

    for field in ("whitelist_wildcards", "blacklist_wildcards", "cxx_wildcards"):
        validate_wildcards(merged[field])

    # 5. Path Normalization
    _normalize_paths(merged, warnings)

    return merged, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: PATHS
# -----------------------------------------------------------------------------

def _normalize_paths(cfg: Dict[str, Any], warnings: List[str]) -> None:
    cwd = os.getcwd()
    cfg["scan_dir"] = normalize_path(cfg["scan_dir"], cwd)

    if cfg["project_root"]:
        cfg["project_root"] = normalize_path(cfg["project_root"], cwd)
    else:
        found = find_project_root(markers=cfg["root_markers"])
        if found is None:
            logger.debug("No project root markers found, using the scan directory")
            found = cfg["scan_dir"]
        cfg["project_root"] = found

    root = cfg["project_root"]
    cfg["include_dirs"] = _unique([normalize_path(d, cwd) for d in cfg["include_dirs"]] + [root])
    cfg["root_dirs"] = _unique([normalize_path(d, cwd) for d in cfg["root_dirs"]] or [root])
    if cfg["output_path"]:
        cfg["output_path"] = normalize_path(cfg["output_path"], cwd)

    if not os.path.isdir(cfg["scan_dir"]):
        warnings.append(f"Scan directory does not exist: {cfg['scan_dir']}")


def _unique(items: List[str]) -> List[str]:
    seen = set()
    out: List[str] = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return out


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    """Validate and sanitize string inputs."""
    if value is None:
        return fallback
    if isinstance(value, str):
        return value.strip()

    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    """Ensure input is a list of sanitized strings, supporting CSV parsing."""
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        warnings.append(f"Field '{field}' converted from CSV string to list.")
        return [x.strip() for x in value.split(",") if x.strip()]

    if isinstance(value, (list, tuple)):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str):
                s = item.strip()
                if s:
                    out.append(s)
            else:
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise ConfigurationError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise ConfigurationError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)
