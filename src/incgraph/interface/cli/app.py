from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of configuration
sources (defaults, configuration file, command-line overrides), validation,
the scan itself and the mapping of the outcome to a process exit code.
"""

import json
import sys
from typing import Any, Dict, List, Optional

from incgraph.core.pipeline.engine import run_pipeline
from incgraph.core.pipeline.validator import validate_config
from incgraph.domain.config import CONFIG_KEYS, load_config
from incgraph.domain.errors import ConfigurationError, ErrorKind
from incgraph.infra.logging import LoggingConfig, configure_logging, get_logger
from incgraph.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: Process exit code (0 on success, 2 on configuration errors,
             1 on any other failure).
    """
    # 1. Argument parsing phase
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 2. Logging bootstrap (console on stderr, stdout carries the document)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=args.log_file))

    logger.debug("CLI execution initiated. Resolving configuration...")

    # 3. Configuration hierarchy and validation
    try:
        base_conf = load_config(args.config_file)
        raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))
        clean_conf, warnings = validate_config(raw_conf, strict=False)
    except ConfigurationError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    # 4. Scan
    try:
        result = run_pipeline(clean_conf)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    if not result.ok:
        print(f"Failure: {result.error}", file=sys.stderr)
        if result.error_kind == ErrorKind.CONFIGURATION.value:
            return EXIT_CONFIG_ERROR
        return EXIT_FAILURE

    return EXIT_OK

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge of override values into the base configuration.

    Only known keys with a non-None value are merged.
    """
    out = dict(base)
    for k in CONFIG_KEYS:
        if k in overrides and overrides[k] is not None:
            out[k] = overrides[k]
    return out


if __name__ == "__main__":
    sys.exit(main())
