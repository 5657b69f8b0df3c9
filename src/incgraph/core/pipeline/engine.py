from __future__ import annotations

"""
Core orchestration pipeline.

Coordinates a complete run:
1. Validates configuration and builds the immutable scan parameters.
2. Walks the scan directory and builds the dependency tree.
3. Renders the whole document in memory.
4. Writes it to the output file or stream.

A run that fails at any step writes nothing.
"""

import logging
import sys
from typing import IO, Any, Dict, Optional, Tuple

from incgraph.core.pipeline.validator import validate_config
from incgraph.core.serialization.json_format import dumps_json, encode_document
from incgraph.core.services.walker import scan_filesystem_tree
from incgraph.domain.dep_tree import DepTree
from incgraph.domain.errors import ErrorKind, IncgraphError, InvariantViolation
from incgraph.domain.scan_models import ScanParams, ScanResult, ScanStats

logger = logging.getLogger(__name__)


def build_tree(config: Optional[Dict[str, Any]]) -> Tuple[DepTree, ScanStats, Dict[str, Any]]:
    """
    Validate a configuration and build its dependency tree.

    Errors propagate to the caller unchanged.

    Returns:
        Tuple[DepTree, ScanStats, Dict[str, Any]]: Tree, walk statistics and
        the validated configuration.
    """
    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    params = ScanParams.from_config(cfg)
    logger.debug(f"Scan parameters: {params}")
    tree, stats = scan_filesystem_tree(params)
    return tree, stats, cfg


def render(tree: DepTree, cfg: Dict[str, Any]) -> str:
    """Render the tree in the configured output format."""
    return dumps_json(
        tree,
        with_rdeps=cfg["create_reverse_dependencies"],
        pretty_print=cfg["pretty_print"],
        indent=cfg["indent"],
    )


def run_pipeline(config: Optional[Dict[str, Any]], stream: Optional[IO[str]] = None) -> ScanResult:
    """
    Execute a full scan and write the resulting document.

    Args:
        config: The configuration dictionary (raw or partial).
        stream: Destination when no 'output_path' is configured. Defaults to stdout.

    Returns:
        ScanResult: Status, statistics and failure details.
    """
    logger.info("Dependency scan started.")

    try:
        tree, stats, cfg = build_tree(config)
        document = render(tree, cfg)
        payload = _encode(document)
        output_path = cfg["output_path"]
        _write_output(payload, output_path, stream)
    except IncgraphError as e:
        logger.error(f"Scan failed: {e}")
        return ScanResult(ok=False, error=str(e), error_kind=e.kind.value, error_path=e.path or "")
    except InvariantViolation as e:
        logger.critical(f"Internal invariant violated: {e}", exc_info=True)
        return ScanResult(ok=False, error=str(e), error_kind=ErrorKind.INVARIANT.value)

    result = ScanResult(
        ok=True,
        output_path=output_path,
        node_count=len(tree),
        edge_count=tree.edge_count(),
        stats=stats,
    )
    logger.info(
        f"Scan complete: {stats.files} files, {stats.parsed_files} parsed, "
        f"{result.node_count} nodes, {result.edge_count} dependencies "
        f"({stats.includes_dropped} includes dropped)"
    )
    return result


def _encode(document: str) -> bytes:
    try:
        return encode_document(document)
    except UnicodeEncodeError as e:
        raise IncgraphError(f"Failed to encode output document ({e.reason})") from e


def _write_output(payload: bytes, output_path: str, stream: Optional[IO[str]]) -> None:
    """
    Write the encoded document to a file or text stream.

    Text streams with an underlying binary buffer (stdout) receive the raw
    bytes; pure text streams receive the decoded text.
    """
    if output_path:
        try:
            with open(output_path, "wb") as f:
                f.write(payload)
        except OSError as e:
            raise IncgraphError(f"Failed to open output file ({e.strerror or e})", output_path) from e
        return

    out = stream if stream is not None else sys.stdout
    buffer = getattr(out, "buffer", None)
    if buffer is not None:
        out.flush()
        buffer.write(payload)
        buffer.flush()
    else:
        out.write(payload.decode("utf-8", "surrogateescape"))
        out.flush()
