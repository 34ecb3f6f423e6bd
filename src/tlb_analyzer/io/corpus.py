"""
Trace corpus discovery.

The capture tool names every trace after the first-level TLB it simulated:

    trace_<MMDD>_<HHMM>_<tlb_size>.<tlb_way>

so the corpus for one TLB configuration is every entry starting with
"trace_" and containing "_<tlb_size>.<tlb_way>". Entries are processed in
lexicographic name order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Union

from tlb_analyzer.errors import TraceCorpusError

logger = logging.getLogger(__name__)

TRACE_PREFIX = "trace_"
MAX_TRACE_FILES = 128


def trace_suffix(tlb_size: int, tlb_way: int) -> str:
    """Name fragment identifying traces of one TLB configuration."""
    return f"_{tlb_size}.{tlb_way}"


def discover_traces(
    directory: Union[str, Path],
    tlb_size: int,
    tlb_way: int,
    limit: int = MAX_TRACE_FILES
) -> List[Path]:
    """
    List the traces recorded for a TLB configuration.

    Args:
        directory: Folder holding trace files.
        tlb_size: First-level TLB size the traces were captured with.
        tlb_way: First-level TLB way count.
        limit: Maximum number of traces returned.

    Returns:
        Sorted list of trace paths, at most `limit` long.

    Raises:
        TraceCorpusError: If the directory cannot be listed.
    """
    directory = Path(directory)
    suffix = trace_suffix(tlb_size, tlb_way)

    try:
        names = [entry.name for entry in directory.iterdir()]
    except OSError as e:
        raise TraceCorpusError(directory, f"can't open dir: {e.strerror or e}") from e

    matches = sorted(
        name for name in names
        if name.startswith(TRACE_PREFIX) and suffix in name
    )

    if len(matches) > limit:
        logger.warning(
            "%d traces match %r in %s, keeping the first %d",
            len(matches), suffix, directory, limit
        )
        matches = matches[:limit]

    logger.info("Found %d trace(s) matching %r in %s", len(matches), suffix, directory)
    return [directory / name for name in matches]
