"""
Batch orchestration - one simulation per trace file.

Every trace is replayed against empty caches with the recency clock at 0,
so results never depend on which traces ran before. Results are returned
in corpus order.

With jobs > 1 traces are distributed over worker processes. Each worker
builds its own caches; only the trace paths and cache geometry are shared.
"""

from __future__ import annotations

import logging
from concurrent.futures import ProcessPoolExecutor
from itertools import repeat
from pathlib import Path
from typing import TYPE_CHECKING, List, Optional, Sequence, Union

from tlb_analyzer.io.corpus import discover_traces
from tlb_analyzer.io.trace import TraceReader
from tlb_analyzer.models.mode import SimulationMode
from tlb_analyzer.models.results import SimulationResult
from tlb_analyzer.simulator.modes import Simulation, create_simulation

if TYPE_CHECKING:
    from tlb_analyzer.io.config import CacheGeometry, SimulationConfig

logger = logging.getLogger(__name__)


def _replay(simulation: Simulation, path: Path) -> SimulationResult:
    logger.info("Simulating %s (%s)", path.name, simulation.mode.name)

    with TraceReader(path) as reader:
        result = simulation.run(reader, trace_path=path)
        events = reader.events_read

    logger.debug(
        "%s: %d events, %d memory accesses, NTLB %d/%d, PWC %d/%d",
        path.name, events, result.total_memory_accesses,
        result.primary.hit, result.primary.miss,
        result.secondary.hit, result.secondary.miss,
    )
    return result


def simulate_trace(
    path: Union[str, Path],
    mode: SimulationMode,
    nested_tlb: Optional[CacheGeometry] = None,
    page_walk_cache: Optional[CacheGeometry] = None
) -> SimulationResult:
    """
    Replay a single trace against freshly built caches.

    Args:
        path: Trace file.
        mode: Design to simulate.
        nested_tlb: Nested TLB geometry (modes NTLB and FULL).
        page_walk_cache: Page walk cache geometry (PWC modes and FULL).

    Returns:
        SimulationResult for the trace.

    Raises:
        ConfigurationError: If a needed geometry is missing or invalid.
        TraceFileError: If the trace cannot be opened.
    """
    simulation = create_simulation(mode, nested_tlb, page_walk_cache)
    return _replay(simulation, Path(path))


def run_batch(
    config: SimulationConfig,
    mode: SimulationMode,
    corpus: Sequence[Union[str, Path]],
    jobs: Optional[int] = None
) -> List[SimulationResult]:
    """
    Run one simulation per trace.

    Args:
        config: Cache geometry source.
        mode: Design to simulate.
        corpus: Trace files, in the order results should be returned.
        jobs: Worker processes (defaults to config.jobs).

    Returns:
        One SimulationResult per trace, in corpus order.

    Raises:
        ConfigurationError: If the geometry is invalid for the mode.
        TraceFileError: If a trace cannot be opened. No partial result
            list is returned.
    """
    jobs = jobs or config.jobs
    paths = [Path(p) for p in corpus]

    # Built up front so geometry errors surface before any trace is read
    simulation = create_simulation(mode, config.nested_tlb, config.page_walk_cache)

    if jobs > 1 and len(paths) > 1:
        logger.info("Running %d traces on %d workers", len(paths), jobs)
        with ProcessPoolExecutor(max_workers=jobs) as executor:
            return list(executor.map(
                simulate_trace,
                paths,
                repeat(simulation.mode),
                repeat(config.nested_tlb),
                repeat(config.page_walk_cache),
            ))

    results = []
    for path in paths:
        simulation.reset()
        results.append(_replay(simulation, path))
    return results


def run_simulation(config: SimulationConfig) -> List[SimulationResult]:
    """
    Discover the trace corpus of a configuration and simulate it.

    Args:
        config: Batch configuration.

    Returns:
        One SimulationResult per discovered trace, in name order.
    """
    corpus = discover_traces(
        config.trace_dir,
        config.tlb_size,
        config.tlb_way,
        limit=config.max_files,
    )
    return run_batch(config, config.mode, corpus)
