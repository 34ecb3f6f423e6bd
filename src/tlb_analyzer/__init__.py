"""
Nested translation cache simulator.

This package replays recorded guest page table walks against simulated
translation caches (nested TLB, page walk cache, or both) to estimate hit
ratios and the memory accesses caused by misses under extended paging.

Modules:
    models: Translation events, address helpers, counters and results
    simulator: Cache engine, simulation modes and batch orchestration
    io: Trace files, corpus discovery, configuration and output formatting
    visualizer: Plain text and rich terminal presentation
"""

__version__ = "0.1.0"
__author__ = "TLB Analyzer Contributors"

from tlb_analyzer.models.mode import SimulationMode
from tlb_analyzer.io.config import build_config
from tlb_analyzer.simulator.batch import run_batch, run_simulation, simulate_trace

__all__ = [
    "SimulationMode",
    "build_config",
    "run_batch",
    "run_simulation",
    "simulate_trace",
]
