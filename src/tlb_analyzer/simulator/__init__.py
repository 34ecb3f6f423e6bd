"""Core simulation logic for nested translation caches."""

from tlb_analyzer.simulator.cache import AssociativeCache, CacheSlot, RecencyClock
from tlb_analyzer.simulator.context import SimulationContext
from tlb_analyzer.simulator.modes import (
    Simulation,
    NestedTLBSimulation,
    ExtendedPageWalkCacheSimulation,
    PageWalkCacheSimulation,
    CombinedSimulation,
    create_simulation,
)
from tlb_analyzer.simulator.batch import run_batch, run_simulation, simulate_trace

__all__ = [
    "AssociativeCache",
    "CacheSlot",
    "RecencyClock",
    "SimulationContext",
    "Simulation",
    "NestedTLBSimulation",
    "ExtendedPageWalkCacheSimulation",
    "PageWalkCacheSimulation",
    "CombinedSimulation",
    "create_simulation",
    "run_batch",
    "run_simulation",
    "simulate_trace",
]
