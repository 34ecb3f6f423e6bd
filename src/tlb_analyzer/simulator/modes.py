"""
Simulation modes - one cost model per translation caching design.

Every mode replays the same event stream; they differ in which caches are
probed and how misses are charged in memory accesses.

COST MODELS:
------------
NTLB (nested TLB only)
    Each guest descriptor read costs 1 access. The nested TLB then
    translates its address; a miss costs 2 more (extended L1 + L2 reads).
    The final frame is translated too, but is not itself read (no +1).

PWC_EPT (page walk cache, extended paging)
    Guest descriptors are looked up in the page walk cache. A miss costs 1
    for the guest read plus 1 per missing extended descriptor. The final
    frame costs only its missing extended descriptors.

PWC_NOEPT (page walk cache, no extended paging)
    A guest descriptor miss costs exactly 1. Extended lookups are assumed
    to be served elsewhere for free, so the final frame costs nothing.

FULL (page walk cache + nested TLB)
    A guest descriptor miss first consults the nested TLB; only a nested
    TLB miss walks the extended table (1 per missing extended descriptor).
    The guest read itself costs 1. The final frame skips the page walk
    cache and goes straight to the nested TLB.

Design Pattern: Strategy
    SimulationMode selects one Simulation subclass from SIMULATIONS; all
    of them share the run() contract.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import TYPE_CHECKING, ClassVar, Dict, Iterable, Optional, Type

from tlb_analyzer.errors import ConfigurationError
from tlb_analyzer.models.address import (
    GUEST_DOMAIN,
    HOST_DOMAIN,
    host_descriptor_addresses,
    page_align,
)
from tlb_analyzer.models.event import TranslationEvent
from tlb_analyzer.models.mode import SimulationMode
from tlb_analyzer.models.results import SimulationResult
from tlb_analyzer.simulator.cache import AssociativeCache
from tlb_analyzer.simulator.context import SimulationContext

if TYPE_CHECKING:
    from tlb_analyzer.io.config import CacheGeometry


class Simulation(ABC):
    """
    Base class for simulation modes.

    Subclasses implement step() for one event; run() drives a whole
    event stream and packages the counters.

    Attributes:
        context: Caches and clock owned by this simulation.
        memory_accesses: Accesses charged so far in the current run.
    """

    mode: ClassVar[SimulationMode]

    def __init__(self, context: SimulationContext):
        """
        Initialize the simulation over a context.

        Args:
            context: Run state holding the caches this mode needs.

        Raises:
            ConfigurationError: If a required cache is missing.
        """
        if self.mode.uses_nested_tlb and context.nested_tlb is None:
            raise ConfigurationError(f"{self.mode.name} requires a nested TLB")
        if self.mode.uses_page_walk_cache and context.page_walk_cache is None:
            raise ConfigurationError(f"{self.mode.name} requires a page walk cache")

        self.context = context
        self.memory_accesses = 0

    @property
    def nested_tlb(self) -> AssociativeCache:
        return self.context.nested_tlb

    @property
    def page_walk_cache(self) -> AssociativeCache:
        return self.context.page_walk_cache

    @abstractmethod
    def step(self, event: TranslationEvent) -> None:
        """
        Apply one translation event to the caches.

        Args:
            event: The recorded walk.
        """
        pass

    def reset(self) -> None:
        """Return to the empty state of a fresh run."""
        self.context.reset()
        self.memory_accesses = 0

    def run(
        self,
        events: Iterable[TranslationEvent],
        trace_path: Optional[Path] = None
    ) -> SimulationResult:
        """
        Replay an event stream and collect the result.

        The caller is responsible for calling reset() between traces.

        Args:
            events: Events in trace order.
            trace_path: Source trace, recorded in the result.

        Returns:
            SimulationResult with the accumulated statistics.
        """
        step = self.step
        for event in events:
            step(event)
        return self.result(trace_path)

    def result(self, trace_path: Optional[Path] = None) -> SimulationResult:
        """Snapshot the current counters into a SimulationResult."""
        return SimulationResult(
            total_memory_accesses=self.memory_accesses,
            primary=self.context.primary_counter(),
            secondary=self.context.secondary_counter(),
            trace_path=trace_path,
            mode=self.mode.name,
        )

    def _walk_extended(self, address: int) -> int:
        """
        Look up the two extended page table descriptors for an address.

        Returns:
            Number of descriptors that missed the page walk cache.
        """
        l1_host, l2_host = host_descriptor_addresses(address)
        misses = 0
        if not self.page_walk_cache.probe(l1_host, HOST_DOMAIN):
            misses += 1
        if not self.page_walk_cache.probe(l2_host, HOST_DOMAIN):
            misses += 1
        return misses


class NestedTLBSimulation(Simulation):
    """Nested TLB only."""

    mode = SimulationMode.NTLB

    DESCRIPTOR_READ_COST = 1
    EXTENDED_WALK_COST = 2

    def _translate(self, address: int, terminal: bool) -> None:
        if not terminal:
            self.memory_accesses += self.DESCRIPTOR_READ_COST

        if not self.nested_tlb.probe(address):
            self.memory_accesses += self.EXTENDED_WALK_COST

    def step(self, event: TranslationEvent) -> None:
        self._translate(page_align(event.l1_addr), terminal=False)

        if event.depth > 1:
            self._translate(page_align(event.l2_addr), terminal=False)

        if event.depth > 2:
            self._translate(event.final_addr, terminal=True)


class ExtendedPageWalkCacheSimulation(Simulation):
    """Page walk cache backed by extended page table walks."""

    mode = SimulationMode.PWC_EPT

    GUEST_READ_COST = 1

    def _guest_level(self, address: int) -> None:
        if self.page_walk_cache.probe(address, GUEST_DOMAIN):
            return
        self.memory_accesses += self._walk_extended(address) + self.GUEST_READ_COST

    def step(self, event: TranslationEvent) -> None:
        self._guest_level(event.l1_addr)

        if event.depth > 1:
            self._guest_level(event.l2_addr)

        if event.depth > 2:
            self.memory_accesses += self._walk_extended(event.final_addr)


class PageWalkCacheSimulation(Simulation):
    """Page walk cache with extended translations served for free."""

    mode = SimulationMode.PWC_NOEPT

    GUEST_READ_COST = 1

    def _guest_level(self, address: int) -> None:
        if not self.page_walk_cache.probe(address, GUEST_DOMAIN):
            self.memory_accesses += self.GUEST_READ_COST

    def step(self, event: TranslationEvent) -> None:
        self._guest_level(event.l1_addr)

        if event.depth > 1:
            self._guest_level(event.l2_addr)


class CombinedSimulation(Simulation):
    """Page walk cache in front of a nested TLB."""

    mode = SimulationMode.FULL

    GUEST_READ_COST = 1

    def _translate(self, address: int) -> None:
        # Only a nested TLB miss walks the extended table
        if not self.nested_tlb.probe(address):
            self.memory_accesses += self._walk_extended(address)

    def _guest_level(self, address: int) -> None:
        if self.page_walk_cache.probe(address, GUEST_DOMAIN):
            return
        self._translate(page_align(address))
        self.memory_accesses += self.GUEST_READ_COST

    def step(self, event: TranslationEvent) -> None:
        self._guest_level(event.l1_addr)

        if event.depth > 1:
            self._guest_level(event.l2_addr)

        if event.depth > 2:
            self._translate(event.final_addr)


SIMULATIONS: Dict[SimulationMode, Type[Simulation]] = {
    SimulationMode.NTLB: NestedTLBSimulation,
    SimulationMode.PWC_EPT: ExtendedPageWalkCacheSimulation,
    SimulationMode.PWC_NOEPT: PageWalkCacheSimulation,
    SimulationMode.FULL: CombinedSimulation,
}


def create_simulation(
    mode: SimulationMode,
    nested_tlb: Optional[CacheGeometry] = None,
    page_walk_cache: Optional[CacheGeometry] = None
) -> Simulation:
    """
    Build a simulation with a fresh context.

    Only the caches the mode uses are created; the other geometry is
    ignored.

    Args:
        mode: Which design to simulate.
        nested_tlb: Nested TLB geometry.
        page_walk_cache: Page walk cache geometry.

    Returns:
        A ready-to-run Simulation.

    Raises:
        ConfigurationError: If a needed geometry is missing or invalid.
    """
    mode = SimulationMode(mode)
    context = SimulationContext(
        nested_tlb=nested_tlb if mode.uses_nested_tlb else None,
        page_walk_cache=page_walk_cache if mode.uses_page_walk_cache else None,
    )
    return SIMULATIONS[mode](context)
