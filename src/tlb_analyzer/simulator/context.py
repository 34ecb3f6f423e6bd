"""
Per-run simulation state.

A SimulationContext owns the recency clock and the cache instances of one
run. Nothing in it is shared between runs, so independent runs may execute
in separate workers.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from tlb_analyzer.models.address import DESCRIPTOR_KEY_SHIFT, PAGE_KEY_SHIFT
from tlb_analyzer.models.results import HitMissCounter
from tlb_analyzer.simulator.cache import AssociativeCache, RecencyClock

if TYPE_CHECKING:
    from tlb_analyzer.io.config import CacheGeometry


class SimulationContext:
    """
    Caches and clock of a single simulation run.

    Attributes:
        clock: Recency clock shared by both caches.
        nested_tlb: Page-granular translation cache (None if unused).
        page_walk_cache: Descriptor-address cache with domain tags
            (None if unused).
    """

    def __init__(
        self,
        nested_tlb: Optional[CacheGeometry] = None,
        page_walk_cache: Optional[CacheGeometry] = None
    ):
        """
        Build the caches for a run.

        Args:
            nested_tlb: Geometry of the nested TLB, or None to omit it.
            page_walk_cache: Geometry of the page walk cache, or None.

        Raises:
            ConfigurationError: If a geometry is invalid.
        """
        self.clock = RecencyClock()
        self.nested_tlb: Optional[AssociativeCache] = None
        self.page_walk_cache: Optional[AssociativeCache] = None

        if nested_tlb is not None:
            self.nested_tlb = AssociativeCache(
                "NTLB",
                capacity=nested_tlb.size,
                ways=nested_tlb.ways,
                key_shift=PAGE_KEY_SHIFT,
                clock=self.clock,
            )

        if page_walk_cache is not None:
            self.page_walk_cache = AssociativeCache(
                "PWC",
                capacity=page_walk_cache.size,
                ways=page_walk_cache.ways,
                key_shift=DESCRIPTOR_KEY_SHIFT,
                clock=self.clock,
                match_domain=True,
            )

    def reset(self) -> None:
        """Invalidate all caches, zero their counters and rewind the clock."""
        self.clock.reset()
        for cache in (self.nested_tlb, self.page_walk_cache):
            if cache is not None:
                cache.reset()

    def primary_counter(self) -> HitMissCounter:
        """Detached nested TLB counter (zeros when the cache is absent)."""
        if self.nested_tlb is None:
            return HitMissCounter()
        return self.nested_tlb.counter.snapshot()

    def secondary_counter(self) -> HitMissCounter:
        """Detached page walk cache counter (zeros when the cache is absent)."""
        if self.page_walk_cache is None:
            return HitMissCounter()
        return self.page_walk_cache.counter.snapshot()
