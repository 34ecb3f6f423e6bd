"""Simulation mode selector."""

from __future__ import annotations

from enum import IntEnum


class SimulationMode(IntEnum):
    """Translation caching design to simulate."""

    NTLB = 0        # Nested TLB only
    PWC_EPT = 1     # Page walk cache with extended paging
    PWC_NOEPT = 2   # Page walk cache without extended paging
    FULL = 3        # Nested TLB + page walk cache

    @property
    def uses_nested_tlb(self) -> bool:
        return self in (SimulationMode.NTLB, SimulationMode.FULL)

    @property
    def uses_page_walk_cache(self) -> bool:
        return self != SimulationMode.NTLB
