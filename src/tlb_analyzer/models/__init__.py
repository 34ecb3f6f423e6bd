"""Data models for translation events, addresses and simulation results."""

from tlb_analyzer.models.address import (
    PAGE_MASK,
    PAGE_KEY_SHIFT,
    DESCRIPTOR_KEY_SHIFT,
    HOST_DOMAIN,
    GUEST_DOMAIN,
    page_align,
    host_descriptor_addresses,
)
from tlb_analyzer.models.event import TranslationEvent
from tlb_analyzer.models.mode import SimulationMode
from tlb_analyzer.models.results import HitMissCounter, SimulationResult

__all__ = [
    "PAGE_MASK",
    "PAGE_KEY_SHIFT",
    "DESCRIPTOR_KEY_SHIFT",
    "HOST_DOMAIN",
    "GUEST_DOMAIN",
    "page_align",
    "host_descriptor_addresses",
    "TranslationEvent",
    "SimulationMode",
    "HitMissCounter",
    "SimulationResult",
]
