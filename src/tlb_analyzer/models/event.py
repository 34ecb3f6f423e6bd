"""
Translation event records.

One event is produced for every first-level TLB miss observed while the
guest ran. It captures which guest page table entries the hardware walker
had to read and how deep the walk went:

    depth 1: only the L1 guest descriptor was read (section or fault)
    depth 2: L1 and L2 guest descriptors were read, no final frame
    depth 3: full walk, final guest physical frame resolved
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

DEPTH_MASK = 0xF
WORD_MASK = 0xFFFFFFFF


@dataclass(frozen=True)
class TranslationEvent:
    """
    A single recorded guest page table walk.

    Attributes:
        depth: Number of walk levels the recorded translation needed.
        l1_addr: Guest physical address of the L1 descriptor.
        l2_addr: Guest physical address of the L2 descriptor.
        final_addr: Guest physical frame the walk produced.
    """

    depth: int
    l1_addr: int
    l2_addr: int
    final_addr: int

    @classmethod
    def from_words(cls, flags: int, l1_addr: int, l2_addr: int, final_addr: int) -> "TranslationEvent":
        """Build an event from the four raw 32-bit words of a trace record."""
        return cls(
            depth=flags & DEPTH_MASK,
            l1_addr=l1_addr & WORD_MASK,
            l2_addr=l2_addr & WORD_MASK,
            final_addr=final_addr & WORD_MASK,
        )

    def to_words(self, page: int = 0) -> Tuple[int, int, int, int]:
        """
        Encode as a trace record.

        Args:
            page: Page-aligned virtual address stored in the upper bits of
                the flags word (ignored by the simulator).
        """
        flags = (page & ~DEPTH_MASK & WORD_MASK) | (self.depth & DEPTH_MASK)
        return flags, self.l1_addr, self.l2_addr, self.final_addr
