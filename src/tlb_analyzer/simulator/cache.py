"""
Set-associative, LRU-managed translation cache.

Every cache modelled by the simulator (nested TLB, page walk cache) is an
instance of AssociativeCache. The instances differ only in capacity, way
count, key shift and whether the domain tag takes part in matching.

SLOT LAYOUT:
============

Slots form one flat array. The array is cut into `ways` index groups of
`step = capacity / ways` slots; the candidate slots for a key are

    set_start, set_start + step, set_start + 2*step, ...   (< capacity)

with set_start = (tag >> key_shift) & (step - 1).

    capacity=8, ways=2  -> step=4, a key may live in slots {i, i+4}
    capacity=8, ways=8  -> step=1, a key may live anywhere

LRU:
====

Each slot records the value of a RecencyClock at its last use. The clock
is shared by all caches of one run so timestamps are comparable across
caches probed for the same event.

On a miss the victim search starts from slot 0 of the WHOLE array (its
timestamp is the initial minimum and its index the initial victim), and
only a strictly older slot in the scanned set replaces it. While several
slots still carry timestamp 0 this can pick slot 0 even when slot 0 is not
part of the scanned set. This matches the reference hardware model and is
kept for result compatibility.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List

from tlb_analyzer.errors import ConfigurationError
from tlb_analyzer.models.results import HitMissCounter

INVALID_TAG = 0xFFFFFFFF


class RecencyClock:
    """Logical clock shared by every cache of one simulation run."""

    def __init__(self) -> None:
        self.now = 0

    def tick(self) -> int:
        """Advance the clock and return the new timestamp."""
        self.now += 1
        return self.now

    def reset(self) -> None:
        self.now = 0


@dataclass(frozen=True)
class CacheSlot:
    """
    Snapshot of one cache slot.

    Attributes:
        tag: Cached address (INVALID_TAG when empty).
        domain: Domain tag (0 = host descriptor, 1 = guest descriptor).
        last_used: Clock value at the last hit or fill (0 when empty).
    """

    tag: int
    domain: int
    last_used: int

    @property
    def is_valid(self) -> bool:
        return not (self.tag == INVALID_TAG and self.last_used == 0)


class AssociativeCache:
    """
    Fixed-capacity set-associative cache with LRU replacement.

    Attributes:
        name: Label used in logs and results.
        capacity: Total number of slots.
        ways: Number of index groups.
        step: Distance between candidate slots of one set.
        index_mask: Mask applied to the shifted key to get the set start.
        key_shift: Right shift applied to a tag before masking.
        match_domain: Whether the domain must match for a hit.
        counter: Hit/miss statistics.
    """

    def __init__(
        self,
        name: str,
        capacity: int,
        ways: int,
        key_shift: int,
        clock: RecencyClock,
        match_domain: bool = False
    ):
        """
        Initialize an empty cache.

        Args:
            name: Cache label.
            capacity: Number of entries.
            ways: Way count; must divide capacity.
            key_shift: 12 for page-granular caches, 2 for descriptor caches.
            clock: Clock shared with the other caches of the run.
            match_domain: Include the domain tag in the hit check.

        Raises:
            ConfigurationError: If the geometry is invalid.
        """
        if capacity < 1 or ways < 1:
            raise ConfigurationError(
                f"{name}: capacity and ways must be positive (got {capacity}, {ways})"
            )
        if capacity % ways != 0:
            raise ConfigurationError(
                f"{name}: way count {ways} does not divide capacity {capacity}"
            )

        self.name = name
        self.capacity = capacity
        self.ways = ways
        self.step = capacity // ways
        self.index_mask = self.step - 1
        self.key_shift = key_shift
        self.match_domain = match_domain
        self.clock = clock
        self.counter = HitMissCounter()

        self._tags: List[int] = []
        self._domains: List[int] = []
        self._stamps: List[int] = []
        self.reset()

    def reset(self) -> None:
        """Invalidate every slot and zero the counter."""
        self._tags = [INVALID_TAG] * self.capacity
        self._domains = [0] * self.capacity
        self._stamps = [0] * self.capacity
        self.counter.reset()

    def set_start(self, tag: int) -> int:
        """First candidate slot for a tag."""
        return (tag >> self.key_shift) & self.index_mask

    def probe(self, tag: int, domain: int = 0) -> bool:
        """
        Look up a tag, filling it on a miss.

        Args:
            tag: Address to look up.
            domain: Domain tag (only compared when match_domain is set).

        Returns:
            True on a hit, False on a miss.
        """
        tags = self._tags
        stamps = self._stamps
        domains = self._domains
        match_domain = self.match_domain

        victim = 0
        oldest = stamps[0]

        for i in range(self.set_start(tag), self.capacity, self.step):
            if tags[i] == tag and (not match_domain or domains[i] == domain):
                stamps[i] = self.clock.tick()
                self.counter.hit += 1
                return True

            if stamps[i] < oldest:
                oldest = stamps[i]
                victim = i

        tags[victim] = tag
        domains[victim] = domain
        stamps[victim] = self.clock.tick()
        self.counter.miss += 1
        return False

    def slot(self, index: int) -> CacheSlot:
        """Return a snapshot of the slot at index."""
        return CacheSlot(
            tag=self._tags[index],
            domain=self._domains[index],
            last_used=self._stamps[index],
        )

    def resident_tags(self) -> List[int]:
        """Tags currently held by valid slots, in slot order."""
        return [
            self._tags[i]
            for i in range(self.capacity)
            if self.slot(i).is_valid
        ]

    def __repr__(self) -> str:
        return (
            f"AssociativeCache(name={self.name!r}, capacity={self.capacity}, "
            f"ways={self.ways}, key_shift={self.key_shift})"
        )
