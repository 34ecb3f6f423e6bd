"""Tests for the four simulation modes and their cost models."""

from __future__ import annotations

import random

import pytest

from conftest import FULL_WALK, event
from tlb_analyzer.errors import ConfigurationError
from tlb_analyzer.io.config import CacheGeometry
from tlb_analyzer.models.address import GUEST_DOMAIN, HOST_DOMAIN, host_descriptor_addresses, page_align
from tlb_analyzer.models.mode import SimulationMode
from tlb_analyzer.simulator.modes import (
    CombinedSimulation,
    ExtendedPageWalkCacheSimulation,
    NestedTLBSimulation,
    PageWalkCacheSimulation,
    create_simulation,
)


def random_events(seed: int, count: int = 300):
    rng = random.Random(seed)
    return [
        event(
            rng.randint(1, 3),
            rng.randrange(1 << 20) << 2,
            rng.randrange(1 << 20) << 2,
            rng.randrange(1 << 8) << 12,
        )
        for _ in range(count)
    ]



def record_probes(monkeypatch, cache):
    """Log (domain, hit) for every probe of a cache."""
    log = []
    probe = cache.probe

    def recording_probe(tag, domain=0):
        hit = probe(tag, domain)
        log.append((domain, hit))
        return hit

    monkeypatch.setattr(cache, "probe", recording_probe)
    return log

class TestAddressHelpers:
    def test_page_align(self):
        assert page_align(0x12345ABC) == 0x12345000

    def test_host_descriptor_addresses(self):
        # section 0x123, page-in-section 0x45
        l1_host, l2_host = host_descriptor_addresses(0x12345678)
        assert l1_host == 0x123 * 4
        assert l2_host == 16 * 1024 + 0x123 * 1024 + 0x45 * 4


class TestCreateSimulation:
    @pytest.mark.parametrize("mode, cls", [
        (SimulationMode.NTLB, NestedTLBSimulation),
        (SimulationMode.PWC_EPT, ExtendedPageWalkCacheSimulation),
        (SimulationMode.PWC_NOEPT, PageWalkCacheSimulation),
        (SimulationMode.FULL, CombinedSimulation),
    ])
    def test_mode_selects_strategy(self, mode, cls, fully_associative):
        sim = create_simulation(mode, fully_associative, fully_associative)
        assert isinstance(sim, cls)
        assert sim.mode == mode

    def test_only_used_caches_are_built(self, fully_associative):
        ntlb_only = create_simulation(SimulationMode.NTLB, fully_associative, fully_associative)
        assert ntlb_only.context.page_walk_cache is None

        pwc_only = create_simulation(SimulationMode.PWC_NOEPT, fully_associative, fully_associative)
        assert pwc_only.context.nested_tlb is None

    def test_unused_geometry_is_not_checked(self, fully_associative):
        bad = CacheGeometry(size=6, ways=4)
        sim = create_simulation(SimulationMode.NTLB, fully_associative, bad)
        assert sim.run([FULL_WALK]).primary.miss == 3

    def test_missing_cache_rejected(self, fully_associative):
        with pytest.raises(ConfigurationError):
            create_simulation(SimulationMode.FULL, fully_associative, None)


class TestNestedTLB:
    def test_lru_sequence_depth_one(self):
        geometry = CacheGeometry(size=4, ways=4)
        sim = create_simulation(SimulationMode.NTLB, geometry)
        pages = [0x1000, 0x2000, 0x3000, 0x4000, 0x1000, 0x5000]

        result = sim.run([event(1, page) for page in pages])

        assert (result.primary.hit, result.primary.miss) == (1, 5)
        # every descriptor read costs 1, every miss 2 more
        assert result.total_memory_accesses == 6 * 1 + 5 * 2
        assert 0x2000 not in sim.nested_tlb.resident_tags()
        assert 0x5000 in sim.nested_tlb.resident_tags()

    def test_full_walk_costs(self, fully_associative):
        sim = create_simulation(SimulationMode.NTLB, fully_associative)
        walk = event(3, 0x00100ABC, 0x00200DEF, 0x00300000)

        first = sim.run([walk])
        assert first.total_memory_accesses == 3 + 3 + 2

        second = sim.run([walk])
        assert second.total_memory_accesses == 8 + 1 + 1
        assert (second.primary.hit, second.primary.miss) == (3, 3)

    def test_descriptors_in_same_page_share_entry(self, fully_associative):
        sim = create_simulation(SimulationMode.NTLB, fully_associative)
        result = sim.run([event(2, 0x00100000, 0x00100004)])
        assert result.total_memory_accesses == 3 + 1
        assert (result.primary.hit, result.primary.miss) == (1, 1)

    def test_page_walk_cache_counter_stays_empty(self, fully_associative):
        result = create_simulation(SimulationMode.NTLB, fully_associative).run([FULL_WALK])
        assert result.secondary.total == 0
        assert result.secondary.hit_ratio is None

    def test_probe_count(self):
        events = random_events(3)
        sim = create_simulation(SimulationMode.NTLB, CacheGeometry(size=32, ways=4))
        result = sim.run(events)
        expected = sum(1 + (e.depth > 1) + (e.depth > 2) for e in events)
        assert result.primary.total == expected


class TestPageWalkCacheWithEPT:
    def test_full_walk_costs(self, fully_associative):
        sim = create_simulation(SimulationMode.PWC_EPT, None, fully_associative)

        result = sim.run([FULL_WALK, FULL_WALK])

        # first walk: (2 host + 1 guest) * 2 levels + 2 host for the frame
        assert result.total_memory_accesses == 3 + 3 + 2
        # second walk hits both guest entries and both frame descriptors
        assert (result.secondary.hit, result.secondary.miss) == (4, 8)
        assert result.primary.total == 0

    def test_shallow_walk_skips_lower_levels(self, fully_associative):
        sim = create_simulation(SimulationMode.PWC_EPT, None, fully_associative)
        result = sim.run([event(1, 0x00100000, 0x00200000, 0x00300000)])
        assert result.total_memory_accesses == 3
        assert result.secondary.miss == 3

    def test_probe_count(self, monkeypatch):
        events = random_events(7)
        sim = create_simulation(SimulationMode.PWC_EPT, None, CacheGeometry(size=32, ways=4))
        log = record_probes(monkeypatch, sim.page_walk_cache)

        result = sim.run(events)

        guest = [hit for domain, hit in log if domain == GUEST_DOMAIN]
        host = [hit for domain, hit in log if domain == HOST_DOMAIN]
        guest_misses = guest.count(False)
        frames = sum(e.depth > 2 for e in events)

        assert len(guest) == sum(1 + (e.depth > 1) for e in events)
        # two extended descriptors per guest miss and per frame
        assert len(host) == 2 * (guest_misses + frames)
        assert result.secondary.total == len(log)
        assert result.total_memory_accesses == guest_misses + host.count(False)

    def test_guest_and_host_entries_do_not_alias(self, fully_associative):
        # guest descriptor at address 4 vs the host L1 descriptor of section 1
        sim = create_simulation(SimulationMode.PWC_EPT, None, fully_associative)
        result = sim.run([event(1, 0x00000004), event(1, 0x00100000)])
        assert result.secondary.hit == 0


class TestPageWalkCacheWithoutEPT:
    def test_full_walk_costs(self, fully_associative):
        sim = create_simulation(SimulationMode.PWC_NOEPT, None, fully_associative)

        result = sim.run([FULL_WALK, FULL_WALK])

        assert result.total_memory_accesses == 2
        assert (result.secondary.hit, result.secondary.miss) == (2, 2)

    def test_probe_count(self):
        events = random_events(5)
        sim = create_simulation(SimulationMode.PWC_NOEPT, None, CacheGeometry(size=64, ways=8))
        result = sim.run(events)
        expected = sum(1 + (e.depth > 1) for e in events)
        assert result.secondary.total == expected
        assert result.total_memory_accesses == result.secondary.miss


class TestCombined:
    def test_full_walk_costs(self, fully_associative):
        sim = create_simulation(SimulationMode.FULL, fully_associative, fully_associative)

        first = sim.run([FULL_WALK])
        assert first.total_memory_accesses == 3 + 3 + 2

        second = sim.run([FULL_WALK])
        # guest entries hit the page walk cache, the frame hits the nested TLB
        assert second.total_memory_accesses == 8
        assert (second.primary.hit, second.primary.miss) == (1, 3)
        assert (second.secondary.hit, second.secondary.miss) == (2, 8)

    def test_nested_tlb_hit_still_charges_guest_read(self, fully_associative):
        sim = create_simulation(SimulationMode.FULL, fully_associative, fully_associative)
        result = sim.run([event(2, 0x00100000, 0x00100004)])

        assert result.total_memory_accesses == 3 + 1
        assert (result.primary.hit, result.primary.miss) == (1, 1)
        assert (result.secondary.hit, result.secondary.miss) == (0, 4)

    def test_probe_count(self, monkeypatch):
        events = random_events(9)
        geometry = CacheGeometry(size=32, ways=4)
        sim = create_simulation(SimulationMode.FULL, geometry, geometry)
        walk_log = record_probes(monkeypatch, sim.page_walk_cache)
        tlb_log = record_probes(monkeypatch, sim.nested_tlb)

        result = sim.run(events)

        guest = [hit for domain, hit in walk_log if domain == GUEST_DOMAIN]
        host = [hit for domain, hit in walk_log if domain == HOST_DOMAIN]
        guest_misses = guest.count(False)
        tlb_misses = sum(not hit for _, hit in tlb_log)
        frames = sum(e.depth > 2 for e in events)

        assert len(guest) == sum(1 + (e.depth > 1) for e in events)
        # the nested TLB sees every guest miss and every frame
        assert len(tlb_log) == guest_misses + frames
        assert len(host) == 2 * tlb_misses
        assert result.primary.total == len(tlb_log)
        assert result.secondary.total == len(walk_log)
        assert result.total_memory_accesses == guest_misses + host.count(False)

    def test_repeated_frame_hits_nested_tlb(self, fully_associative):
        sim = create_simulation(SimulationMode.FULL, fully_associative, fully_associative)
        sim.run([FULL_WALK])
        before = sim.memory_accesses

        sim.step(event(3, 0x00100000, 0x00200000, FULL_WALK.final_addr))

        assert sim.memory_accesses == before
        assert sim.nested_tlb.counter.hit == 1


@pytest.mark.parametrize("mode", list(SimulationMode))
def test_reset_gives_identical_rerun(mode):
    geometry = CacheGeometry(size=16, ways=4)
    sim = create_simulation(mode, geometry, geometry)
    events = random_events(11)

    first = sim.run(events)
    sim.reset()
    second = sim.run(events)

    assert first == second
    assert sim.context.clock.now > 0


@pytest.mark.parametrize("mode", list(SimulationMode))
def test_empty_stream_yields_zero_result(mode, fully_associative):
    result = create_simulation(mode, fully_associative, fully_associative).run([])
    assert result.total_memory_accesses == 0
    assert result.primary.total == 0
    assert result.secondary.total == 0
    assert result.mode == mode.name
