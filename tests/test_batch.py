"""Tests for batch orchestration over trace corpora."""

from __future__ import annotations

import pytest

from conftest import FULL_WALK, event
from tlb_analyzer.errors import TraceFileError
from tlb_analyzer.io.config import build_config
from tlb_analyzer.models.mode import SimulationMode
from tlb_analyzer.simulator.batch import run_batch, run_simulation, simulate_trace

WORKLOAD = [
    FULL_WALK,
    event(2, 0x00100004, 0x00400010),
    event(3, 0x00500000, 0x00600040, 0x00700000),
    FULL_WALK,
    event(1, 0x00800008),
]


def config_for(tmp_path, mode=SimulationMode.FULL, **options):
    return build_config(4, 4, 8, 8, mode, trace_dir=tmp_path, **options)


def strip_path(result):
    data = result.to_dict()
    data.pop("trace")
    return data


def test_results_follow_corpus_order(tmp_path, trace_factory):
    paths = [
        trace_factory("trace_b_4.4", WORKLOAD),
        trace_factory("trace_a_4.4", [FULL_WALK]),
    ]

    results = run_batch(config_for(tmp_path), SimulationMode.FULL, paths)

    assert [r.trace_path for r in results] == paths
    assert results[1].total_memory_accesses == 8


def test_caches_reset_between_traces(tmp_path, trace_factory):
    first = trace_factory("trace_a_4.4", WORKLOAD)
    second = trace_factory("trace_b_4.4", WORKLOAD)

    for mode in SimulationMode:
        results = run_batch(config_for(tmp_path), mode, [first, second])
        assert strip_path(results[0]) == strip_path(results[1])


def test_rerun_is_idempotent(tmp_path, trace_factory):
    trace_factory("trace_a_4.4", WORKLOAD)
    trace_factory("trace_b_4.4", WORKLOAD[::-1])
    config = config_for(tmp_path)

    assert run_simulation(config) == run_simulation(config)


def test_run_simulation_discovers_corpus(tmp_path, trace_factory):
    trace_factory("trace_c_4.4", [FULL_WALK])
    trace_factory("trace_a_4.4", [FULL_WALK])
    trace_factory("trace_b_16.4", [FULL_WALK])

    results = run_simulation(config_for(tmp_path, SimulationMode.PWC_NOEPT))

    assert [r.trace_name for r in results] == ["trace_a_4.4", "trace_c_4.4"]
    assert all(r.mode == "PWC_NOEPT" for r in results)


def test_empty_trace_yields_zero_result(tmp_path, trace_factory):
    path = trace_factory("trace_empty_4.4", [])

    for mode in SimulationMode:
        (result,) = run_batch(config_for(tmp_path), mode, [path])
        assert result.total_memory_accesses == 0
        assert (result.primary.hit, result.primary.miss) == (0, 0)
        assert (result.secondary.hit, result.secondary.miss) == (0, 0)


def test_single_trace_matches_batch(tmp_path, trace_factory):
    path = trace_factory("trace_a_4.4", WORKLOAD)
    config = config_for(tmp_path)

    single = simulate_trace(path, SimulationMode.FULL, config.nested_tlb, config.page_walk_cache)
    (batched,) = run_batch(config, SimulationMode.FULL, [path])

    assert single == batched


def test_parallel_matches_sequential(tmp_path, trace_factory):
    paths = [
        trace_factory(f"trace_{n}_4.4", WORKLOAD[n:] + WORKLOAD[:n])
        for n in range(4)
    ]
    config = config_for(tmp_path)

    sequential = run_batch(config, SimulationMode.FULL, paths, jobs=1)
    parallel = run_batch(config, SimulationMode.FULL, paths, jobs=2)

    assert parallel == sequential


def test_missing_trace_aborts_batch(tmp_path, trace_factory):
    present = trace_factory("trace_a_4.4", WORKLOAD)

    with pytest.raises(TraceFileError):
        run_batch(config_for(tmp_path), SimulationMode.NTLB, [present, tmp_path / "trace_gone_4.4"])
