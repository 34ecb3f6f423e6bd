"""Shared fixtures for the simulator tests."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

import pytest

from tlb_analyzer.io.config import CacheGeometry
from tlb_analyzer.io.trace import write_trace
from tlb_analyzer.models.event import TranslationEvent


def event(depth: int, l1: int, l2: int = 0, final: int = 0) -> TranslationEvent:
    """Shorthand for building a TranslationEvent."""
    return TranslationEvent(depth=depth, l1_addr=l1, l2_addr=l2, final_addr=final)


# A full walk whose three addresses live in different 1MB sections, so
# none of their extended descriptors collide.
FULL_WALK = event(3, 0x00100000, 0x00200000, 0x00300000)


@pytest.fixture
def fully_associative() -> CacheGeometry:
    """16 entries in a single set; nothing is evicted in the small tests."""
    return CacheGeometry(size=16, ways=16)


@pytest.fixture
def trace_factory(tmp_path: Path) -> Callable[..., Path]:
    """Write a trace file into tmp_path and return its path."""

    def _make(name: str, events: Iterable[TranslationEvent], directory: Path = tmp_path) -> Path:
        path = directory / name
        write_trace(path, events)
        return path

    return _make
