"""
Counters and per-trace simulation results.

A SimulationResult is produced for every (trace file, configuration) pair.
It carries two hit/miss counters:

    primary:   the nested TLB (NTLB)
    secondary: the page walk cache (PWC)

Modes that do not use one of the caches report all zeros for it.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Optional


@dataclass
class HitMissCounter:
    """Hit and miss statistics of one cache."""

    hit: int = 0
    miss: int = 0

    @property
    def total(self) -> int:
        return self.hit + self.miss

    @property
    def hit_ratio(self) -> Optional[float]:
        """Hit ratio in percent, or None when the cache was never probed."""
        if self.total == 0:
            return None
        return 100.0 * self.hit / self.total

    def reset(self) -> None:
        self.hit = 0
        self.miss = 0

    def snapshot(self) -> "HitMissCounter":
        """Return a detached copy."""
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "hit": self.hit,
            "miss": self.miss,
            "hit_ratio": self.hit_ratio,
        }


@dataclass(frozen=True)
class SimulationResult:
    """
    Outcome of replaying one trace file.

    Attributes:
        total_memory_accesses: Extra memory reads caused by the cost model.
        primary: Nested TLB statistics.
        secondary: Page walk cache statistics.
        trace_path: Trace the result was produced from (if any).
        mode: Name of the simulation mode.
    """

    total_memory_accesses: int = 0
    primary: HitMissCounter = field(default_factory=HitMissCounter)
    secondary: HitMissCounter = field(default_factory=HitMissCounter)
    trace_path: Optional[Path] = None
    mode: str = ""

    @property
    def trace_name(self) -> str:
        return self.trace_path.name if self.trace_path else ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "trace": str(self.trace_path) if self.trace_path else None,
            "mode": self.mode,
            "total_memory_accesses": self.total_memory_accesses,
            "ntlb": self.primary.to_dict(),
            "pwc": self.secondary.to_dict(),
        }
