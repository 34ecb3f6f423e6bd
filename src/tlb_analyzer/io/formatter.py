"""
Output formatting for batch results.

TEXT FORMAT:
============
One header line, then two lines per trace in corpus order:

    Cache       Hit   Miss   Hit Ratio   Mem Access
    NTLB        <hit> <miss> <ratio>
    PWC         <hit> <miss> <ratio>     <total accesses>

Fields are tab separated; the label is left-aligned in 10 columns, every
other field right-aligned in 20. Ratios are percentages with 4 decimals,
or "N/A" for a cache that was never probed.

JSON FORMAT:
============
{
    "timestamp": "...",
    "config": { ...SimulationConfig... },
    "results": [
        {
            "trace": "TRACES/trace_...",
            "mode": "FULL",
            "total_memory_accesses": 1234,
            "ntlb": {"hit": 1, "miss": 2, "hit_ratio": 33.3},
            "pwc":  {"hit": 3, "miss": 4, "hit_ratio": 42.8}
        }
    ]
}
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Sequence

from tlb_analyzer.io.config import SimulationConfig
from tlb_analyzer.models.results import HitMissCounter, SimulationResult

UNDEFINED_RATIO = "N/A"


def format_ratio(counter: HitMissCounter) -> str:
    """Hit ratio as a percentage with 4 decimals."""
    ratio = counter.hit_ratio
    if ratio is None:
        return UNDEFINED_RATIO
    return f"{ratio:.4f}"


def format_text(results: Sequence[SimulationResult]) -> str:
    """
    Render results in the plain text table.

    Args:
        results: Results in corpus order.

    Returns:
        Multi-line string (no trailing newline).
    """
    lines = [
        f"{'Cache':<10}\t{'Hit':>20}\t{'Miss':>20}\t{'Hit Ratio':>20}\t{'Mem Access':>20}"
    ]

    for result in results:
        ntlb = result.primary
        pwc = result.secondary
        lines.append(
            f"{'NTLB':<10}\t{ntlb.hit:>20}\t{ntlb.miss:>20}\t{format_ratio(ntlb):>20}"
        )
        lines.append(
            f"{'PWC':<10}\t{pwc.hit:>20}\t{pwc.miss:>20}\t{format_ratio(pwc):>20}"
            f"\t{result.total_memory_accesses:>20}"
        )

    return "\n".join(lines)


@dataclass
class BatchOutput:
    """
    Formatted output of a batch run.

    This wraps the results with the configuration that produced them.
    """

    timestamp: str
    config: SimulationConfig
    results: List[SimulationResult]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "timestamp": self.timestamp,
            "config": self.config.model_dump(mode="json"),
            "results": [r.to_dict() for r in self.results],
        }

    def to_json(self, indent: int = 2) -> str:
        """Convert to formatted JSON string."""
        return json.dumps(self.to_dict(), indent=indent)


def format_output(
    results: Sequence[SimulationResult],
    config: SimulationConfig
) -> BatchOutput:
    """
    Bundle results with their configuration.

    Args:
        results: Batch results in corpus order.
        config: Configuration of the batch.

    Returns:
        BatchOutput ready for serialization.
    """
    return BatchOutput(
        timestamp=datetime.now().isoformat(),
        config=config,
        results=list(results),
    )


def save_output(
    output: BatchOutput,
    file_path: str | Path,
    pretty: bool = True
) -> None:
    """
    Save formatted output to a JSON file.

    Args:
        output: The formatted output.
        file_path: Destination file path.
        pretty: If True, format with indentation.
    """
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    indent = 2 if pretty else None
    with open(path, "w") as f:
        json.dump(output.to_dict(), f, indent=indent)
