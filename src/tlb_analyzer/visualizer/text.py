"""Plain text visualizer producing the tab-separated result table."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Sequence, TextIO

from tlb_analyzer.io.config import SimulationConfig
from tlb_analyzer.io.formatter import format_text
from tlb_analyzer.models.results import SimulationResult
from tlb_analyzer.visualizer.base import BaseVisualizer


class TextVisualizer(BaseVisualizer):
    """Writes results in the plain text format of io.formatter."""

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        stream: Optional[TextIO] = None
    ):
        super().__init__(config)
        self.stream = stream

    def visualize(self, results: Sequence[SimulationResult]) -> None:
        print(format_text(results), file=self.stream or sys.stdout)

    def save(self, results: Sequence[SimulationResult], output_path: Path) -> None:
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(format_text(results) + "\n")
