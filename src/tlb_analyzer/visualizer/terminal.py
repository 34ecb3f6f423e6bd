"""
Terminal-based visualizer using Rich library.

This module provides colorful, structured terminal output for batch
results. It uses the Rich library for:
- A header panel with the simulated configuration
- One table row per (trace, cache) pair
- A footer with aggregate memory accesses
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich import box

from tlb_analyzer.io.config import SimulationConfig
from tlb_analyzer.io.formatter import format_ratio
from tlb_analyzer.models.results import HitMissCounter, SimulationResult
from tlb_analyzer.visualizer.base import BaseVisualizer


class TerminalVisualizer(BaseVisualizer):
    """
    Rich terminal visualizer for batch results.

    Produces:
    - Configuration panel (mode, cache geometry, corpus)
    - Results table with hit/miss/ratio per cache and memory accesses
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        console: Optional[Console] = None
    ):
        """
        Initialize the terminal visualizer.

        Args:
            config: Batch configuration.
            console: Rich Console instance (creates new if None).
        """
        super().__init__(config)
        self.console = console or Console()

    def visualize(self, results: Sequence[SimulationResult]) -> None:
        """
        Display batch results in the terminal.

        Args:
            results: Results in corpus order.
        """
        self._print_header(results)
        self._print_results(results)

    def save(self, results: Sequence[SimulationResult], output_path: Path) -> None:
        """
        Save terminal output to a file.

        Args:
            results: Results in corpus order.
            output_path: Path to save output (as text).
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        old_console = self.console
        with open(output_path, "w") as f:
            self.console = Console(file=f, force_terminal=True)
            try:
                self.visualize(results)
            finally:
                self.console = old_console

    def _print_header(self, results: Sequence[SimulationResult]) -> None:
        """Print the configuration panel."""
        header_text = "[bold cyan]Nested Translation Cache Simulation[/]\n"
        header_text += f"[dim]Mode: {self.get_mode_name()}[/]"

        if self.config:
            ntlb = self.config.nested_tlb
            pwc = self.config.page_walk_cache
            header_text += (
                f"\n[dim]NTLB: {ntlb.size} entries / {ntlb.ways} ways   "
                f"PWC: {pwc.size} entries / {pwc.ways} ways[/]"
            )
            header_text += (
                f"\n[dim]Traces: {len(results)} from {self.config.trace_dir} "
                f"(TLB {self.config.tlb_size}.{self.config.tlb_way})[/]"
            )

        self.console.print(Panel(header_text, box=box.DOUBLE))

    def _counter_cells(self, counter: HitMissCounter) -> tuple:
        ratio = format_ratio(counter)
        if counter.hit_ratio is None:
            ratio = f"[dim]{ratio}[/]"
        return str(counter.hit), str(counter.miss), ratio

    def _print_results(self, results: Sequence[SimulationResult]) -> None:
        """Print the results table."""
        table = Table(title="Simulation Results", box=box.ROUNDED)
        table.add_column("Trace", style="cyan")
        table.add_column("Cache", style="bold")
        table.add_column("Hit", justify="right", style="green")
        table.add_column("Miss", justify="right", style="red")
        table.add_column("Hit Ratio (%)", justify="right", style="yellow")
        table.add_column("Mem Access", justify="right", style="magenta")

        total_accesses = 0
        for result in results:
            total_accesses += result.total_memory_accesses
            table.add_row(
                result.trace_name,
                "[blue]NTLB[/]",
                *self._counter_cells(result.primary),
                ""
            )
            table.add_row(
                "",
                "[magenta]PWC[/]",
                *self._counter_cells(result.secondary),
                str(result.total_memory_accesses),
                end_section=True
            )

        self.console.print(table)

        if not results:
            self.console.print("[yellow]No matching traces found.[/]")
        else:
            self.console.print(
                f"[bold]Total memory accesses:[/] {total_accesses}"
            )
