"""
Base visualizer abstract class.

This module defines the interface for batch result visualizers.
Both the plain text and the rich terminal visualizers implement it.

Design Pattern: Strategy
    Different presentation strategies can be swapped without
    changing the caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from tlb_analyzer.io.config import SimulationConfig
from tlb_analyzer.models.results import SimulationResult


class BaseVisualizer(ABC):
    """
    Abstract base class for result visualizers.

    Subclasses implement specific presentation strategies
    (plain text, rich table).
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        """
        Initialize the visualizer.

        Args:
            config: Optional batch configuration for additional context.
        """
        self.config = config

    @abstractmethod
    def visualize(self, results: Sequence[SimulationResult]) -> None:
        """
        Present batch results.

        Args:
            results: Results in corpus order.
        """
        pass

    @abstractmethod
    def save(self, results: Sequence[SimulationResult], output_path: Path) -> None:
        """
        Save the presentation to a file.

        Args:
            results: Results in corpus order.
            output_path: Destination file.
        """
        pass

    def get_mode_name(self) -> str:
        """Get the simulation mode name from config."""
        if self.config:
            return self.config.mode.name
        return "unknown"
