"""Visualization components for simulation results."""

from tlb_analyzer.visualizer.base import BaseVisualizer
from tlb_analyzer.visualizer.html import HTMLVisualizer
from tlb_analyzer.visualizer.terminal import TerminalVisualizer
from tlb_analyzer.visualizer.text import TextVisualizer

__all__ = [
    "BaseVisualizer",
    "HTMLVisualizer",
    "TerminalVisualizer",
    "TextVisualizer",
]
