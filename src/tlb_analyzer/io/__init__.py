"""Input/Output handling for traces, configuration and results."""

from tlb_analyzer.io.config import CacheGeometry, SimulationConfig, build_config
from tlb_analyzer.io.corpus import discover_traces, trace_suffix
from tlb_analyzer.io.trace import TraceReader, read_trace, write_trace
from tlb_analyzer.io.formatter import BatchOutput, format_output, format_text, save_output

__all__ = [
    "CacheGeometry",
    "SimulationConfig",
    "build_config",
    "discover_traces",
    "trace_suffix",
    "TraceReader",
    "read_trace",
    "write_trace",
    "BatchOutput",
    "format_output",
    "format_text",
    "save_output",
]
