"""
HTML-based visualizer using Jinja2 templates.

Generates a standalone HTML report for a batch run. The report includes:
- The simulated configuration (mode, cache geometry, corpus)
- Summary figures for the whole batch
- One table row per trace with NTLB and PWC statistics
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from jinja2 import Environment

from tlb_analyzer.io.config import SimulationConfig
from tlb_analyzer.io.formatter import format_ratio
from tlb_analyzer.models.results import HitMissCounter, SimulationResult
from tlb_analyzer.visualizer.base import BaseVisualizer


HTML_TEMPLATE = """
<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>TLB Analyzer: {{ mode }}</title>
    <style>
        :root {
            --bg-primary: #1a1a2e;
            --bg-secondary: #16213e;
            --bg-tertiary: #0f3460;
            --accent-blue: #4da8da;
            --accent-green: #00d26a;
            --accent-red: #ff6b6b;
            --accent-magenta: #c792ea;
            --text-primary: #e8e8e8;
            --text-secondary: #a0a0a0;
        }

        body {
            font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
            background: var(--bg-primary);
            color: var(--text-primary);
            margin: 0;
            padding: 2rem;
        }

        .container { max-width: 1200px; margin: 0 auto; }

        .card {
            background: var(--bg-secondary);
            border: 1px solid var(--bg-tertiary);
            border-radius: 12px;
            padding: 1.5rem;
            margin-bottom: 1.5rem;
        }

        h1 { color: var(--accent-blue); margin-top: 0; }
        h2 { color: var(--accent-blue); font-size: 1.2rem; margin-top: 0; }

        .config { color: var(--text-secondary); }

        .summary { display: flex; flex-wrap: wrap; gap: 1rem; }

        .summary-stat {
            background: var(--bg-tertiary);
            border-radius: 10px;
            padding: 1rem 1.5rem;
            text-align: center;
        }

        .summary-stat .value { font-size: 2rem; font-weight: bold; color: var(--accent-blue); }
        .summary-stat .label { color: var(--text-secondary); font-size: 0.9rem; }

        table { width: 100%; border-collapse: collapse; }

        th {
            background: var(--bg-tertiary);
            color: var(--text-secondary);
            padding: 0.6rem;
            text-align: right;
        }

        td {
            padding: 0.6rem;
            border-bottom: 1px solid var(--bg-tertiary);
            font-family: 'Fira Code', monospace;
            text-align: right;
        }

        td.trace, th.trace { text-align: left; }
        .hit { color: var(--accent-green); }
        .miss { color: var(--accent-red); }
        .accesses { color: var(--accent-magenta); }
        .undefined { color: var(--text-secondary); }

        .timestamp { text-align: center; color: var(--text-secondary); font-size: 0.85rem; }
    </style>
</head>
<body>
    <div class="container">
        <div class="card">
            <h1>Nested Translation Cache Simulation</h1>
            <p class="config">Mode: {{ mode }}</p>
            {% if geometry %}
            <p class="config">
                NTLB: {{ geometry.ntlb_size }} entries / {{ geometry.ntlb_ways }} ways,
                PWC: {{ geometry.pwc_size }} entries / {{ geometry.pwc_ways }} ways
            </p>
            <p class="config">Traces from {{ geometry.trace_dir }} (TLB {{ geometry.tlb }})</p>
            {% endif %}
        </div>

        <div class="card">
            <h2>Summary</h2>
            <div class="summary">
                <div class="summary-stat">
                    <div class="value">{{ rows|length }}</div>
                    <div class="label">Traces</div>
                </div>
                <div class="summary-stat">
                    <div class="value">{{ total_accesses }}</div>
                    <div class="label">Memory Accesses</div>
                </div>
            </div>
        </div>

        <div class="card">
            <h2>Results</h2>
            {% if rows %}
            <table>
                <thead>
                    <tr>
                        <th class="trace">Trace</th>
                        <th>NTLB Hit</th>
                        <th>NTLB Miss</th>
                        <th>NTLB Hit Ratio (%)</th>
                        <th>PWC Hit</th>
                        <th>PWC Miss</th>
                        <th>PWC Hit Ratio (%)</th>
                        <th>Mem Access</th>
                    </tr>
                </thead>
                <tbody>
                    {% for row in rows %}
                    <tr>
                        <td class="trace">{{ row.trace }}</td>
                        <td class="hit">{{ row.ntlb.hit }}</td>
                        <td class="miss">{{ row.ntlb.miss }}</td>
                        <td class="{{ 'undefined' if row.ntlb.undefined }}">{{ row.ntlb.ratio }}</td>
                        <td class="hit">{{ row.pwc.hit }}</td>
                        <td class="miss">{{ row.pwc.miss }}</td>
                        <td class="{{ 'undefined' if row.pwc.undefined }}">{{ row.pwc.ratio }}</td>
                        <td class="accesses">{{ row.accesses }}</td>
                    </tr>
                    {% endfor %}
                </tbody>
            </table>
            {% else %}
            <p class="config">No matching traces found.</p>
            {% endif %}
        </div>

        <p class="timestamp">Generated: {{ timestamp }}</p>
    </div>
</body>
</html>
"""


class HTMLVisualizer(BaseVisualizer):
    """
    HTML visualizer for batch results.

    Generates a standalone HTML file suitable for viewing in a browser.
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        """
        Initialize the HTML visualizer.

        Args:
            config: Batch configuration.
        """
        super().__init__(config)
        self.template = Environment(autoescape=True).from_string(HTML_TEMPLATE)

    def visualize(self, results: Sequence[SimulationResult]) -> None:
        """Print the HTML report to stdout."""
        print(self.render_to_string(results))

    def save(self, results: Sequence[SimulationResult], output_path: Path) -> None:
        """
        Save the HTML report to a file.

        Args:
            results: Results in corpus order.
            output_path: Path to save HTML file.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            f.write(self.render_to_string(results))

    def render_to_string(self, results: Sequence[SimulationResult]) -> str:
        """Render the HTML report without saving it."""
        geometry = None
        if self.config:
            geometry = {
                "ntlb_size": self.config.nested_tlb.size,
                "ntlb_ways": self.config.nested_tlb.ways,
                "pwc_size": self.config.page_walk_cache.size,
                "pwc_ways": self.config.page_walk_cache.ways,
                "trace_dir": str(self.config.trace_dir),
                "tlb": f"{self.config.tlb_size}.{self.config.tlb_way}",
            }

        rows = [
            {
                "trace": result.trace_name,
                "ntlb": self._counter(result.primary),
                "pwc": self._counter(result.secondary),
                "accesses": result.total_memory_accesses,
            }
            for result in results
        ]

        return self.template.render(
            mode=self.get_mode_name(),
            geometry=geometry,
            rows=rows,
            total_accesses=sum(r.total_memory_accesses for r in results),
            timestamp=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        )

    @staticmethod
    def _counter(counter: HitMissCounter) -> dict:
        return {
            "hit": counter.hit,
            "miss": counter.miss,
            "ratio": format_ratio(counter),
            "undefined": counter.hit_ratio is None,
        }
