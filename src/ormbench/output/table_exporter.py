"""
Console table export for benchmark results using tabulate.
"""

from pathlib import Path
from typing import Dict, List, Optional

from tabulate import tabulate

from ormbench.config import BenchmarkReport
from ormbench.metrics import compare_backends

HEADERS = ["Scenario", "Samples", "Mean (ms)", "P50 (ms)", "P95 (ms)", "P99 (ms)", "QPS"]


def format_comparison(comparisons: List[Dict]) -> str:
    """Table of ORM vs raw medians per (shape, rows) cell."""
    rows = [
        [
            item['shape'],
            item['num_rows'],
            f"{item['orm_p50_ms']:.3f}",
            f"{item['raw_p50_ms']:.3f}",
            "-" if item['orm_over_raw'] is None else f"{item['orm_over_raw']:.2f}x",
        ]
        for item in comparisons
    ]
    return tabulate(
        rows,
        headers=["Query", "Rows", "ORM P50 (ms)", "Raw P50 (ms)", "ORM / Raw"],
        tablefmt="simple",
    )


def export_table(report: BenchmarkReport, output_dir: Optional[str] = None) -> str:
    """
    Format benchmark report as a console table.

    Args:
        report: BenchmarkReport to export
        output_dir: If given, the table is also saved to <output_dir>/<report_id>.txt

    Returns:
        Formatted table string

    Example:
        >>> print(export_table(report))
        Scenario            Samples    Mean (ms)    P50 (ms)  ...
        ----------------  ---------  -----------  ----------
        simple_10000_orm        100       14.210      14.003
        ...
    """
    output = []
    output.append("=" * 70)
    output.append("ORM vs Raw Driver Query Benchmark")
    output.append("=" * 70)
    output.append(f"Report ID: {report.report_id}")
    output.append(f"Timestamp: {report.start_time.isoformat()}")
    output.append(f"Samples:   {report.config.samples} (warmup {report.config.warmup_iterations})")
    output.append("")
    output.append(tabulate(report.to_table_rows(), headers=HEADERS, tablefmt="simple"))

    comparisons = compare_backends(report.results)
    if comparisons:
        output.append("")
        output.append("Backend comparison:")
        output.append(format_comparison(comparisons))

    output.append("")
    output.append(f"Benchmark completed in {report.total_duration_seconds:.2f} seconds.")
    output.append("=" * 70)

    full_output = "\n".join(output)

    if output_dir is not None:
        output_path = Path(output_dir)
        output_path.mkdir(parents=True, exist_ok=True)
        with open(output_path / f"{report.report_id}.txt", 'w') as f:
            f.write(full_output)

    return full_output
