"""Report exporters."""

from ormbench.output.json_exporter import export_json
from ormbench.output.table_exporter import export_table, format_comparison

__all__ = ["export_json", "export_table", "format_comparison"]
