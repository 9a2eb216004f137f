"""CLI commands for the trade journal analytics engine."""

from .export_to_excel import export_to_excel
from .report import main as report

__all__ = [
    "export_to_excel",
    "report",
]
