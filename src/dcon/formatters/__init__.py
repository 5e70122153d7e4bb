"""Output formatters for dcon."""

from dcon.formatters.base import Formatter, FormatterRegistry, RenderMode, registry
from dcon.formatters.csv import CSVFormatter
from dcon.formatters.json import JSONFormatter
from dcon.formatters.table import TableFormatter

__all__ = [
    "CSVFormatter",
    "Formatter",
    "FormatterRegistry",
    "JSONFormatter",
    "RenderMode",
    "TableFormatter",
    "registry",
]
