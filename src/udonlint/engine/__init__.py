"""Engine module - lint runs, diagnostic aggregation and rendering."""

from udonlint.engine.formatting import display_path, format_diagnostic, format_summary, to_json
from udonlint.engine.runner import LintResult, LintRunner
from udonlint.engine.sink import DiagnosticSink

__all__ = [
    "DiagnosticSink",
    "LintResult",
    "LintRunner",
    "display_path",
    "format_diagnostic",
    "format_summary",
    "to_json",
]
