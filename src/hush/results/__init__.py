"""Analysis result models exchanged with the analysis engine."""

from hush.results.enums import Severity
from hush.results.models import FileResult, LintMessage, ResultBatch

__all__ = ["Severity", "LintMessage", "FileResult", "ResultBatch"]
