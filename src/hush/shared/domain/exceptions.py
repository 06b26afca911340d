"""
Domain exceptions for Hush.

Follows the "Fail Fast" principle: ledger problems abort the operation that
hit them and are never silently repaired.
All application errors should inherit from HushError.
"""


class HushError(Exception):
    """Base class for all Hush exceptions."""

    def __init__(self, message: str, context: dict = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}


class LedgerNotFound(HushError):
    """Raised when an explicitly requested ledger file does not exist."""

    pass


class LedgerCorrupt(HushError):
    """Raised when a ledger file exists but is unparsable or structurally invalid."""

    pass


class PartialAnalysisError(HushError):
    """Raised when pruning is attempted against a batch that misses ledger files."""

    @property
    def uncovered_files(self) -> list[str]:
        return list(self.context.get("uncovered_files", []))


class ConfigurationError(HushError):
    """Raised when project configuration is invalid or corrupt."""

    pass


class ResultsFormatError(HushError):
    """Raised when an analysis results file is not a valid result batch."""

    pass
