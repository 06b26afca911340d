"""
Collaborator interfaces.

The analysis engine and the raw result cache live outside this package.
The host only depends on these structural contracts.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from hush.results.models import ResultBatch


@runtime_checkable
class AnalysisEngine(Protocol):
    """Produces raw (unsuppressed) results."""

    async def analyze_files_async(self, patterns: Sequence[str]) -> ResultBatch:
        """Analyze every file matched by the given patterns."""
        ...

    async def analyze_text_async(self, text: str, file_path: str | None = None) -> ResultBatch:
        """Analyze a piece of source text, optionally attributed to a file."""
        ...


@runtime_checkable
class ResultCache(Protocol):
    """Stores raw results keyed by file content."""

    async def put_async(self, batch: ResultBatch) -> None:
        """Commit raw results. Must only ever see unsuppressed batches."""
        ...
