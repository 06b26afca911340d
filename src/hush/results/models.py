"""
Analysis result models.

These models define what the analysis engine hands to reconciliation:
- LintMessage: one reported problem
- FileResult: all messages for one file, plus derived counters
- ResultBatch: ordered per-file results of one run

JSON format: ESLint `--format json` (camelCase)
Python internal format: snake_case
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

from hush.results.enums import Severity
from hush.shared.domain.base_model import BaseDomainModel


@dataclass
class LintMessage(BaseDomainModel):
    """
    A single problem reported by the analysis engine.

    JSON equivalent:
    ```json
    {"ruleId": "no-console", "severity": 2, "message": "Unexpected console statement.",
     "line": 3, "column": 5, "endLine": 3, "endColumn": 16}
    ```

    Messages with rule_id None (parse errors and other non-rule
    diagnostics) are never suppressible.
    """

    rule_id: str | None = None
    severity: Severity = Severity.ERROR
    message: str = ""
    line: int = 0
    column: int = 0
    end_line: int | None = None
    end_column: int | None = None
    fatal: bool | None = None

    @property
    def is_suppressible(self) -> bool:
        return self.rule_id is not None


@dataclass
class FileResult(BaseDomainModel):
    """
    Messages reported for one file.

    The counters only reflect visible messages. A file whose messages were
    all suppressed stays in the batch and reports zero errors and warnings.
    """

    file_path: str
    messages: list[LintMessage] = field(default_factory=list)
    suppressed_messages: list[LintMessage] = field(default_factory=list)
    error_count: int = field(init=False, default=0)
    warning_count: int = field(init=False, default=0)
    fatal_error_count: int = field(init=False, default=0)

    def __post_init__(self) -> None:
        self.error_count = sum(1 for m in self.messages if m.severity == Severity.ERROR)
        self.warning_count = sum(1 for m in self.messages if m.severity == Severity.WARNING)
        self.fatal_error_count = sum(1 for m in self.messages if m.fatal)

    @property
    def is_clean(self) -> bool:
        return not self.messages


@dataclass
class ResultBatch:
    """Ordered per-file results of one analysis run."""

    results: list[FileResult] = field(default_factory=list)

    def __iter__(self) -> Iterator[FileResult]:
        return iter(self.results)

    def __len__(self) -> int:
        return len(self.results)

    @property
    def file_paths(self) -> list[str]:
        return [r.file_path for r in self.results]

    @property
    def message_count(self) -> int:
        return sum(len(r.messages) for r in self.results)

    def to_json(self) -> list[dict[str, Any]]:
        """Serialize as an ESLint-compatible JSON array."""
        return [r.to_json() for r in self.results]

    @classmethod
    def from_json(cls, data: Any) -> ResultBatch:
        """
        Build a batch from an ESLint-compatible JSON array.

        Raises:
            ValueError: If the data is not a list of file result objects
        """
        if not isinstance(data, list):
            raise ValueError(f"Expected a list of file results, got {type(data).__name__}")

        results = []
        for index, item in enumerate(data):
            if not isinstance(item, dict):
                raise ValueError(f"File result #{index} is not an object")
            results.append(FileResult.from_json(item))
        return cls(results=results)
