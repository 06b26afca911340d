"""
Reconciliation of analysis results against the suppression ledger.

The unit of decision is the occurrence group: all messages of one rule in
one file. The ledger only records how many occurrences were accepted, not
which ones, so a group is either hidden entirely or shown entirely:

- n <= k: all n occurrences are suppressed
- n > k:  none are suppressed; a new occurrence cannot hide among the
          accepted ones

Everything here is pure: inputs are never modified.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path

from hush.results.enums import Severity
from hush.results.models import FileResult, LintMessage, ResultBatch
from hush.shared.infrastructure.logging import get_logger
from hush.shared.utils.path_utils import to_ledger_key
from hush.suppression.models import Ledger, RuleCounts

logger = get_logger(__name__)

Pair = tuple[str, str]


@dataclass
class ReconciliationSummary:
    """Totals for a reconciled batch."""

    files: int = 0
    errors: int = 0
    warnings: int = 0
    suppressed: int = 0

    @property
    def has_errors(self) -> bool:
        return self.errors > 0


def count_occurrences(batch: ResultBatch, root: str | Path | None = None) -> RuleCounts:
    """
    Count rule occurrences per ledger file key.

    Messages without a rule id are not counted. Results for the same file
    (after normalization) are merged.
    """
    counts: RuleCounts = {}
    for result in batch:
        key = to_ledger_key(result.file_path, root)
        file_counts = counts.setdefault(key, {})
        for message in result.messages:
            if message.is_suppressible:
                file_counts[message.rule_id] = file_counts.get(message.rule_id, 0) + 1
    return counts


def _suppressed_rules(ledger: Ledger, file_key: str, occurrences: dict[str, int]) -> set[str]:
    return {
        rule_id
        for rule_id, n in occurrences.items()
        if n <= ledger.get_count(file_key, rule_id)
    }


def apply_suppressions(
    batch: ResultBatch,
    ledger: Ledger,
    root: str | Path | None = None,
) -> ResultBatch:
    """
    Remove accepted occurrence groups from a batch.

    Args:
        batch: Raw analysis results
        ledger: Accepted counts
        root: Project root used to map result paths to ledger keys

    Returns:
        A new batch. Every file result is kept (in order); suppressed
        messages move to `suppressed_messages` and the counters only
        reflect what is still visible.
    """
    if ledger.is_empty:
        return batch

    occurrences = count_occurrences(batch, root)
    reconciled: list[FileResult] = []
    total_suppressed = 0

    for result in batch:
        key = to_ledger_key(result.file_path, root)
        hidden = _suppressed_rules(ledger, key, occurrences.get(key, {}))
        if not hidden:
            reconciled.append(result)
            continue

        visible: list[LintMessage] = []
        suppressed: list[LintMessage] = list(result.suppressed_messages)
        for message in result.messages:
            if message.rule_id in hidden:
                suppressed.append(message)
            else:
                visible.append(message)

        total_suppressed += len(result.messages) - len(visible)
        reconciled.append(replace(result, messages=visible, suppressed_messages=suppressed))

    logger.debug("suppressions_applied", files=len(batch), suppressed=total_suppressed)
    return ResultBatch(results=reconciled)


def find_stale_entries(
    ledger: Ledger,
    batch: ResultBatch,
    root: str | Path | None = None,
) -> set[Pair]:
    """
    Ledger pairs with zero occurrences anywhere in the batch.

    Only meaningful for a batch covering every file the ledger references.
    Read-only, so it can back a dry-run preview.
    """
    occurrences = count_occurrences(batch, root)
    return {
        (file_path, rule_id)
        for file_path, rule_id, _count in ledger
        if occurrences.get(file_path, {}).get(rule_id, 0) == 0
    }


def find_unused_suppressions(
    ledger: Ledger,
    batch: ResultBatch,
    root: str | Path | None = None,
) -> dict[Pair, tuple[int, int]]:
    """
    Entries for analyzed files whose accepted count exceeds current occurrences.

    Files not present in the batch are ignored, so this is safe on partial
    runs.

    Returns:
        (file, rule) -> (accepted count, current count)
    """
    occurrences = count_occurrences(batch, root)
    unused: dict[Pair, tuple[int, int]] = {}
    for file_path, rule_id, accepted in ledger:
        if file_path not in occurrences:
            continue
        current = occurrences[file_path].get(rule_id, 0)
        if current < accepted:
            unused[(file_path, rule_id)] = (accepted, current)
    return unused


def summarize(batch: ResultBatch) -> ReconciliationSummary:
    summary = ReconciliationSummary(files=len(batch))
    for result in batch:
        summary.errors += sum(1 for m in result.messages if m.severity == Severity.ERROR)
        summary.warnings += sum(1 for m in result.messages if m.severity == Severity.WARNING)
        summary.suppressed += len(result.suppressed_messages)
    return summary
