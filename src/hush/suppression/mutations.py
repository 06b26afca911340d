"""
Ledger mutation operations.

Each operation takes the current ledger and a batch of raw results and
returns a new ledger; nothing is modified in place and nothing is written.
Persisting the result is the caller's decision (see LedgerEditor).
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from hush.results.models import ResultBatch
from hush.shared.domain.exceptions import PartialAnalysisError
from hush.shared.infrastructure.logging import get_logger
from hush.shared.utils.path_utils import to_ledger_key
from hush.suppression.models import Ledger
from hush.suppression.reconciler import count_occurrences, find_stale_entries

logger = get_logger(__name__)


def accept_all(ledger: Ledger, batch: ResultBatch, root: str | Path | None = None) -> Ledger:
    """
    Accept every occurrence group in the batch at its current count.

    Pairs in the ledger that the batch does not mention are left untouched.
    """
    occurrences = count_occurrences(batch, root)
    return ledger.with_counts(occurrences)


def accept_for_rule(
    ledger: Ledger,
    batch: ResultBatch,
    rule_id: str,
    root: str | Path | None = None,
) -> Ledger:
    """Accept the occurrence groups of one rule at their current counts."""
    occurrences = count_occurrences(batch, root)
    selected = {
        file_path: {rule_id: rules[rule_id]}
        for file_path, rules in occurrences.items()
        if rule_id in rules
    }
    if not selected:
        logger.debug("accept_rule_no_occurrences", rule_id=rule_id)
    return ledger.with_counts(selected)


def prune(
    ledger: Ledger,
    batch: ResultBatch,
    root: str | Path | None = None,
    *,
    missing_files: Iterable[str] = (),
    tighten: bool = False,
) -> Ledger:
    """
    Remove stale entries.

    Args:
        ledger: Current ledger
        batch: Results for the whole repository
        root: Project root used to map result paths to ledger keys
        missing_files: Ledger file keys known to no longer exist; they count
            as analyzed with zero occurrences
        tighten: Also lower counts to the current occurrence count where
            violations were fixed but some remain

    Raises:
        PartialAnalysisError: If a ledger file is neither in the batch nor
            in missing_files. The ledger is left unchanged.
    """
    analyzed = {to_ledger_key(path, root) for path in batch.file_paths}
    covered = analyzed | {to_ledger_key(path) for path in missing_files}
    uncovered = [file_path for file_path in ledger.files if file_path not in covered]
    if uncovered:
        logger.warning("prune_partial_batch", uncovered=len(uncovered), analyzed=len(analyzed))
        raise PartialAnalysisError(
            f"Cannot prune: {len(uncovered)} ledger file(s) were not analyzed in this run "
            f"(first: {uncovered[0]}). Run the analysis on the whole repository.",
            {"uncovered_files": uncovered},
        )

    pruned = ledger.without(find_stale_entries(ledger, batch, root))

    if tighten:
        occurrences = count_occurrences(batch, root)
        lowered = {
            file_path: {
                rule_id: occurrences[file_path][rule_id]
                for rule_id, accepted in pruned.rules_for(file_path).items()
                if occurrences[file_path][rule_id] < accepted
            }
            for file_path in pruned.files
        }
        pruned = pruned.with_counts(lowered)

    return pruned
