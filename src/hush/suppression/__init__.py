"""
Count-based bulk suppressions.

The ledger records, per file and rule, how many violations were accepted.
Reconciliation hides an occurrence group only while its count does not
exceed the accepted count.

Exports:
    - SuppressionEntry, Ledger, LedgerChange, EntryDelta: ledger models
    - LedgerStore: ledger file persistence
    - apply_suppressions, find_stale_entries, find_unused_suppressions,
      count_occurrences: reconciliation
    - accept_all, accept_for_rule, prune: mutation operations
    - AnalysisHost, LedgerEditor: integration seam
"""

from hush.suppression.host import AnalysisHost, LedgerEditor
from hush.suppression.models import EntryDelta, Ledger, LedgerChange, SuppressionEntry
from hush.suppression.mutations import accept_all, accept_for_rule, prune
from hush.suppression.reconciler import (
    apply_suppressions,
    count_occurrences,
    find_stale_entries,
    find_unused_suppressions,
)
from hush.suppression.store import LedgerStore

__all__ = [
    "SuppressionEntry",
    "Ledger",
    "LedgerChange",
    "EntryDelta",
    "LedgerStore",
    "apply_suppressions",
    "count_occurrences",
    "find_stale_entries",
    "find_unused_suppressions",
    "accept_all",
    "accept_for_rule",
    "prune",
    "AnalysisHost",
    "LedgerEditor",
]
