"""
Suppression ledger models.

- SuppressionEntry: accepted occurrence count for one (file, rule) pair
- Ledger: file -> rule -> SuppressionEntry, never holding zero counts
- EntryDelta / LedgerChange: difference between two ledgers

Ledger file format (keys sorted on save):
```json
{
  "src/app.js": {
    "no-unused-vars": {"count": 2}
  }
}
```
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, NamedTuple

RuleCounts = dict[str, dict[str, int]]


@dataclass(frozen=True)
class SuppressionEntry:
    """Number of occurrences of a rule in a file accepted at suppression time."""

    count: int

    def __post_init__(self) -> None:
        if self.count < 0:
            raise ValueError(f"Suppression count must be non-negative, got {self.count}")

    def to_json(self) -> dict[str, Any]:
        return {"count": self.count}


class EntryDelta(NamedTuple):
    """One (file, rule) pair whose count differs between two ledgers."""

    file_path: str
    rule_id: str
    before: int
    after: int


@dataclass
class LedgerChange:
    """
    Result of a ledger mutation.

    Added pairs have before == 0, removed pairs have after == 0.
    """

    deltas: list[EntryDelta] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(self.deltas)

    @property
    def added(self) -> list[EntryDelta]:
        return [d for d in self.deltas if d.before == 0]

    @property
    def removed(self) -> list[EntryDelta]:
        return [d for d in self.deltas if d.after == 0]

    @property
    def changed(self) -> list[EntryDelta]:
        return [d for d in self.deltas if d.before and d.after]


class Ledger:
    """
    Accepted violation counts per file and rule.

    A Ledger is never modified in place: every update returns a new
    instance, so a candidate ledger can be compared with the current one
    before it is persisted. Zero counts are never stored.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[str, Mapping[str, SuppressionEntry]] | None = None):
        self._entries: dict[str, dict[str, SuppressionEntry]] = {}
        for file_path, rules in (entries or {}).items():
            kept = {rule_id: entry for rule_id, entry in rules.items() if entry.count > 0}
            if kept:
                self._entries[file_path] = kept

    @classmethod
    def from_counts(cls, counts: Mapping[str, Mapping[str, int]]) -> Ledger:
        """Build a ledger from plain nested counts; zero counts are dropped."""
        return cls({
            file_path: {rule_id: SuppressionEntry(count) for rule_id, count in rules.items()}
            for file_path, rules in counts.items()
        })

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return sum(len(rules) for rules in self._entries.values())

    def __iter__(self) -> Iterator[tuple[str, str, int]]:
        for file_path, rules in self._entries.items():
            for rule_id, entry in rules.items():
                yield file_path, rule_id, entry.count

    def __contains__(self, pair: object) -> bool:
        if not isinstance(pair, tuple) or len(pair) != 2:
            return False
        file_path, rule_id = pair
        return rule_id in self._entries.get(file_path, {})

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ledger):
            return NotImplemented
        return self._entries == other._entries

    def __repr__(self) -> str:
        return f"Ledger({self.to_counts()!r})"

    @property
    def is_empty(self) -> bool:
        return not self._entries

    @property
    def files(self) -> list[str]:
        return sorted(self._entries)

    def get(self, file_path: str, rule_id: str) -> SuppressionEntry | None:
        return self._entries.get(file_path, {}).get(rule_id)

    def get_count(self, file_path: str, rule_id: str) -> int:
        """Accepted count for the pair, 0 when there is no entry."""
        entry = self.get(file_path, rule_id)
        return entry.count if entry else 0

    def rules_for(self, file_path: str) -> dict[str, int]:
        return {rule_id: e.count for rule_id, e in self._entries.get(file_path, {}).items()}

    def to_counts(self) -> RuleCounts:
        return {f: {r: e.count for r, e in rules.items()} for f, rules in self._entries.items()}

    def to_json(self) -> dict[str, Any]:
        """Serialize with file and rule keys in lexical order."""
        return {
            file_path: {
                rule_id: self._entries[file_path][rule_id].to_json()
                for rule_id in sorted(self._entries[file_path])
            }
            for file_path in sorted(self._entries)
        }

    # ------------------------------------------------------------------
    # Updates (each returns a new Ledger)
    # ------------------------------------------------------------------

    def with_count(self, file_path: str, rule_id: str, count: int) -> Ledger:
        """Set the count for one pair; a count of 0 removes the entry."""
        return self.with_counts({file_path: {rule_id: count}})

    def with_counts(self, counts: Mapping[str, Mapping[str, int]]) -> Ledger:
        """Set (or overwrite) counts for many pairs at once."""
        merged = self.to_counts()
        for file_path, rules in counts.items():
            merged.setdefault(file_path, {}).update(rules)
        return Ledger.from_counts(merged)

    def without(self, pairs: Iterable[tuple[str, str]]) -> Ledger:
        """Drop the given (file, rule) pairs; unknown pairs are ignored."""
        remaining = self.to_counts()
        for file_path, rule_id in pairs:
            remaining.get(file_path, {}).pop(rule_id, None)
        return Ledger.from_counts(remaining)

    def diff(self, other: Ledger) -> LedgerChange:
        """Describe how to get from this ledger to `other`."""
        before = self.to_counts()
        after = other.to_counts()
        deltas = []
        for file_path in sorted(set(before) | set(after)):
            old_rules = before.get(file_path, {})
            new_rules = after.get(file_path, {})
            for rule_id in sorted(set(old_rules) | set(new_rules)):
                old = old_rules.get(rule_id, 0)
                new = new_rules.get(rule_id, 0)
                if old != new:
                    deltas.append(EntryDelta(file_path, rule_id, old, new))
        return LedgerChange(deltas=deltas)
