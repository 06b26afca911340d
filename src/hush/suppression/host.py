"""
Integration seam for embedding hosts and the CLI.

Two capability sets over one LedgerStore:
- AnalysisHost: read-only. Runs the analysis engine and, when configured,
  reconciles results against a ledger loaded once per instance.
- LedgerEditor: read-write. Applies mutation operations to the ledger file
  and saves the result.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from pathlib import Path
from typing import Any

import aiofiles.os

from hush.engine.protocols import AnalysisEngine, ResultCache
from hush.results.models import ResultBatch
from hush.shared.infrastructure.config import settings
from hush.shared.infrastructure.logging import get_logger
from hush.shared.infrastructure.project_config import load_project_config
from hush.suppression.mutations import accept_all, accept_for_rule, prune
from hush.suppression.models import Ledger, LedgerChange
from hush.suppression.reconciler import apply_suppressions
from hush.suppression.store import LedgerStore

logger = get_logger(__name__)


class AnalysisHost:
    """
    Runs analysis and optionally filters results through the ledger.

    The ledger is loaded lazily, at most once per instance, and shared by
    concurrent calls. A failed load is not remembered, so a later call
    tries again.
    """

    def __init__(
        self,
        engine: AnalysisEngine,
        root: str | Path | None = None,
        ledger_location: str | Path | None = None,
        apply_suppressions: bool | None = None,
        result_cache: ResultCache | None = None,
        store: LedgerStore | None = None,
    ):
        """
        Args:
            engine: Analysis engine producing raw results
            root: Project root (default: cwd)
            ledger_location: Explicit ledger path, absolute or relative to root
            apply_suppressions: Reconcile every batch before returning it;
                None uses the configured default
            result_cache: Receives raw results before reconciliation
            store: Ledger store, shared with a LedgerEditor if any
        """
        self.engine = engine
        self.root = Path(root) if root is not None else Path.cwd()
        self.ledger_location = ledger_location
        self.apply_suppressions = (
            settings.apply_suppressions if apply_suppressions is None else apply_suppressions
        )
        self.result_cache = result_cache
        self.store = store or LedgerStore()
        self.ledger_path = self.store.resolve_path(ledger_location, self.root)

        self._ledger: Ledger | None = None
        self._load_lock: asyncio.Lock | None = None

    @classmethod
    def from_project(
        cls,
        engine: AnalysisEngine,
        root: str | Path | None = None,
        *,
        ledger_location: str | Path | None = None,
        apply_suppressions: bool | None = None,
        **kwargs: Any,
    ) -> AnalysisHost:
        """
        Build a host honouring the project's .hush/config.yaml.

        Explicit arguments win over the project file, which wins over
        environment settings.
        """
        project_root = Path(root) if root is not None else Path.cwd()
        config = load_project_config(project_root)
        return cls(
            engine,
            root=project_root,
            ledger_location=ledger_location or config.ledger_location,
            apply_suppressions=config.resolve_apply_suppressions(apply_suppressions),
            **kwargs,
        )

    def _get_lock(self) -> asyncio.Lock:
        if self._load_lock is None:
            self._load_lock = asyncio.Lock()
        return self._load_lock

    async def get_ledger_async(self) -> Ledger:
        """Load the ledger on first use and return the cached instance afterwards."""
        if self._ledger is not None:
            return self._ledger

        async with self._get_lock():
            if self._ledger is None:
                self._ledger = await self.store.load_async(
                    self.ledger_path, explicit=self.ledger_location is not None
                )
        return self._ledger

    async def apply_suppressions_async(self, batch: ResultBatch) -> ResultBatch:
        """Reconcile a raw batch against the cached ledger."""
        ledger = await self.get_ledger_async()
        return apply_suppressions(batch, ledger, self.root)

    async def analyze_files_async(self, patterns: Sequence[str]) -> ResultBatch:
        raw = await self.engine.analyze_files_async(patterns)
        return await self._finish_async(raw)

    async def analyze_text_async(self, text: str, file_path: str | None = None) -> ResultBatch:
        raw = await self.engine.analyze_text_async(text, file_path)
        return await self._finish_async(raw)

    async def _finish_async(self, raw: ResultBatch) -> ResultBatch:
        # Raw results go to the cache first so ledger edits never
        # invalidate cached analysis.
        if self.result_cache is not None:
            await self.result_cache.put_async(raw)

        if not self.apply_suppressions:
            return raw
        return await self.apply_suppressions_async(raw)


class LedgerEditor:
    """
    Applies mutation operations to a ledger file.

    Every operation reloads the ledger from disk under the store's per-path
    lock, so edits never build on a stale in-memory copy.
    """

    def __init__(
        self,
        root: str | Path | None = None,
        ledger_location: str | Path | None = None,
        store: LedgerStore | None = None,
    ):
        self.root = Path(root) if root is not None else Path.cwd()
        self.ledger_location = ledger_location
        self.store = store or LedgerStore()
        self.ledger_path = self.store.resolve_path(ledger_location, self.root)

    @property
    def explicit(self) -> bool:
        return self.ledger_location is not None

    async def load_async(self) -> Ledger:
        return await self.store.load_async(self.ledger_path, explicit=self.explicit)

    async def accept_all_async(self, batch: ResultBatch) -> LedgerChange:
        _, change = await self.store.update_async(
            self.ledger_path,
            lambda ledger: accept_all(ledger, batch, self.root),
            explicit=self.explicit,
        )
        logger.info("suppressions_accepted", rule_id=None, changes=len(change.deltas))
        return change

    async def accept_rule_async(self, batch: ResultBatch, rule_id: str) -> LedgerChange:
        _, change = await self.store.update_async(
            self.ledger_path,
            lambda ledger: accept_for_rule(ledger, batch, rule_id, self.root),
            explicit=self.explicit,
        )
        logger.info("suppressions_accepted", rule_id=rule_id, changes=len(change.deltas))
        return change

    async def prune_async(
        self,
        batch: ResultBatch,
        *,
        tighten: bool = False,
        dry_run: bool = False,
    ) -> LedgerChange:
        """
        Remove stale entries (and optionally lower counts).

        Raises:
            PartialAnalysisError: If the batch misses files the ledger
                references that still exist on disk
        """
        # Transforms run synchronously under the store lock, so deleted files
        # are looked up from a snapshot beforehand.
        snapshot = await self.load_async()
        missing = await self._missing_files_async(snapshot)

        if dry_run:
            candidate = prune(snapshot, batch, self.root, missing_files=missing, tighten=tighten)
            return snapshot.diff(candidate)

        _, change = await self.store.update_async(
            self.ledger_path,
            lambda ledger: prune(ledger, batch, self.root, missing_files=missing, tighten=tighten),
            explicit=self.explicit,
        )
        logger.info("suppressions_pruned", removed=len(change.removed), changes=len(change.deltas))
        return change

    async def _missing_files_async(self, ledger: Ledger) -> list[str]:
        missing = []
        for file_path in ledger.files:
            if not await aiofiles.os.path.exists(self.root / file_path):
                missing.append(file_path)
        return missing
