"""
Ledger persistence.

Loads and saves the suppression ledger as JSON and owns the rules for where
the ledger lives. Writes are atomic (temp file + rename) and serialized per
ledger path.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from pathlib import Path

import aiofiles
import aiofiles.os
from pydantic import BaseModel, ConfigDict, Field, StrictInt, TypeAdapter, ValidationError

from hush.shared.domain.exceptions import LedgerCorrupt, LedgerNotFound
from hush.shared.infrastructure.config import settings
from hush.shared.infrastructure.logging import get_logger
from hush.shared.utils.path_utils import resolve_location, to_ledger_key
from hush.suppression.models import Ledger, LedgerChange

logger = get_logger(__name__)


class _EntrySchema(BaseModel):
    """On-disk shape of one entry: {"count": <non-negative int>}."""

    model_config = ConfigDict(extra="forbid")

    count: StrictInt = Field(ge=0)


_LEDGER_SCHEMA = TypeAdapter(dict[str, dict[str, _EntrySchema]])


def serialize_ledger(ledger: Ledger) -> str:
    """Deterministic JSON text for a ledger (sorted keys, trailing newline)."""
    return json.dumps(ledger.to_json(), indent=2, sort_keys=True, ensure_ascii=False) + "\n"


def parse_ledger(content: str, source: str = "<string>") -> Ledger:
    """
    Parse and validate ledger JSON text.

    Raises:
        LedgerCorrupt: If the text is not JSON or does not have the ledger shape
    """
    try:
        raw = _LEDGER_SCHEMA.validate_json(content)
    except ValidationError as e:
        raise LedgerCorrupt(
            f"Ledger {source} is corrupt: {e.errors()[0]['msg'] if e.errors() else e}",
            {"path": source, "errors": e.error_count()},
        ) from e

    dropped = sum(1 for rules in raw.values() for entry in rules.values() if entry.count == 0)
    if dropped:
        logger.debug("ledger_zero_counts_dropped", path=source, dropped=dropped)

    # Keys written by hand or by other tools may use "\" or "./"; they must
    # match the keys reconciliation derives from result paths.
    counts: dict[str, dict[str, int]] = {}
    merged = 0
    for file_path, rules in raw.items():
        key = to_ledger_key(file_path)
        if key in counts:
            merged += 1
        file_counts = counts.setdefault(key, {})
        for rule_id, entry in rules.items():
            file_counts[rule_id] = max(file_counts.get(rule_id, 0), entry.count)

    if merged:
        logger.warning("ledger_duplicate_keys_merged", path=source, merged=merged)

    return Ledger.from_counts(counts)


class LedgerStore:
    """
    Reads and writes ledger files.

    One store instance is shared by the read-only host and the read-write
    editor; it holds one asyncio.Lock per ledger path so that only one save
    to a given file is in flight at a time.
    """

    def __init__(self, default_filename: str | None = None):
        self.default_filename = default_filename or settings.ledger_filename
        self._locks: dict[Path, asyncio.Lock] = {}

    def resolve_path(self, explicit_path: str | Path | None, root_dir: str | Path) -> Path:
        """
        Resolve the ledger location.

        Args:
            explicit_path: Explicit location (absolute, or relative to root_dir)
            root_dir: Project root

        Returns:
            Absolute path; the default file name inside root_dir when no
            explicit path is given
        """
        return resolve_location(explicit_path, root_dir, self.default_filename)

    def _get_lock(self, path: Path) -> asyncio.Lock:
        """Get or create the lock for a ledger path (lazy, event-loop safe)."""
        key = Path(path).absolute()
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock

    async def load_async(self, path: str | Path, *, explicit: bool = False) -> Ledger:
        """
        Load a ledger file.

        Args:
            path: Resolved ledger path
            explicit: Whether the caller asked for this location explicitly

        Returns:
            The ledger; an empty ledger when the default location has no file

        Raises:
            LedgerNotFound: explicit location without a file
            LedgerCorrupt: file present but invalid
            OSError: other read failures, unwrapped
        """
        path = Path(path)
        try:
            async with aiofiles.open(path, encoding="utf-8") as f:
                content = await f.read()
        except FileNotFoundError:
            if explicit:
                logger.error("ledger_not_found", path=str(path))
                raise LedgerNotFound(f"Ledger file not found: {path}", {"path": str(path)})
            logger.debug("ledger_absent_using_empty", path=str(path))
            return Ledger()
        except UnicodeDecodeError as e:
            logger.error("ledger_corrupt", path=str(path), error=str(e))
            raise LedgerCorrupt(f"Ledger {path} is corrupt: not valid UTF-8", {"path": str(path)}) from e

        try:
            ledger = parse_ledger(content, source=str(path))
        except LedgerCorrupt as e:
            logger.error("ledger_corrupt", path=str(path), error=str(e))
            raise

        logger.info("ledger_loaded", path=str(path), files=len(ledger.files), entries=len(ledger))
        return ledger

    async def save_async(self, path: str | Path, ledger: Ledger) -> None:
        """Persist a ledger; saves to the same path never interleave."""
        path = Path(path)
        async with self._get_lock(path):
            await self._write_async(path, ledger)

    async def update_async(
        self,
        path: str | Path,
        transform: Callable[[Ledger], Ledger],
        *,
        explicit: bool = False,
    ) -> tuple[Ledger, LedgerChange]:
        """
        Load, transform and save a ledger under the path's lock.

        The transform must be pure. If it raises, nothing is written.

        Returns:
            The saved ledger and its difference from the previous one
        """
        path = Path(path)
        async with self._get_lock(path):
            current = await self.load_async(path, explicit=explicit)
            updated = transform(current)
            change = current.diff(updated)
            await self._write_async(path, updated)
        return updated, change

    async def _write_async(self, path: Path, ledger: Ledger) -> None:
        content = serialize_ledger(ledger)
        await aiofiles.os.makedirs(path.parent, exist_ok=True)

        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            async with aiofiles.open(tmp_path, "w", encoding="utf-8") as f:
                await f.write(content)
            await aiofiles.os.replace(tmp_path, path)
        except OSError:
            if await aiofiles.os.path.exists(tmp_path):
                await aiofiles.os.remove(tmp_path)
            raise

        logger.info("ledger_saved", path=str(path), files=len(ledger.files), entries=len(ledger))
