"""
Replay engine: serves results from a previously written results file.

Lets the CLI reconcile and mutate the ledger from the output of any analyzer
that writes ESLint-compatible JSON (`eslint --format json -o results.json`).
"""

from __future__ import annotations

import copy
import fnmatch
import json
from collections.abc import Sequence
from pathlib import Path

import aiofiles

from hush.results.models import FileResult, ResultBatch
from hush.shared.domain.exceptions import ResultsFormatError
from hush.shared.infrastructure.logging import get_logger
from hush.shared.utils.path_utils import to_ledger_key

logger = get_logger(__name__)

MATCH_ALL = ("*",)


async def read_results_async(path: str | Path) -> ResultBatch:
    """
    Read a results JSON file.

    Raises:
        ResultsFormatError: If the file is not a valid result batch
        OSError: If the file cannot be read
    """
    try:
        async with aiofiles.open(path, encoding="utf-8") as f:
            content = await f.read()
        batch = ResultBatch.from_json(json.loads(content))
    except (ValueError, TypeError) as e:
        logger.error("results_file_invalid", path=str(path), error=str(e))
        raise ResultsFormatError(f"Invalid results file {path}: {e}", {"path": str(path)}) from e

    logger.debug("results_file_loaded", path=str(path), files=len(batch))
    return batch


class ReplayEngine:
    """
    AnalysisEngine backed by a results file.

    The file is read on first use and kept for the lifetime of the engine.
    Every call hands out copies, so callers never share result objects.
    """

    def __init__(self, results_path: str | Path, root: str | Path | None = None):
        self.results_path = Path(results_path)
        self.root = Path(root) if root is not None else Path.cwd()
        self._batch: ResultBatch | None = None

    async def _get_batch_async(self) -> ResultBatch:
        if self._batch is None:
            self._batch = await read_results_async(self.results_path)
        return self._batch

    async def analyze_files_async(self, patterns: Sequence[str] = MATCH_ALL) -> ResultBatch:
        batch = await self._get_batch_async()
        patterns = list(patterns) or list(MATCH_ALL)

        selected = [
            copy.deepcopy(result)
            for result in batch
            if any(fnmatch.fnmatch(to_ledger_key(result.file_path, self.root), p) for p in patterns)
        ]
        logger.debug("replay_files_selected", patterns=patterns, selected=len(selected), total=len(batch))
        return ResultBatch(results=selected)

    async def analyze_text_async(self, text: str, file_path: str | None = None) -> ResultBatch:
        # Recorded results cannot analyze new text; the recorded result for
        # the file stands in for it.
        batch = await self._get_batch_async()
        if file_path is not None:
            key = to_ledger_key(file_path, self.root)
            for result in batch:
                if to_ledger_key(result.file_path, self.root) == key:
                    return ResultBatch(results=[copy.deepcopy(result)])

        return ResultBatch(results=[FileResult(file_path=file_path or "<text>")])
