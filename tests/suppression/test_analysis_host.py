"""
Tests for AnalysisHost (read-only) and LedgerEditor (read-write).
"""

import json
from unittest.mock import AsyncMock, patch

import pytest

from hush.shared.domain.exceptions import LedgerCorrupt, LedgerNotFound, PartialAnalysisError
from hush.suppression.host import AnalysisHost, LedgerEditor
from hush.suppression.store import LedgerStore


class FakeEngine:
    """AnalysisEngine returning a fixed batch and recording calls."""

    def __init__(self, batch):
        self.batch = batch
        self.calls = []

    async def analyze_files_async(self, patterns):
        self.calls.append(("files", list(patterns)))
        return self.batch

    async def analyze_text_async(self, text, file_path=None):
        self.calls.append(("text", file_path))
        return self.batch


class RecordingCache:
    """ResultCache remembering what it was given, and when."""

    def __init__(self, events):
        self.events = events
        self.batches = []

    async def put_async(self, batch):
        self.events.append("cache_put")
        self.batches.append(batch)


class TestAnalysisHost:
    """Test the read-only integration seam."""

    @pytest.mark.asyncio
    async def test_returns_raw_results_when_disabled(self, project_root, write_ledger, make_batch):
        write_ledger({"a.js": {"no-console": {"count": 1}}})
        batch = make_batch({"a.js": ["no-console"]})
        host = AnalysisHost(FakeEngine(batch), root=project_root, apply_suppressions=False)

        result = await host.analyze_files_async(["*.js"])

        assert result is batch
        assert len(result.results[0].messages) == 1

    @pytest.mark.asyncio
    async def test_reconciles_when_enabled(self, project_root, write_ledger, make_batch):
        write_ledger({"a.js": {"no-console": {"count": 1}}})
        host = AnalysisHost(
            FakeEngine(make_batch({"a.js": ["no-console"], "b.js": ["semi"]})),
            root=project_root,
            apply_suppressions=True,
        )

        result = await host.analyze_files_async(["*.js"])

        assert result.results[0].messages == []
        assert len(result.results[1].messages) == 1

    @pytest.mark.asyncio
    async def test_analyze_text_is_reconciled_too(self, project_root, write_ledger, make_batch):
        write_ledger({"a.js": {"no-console": {"count": 1}}})
        engine = FakeEngine(make_batch({"a.js": ["no-console"]}))
        host = AnalysisHost(engine, root=project_root, apply_suppressions=True)

        result = await host.analyze_text_async("console.log(1)", file_path="a.js")

        assert result.results[0].messages == []
        assert engine.calls == [("text", "a.js")]

    @pytest.mark.asyncio
    async def test_default_comes_from_settings(self, project_root, make_batch):
        with patch("hush.suppression.host.settings") as mock_settings:
            mock_settings.apply_suppressions = True
            host = AnalysisHost(FakeEngine(make_batch({})), root=project_root)

        assert host.apply_suppressions is True

    @pytest.mark.asyncio
    async def test_ledger_is_loaded_once(self, project_root, write_ledger, make_batch):
        write_ledger({"a.js": {"no-console": {"count": 1}}})
        store = LedgerStore()
        host = AnalysisHost(
            FakeEngine(make_batch({"a.js": ["no-console"]})),
            root=project_root,
            apply_suppressions=True,
            store=store,
        )

        with patch.object(store, "load_async", wraps=store.load_async) as load_spy:
            await host.analyze_files_async(["*"])
            await host.analyze_files_async(["*"])
            await host.analyze_text_async("x", "a.js")

        assert load_spy.await_count == 1

    @pytest.mark.asyncio
    async def test_cached_ledger_survives_file_changes(self, project_root, write_ledger, make_batch):
        path = write_ledger({"a.js": {"no-console": {"count": 1}}})
        host = AnalysisHost(
            FakeEngine(make_batch({"a.js": ["no-console"]})), root=project_root, apply_suppressions=True
        )
        await host.analyze_files_async(["*"])

        path.write_text("{corrupt", encoding="utf-8")
        result = await host.analyze_files_async(["*"])

        assert result.results[0].messages == []

    @pytest.mark.asyncio
    async def test_failed_load_is_not_cached(self, project_root, write_ledger, make_batch):
        path = write_ledger("{corrupt")
        host = AnalysisHost(
            FakeEngine(make_batch({"a.js": ["no-console"]})), root=project_root, apply_suppressions=True
        )

        with pytest.raises(LedgerCorrupt):
            await host.analyze_files_async(["*"])

        path.write_text(json.dumps({"a.js": {"no-console": {"count": 1}}}), encoding="utf-8")
        result = await host.analyze_files_async(["*"])

        assert result.results[0].messages == []

    @pytest.mark.asyncio
    async def test_explicit_missing_ledger_fails(self, project_root, make_batch):
        host = AnalysisHost(
            FakeEngine(make_batch({"a.js": ["no-console"]})),
            root=project_root,
            ledger_location="missing.json",
            apply_suppressions=True,
        )

        with pytest.raises(LedgerNotFound):
            await host.analyze_files_async(["*"])

    @pytest.mark.asyncio
    async def test_default_missing_ledger_is_empty(self, project_root, make_batch):
        host = AnalysisHost(
            FakeEngine(make_batch({"a.js": ["no-console"]})), root=project_root, apply_suppressions=True
        )

        result = await host.analyze_files_async(["*"])

        assert len(result.results[0].messages) == 1

    @pytest.mark.asyncio
    async def test_raw_results_reach_cache_before_reconciliation(self, project_root, write_ledger, make_batch):
        write_ledger({"a.js": {"no-console": {"count": 1}}})
        events = []
        cache = RecordingCache(events)
        raw = make_batch({"a.js": ["no-console"]})
        host = AnalysisHost(FakeEngine(raw), root=project_root, apply_suppressions=True, result_cache=cache)

        with patch(
            "hush.suppression.host.apply_suppressions",
            side_effect=lambda *args: events.append("reconcile") or args[0],
        ):
            await host.analyze_files_async(["*"])

        assert events == ["cache_put", "reconcile"]
        assert cache.batches[0] is raw
        assert len(cache.batches[0].results[0].messages) == 1

    @pytest.mark.asyncio
    async def test_cache_receives_raw_results_even_when_suppressed(self, project_root, write_ledger, make_batch):
        write_ledger({"a.js": {"no-console": {"count": 1}}})
        cache = AsyncMock()
        raw = make_batch({"a.js": ["no-console"]})
        host = AnalysisHost(FakeEngine(raw), root=project_root, apply_suppressions=True, result_cache=cache)

        result = await host.analyze_files_async(["*"])

        cache.put_async.assert_awaited_once_with(raw)
        assert result.results[0].messages == []

    @pytest.mark.asyncio
    async def test_from_project_reads_config(self, project_root, write_ledger, make_batch):
        config_dir = project_root / ".hush"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text(
            "ledgerLocation: custom.json\napplySuppressions: true\n", encoding="utf-8"
        )
        write_ledger({"a.js": {"no-console": {"count": 1}}}, name="custom.json")

        host = AnalysisHost.from_project(FakeEngine(make_batch({"a.js": ["no-console"]})), project_root)
        result = await host.analyze_files_async(["*"])

        assert host.apply_suppressions is True
        assert host.ledger_path == project_root / "custom.json"
        assert result.results[0].messages == []

    @pytest.mark.asyncio
    async def test_from_project_arguments_win(self, project_root, make_batch):
        config_dir = project_root / ".hush"
        config_dir.mkdir()
        (config_dir / "config.yaml").write_text("applySuppressions: true\n", encoding="utf-8")

        host = AnalysisHost.from_project(FakeEngine(make_batch({})), project_root, apply_suppressions=False)

        assert host.apply_suppressions is False


class TestLedgerEditor:
    """Test the read-write integration seam."""

    @pytest.mark.asyncio
    async def test_accept_all_creates_ledger(self, project_root, make_batch):
        editor = LedgerEditor(project_root)

        change = await editor.accept_all_async(make_batch({"a.js": ["no-console"] * 3}))

        data = json.loads((project_root / "hush-suppressions.json").read_text(encoding="utf-8"))
        assert data == {"a.js": {"no-console": {"count": 3}}}
        assert len(change.added) == 1

    @pytest.mark.asyncio
    async def test_accept_rule_keeps_other_rules(self, project_root, write_ledger, make_batch):
        write_ledger({"a.js": {"semi": {"count": 1}}})
        editor = LedgerEditor(project_root)

        await editor.accept_rule_async(make_batch({"a.js": ["no-console", "eqeqeq"]}), "no-console")

        ledger = await editor.load_async()
        assert ledger.to_counts() == {"a.js": {"semi": 1, "no-console": 1}}

    @pytest.mark.asyncio
    async def test_prune_treats_deleted_files_as_covered(self, project_root, write_ledger, make_batch):
        (project_root / "a.js").write_text("x", encoding="utf-8")
        write_ledger({
            "a.js": {"no-console": {"count": 1}, "semi": {"count": 1}},
            "deleted.js": {"eqeqeq": {"count": 2}},
        })
        editor = LedgerEditor(project_root)

        change = await editor.prune_async(make_batch({"a.js": ["no-console"]}))

        assert (await editor.load_async()).to_counts() == {"a.js": {"no-console": 1}}
        assert len(change.removed) == 2

    @pytest.mark.asyncio
    async def test_prune_partial_batch_leaves_file_untouched(self, project_root, write_ledger, make_batch):
        (project_root / "a.js").write_text("x", encoding="utf-8")
        (project_root / "b.js").write_text("x", encoding="utf-8")
        path = write_ledger({"a.js": {"r": {"count": 1}}, "b.js": {"r": {"count": 1}}})
        before = path.read_bytes()
        editor = LedgerEditor(project_root)

        with pytest.raises(PartialAnalysisError):
            await editor.prune_async(make_batch({"a.js": []}))

        assert path.read_bytes() == before

    @pytest.mark.asyncio
    async def test_prune_accepts_backslash_ledger_keys(self, project_root, write_ledger, make_batch):
        (project_root / "src").mkdir()
        (project_root / "src" / "a.js").write_text("x", encoding="utf-8")
        write_ledger({"src\\a.js": {"no-console": {"count": 1}, "semi": {"count": 1}}})
        editor = LedgerEditor(project_root)

        await editor.prune_async(make_batch({"src/a.js": ["no-console"]}))

        data = json.loads((project_root / "hush-suppressions.json").read_text(encoding="utf-8"))
        assert data == {"src/a.js": {"no-console": {"count": 1}}}

    @pytest.mark.asyncio
    async def test_prune_dry_run_does_not_write(self, project_root, write_ledger, make_batch):
        (project_root / "a.js").write_text("x", encoding="utf-8")
        path = write_ledger({"a.js": {"r": {"count": 1}}})
        before = path.read_bytes()
        editor = LedgerEditor(project_root)

        change = await editor.prune_async(make_batch({"a.js": []}), dry_run=True)

        assert len(change.removed) == 1
        assert path.read_bytes() == before

    @pytest.mark.asyncio
    async def test_explicit_missing_ledger_fails(self, project_root, make_batch):
        editor = LedgerEditor(project_root, ledger_location="missing.json")

        with pytest.raises(LedgerNotFound):
            await editor.accept_all_async(make_batch({"a.js": ["r"]}))

    @pytest.mark.asyncio
    async def test_shared_store_between_host_and_editor(self, project_root, make_batch):
        store = LedgerStore()
        batch = make_batch({"a.js": ["no-console"]})
        editor = LedgerEditor(project_root, store=store)
        host = AnalysisHost(FakeEngine(batch), root=project_root, apply_suppressions=True, store=store)

        await editor.accept_all_async(batch)
        result = await host.analyze_files_async(["*"])

        assert host.ledger_path == editor.ledger_path
        assert result.results[0].messages == []
