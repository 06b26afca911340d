"""
Hush Suppression Commands.

Commands that read an analysis results file and reconcile or mutate the
suppression ledger:

    hush check --results results.json        # Apply suppressions, report what is left
    hush accept-all --results results.json   # Accept every current violation
    hush accept-rule no-console --results results.json
    hush prune --results results.json        # Drop entries that no longer occur
    hush stale --results results.json        # Preview what prune would drop
"""

import asyncio
import json
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, Optional, TypeVar

import typer
from rich.console import Console
from rich.table import Table

from hush.engine.replay import MATCH_ALL, ReplayEngine
from hush.results.enums import Severity
from hush.results.models import ResultBatch
from hush.shared.domain.exceptions import HushError
from hush.shared.infrastructure.logging import get_logger
from hush.shared.infrastructure.project_config import load_project_config
from hush.suppression.host import AnalysisHost, LedgerEditor
from hush.suppression.models import LedgerChange
from hush.suppression.reconciler import find_stale_entries, find_unused_suppressions, summarize
from hush.suppression.store import LedgerStore

console = Console()
logger = get_logger(__name__)

T = TypeVar("T")

EXIT_PROBLEMS = 1
EXIT_ERROR = 2

ResultsOption = typer.Option(
    ..., "--results", "-r", exists=True, dir_okay=False, readable=True,
    help="Analysis results file (ESLint-compatible JSON)",
)
RootOption = typer.Option(
    None, "--root", file_okay=False,
    help="Project root (default: current directory)",
)
LedgerOption = typer.Option(
    None, "--ledger", "-l",
    help="Ledger file, absolute or relative to the root",
)


def _run(coro: Coroutine[Any, Any, T]) -> T:
    """Run a coroutine, turning Hush errors into exit code 2."""
    try:
        return asyncio.run(coro)
    except HushError as e:
        logger.error("command_failed", error=e.message, error_type=type(e).__name__)
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(EXIT_ERROR)


def _context(root: Optional[Path], ledger: Optional[str]) -> tuple[Path, Optional[str]]:
    project_root = (root or Path.cwd()).absolute()
    try:
        config = load_project_config(project_root)
    except HushError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(EXIT_ERROR)
    return project_root, ledger or config.ledger_location


async def _full_batch_async(results: Path, root: Path) -> ResultBatch:
    return await ReplayEngine(results, root).analyze_files_async(MATCH_ALL)


def _print_change(change: LedgerChange, *, title: str, dry_run: bool = False) -> None:
    if not change.has_changes:
        console.print("[green]✓ Ledger already up to date.[/green]")
        return

    table = Table(title=title + (" (dry run)" if dry_run else ""))
    table.add_column("File", style="cyan")
    table.add_column("Rule")
    table.add_column("Before", justify="right")
    table.add_column("After", justify="right")

    for delta in change.deltas:
        after = "[red]removed[/red]" if delta.after == 0 else str(delta.after)
        before = "[dim]-[/dim]" if delta.before == 0 else str(delta.before)
        table.add_row(delta.file_path, delta.rule_id, before, after)

    console.print(table)
    console.print(
        f"[bold]{len(change.added)}[/bold] added, "
        f"[bold]{len(change.changed)}[/bold] changed, "
        f"[bold]{len(change.removed)}[/bold] removed"
    )


def accept_all_command(
    results: Path = ResultsOption,
    root: Optional[Path] = RootOption,
    ledger: Optional[str] = LedgerOption,
) -> None:
    """
    Accept every current violation.

    Sets the ledger count of each (file, rule) pair in the results to its
    current occurrence count. Entries for other pairs are kept.
    """
    project_root, location = _context(root, ledger)
    editor = LedgerEditor(project_root, location)

    async def _accept() -> LedgerChange:
        batch = await _full_batch_async(results, project_root)
        return await editor.accept_all_async(batch)

    change = _run(_accept())
    _print_change(change, title="Accepted suppressions")
    console.print(f"[dim]Ledger: {editor.ledger_path}[/dim]")


def accept_rule_command(
    rule_id: str = typer.Argument(..., help="Rule whose current violations are accepted"),
    results: Path = ResultsOption,
    root: Optional[Path] = RootOption,
    ledger: Optional[str] = LedgerOption,
) -> None:
    """Accept the current violations of a single rule."""
    project_root, location = _context(root, ledger)
    editor = LedgerEditor(project_root, location)

    async def _accept() -> LedgerChange:
        batch = await _full_batch_async(results, project_root)
        return await editor.accept_rule_async(batch, rule_id)

    change = _run(_accept())
    _print_change(change, title=f"Accepted suppressions for {rule_id}")
    console.print(f"[dim]Ledger: {editor.ledger_path}[/dim]")


def prune_command(
    results: Path = ResultsOption,
    root: Optional[Path] = RootOption,
    ledger: Optional[str] = LedgerOption,
    tighten: bool = typer.Option(False, "--tighten", help="Also lower counts to the current number of violations"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would change without saving"),
) -> None:
    """
    Remove suppressions that no longer match any violation.

    The results must cover the whole repository; files referenced by the
    ledger that were not analyzed (and still exist) abort the prune.
    """
    project_root, location = _context(root, ledger)
    editor = LedgerEditor(project_root, location)

    async def _prune() -> LedgerChange:
        batch = await _full_batch_async(results, project_root)
        return await editor.prune_async(batch, tighten=tighten, dry_run=dry_run)

    change = _run(_prune())
    _print_change(change, title="Pruned suppressions", dry_run=dry_run)


def stale_command(
    results: Path = ResultsOption,
    root: Optional[Path] = RootOption,
    ledger: Optional[str] = LedgerOption,
) -> None:
    """List ledger entries with no remaining violations (read-only)."""
    project_root, location = _context(root, ledger)
    store = LedgerStore()
    path = store.resolve_path(location, project_root)

    async def _stale() -> list[tuple[str, str]]:
        current = await store.load_async(path, explicit=location is not None)
        batch = await _full_batch_async(results, project_root)
        return sorted(find_stale_entries(current, batch, project_root))

    stale = _run(_stale())
    if not stale:
        console.print("[green]✓ No stale suppressions.[/green]")
        return

    for file_path, rule_id in stale:
        console.print(f"  [yellow]•[/yellow] {file_path} [dim]{rule_id}[/dim]")
    console.print(f"\n[bold]{len(stale)}[/bold] stale suppression(s). Run 'hush prune' to remove them.")


def check_command(
    results: Path = ResultsOption,
    root: Optional[Path] = RootOption,
    ledger: Optional[str] = LedgerOption,
    pass_on_unpruned: bool = typer.Option(
        False, "--pass-on-unpruned", help="Do not fail when suppressions are no longer needed",
    ),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", dir_okay=False, help="Write the filtered results as JSON",
    ),
) -> None:
    """
    Apply suppressions and report the remaining problems.

    Exits with 1 when errors remain or when suppressions are left over that
    no longer occur (unless --pass-on-unpruned).
    """
    project_root, location = _context(root, ledger)
    host = AnalysisHost(
        ReplayEngine(results, project_root),
        root=project_root,
        ledger_location=location,
        apply_suppressions=False,
    )

    async def _check() -> tuple[ResultBatch, dict]:
        # Unused entries are measured against raw counts, not what is left
        # after suppression.
        raw = await host.analyze_files_async(MATCH_ALL)
        filtered = await host.apply_suppressions_async(raw)
        current = await host.get_ledger_async()
        return filtered, find_unused_suppressions(current, raw, project_root)

    filtered, unused = _run(_check())

    if output:
        output.write_text(json.dumps(filtered.to_json(), indent=2) + "\n", encoding="utf-8")

    summary = summarize(filtered)
    visible = [r for r in filtered if r.messages]
    if visible:
        table = Table(title="Problems")
        table.add_column("Location", style="cyan")
        table.add_column("Severity")
        table.add_column("Rule", style="dim")
        table.add_column("Message")
        for result in visible:
            for m in result.messages:
                severity = "[red]error[/red]" if m.severity == Severity.ERROR else "[yellow]warning[/yellow]"
                table.add_row(f"{result.file_path}:{m.line}:{m.column}", severity, m.rule_id or "-", m.message)
        console.print(table)

    console.print(
        f"[bold]{summary.errors}[/bold] error(s), [bold]{summary.warnings}[/bold] warning(s), "
        f"[dim]{summary.suppressed} suppressed[/dim]"
    )

    if unused:
        console.print("\n[bold yellow]Unused suppressions:[/bold yellow]")
        for (file_path, rule_id), (accepted, current) in sorted(unused.items()):
            console.print(f"  [yellow]•[/yellow] {file_path} [dim]{rule_id}[/dim] accepted {accepted}, found {current}")
        console.print("[dim]Run 'hush prune --tighten' to update the ledger.[/dim]")

    if summary.has_errors or (unused and not pass_on_unpruned):
        raise typer.Exit(EXIT_PROBLEMS)
