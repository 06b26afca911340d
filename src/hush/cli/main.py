"""
Hush CLI - bulk suppressions for static analysis results
Main entry point for the command-line interface

Usage:
    hush check --results results.json       # Apply suppressions and report
    hush accept-all --results results.json  # Accept all current violations
    hush accept-rule <rule> --results ...   # Accept violations of one rule
    hush prune --results results.json       # Remove stale suppressions
    hush stale --results results.json       # List stale suppressions
"""

import typer
from rich.console import Console
from rich.panel import Panel

from hush import __version__
from hush.cli.commands import suppressions
from hush.shared.infrastructure.logging import configure_logging

app = typer.Typer(
    name="hush",
    help="Hush - remember accepted static analysis violations and surface only new ones",
    add_completion=False,
    no_args_is_help=True,
)
console = Console()

app.command(name="check")(suppressions.check_command)
app.command(name="accept-all")(suppressions.accept_all_command)
app.command(name="accept-rule")(suppressions.accept_rule_command)
app.command(name="prune")(suppressions.prune_command)
app.command(name="stale")(suppressions.stale_command)


@app.callback()
def main_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log debug output to stderr"),
):
    """Configure logging before any command runs."""
    configure_logging(level="DEBUG" if verbose else None)


@app.command()
def version():
    """Show Hush version information"""
    console.print(Panel.fit(
        "[bold cyan]Hush Core[/bold cyan]\n"
        f"[dim]Version:[/dim] {__version__}\n",
        title="About Hush",
        border_style="cyan"
    ))


def main():
    """Main entry point"""
    app()


if __name__ == "__main__":
    main()
