"""Main CLI entry point for the enquiry-engine command."""

import json
import click
from pathlib import Path
from rich.console import Console
from rich.table import Table
from rich.panel import Panel
from typing import Any, Dict, Optional

from ..core.definitions import ConfigurationError, DefinitionStore
from ..core.priority import PriorityClassifier
from ..core.profiles import PROFILE_TYPE_REFS
from ..core.scorer import RuleScorer
from ..core.transitions import TransitionValidator

console = Console()

LABEL_COLORS = {"LOW": "dim", "MEDIUM": "blue", "HIGH": "yellow", "CRITICAL": "red"}


def get_store(definitions_path: Optional[str] = None) -> DefinitionStore:
    """Get definition store instance."""
    path = Path(definitions_path) if definitions_path else None
    try:
        return DefinitionStore(path)
    except ConfigurationError as e:
        raise click.ClickException(str(e))


def load_record(record_path: Optional[str]) -> Dict[str, Any]:
    """Read a record JSON object from a file."""
    if not record_path:
        return {}
    with open(record_path, 'r') as f:
        try:
            record = json.load(f)
        except json.JSONDecodeError as e:
            raise click.ClickException(f"Record file is not valid JSON: {e}")
    if not isinstance(record, dict):
        raise click.ClickException("Record file must contain a JSON object")
    return record


@click.group()
@click.version_option(version="1.0.0", prog_name="enquiry-engine")
def cli():
    """Enquiry Engine - priority scoring and status transition checks.

    \b
    Quick Start:
      enquiry-engine validate                             # Check definitions
      enquiry-engine score -r enquiry.json                # Classify an enquiry
      enquiry-engine transition New Qualified --role Sales -r enquiry.json
    """
    pass


@cli.command()
@click.option("--definitions", "-d", "definitions_path", help="Custom definitions file")
def validate(definitions_path: Optional[str]):
    """Validate the priority score and status type definitions."""
    store = get_store(definitions_path)

    console.print(Panel.fit(
        f"[green]✓ Definitions are valid[/green]\n\n"
        f"Location: [cyan]{store.data_path}[/cyan]\n\n"
        f"Priority score types: {len(store.tiers)} "
        f"([green]{len(store.active_tiers())} active[/green])\n"
        f"Status types:         {len(store.statuses)} "
        f"([green]{len(store.active_statuses())} active[/green])",
        title="Enquiry Engine"
    ))


@cli.command()
@click.option("--record", "-r", "record_path", type=click.Path(exists=True), required=True,
              help="JSON file with the enquiry fields")
@click.option("--explain", is_flag=True, help="Show matched rules for each tier")
@click.option("--definitions", "-d", "definitions_path", help="Custom definitions file")
def score(record_path: str, explain: bool, definitions_path: Optional[str]):
    """Classify an enquiry against the active priority score types."""
    store = get_store(definitions_path)
    record = load_record(record_path)
    tiers = store.active_tiers()

    if not tiers:
        console.print("[yellow]No active priority score types defined.[/yellow]")
        return

    classifier = PriorityClassifier()
    result = classifier.classify(record, tiers)
    matched_ids = {match.tier.id for match in result.all_matches}

    table = Table(title="Priority Scores")
    table.add_column("Name", style="cyan")
    table.add_column("Label", justify="center")
    table.add_column("Range", justify="center")
    table.add_column("Score", justify="right", style="bold")
    table.add_column("Match", justify="center")

    for scored in classifier.score_tiers(record, tiers):
        tier = scored.tier
        label_style = LABEL_COLORS.get(tier.display_label.value, "")
        if result.selected and result.selected.tier.id == tier.id:
            match_cell = "[green]selected[/green]"
        elif tier.id in matched_ids:
            match_cell = "yes"
        else:
            match_cell = "[dim]no[/dim]"
        table.add_row(
            tier.name,
            f"[{label_style}]{tier.display_label.value}[/{label_style}]",
            f"{tier.score_range.min} - {tier.score_range.max}",
            str(scored.score),
            match_cell,
        )

    console.print(table)

    if result.selected:
        console.print(
            f"Selected priority: [bold]{result.selected.tier.name}[/bold] "
            f"(total score {result.total_score})"
        )
    else:
        console.print("[yellow]No priority score type matched (total score 0)[/yellow]")

    if explain:
        scorer = RuleScorer()
        for tier in tiers:
            breakdown = scorer.explain(record, tier.scoring_rules)
            console.print(Panel(scorer.explain_score(breakdown), title=tier.name))


@cli.command()
@click.argument("current_status")
@click.argument("target_status")
@click.option("--role", "actor_role", help="Role of the acting user")
@click.option("--record", "-r", "record_path", type=click.Path(exists=True),
              help="JSON file with the record fields")
@click.option("--definitions", "-d", "definitions_path", help="Custom definitions file")
def transition(current_status: str, target_status: str, actor_role: Optional[str],
               record_path: Optional[str], definitions_path: Optional[str]):
    """Check whether a record may move from CURRENT_STATUS to TARGET_STATUS."""
    store = get_store(definitions_path)
    status = store.get_status(current_status)
    if status is None:
        raise click.ClickException(f"Status type not found: {current_status}")

    decision = TransitionValidator().can_transition(
        load_record(record_path), status, target_status, actor_role
    )

    if decision.allowed:
        console.print(f"[green]✓ {current_status} → {target_status} is permitted[/green]")
        return

    console.print(f"[red]✗ {current_status} → {target_status} denied[/red] ({decision.reason.value})")
    console.print(f"  {decision.message}")
    raise SystemExit(1)


@cli.command("transitions")
@click.argument("current_status")
@click.option("--role", "actor_role", help="Role of the acting user")
@click.option("--record", "-r", "record_path", type=click.Path(exists=True),
              help="JSON file with the record fields")
@click.option("--definitions", "-d", "definitions_path", help="Custom definitions file")
def list_transitions(current_status: str, actor_role: Optional[str],
                     record_path: Optional[str], definitions_path: Optional[str]):
    """List the statuses a record may move to from CURRENT_STATUS."""
    store = get_store(definitions_path)
    status = store.get_status(current_status)
    if status is None:
        raise click.ClickException(f"Status type not found: {current_status}")

    targets = TransitionValidator().available_transitions(
        load_record(record_path), status, actor_role
    )
    if not targets:
        console.print("[yellow]No transitions available.[/yellow]")
        return

    for target in targets:
        console.print(f"  • {target}")


@cli.command("toggle-tier")
@click.argument("tier_id")
@click.option("--definitions", "-d", "definitions_path", help="Custom definitions file")
def toggle_tier(tier_id: str, definitions_path: Optional[str]):
    """Activate or deactivate a priority score type."""
    store = get_store(definitions_path)
    try:
        tier = store.toggle_tier(tier_id)
    except KeyError as e:
        raise click.ClickException(str(e.args[0]))

    state = "[green]active[/green]" if tier.is_active else "[dim]inactive[/dim]"
    console.print(f"{tier.name} is now {state}")


@cli.command("profile-types")
def profile_types():
    """Show linkable profile kinds and their target collections."""
    table = Table(title="Profile Types")
    table.add_column("Kind", style="cyan")
    table.add_column("Reference")
    for kind, ref in PROFILE_TYPE_REFS.items():
        table.add_row(kind.value, ref)
    console.print(table)


if __name__ == "__main__":
    cli()
