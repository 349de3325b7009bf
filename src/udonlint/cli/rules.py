"""udonlint rules - list the rule catalog."""

import json

import click
from rich.table import Table

from udonlint.core.progress import get_console
from udonlint.engine.formatting import diagnostic_id
from udonlint.rules import RuleCategory, registry

_CATEGORY_TITLES = {
    RuleCategory.LANGUAGE: "Language features",
    RuleCategory.API: "APIs and attributes",
    RuleCategory.SEMANTIC: "Cross-file analysis",
}


@click.command()
@click.option("--json", "as_json", is_flag=True, help="Output as JSON")
def rules_command(as_json: bool) -> None:
    """List every lint rule, grouped by category."""
    if as_json:
        click.echo(
            json.dumps(
                [
                    {
                        "id": diagnostic_id(rule.code),
                        "code": int(rule.code),
                        "name": rule.name,
                        "family": rule.family.value,
                        "category": rule.category.value,
                        "severity": rule.severity.value,
                        "summary": rule.summary,
                    }
                    for rule in registry.all()
                ],
                indent=2,
            )
        )
        return

    console = get_console()
    for category in RuleCategory:
        table = Table(title=_CATEGORY_TITLES[category], title_justify="left", show_edge=False)
        table.add_column("Code", style="cyan", no_wrap=True)
        table.add_column("Rule")
        table.add_column("Severity")
        table.add_column("Description")
        for rule in registry.for_category(category):
            severity = "[yellow]warning[/yellow]" if rule.severity.value == "warning" else "error"
            table.add_row(diagnostic_id(rule.code), rule.name, severity, rule.summary)
        console.print(table)
        console.print()
