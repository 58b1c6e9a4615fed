"""CLI output formatting helpers."""

from typing import Any

import click
import yaml

from .provision import RunReport
from .verify import CheckResult, Section, VerificationReport

RULE = "=" * 46


def print_banner(title: str) -> None:
    click.echo(RULE)
    click.echo(title)
    click.echo(RULE)
    click.echo("")


def print_section_header(section: Section) -> None:
    click.echo(section.title)
    click.echo(RULE)


def print_check_result(result: CheckResult) -> None:
    """Print one ``Testing: ... PASSED/FAILED`` line."""
    click.echo(f"Testing: {result.description}... ", nl=False)
    if result.passed:
        click.secho("✓ PASSED", fg="green")
    else:
        click.secho("✗ FAILED", fg="red")


def print_verification_summary(report: VerificationReport) -> None:
    """Print pass count and, on success, the next steps."""
    click.echo("")
    click.echo(RULE)
    click.echo(f"Results: {report.passed}/{report.total} passed")
    click.echo(RULE)

    if report.ok:
        click.secho("✓ All tests passed!", fg="green")
        click.echo("")
        click.echo("Next steps:")
        click.echo("  1. tailspace install-local")
        click.echo("  2. Verify tools: command -v kubectl kind starship nvim docker")
        click.echo("")
    else:
        click.secho("✗ Some tests failed", fg="red")


def print_run_summary(report: RunReport) -> None:
    """Print per-phase outcomes of a provisioning run.

    Args:
        report: Report returned by the provisioner
    """
    click.echo("")
    click.echo("Provisioning summary:")
    for entry in report.entries:
        mark = "✓" if entry.ok else "✗"
        line = f"  {mark} [{entry.phase}] {entry.name}: {entry.outcome}"
        if entry.detail and not entry.ok:
            line = f"{line} ({entry.detail})"
        click.echo(line)

    counts = ", ".join(f"{outcome}={n}" for outcome, n in sorted(report.counts().items()))
    click.echo(f"\n  {counts}")


def print_config(values: dict[str, Any], sources: dict[str, str]) -> None:
    """Print resolved settings as YAML with their sources.

    Args:
        values: Setting values
        sources: Where each value came from
    """
    click.echo("Tailspace Provisioning Configuration\n")
    for key, value in values.items():
        rendered = yaml.safe_dump({key: value}, default_flow_style=True).strip().strip("{}")
        click.echo(f"  {rendered}  # {sources.get(key, 'default')}")
