"""CLI entry point for trust-protocol.

Invoked as::

    trust-protocol [OPTIONS] COMMAND [ARGS]...

or, during development::

    python -m trust_protocol.cli.main

Commands
--------
verify-chain       Verify the hash chain of an exported TSP-1.0 snapshot
verify-credential  Verify a trust credential's hash and expiry
check-policy       Evaluate a policy against a snapshot's latest record
version            Show version information

All commands only read the files they are given.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

if TYPE_CHECKING:
    from trust_protocol.profile import TrustProfile

console = Console()


# ------------------------------------------------------------------
# Root group
# ------------------------------------------------------------------


@click.group()
@click.version_option(package_name="trust-protocol")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    show_default=True,
    help="Logging verbosity.",
)
def cli(log_level: str) -> None:
    """Audit trust profile snapshots, credentials, and policies offline."""
    logging.basicConfig(level=getattr(logging, log_level.upper()))


@cli.command(name="version")
def version_command() -> None:
    """Show detailed version information."""
    from trust_protocol import SCHEMA, __version__

    console.print(f"[bold]trust-protocol[/bold] v{__version__} (schema {SCHEMA})")


# ------------------------------------------------------------------
# verify-chain
# ------------------------------------------------------------------


@cli.command(name="verify-chain")
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
def verify_chain_command(snapshot: str) -> None:
    """Verify the record history of the TSP-1.0 SNAPSHOT file."""
    profile = _load_profile(snapshot)
    result = profile.verify()

    history = profile.get_history()
    table = Table(title=f"History: {profile.entity_id}", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Record", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Level")
    table.add_column("Generated")
    table.add_column("Hash")

    for index, record in enumerate(history):
        bad = result.first_invalid_index is not None and index >= result.first_invalid_index
        table.add_row(
            str(index),
            record.id,
            f"{record.overall_score:.4f}",
            record.level.label,
            record.generated_at.isoformat(),
            f"[red]{record.hash[:12]}[/red]" if bad else record.hash[:12],
        )

    if history:
        console.print(table)
    console.print(f"\n  Records checked: [bold]{result.records_checked}[/bold]")

    if result.valid:
        console.print("  [green]PASS[/green]  Hash chain is intact.")
    else:
        console.print(
            f"  [red]FAIL[/red]  Hash chain broken at record {result.first_invalid_index}."
        )
        sys.exit(1)


# ------------------------------------------------------------------
# verify-credential
# ------------------------------------------------------------------


@cli.command(name="verify-credential")
@click.argument("credential_file", type=click.Path(exists=True, dir_okay=False))
def verify_credential_command(credential_file: str) -> None:
    """Verify the hash and expiry of CREDENTIAL_FILE."""
    from trust_protocol.credentials import TrustCredential

    try:
        credential = TrustCredential.from_json(
            Path(credential_file).read_text(encoding="utf-8")
        )
    except ValueError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)

    issues: list[str] = []
    passed: list[str] = []

    if credential.verify():
        passed.append("Verification hash matches credential content.")
    else:
        issues.append("Verification hash does not match; credential was altered.")

    if credential.is_expired():
        issues.append(f"Credential expired at {credential.valid_until.isoformat()}.")
    else:
        passed.append(f"Credential valid until {credential.valid_until.isoformat()}.")

    console.print(f"  Entity:  [bold]{credential.entity_id}[/bold]")
    console.print(f"  Issuer:  {credential.issuer_id}")
    console.print(f"  Score:   {credential.overall_score:.4f} ({credential.level.label})")
    for item in passed:
        console.print(f"  [green]PASS[/green]  {item}")
    for item in issues:
        console.print(f"  [red]FAIL[/red]  {item}")

    if issues:
        sys.exit(1)


# ------------------------------------------------------------------
# check-policy
# ------------------------------------------------------------------


@cli.command(name="check-policy")
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False))
@click.argument("policy_file", type=click.Path(exists=True, dir_okay=False))
def check_policy_command(snapshot: str, policy_file: str) -> None:
    """Evaluate the policy in POLICY_FILE against SNAPSHOT's latest record."""
    from pydantic import ValidationError

    from trust_protocol.trust.policy import TrustPolicy

    profile = _load_profile(snapshot)
    try:
        policy = TrustPolicy.model_validate_json(
            Path(policy_file).read_text(encoding="utf-8")
        )
    except ValidationError as exc:
        console.print(f"[red]Error:[/red] invalid policy file: {escape(str(exc))}")
        sys.exit(1)

    check = profile.check_policy(policy)

    if check.passed:
        console.print(
            f"[green]Policy {policy.name or policy.id!r} passed[/green] "
            f"for {profile.entity_id}."
        )
        return

    table = Table(title=f"Unmet requirements: {policy.name or policy.id}", show_header=True)
    table.add_column("Requirement", style="cyan")
    table.add_column("Dimension")
    table.add_column("Required", justify="right")
    table.add_column("Actual", justify="right")
    for failure in check.failures:
        table.add_row(
            failure.category.value,
            failure.dimension.value,
            f"{failure.required:.4f}",
            f"{failure.actual:.4f}",
        )
    if check.failures:
        console.print(table)
    console.print(f"[red]Policy {policy.name or policy.id!r} failed[/red] for {profile.entity_id}.")
    sys.exit(1)


# ------------------------------------------------------------------
# Helpers
# ------------------------------------------------------------------


def _load_profile(snapshot: str) -> "TrustProfile":
    """Load a TrustProfile from a snapshot file, exiting 1 if it is rejected."""
    from trust_protocol.errors import TrustProtocolError
    from trust_protocol.profile import TrustProfile

    try:
        return TrustProfile.from_json(Path(snapshot).read_text(encoding="utf-8"))
    except TrustProtocolError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
