"""CLI commands for ad-hoc entity resolution.

Usage:
    samlink resolve NAME [--state ST] [--domain DOMAIN] [--json]
    samlink search NAME [--state ST] [--limit N]
    samlink lookup UEI
"""

import asyncio
import json
import sys

import click

from ..api.deps import build_services
from ..ingestion.base import SamLinkError
from ..resolution.models import Matched, NoMatch, Pending, RegistryCandidate, ResolutionQuery


def _describe(entity: RegistryCandidate) -> str:
    location = ", ".join(p for p in (entity.address.city, entity.state_code) if p)
    text = f"{entity.legal_name} (UEI {entity.uei})"
    if entity.alternate_name:
        text += f" dba {entity.alternate_name}"
    if location:
        text += f" - {location}"
    return text


@click.command(name="resolve")
@click.argument("name")
@click.option("--state", type=str, default=None, help="Company state (e.g. CA)")
@click.option("--domain", type=str, default=None, help="Company website domain")
@click.option("--json", "as_json", is_flag=True, help="Print the outcome as JSON")
def resolve_company(name: str, state: str | None, domain: str | None, as_json: bool):
    """Resolve a company name to a SAM.gov entity.

    Examples:

        samlink resolve "Honeywell"

        samlink resolve "Acme Co" --state CA --domain acme.com
    """
    query = ResolutionQuery(subject_name=name, state_hint=state, domain_hint=domain)

    async def _resolve():
        services = build_services()
        try:
            return await services.resolver.resolve(query)
        finally:
            await services.close()

    try:
        outcome = asyncio.run(_resolve())
    except SamLinkError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if as_json:
        click.echo(json.dumps(outcome.model_dump(mode="json"), indent=2))
        return

    click.echo(f"\nResolution for {name!r}: ", nl=False)
    if isinstance(outcome, Matched):
        click.secho("matched", fg="green")
        click.echo(f"  {_describe(outcome.candidate)}")
        click.echo(f"  Score: {outcome.score:.2f}")
    elif isinstance(outcome, Pending):
        click.secho("needs review", fg="yellow")
        for scored in outcome.top_candidates:
            click.echo(f"  {scored.score:.2f}  {_describe(scored.candidate)}")
    elif isinstance(outcome, NoMatch):
        click.secho("no match", fg="red")
        for candidate in outcome.sample_raw:
            click.echo(f"  -     {_describe(candidate)}")


@click.command(name="search")
@click.argument("name")
@click.option("--state", type=str, default=None, help="Company state (e.g. CA)")
@click.option("--domain", type=str, default=None, help="Company website domain")
@click.option("--limit", type=int, default=10, help="Maximum matches to show")
def search(name: str, state: str | None, domain: str | None, limit: int):
    """List scored SAM.gov candidates for a name."""
    query = ResolutionQuery(subject_name=name, state_hint=state, domain_hint=domain)

    async def _search():
        services = build_services()
        try:
            return await services.resolver.search(query, limit=limit)
        finally:
            await services.close()

    try:
        matches = asyncio.run(_search())
    except SamLinkError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if not matches:
        click.echo("No matching entities found.")
        return

    click.echo(f"\nMatches for {name!r} ({len(matches)} found)")
    click.echo("=" * 70)
    for scored in matches:
        click.echo(f"  {scored.score:.2f}  {_describe(scored.candidate)}")


@click.command(name="lookup")
@click.argument("uei")
def lookup(uei: str):
    """Show a SAM.gov entity by UEI."""

    async def _lookup():
        services = build_services()
        try:
            return await services.registry.get_entity(uei)
        finally:
            await services.close()

    try:
        raw = asyncio.run(_lookup())
    except SamLinkError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if raw is None:
        click.echo(f"Entity not found: {uei}", err=True)
        sys.exit(1)

    entity = RegistryCandidate.from_sam_record(raw)
    click.echo(json.dumps(entity.model_dump(mode="json"), indent=2))
