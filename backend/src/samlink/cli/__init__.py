"""CLI entry points for samlink.

Provides command-line tools for:
- Resolving company names to SAM.gov entities
- Looking up entities by UEI
- Inspecting the effective configuration
"""

import click

from ..config import get_settings
from ..logging import setup_logging
from .resolve import lookup, resolve_company, search


@click.group()
@click.version_option(version="0.1.0", prog_name="samlink")
def main():
    """samlink - CRM company to SAM.gov entity resolution."""
    setup_logging()


@main.command(name="config")
def show_config():
    """Show resolution settings (secrets are not printed)."""
    settings = get_settings()
    for key in (
        "environment",
        "sam_api_base",
        "auto_link_threshold",
        "relevance_floor",
        "location_bonus",
        "max_review_candidates",
        "cache_ttl_seconds",
        "dedup_window_seconds",
        "strategy_delay_seconds",
        "rate_limit_retry_delay_seconds",
    ):
        click.echo(f"{key}: {getattr(settings, key)}")
    click.echo(f"sam_api_key: {'set' if settings.sam_api_key else 'not set'}")


main.add_command(resolve_company)
main.add_command(search)
main.add_command(lookup)


if __name__ == "__main__":
    main()
