#!/usr/bin/env python3
"""
CRM Insights CLI - Command-line interface for the tool.
"""

import asyncio
import calendar
import sys
from datetime import date

import click

from . import __version__
from .analyzer import InsightAnalyzer
from .config import Settings, configure_logging, load_settings
from .crm_client import AsyncCrmClient
from .filters import build_filter_options
from .formatters import (
    format_analysis_summary,
    format_config_status,
    format_filter_options,
    format_sentiment_report,
)
from .models import ALL, AnalysisStatus, FilterCriteria
from .sources import AccountSource, JsonFileAccountSource, StaticAccountSource, load_sample_accounts


def default_start_date() -> date:
    """Three months before today."""
    today = date.today()
    month = today.month - 3
    year = today.year
    if month < 1:
        month += 12
        year -= 1
    # Clamp to the last day of the month, e.g. May 31 -> Feb 28
    return date(year, month, min(today.day, calendar.monthrange(year, month)[1]))


def select_source(settings: Settings, data_file) -> AccountSource:
    """Pick the data source: explicit file, configured feed, then sample data."""
    if data_file:
        return JsonFileAccountSource(data_file)
    if settings.crm_feed_url:
        return AsyncCrmClient(settings)
    click.echo("ℹ️  No CRM feed configured - using sample data (demo mode)")
    return StaticAccountSource(load_sample_accounts())


def _load_settings_or_exit() -> Settings:
    try:
        settings = load_settings()
    except Exception as e:
        click.echo(f"\n❌ Error loading settings: {e}", err=True)
        click.echo("\nMake sure .env file is configured correctly.")
        sys.exit(1)
    configure_logging(settings.log_level)
    return settings


@click.group()
@click.version_option(version=__version__, prog_name="crm-insights")
def cli():
    """
    CRM Insights - Strategic Q&A over CRM account activity

    Filter notes, emails and meeting transcripts, ask a question, and get an
    evidence-backed answer alongside meeting sentiment.
    """
    pass


@cli.command()
@click.argument("question")
@click.option("--team", default=ALL, show_default=True, help="Sales team")
@click.option("--ae", default=ALL, show_default=True, help="Account executive")
@click.option("--tier", default=ALL, show_default=True, help="Account tier (1-5)")
@click.option("--segment", default=ALL, show_default=True, help="Market segment")
@click.option(
    "--start",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Window start, YYYY-MM-DD (default: three months ago)",
)
@click.option(
    "--end",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    help="Window end, YYYY-MM-DD (default: today)",
)
@click.option(
    "--data-file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file of accounts to analyze instead of the CRM feed",
)
def analyze(question, team, ae, tier, segment, start, end, data_file):
    """
    Ask a strategic question about filtered CRM activity.

    The answer streams to the terminal as it is generated, followed by the
    sentiment of any meeting transcripts in scope.

    Examples:
        crm-insights analyze "What are the most common problems prospects are trying to solve?"
        crm-insights analyze "Why do we lose deals?" --team Giants --tier 1
        crm-insights analyze "What competitors come up?" --start 2024-07-01 --end 2024-07-31
    """
    settings = _load_settings_or_exit()

    criteria = FilterCriteria(
        team=team,
        ae=ae,
        tier=tier,
        segment=segment,
        start_date=start.date() if start else default_start_date(),
        end_date=end.date() if end else date.today(),
    )

    click.echo("\n" + "=" * 70)
    click.echo("CRM Insights - Analysis")
    click.echo("=" * 70)
    click.echo(f"\n❓ {question}")
    click.echo(
        f"🔎 Team: {criteria.team} | AE: {criteria.ae} | Tier: {criteria.tier} "
        f"| Segment: {criteria.segment}"
    )
    click.echo(f"📅 {criteria.start_date.isoformat()} → {criteria.end_date.isoformat()}\n")

    try:
        result = asyncio.run(run_analysis(settings, criteria, question, data_file))
    except Exception as e:
        click.echo(f"\n❌ Error during analysis: {e}", err=True)
        sys.exit(1)

    if result.status == AnalysisStatus.FAILED:
        click.echo(result.insight)

    click.echo("\n")
    click.echo(format_analysis_summary(result))
    click.echo(format_sentiment_report(result.sentiment))

    if result.status == AnalysisStatus.FAILED:
        sys.exit(1)


async def run_analysis(settings, criteria, question, data_file):
    """Run the async analysis, streaming the insight to stdout."""
    source = select_source(settings, data_file)
    analyzer = InsightAnalyzer(settings)
    try:
        return await analyzer.analyze_from_source(
            source,
            criteria,
            question,
            on_fragment=lambda fragment: click.echo(fragment, nl=False),
        )
    finally:
        await source.close()


@cli.command()
@click.option(
    "--data-file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file of accounts instead of the CRM feed",
)
def filters(data_file):
    """
    Show the filter values available in the data.

    Examples:
        crm-insights filters
        crm-insights filters --data-file accounts.json
    """
    settings = _load_settings_or_exit()

    async def fetch():
        source = select_source(settings, data_file)
        try:
            return await source.fetch_accounts()
        finally:
            await source.close()

    try:
        accounts = asyncio.run(fetch())
    except Exception as e:
        click.echo(f"\n❌ Error fetching accounts: {e}", err=True)
        sys.exit(1)

    click.echo(f"\n📋 {len(accounts)} account(s)")
    click.echo(format_filter_options(build_filter_options(accounts)))


@cli.command()
def ping():
    """
    Check configuration and whether the CRM feed is reachable.

    Examples:
        crm-insights ping
    """
    settings = _load_settings_or_exit()

    click.echo("\n⚙️  Configuration")
    click.echo(format_config_status(settings))

    if not settings.crm_feed_url:
        return

    async def probe():
        async with AsyncCrmClient(settings) as client:
            return await client.ping()

    if asyncio.run(probe()):
        click.echo("\n✅ CRM feed reachable")
    else:
        click.echo(
            f"\n❌ CRM feed not responding within {settings.probe_timeout:.0f}s "
            f"at {settings.crm_feed_url}",
            err=True,
        )
        sys.exit(1)


if __name__ == "__main__":
    cli()
