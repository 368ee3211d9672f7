"""
Main CLI interface for the cost dashboard.

Runs the billing proxy, fetches provider summaries through it, and prints
spend reports over expense data.
"""

import asyncio
import json
import logging
import sys
from datetime import date, timedelta

import click
import uvicorn

from . import __version__
from .analytics.mock_data import generate_expenses, sample_expenses
from .analytics.models import FilterState
from .analytics.transformers import (
    allocation_csv,
    calculate_expenses_by_category,
    calculate_expenses_by_service,
    calculate_mom_change,
    calculate_unit_economics,
    filter_expenses,
    generate_cost_allocation_data,
    generate_trend_data,
)
from .clients.model_billing import MODEL_VENDORS
from .config.settings import get_config, reload_config
from .dashboard.data_manager import PROVIDERS, CostDataManager
from .utils.http_client import HTTPClient

# Set up logging
logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging based on verbosity settings."""
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)
    else:
        # Default behavior: suppress all logs except errors
        logging.getLogger().setLevel(logging.ERROR)

    # Configure SDK and HTTP loggers to reduce noise
    for logger_name in ["boto3", "botocore", "urllib3"]:
        logging.getLogger(logger_name).setLevel(logging.INFO if verbose else logging.ERROR)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging and debug output")
@click.pass_context
def cli(ctx, verbose):
    """Cost Dashboard - Track spend across cloud and AI providers."""
    setup_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["config"] = get_config()


@cli.command()
@click.option("--host", help="Bind address (default: server.host from config)")
@click.option("--port", type=int, help="Port (default: server.port from config)")
@click.option("--reload", "auto_reload", is_flag=True, help="Reload on code changes")
@click.pass_context
def serve(ctx, host, port, auto_reload):
    """Start the billing API proxy."""
    server = ctx.obj["config"].server
    host = host or server.get("host", "0.0.0.0")
    port = port or server.get("port", 3001)

    click.echo(f"Starting cost proxy at http://{host}:{port}")
    uvicorn.run(
        "costboard.api.proxy_service:app",
        host=host,
        port=port,
        reload=auto_reload,
        log_level="debug" if ctx.obj["verbose"] else "info",
    )


async def _fetch_provider(manager: CostDataManager, provider: str, options: dict):
    """Dispatch to the data manager fetch for a provider."""
    start, end = options["start_date"], options["end_date"]
    if provider == "aws":
        return await manager.fetch_aws(
            options["access_key_id"], options["secret_access_key"], options["region"], start, end
        )
    if provider == "openai":
        return await manager.fetch_openai(options["api_key"], start, end)
    if provider == "vercel":
        return await manager.fetch_vercel(options["api_key"], options["team_id"], start, end)
    if provider == "cursor":
        return await manager.fetch_cursor(options["api_key"], start, end)
    return await manager.fetch_model_billing(provider, options["api_key"], start, end)


@cli.command()
@click.argument("provider", type=click.Choice(PROVIDERS))
@click.option(
    "--start-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=str(date.today() - timedelta(days=7)),
    help="Start date for cost data (default: 7 days ago)",
)
@click.option(
    "--end-date",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=str(date.today()),
    help="End date for cost data (default: today)",
)
@click.option("--proxy-url", help="Cost proxy base URL (default: client.base_url from config)")
@click.option("--access-key-id", envvar="AWS_ACCESS_KEY_ID", help="AWS access key ID")
@click.option("--secret-access-key", envvar="AWS_SECRET_ACCESS_KEY", help="AWS secret key")
@click.option("--region", envvar="AWS_REGION", default="us-east-1", help="AWS region")
@click.option("--api-key", envvar="COSTBOARD_API_KEY", help="API key or token for the provider")
@click.option("--team-id", help="Vercel team ID")
@click.pass_context
def fetch(ctx, provider, start_date, end_date, proxy_url, **credentials):
    """Fetch a provider summary through the proxy and print it as JSON."""
    client_config = ctx.obj["config"].client
    http_client = HTTPClient(
        proxy_url or client_config.get("base_url", "http://localhost:3001"),
        timeout=client_config.get("timeout", 30),
    )
    manager = CostDataManager(http_client=http_client)
    options = {
        **credentials,
        "start_date": start_date.date().isoformat(),
        "end_date": end_date.date().isoformat(),
    }

    state = asyncio.run(_fetch_provider(manager, provider, options))
    if state.error:
        click.echo(f"❌ {provider} fetch failed: {state.error}", err=True)
        sys.exit(1)

    click.echo(state.data.model_dump_json(indent=2))


def _build_report(expenses, months: int) -> dict:
    """Aggregate a list of expenses into the report sections."""
    return {
        "expense_count": len(expenses),
        "total": round(sum(expense.amount for expense in expenses), 2),
        "mom_change": calculate_mom_change(expenses).model_dump(),
        "by_category": [item.model_dump() for item in calculate_expenses_by_category(expenses)],
        "top_services": [
            item.model_dump() for item in calculate_expenses_by_service(expenses)[:5]
        ],
        "trend": [item.model_dump() for item in generate_trend_data(expenses, months=months)],
        "unit_economics": calculate_unit_economics(expenses),
    }


def _display_report_table(report: dict):
    click.echo("Cost Report")
    click.echo("=" * 50)
    click.echo(f"Expenses: {report['expense_count']}")
    click.echo(f"Total Cost: ${report['total']:,.2f}")

    mom = report["mom_change"]
    click.echo(
        f"This month: ${mom['current_month']:,.2f}  Last month: ${mom['previous_month']:,.2f}  "
        f"Change: {mom['percentage_change']:+.2f}%"
    )

    click.echo("\nBy Category:")
    for item in report["by_category"]:
        click.echo(f"  {item['category_name']}: ${item['amount']:,.2f}")

    click.echo("\nTop Services:")
    for item in report["top_services"]:
        click.echo(f"  {item['service_name']}: ${item['amount']:,.2f}")

    click.echo("\nMonthly Trend:")
    for month in report["trend"]:
        click.echo(f"  {month['month']}: ${month['total']:,.2f}")

    click.echo("\nUnit Economics:")
    for metric_type, unit_cost in sorted(report["unit_economics"].items()):
        click.echo(f"  {metric_type}: ${unit_cost:.6f}")


@cli.command()
@click.option("--sample", is_flag=True, help="Use the fixed five-expense sample set")
@click.option("--count", type=int, help="Number of generated expenses")
@click.option("--seed", type=int, help="Seed for reproducible generated expenses")
@click.option("--search", default="", help="Only include expenses matching this text")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json", "csv"]),
    default="table",
    help="Output format (csv exports the cost allocation tree)",
)
@click.pass_context
def report(ctx, sample, count, seed, search, output_format):
    """Print a spend report over sample expense data."""
    sample_config = ctx.obj["config"].sample_data
    months = sample_config.get("months", 6)

    if sample:
        expenses = sample_expenses()
    else:
        expenses = generate_expenses(
            count=count if count is not None else sample_config.get("count", 500),
            seed=seed if seed is not None else sample_config.get("seed"),
        )

    if search:
        # The fixed sample set predates the default window, so only the search applies
        filters = FilterState().with_search_query(search)
        if sample:
            filters = filters.with_date_range(
                min(e.timestamp for e in expenses), max(e.timestamp for e in expenses)
            )
        expenses = filter_expenses(expenses, filters)

    if output_format == "csv":
        click.echo(allocation_csv(generate_cost_allocation_data(expenses)), nl=False)
        return

    data = _build_report(expenses, months)
    if output_format == "json":
        click.echo(json.dumps(data, indent=2))
    else:
        _display_report_table(data)


@cli.command()
@click.pass_context
def config_info(ctx):
    """Display current configuration information."""
    config = ctx.obj["config"]

    click.echo("Cost Dashboard Configuration")
    click.echo("=" * 40)
    click.echo(f"Proxy: {config.server.get('host')}:{config.server.get('port')}")
    click.echo(f"Client base URL: {config.client.get('base_url')}")

    click.echo("\nProviders:")
    for provider in PROVIDERS:
        provider_config = config.get_provider_config(provider)
        base_url = provider_config.get("base_url", "built-in")
        click.echo(f"  {provider.upper()}: {base_url}")

    click.echo(f"\nModel vendors: {', '.join(MODEL_VENDORS)}")


@cli.command()
@click.confirmation_option(prompt="Are you sure you want to reload configuration?")
@click.pass_context
def reload(ctx):
    """Reload configuration from files."""
    config = reload_config()
    ctx.obj["config"] = config
    click.echo("✅ Configuration reloaded successfully")


@cli.command()
def version():
    """Display version information."""
    click.echo(f"Cost Dashboard v{__version__}")
    click.echo("Track spend across AWS, OpenAI, Vercel, Cursor, Anthropic, Cohere and Gemini")


if __name__ == "__main__":
    cli()
