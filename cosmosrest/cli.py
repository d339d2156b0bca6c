"""
cosmosrest Command-Line Interface

Inspect resource links and run reads and queries against a Cosmos DB account.

Author: cosmosrest contributors
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
from pydantic import BaseModel, ValidationError

from cosmosrest import __version__
from cosmosrest.client import Client
from cosmosrest.core.config_manager import ConfigManager
from cosmosrest.core.logging_config import configure_logging, setup_logging
from cosmosrest.exceptions import CosmosError
from cosmosrest.request.links import parse_link
from cosmosrest.request.options import (
    continuation as continuation_option,
    enable_populate_query_metrics,
    limit as limit_option,
    partition_key as partition_key_option,
)

logger = logging.getLogger("cosmosrest.cli")


@click.group()
@click.version_option(version=__version__, prog_name="cosmosrest")
@click.option(
    "--config",
    "-c",
    "config_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (YAML or JSON)",
)
@click.option("--endpoint", help="Account endpoint, e.g. https://acct.documents.azure.com")
@click.option(
    "--master-key",
    envvar="COSMOSREST_MASTER_KEY",
    help="Base64-encoded master key (or set COSMOSREST_MASTER_KEY)",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    help="Logging level [default: from config, else WARNING]",
)
@click.option("--debug", is_flag=True, help="Log every request and its curl equivalent")
@click.pass_context
def cli(
    ctx,
    config_file: Optional[Path],
    endpoint: Optional[str],
    master_key: Optional[str],
    log_level: Optional[str],
    debug: bool
):
    """
    cosmosrest - Cosmos DB REST client

    Read and query databases, collections and documents from the shell.
    """
    ctx.ensure_object(dict)
    setup_logging((log_level or "WARNING").upper(), format_type="text")

    overrides: Dict[str, Any] = {}
    if endpoint:
        overrides["endpoint"] = endpoint
    if master_key:
        overrides["master_key"] = master_key
    if debug:
        overrides["debug"] = True
    if log_level:
        overrides["logging"] = {"level": log_level.upper()}

    ctx.obj["config_file"] = str(config_file) if config_file else None
    ctx.obj["overrides"] = overrides


def _open_client(ctx) -> Client:
    """Load configuration and build a client; exits on invalid configuration."""
    try:
        config = ConfigManager().load(
            config_file=ctx.obj.get("config_file"),
            cli_overrides=ctx.obj.get("overrides"),
        )
        configure_logging(config.logging)
    except (ValidationError, ValueError, FileNotFoundError) as e:
        click.echo(f"[ERROR] Invalid configuration: {e}", err=True)
        sys.exit(1)

    if not config.endpoint or not config.master_key:
        click.echo("[ERROR] An endpoint and a master key are required", err=True)
        sys.exit(1)

    return Client(config, transport=ctx.obj.get("transport"))


def _echo_json(data: Any) -> None:
    if isinstance(data, BaseModel):
        data = data.model_dump(by_alias=True)
    click.echo(json.dumps(data, indent=2, default=str))


@cli.command("parse-link")
@click.argument("link")
def parse_link_command(link: str):
    """
    Show how a resource link is signed.

    Examples:
        cosmosrest parse-link dbs/db1/colls/c1/docs/doc1
        cosmosrest parse-link dbs/b5NCAA==/
    """
    resource = parse_link(link)
    click.echo(f"Link: {resource.link}")
    click.echo(f"Id:   {resource.resource_id}")
    click.echo(f"Type: {resource.resource_type}")


@cli.command()
@click.pass_context
def databases(ctx):
    """List the databases of the account."""
    with _open_client(ctx) as client:
        try:
            response = client.read("dbs", target=Any)
        except CosmosError as e:
            click.echo(f"[ERROR] Failed to list databases: {e}", err=True)
            sys.exit(1)

    for database in response.data.get("Databases", []):
        click.echo(database.get("id", ""))


@cli.command()
@click.argument("link")
@click.option("--partition-key", help="Partition key value of the resource")
@click.pass_context
def read(ctx, link: str, partition_key: Optional[str]):
    """
    Read a resource by link and print it as JSON.

    Example:
        cosmosrest read dbs/db1/colls/c1/docs/doc1 --partition-key user1
    """
    opts = [partition_key_option(partition_key)] if partition_key else None
    with _open_client(ctx) as client:
        try:
            response = client.read(link, target=Any, opts=opts)
        except CosmosError as e:
            click.echo(f"[ERROR] Failed to read {link}: {e}", err=True)
            sys.exit(1)

    _echo_json(response.data)


@cli.command()
@click.argument("link")
@click.argument("sql")
@click.option("--limit", type=int, help="Max items per page")
@click.option("--continuation", help="Continuation token from a previous page")
@click.option("--partition-key", help="Restrict the query to one partition")
@click.option("--metrics", is_flag=True, help="Print query execution metrics")
@click.pass_context
def query(
    ctx,
    link: str,
    sql: str,
    limit: Optional[int],
    continuation: Optional[str],
    partition_key: Optional[str],
    metrics: bool
):
    """
    Run a SQL query against a feed and print one page of results.

    Examples:
        cosmosrest query dbs/db1/colls/c1/docs/ "SELECT * FROM root"
        cosmosrest query dbs/db1/colls/c1/docs/ "SELECT * FROM root" --limit 10 --metrics
    """
    opts = []
    if limit:
        opts.append(limit_option(limit))
    if continuation:
        opts.append(continuation_option(continuation))
    if partition_key:
        opts.append(partition_key_option(partition_key))
    if metrics:
        opts.append(enable_populate_query_metrics())

    with _open_client(ctx) as client:
        try:
            response = client.query(link, sql, target=Any, opts=opts)
            query_metrics = response.query_metrics() if metrics else None
        except CosmosError as e:
            click.echo(f"[ERROR] Query failed: {e}", err=True)
            sys.exit(1)

    _echo_json(response.data)

    if response.continuation():
        click.echo(f"Continuation: {response.continuation()}", err=True)
    if query_metrics is not None:
        click.echo("Metrics:", err=True)
        for name, value in query_metrics.model_dump().items():
            click.echo(f"  {name}: {value}", err=True)


def main():
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
