"""CLI entry point: worksheetweb.

Subcommands:
    worksheetweb serve            # run the API with uvicorn
    worksheetweb init-db          # create tables that do not exist yet
    worksheetweb seed             # insert sample worksheets into an empty table
"""

from __future__ import annotations

import asyncio
import os

import click
from dotenv import load_dotenv

from worksheetweb.core.database import create_engine, create_session_factory, init_schema
from worksheetweb.core.logging import LOG_FORMATS, setup_logging

_DEFAULT_HOST = "0.0.0.0"
_DEFAULT_PORT = 3001


async def _init_db(database_url: str | None) -> None:
    engine = create_engine(database_url)
    try:
        await init_schema(engine)
    finally:
        await engine.dispose()


async def _seed(database_url: str | None) -> int:
    from worksheetweb.api.deps import get_worksheet_service

    engine = create_engine(database_url)
    try:
        await init_schema(engine)
        factory = create_session_factory(engine)
        async with factory() as session:
            async with session.begin():
                return await get_worksheet_service().seed_sample_data(session)
    finally:
        await engine.dispose()


@click.group()
@click.option("--env-file", default=".env", help="dotenv file to load before running")
@click.option("--log-level", default=None, help="Override WORKSHEETWEB_LOG_LEVEL")
@click.option("--log-format", default=None, type=click.Choice(LOG_FORMATS))
def main(env_file: str, log_level: str | None, log_format: str | None) -> None:
    """WorksheetWeb backend."""
    load_dotenv(env_file)
    # exported so the uvicorn app factory configures logging the same way
    if log_level:
        os.environ["WORKSHEETWEB_LOG_LEVEL"] = log_level
    if log_format:
        os.environ["WORKSHEETWEB_LOG_FORMAT"] = log_format
    setup_logging()


@main.command("serve")
@click.option("--host", default=None, help=f"Bind address (default {_DEFAULT_HOST})")
@click.option("--port", default=None, type=int, help=f"Port (default {_DEFAULT_PORT})")
@click.option("--reload", is_flag=True, help="Reload on code changes")
def serve(host: str | None, port: int | None, reload: bool) -> None:
    """Run the HTTP API."""
    import uvicorn

    host = host or os.environ.get("WORKSHEETWEB_HOST", _DEFAULT_HOST)
    port = port or int(os.environ.get("WORKSHEETWEB_PORT", _DEFAULT_PORT))
    click.echo(f"Server running on port {port}")
    click.echo(f"API documentation: http://localhost:{port}/api/docs")
    uvicorn.run(
        "worksheetweb.api:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_config=None,
    )


@main.command("init-db")
@click.option("--database-url", default=None, help="Override WORKSHEETWEB_DATABASE_URL")
def init_db(database_url: str | None) -> None:
    """Create database tables."""
    asyncio.run(_init_db(database_url))
    click.echo("Database tables initialised")


@main.command("seed")
@click.option("--database-url", default=None, help="Override WORKSHEETWEB_DATABASE_URL")
def seed(database_url: str | None) -> None:
    """Insert sample worksheets if none exist."""
    inserted = asyncio.run(_seed(database_url))
    if inserted:
        click.echo(f"Seeded {inserted} sample worksheets")
    else:
        click.echo("Worksheets already present, nothing seeded")
