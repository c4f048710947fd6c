"""Main CLI entry point for the video ingestion service"""

import sys
import click
from dotenv import load_dotenv

# Load .env
load_dotenv()

from .database import StoreInitializationError
from .scrapers import SOURCES
from .services import AnalysisConfigurationError, RunService, build_store
from .services.run_service import resolve_sources
from .utils import load_config
from .utils.logger import get_logger

logger = get_logger(__name__, service_name="cli")

source_option = click.option(
    "--source",
    "sources",
    multiple=True,
    type=click.Choice(SOURCES),
    help="Source to ingest (repeatable, default: all configured sources)",
)


def _open_store(config):
    try:
        return build_store(config)
    except StoreInitializationError as e:
        logger.error(f"Store initialization failed: {e}")
        click.echo(f"Store initialization failed: {e}", err=True)
        sys.exit(1)


def _run_submission(config, batch_size):
    with _open_store(config) as store:
        try:
            result = RunService(config, store).submit(batch_size)
        except AnalysisConfigurationError as e:
            logger.error(f"Analysis submission not configured: {e}")
            click.echo(f"Analysis submission not configured: {e}", err=True)
            sys.exit(1)
    click.echo(repr(result))


def _run_ingestion(config, sources, limit) -> bool:
    """Ingest sources synchronously; False if any source failed to authenticate"""
    with _open_store(config) as store:
        service = RunService(config, store)
        results, auth_failures = service.ingest(sources, limit)

    for result in results:
        click.echo(repr(result))
    for source in auth_failures:
        click.echo(f"Authentication failed for {source}", err=True)
    return not auth_failures


@click.group()
def cli():
    """Video Ingestion Service CLI"""
    pass


@cli.command()
@source_option
@click.option("--limit", type=int, default=None, help="Candidates to list per source")
@click.option("--async-mode", is_flag=True, help="Run via Celery workers")
def ingest(sources, limit, async_mode):
    """Ingest recent videos from the sources"""
    config = load_config()

    if async_mode:
        from .workers.tasks import ingest_source_task
        for source in resolve_sources(config, sources):
            ingest_source_task.delay(source, limit)
            click.echo(f"Dispatched ingestion task for {source}.")
        return

    if not _run_ingestion(config, sources, limit):
        sys.exit(1)


@cli.command()
@click.option("--batch-size", type=int, default=None, help="Videos to submit in this run")
@click.option("--async-mode", is_flag=True, help="Run via Celery workers")
def submit(batch_size, async_mode):
    """Submit stored videos without an analysis id"""
    if async_mode:
        from .workers.tasks import submit_analyses_task
        submit_analyses_task.delay(batch_size=batch_size)
        click.echo("Dispatched analysis submission task.")
        return

    _run_submission(load_config(), batch_size)


@cli.command()
@source_option
@click.option("--limit", type=int, default=None, help="Candidates to list per source")
@click.option("--batch-size", type=int, default=None, help="Videos to submit after ingestion")
@click.option("--async-mode", is_flag=True, help="Run sources in parallel on Celery workers")
def run(sources, limit, batch_size, async_mode):
    """Ingest all sources, then submit pending videos"""
    config = load_config()

    if async_mode:
        from celery import chord
        from .workers.tasks import ingest_source_task, submit_analyses_task
        names = resolve_sources(config, sources)
        chord(
            ingest_source_task.s(source, limit) for source in names
        )(submit_analyses_task.s(batch_size=batch_size))
        click.echo(f"Dispatched ingestion for {len(names)} sources followed by submission.")
        return

    authenticated = _run_ingestion(config, sources, limit)
    _run_submission(config, batch_size)

    if not authenticated:
        sys.exit(1)


@cli.command(name="sources")
def list_sources():
    """List the registered sources"""
    for name in SOURCES:
        click.echo(name)


if __name__ == "__main__":
    cli()
