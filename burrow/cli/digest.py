"""CLI commands for the burrow digest."""

import logging
import sys
import tempfile
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import click
import structlog

from burrow import __version__
from burrow.aggregator.metrics import AggregatorMetrics
from burrow.config.loader import (
    ConfigValidationError,
    increment_edition,
    load_config,
    resolve_config_path,
)
from burrow.config.schemas import BurrowConfig
from burrow.context import FetchContext
from burrow.fetch.client import HttpFetcher
from burrow.mailer import DeliveryError, ResendMailer
from burrow.observability.logging import bind_run_context, configure_logging
from burrow.pipeline import build_sources, collect
from burrow.renderer.models import RenderedDigest
from burrow.renderer.renderer import DigestRenderer
from burrow.settings.app import get_settings


logger = structlog.get_logger()

COMPONENT_CLI = "cli"


@dataclass
class RunOptions:
    """Options for the run command."""

    config_path: Path
    timeout_seconds: float
    json_logs: bool
    verbose: bool
    preview: bool = False
    test: bool = False


def _setup_logging_and_context(
    options: RunOptions, run_id: str
) -> structlog.typing.FilteringBoundLogger:
    """Set up logging and return bound logger.

    Args:
        options: Run options.
        run_id: Unique run identifier.

    Returns:
        Bound logger with run context.
    """
    log_level = logging.DEBUG if options.verbose else logging.INFO
    configure_logging(level=log_level, json_format=options.json_logs)
    bind_run_context(run_id)

    log = logger.bind(component=COMPONENT_CLI, command="run")
    log.info(
        "digest_run_started",
        config_path=str(options.config_path),
        timeout_seconds=options.timeout_seconds,
        preview=options.preview,
        test=options.test,
    )
    return log


def _load_configuration(config_path: Path) -> BurrowConfig:
    """Load configuration, exiting with a message on failure.

    Args:
        config_path: Path to config.yaml.

    Returns:
        Validated configuration.
    """
    try:
        return load_config(config_path)
    except ConfigValidationError as e:
        click.echo(f"Configuration validation failed: {e.file_path}", err=True)
        for error in e.errors:
            click.echo(f"  - {error['loc']}: {error['msg']}", err=True)
        sys.exit(1)
    except FileNotFoundError:
        click.echo(f"Error: Configuration file not found: {config_path}", err=True)
        sys.exit(1)


def _load_header_image(
    path: str | None, log: structlog.typing.FilteringBoundLogger
) -> bytes | None:
    try:
        return ResendMailer.load_header_image(path)
    except OSError as e:
        log.warning("header_image_unreadable", path=path, error=str(e))
        return None


def _write_preview(digest: RenderedDigest) -> Path:
    """Write the HTML body to a temp file for browser preview."""
    with tempfile.NamedTemporaryFile(
        "w",
        prefix="burrow-digest-",
        suffix=".html",
        delete=False,
        encoding="utf-8",
    ) as f:
        f.write(digest.html)
    return Path(f.name)


def _deliver(  # noqa: PLR0913
    options: RunOptions,
    config: BurrowConfig,
    config_path: Path,
    digest: RenderedDigest,
    header_image: bytes | None,
    now: datetime,
    log: structlog.typing.FilteringBoundLogger,
) -> None:
    """Send the digest and advance the edition counter.

    Test sends go to ``email.test_to`` and leave the counter alone.
    """
    recipient = config.email.test_to if options.test else config.email.to
    if not recipient:
        click.echo("Error: No recipient configured for this run", err=True)
        sys.exit(1)

    with ResendMailer(
        sender=config.email.from_address,
        recipient=recipient,
        api_key=config.email.resend_api_key,
        header_image=header_image,
    ) as mailer:
        try:
            message_id = mailer.send(digest, now)
        except DeliveryError as e:
            log.error("digest_send_failed", error=e.message, status_code=e.status_code)
            click.echo(f"Error: {e.message}", err=True)
            sys.exit(1)

    log.info("digest_delivered", recipient=recipient, message_id=message_id)
    if options.test:
        return

    try:
        increment_edition(config_path)
    except OSError as e:
        log.error("edition_increment_failed", error=str(e))


def _execute_run(options: RunOptions) -> None:
    """Execute one digest run.

    1. Load configuration
    2. Fetch all sources under one deadline, then enrich
    3. Render
    4. Preview or deliver
    """
    run_id = str(uuid.uuid4())
    log = _setup_logging_and_context(options, run_id)
    config = _load_configuration(options.config_path)

    edition = config.edition + 1
    now = datetime.now(UTC).astimezone()
    ctx = FetchContext.with_timeout(options.timeout_seconds, now=now)

    with HttpFetcher() as http:
        plan = build_sources(config, http)
        results = collect(ctx, plan)

    header_image = None
    if not options.preview:
        header_image = _load_header_image(config.email.header_image, log)

    digest = DigestRenderer().render(
        results,
        edition=edition,
        now=now,
        inline_header_image=header_image is not None,
    )

    if options.preview:
        path = _write_preview(digest)
        log.info("digest_preview_written", path=str(path))
        click.echo(f"HTML written to {path}")
        click.launch(str(path))
    else:
        _deliver(options, config, options.config_path, digest, header_image, now, log)
        click.echo(f"Digest #{edition} sent successfully!")

    metrics = AggregatorMetrics.get_instance()
    log.info(
        "digest_run_complete",
        edition=edition,
        sources_failed=sum(1 for r in results if not r.ok),
        total_failures=metrics.get_failures_total(),
    )


@click.group()
@click.version_option(version=__version__)
def cli() -> None:
    """Burrow daily digest CLI."""


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to config.yaml (default: $BURROW_CONFIG or /etc/burrow/config.yaml).",
)
@click.option(
    "--preview",
    is_flag=True,
    default=False,
    help="Render the digest and open it in a browser instead of sending it.",
)
@click.option(
    "--test",
    is_flag=True,
    default=False,
    help="Send to email.test_to and keep the edition counter unchanged.",
)
@click.option(
    "--json-logs/--console-logs",
    "json_logs",
    default=None,
    help="Output logs in JSON format (default: $BURROW_LOG_JSON).",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    default=False,
    help="Enable verbose (DEBUG) logging.",
)
@click.option(
    "--timeout",
    "timeout_seconds",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Deadline for the whole fetch phase in seconds (default: 120).",
)
def run(  # noqa: PLR0913
    config_path: Path | None,
    preview: bool,
    test: bool,
    json_logs: bool | None,
    verbose: bool,
    timeout_seconds: float | None,
) -> None:
    """Fetch all sources, render the digest, and send it.

    All sources are fetched concurrently under a single deadline. A
    failing source shows up as an "unavailable" notice in its section;
    it never aborts the run.
    """
    settings = get_settings()
    options = RunOptions(
        config_path=resolve_config_path(config_path or settings.config_path),
        timeout_seconds=timeout_seconds or settings.run_timeout_seconds,
        json_logs=settings.log_json if json_logs is None else json_logs,
        verbose=verbose,
        preview=preview,
        test=test,
    )
    _execute_run(options)


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Path to config.yaml (default: $BURROW_CONFIG or /etc/burrow/config.yaml).",
)
def validate(config_path: Path | None) -> None:
    """Validate the configuration file without fetching anything."""
    settings = get_settings()
    configure_logging(level=logging.WARNING, json_format=settings.log_json)
    path = resolve_config_path(config_path or settings.config_path)
    config = _load_configuration(path)

    click.echo("Configuration is valid!")
    click.echo(f"  Schedule: {config.schedule or '(external)'}")
    click.echo(f"  Edition: {config.edition}")
    click.echo(f"  Sources: {len(config.sources)}")
    for source in config.sources:
        click.echo(f"    - {source.type.value}")


if __name__ == "__main__":
    cli()
