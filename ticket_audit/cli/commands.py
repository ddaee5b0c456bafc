"""CLI command implementations for the ticket quality audit."""

from __future__ import annotations

import json
import threading
from typing import TYPE_CHECKING, Any

import click

from ticket_audit.models.config import Config
from ticket_audit.utils.logger import configure_logging

if TYPE_CHECKING:
    from ticket_audit.models.analysis import AnalysisResult
    from ticket_audit.models.batch import BatchState
    from ticket_audit.services.ticket_client import TicketApiClient


def _get_config() -> Config:
    """Load configuration from .env file."""
    return Config()


def _get_ticket_client(config: Config) -> TicketApiClient:
    """Build a ticketing API client, logging in when no token is configured."""
    from ticket_audit.services.ticket_client import TicketApiClient

    client = TicketApiClient(
        config.ticket_api_base_url,
        token=config.ticket_api_token,
        proxy_url=config.ticket_api_proxy_url,
        timeout=config.http_timeout,
    )
    if not client.token and config.ticket_api_username and config.ticket_api_password:
        client.authenticate(config.ticket_api_username, config.ticket_api_password)
    return client


def _print_summary(title: str, stats: dict[str, Any]) -> None:
    """Print a formatted summary of a batch run."""
    click.echo(f"\n[SUCCESS] {title}")
    for key, value in stats.items():
        if key == "errors" and isinstance(value, list):
            if value:
                click.echo(f"  Errors ({len(value)}):")
                for error in value[:10]:
                    click.echo(f"    - {error}")
                if len(value) > 10:
                    click.echo(f"    ... and {len(value) - 10} more")
        else:
            click.echo(f"  {key}: {value}")


def _print_result(result: AnalysisResult) -> None:
    """Print one analysis result in detail."""
    if result.is_failure:
        click.echo(f"  #{result.ticket_id}: FAILED ({result.failure}) {result.error}")
        return
    rca = "yes" if result.rca_detected else "no"
    click.echo(f"  #{result.ticket_id}: score {result.score:g}/10, RCA {rca}")
    click.echo(f"    {result.summary}")
    for strength in result.strengths:
        click.echo(f"    + {strength}")
    for weakness in result.weaknesses:
        click.echo(f"    - {weakness}")


def _run_in_worker(target: Any, cancel_event: threading.Event) -> BatchState:
    """Run the batch on a worker thread so Ctrl-C can request a stop."""
    outcome: dict[str, Any] = {}

    def worker() -> None:
        try:
            outcome["state"] = target()
        except BaseException as exc:
            outcome["error"] = exc

    thread = threading.Thread(target=worker, name="batch-analyzer", daemon=True)
    thread.start()
    while thread.is_alive():
        try:
            thread.join(timeout=0.5)
        except KeyboardInterrupt:
            if not cancel_event.is_set():
                click.echo("\n[INFO] Stopping after the current ticket...")
            cancel_event.set()

    if "error" in outcome:
        raise outcome["error"]
    state: BatchState = outcome["state"]
    return state


@click.command()
@click.option("--query", default=None, help="Ticket search query, passed to the API verbatim")
@click.option("--ticket-id", "ticket_ids", multiple=True, type=int, help="Ticket ID (repeatable)")
@click.option("--model", "model_id", default=None, help="LLM model ID (default from config)")
@click.option("--rpm", default=None, type=click.IntRange(min=1), help="Requests per minute")
@click.option("--limit", default=None, type=click.IntRange(min=1), help="Analyze the first N tickets")
@click.option(
    "--sink",
    "sink_strategy",
    default=None,
    type=click.Choice(["append", "keyed"]),
    help="Result storage strategy",
)
@click.option("--api-key", default=None, help="LLM API key override")
@click.option("--skip-key-check", is_flag=True, help="Skip the credential probe before the run")
@click.option(
    "--output-format",
    default="summary",
    type=click.Choice(["summary", "detailed", "json"]),
    help="Output format",
)
def analyze(
    query: str | None,
    ticket_ids: tuple[int, ...],
    model_id: str | None,
    rpm: int | None,
    limit: int | None,
    sink_strategy: str | None,
    api_key: str | None,
    skip_key_check: bool,
    output_format: str,
) -> None:
    """Run an AI quality audit over a batch of tickets."""
    config = _get_config()
    configure_logging(config.log_level)

    from ticket_audit.core.result_aggregation import format_audit_summary
    from ticket_audit.models.batch import BatchConfig
    from ticket_audit.models.ticket import Ticket
    from ticket_audit.services.batch_analyzer import BatchAnalyzer
    from ticket_audit.services.llm_client import LLMClient
    from ticket_audit.services.result_sink import create_sink

    if not query and not ticket_ids:
        raise click.UsageError("Provide --query or at least one --ticket-id")

    max_items = limit or config.max_tickets
    ticket_client = _get_ticket_client(config)
    if query:
        click.echo("[INFO] Searching tickets...")
        tickets = ticket_client.search_tickets(query, size=max_items)["tickets"]
    else:
        tickets = [Ticket(ticket_id=ticket_id) for ticket_id in ticket_ids]

    if not tickets:
        click.echo("[INFO] No tickets to analyze")
        return

    batch_config = BatchConfig(
        model_id=model_id or config.llm_model,
        requests_per_minute=rpm or config.requests_per_minute,
        api_key=api_key,
        max_items=max_items,
        validate_credentials=not skip_key_check,
    )
    sink = create_sink(sink_strategy or config.sink_strategy)
    analyzer = BatchAnalyzer(ticket_client, LLMClient(config.anthropic_api_key, batch_config.model_id))
    cancel_event = threading.Event()

    def on_progress(processed: int, total: int, current_item_id: int | None) -> None:
        if output_format != "json":
            click.echo(f"[{processed}/{total}] ticket {current_item_id}")

    click.echo(
        f"[INFO] Analyzing {min(len(tickets), max_items)} tickets with "
        f"{batch_config.model_id} at {batch_config.requests_per_minute} RPM..."
    )
    state = _run_in_worker(
        lambda: analyzer.run(tickets, batch_config, sink, cancel_event, on_progress=on_progress),
        cancel_event,
    )

    if output_format == "json":
        click.echo(
            json.dumps(
                {
                    "state": state.model_dump(mode="json"),
                    "results": [result.model_dump(mode="json") for result in sink.results],
                },
                indent=2,
            )
        )
        return

    if output_format == "detailed":
        for result in sink.results:
            _print_result(result)

    if state.stop_reason is not None:
        click.echo(f"\n[ERROR] Batch stopped: {state.stop_reason}")
    stats = sink.summary()
    _print_summary(
        f"Batch {state.status} ({state.processed_count}/{state.total_count} tickets)",
        stats.pop("run"),
    )
    stats["errors"] = []
    click.echo(format_audit_summary(stats))


@click.command()
@click.option("--api-key", default=None, help="LLM API key override")
def check_connections(api_key: str | None) -> None:
    """Check connectivity to the ticketing API and the LLM API."""
    config = _get_config()
    configure_logging(config.log_level)

    from ticket_audit.services.llm_client import LLMClient
    from ticket_audit.utils.health_checks import check_ticket_api_health

    ticket_client = _get_ticket_client(config)
    ticket_ok = check_ticket_api_health(
        config.ticket_api_base_url,
        ticket_client.token,
        timeout=config.http_timeout,
    )
    click.echo(f"[{'OK' if ticket_ok else 'ERROR'}] Ticketing API")

    try:
        llm_ok = LLMClient(config.anthropic_api_key, config.llm_model).validate_api_key(api_key)
    except Exception as exc:
        click.echo(f"[ERROR] LLM API: {exc}")
        llm_ok = False
    else:
        click.echo(f"[{'OK' if llm_ok else 'ERROR'}] LLM API key")

    if not (ticket_ok and llm_ok):
        raise SystemExit(1)


@click.command(name="models")
def list_models() -> None:
    """List the LLM models available for analysis."""
    from ticket_audit.services.llm_client import LLMClient

    for model in LLMClient.available_models():
        click.echo(f"{model['id']}\t{model['display_name']}")
