"""``contribkit envelope`` - build CloudEvents envelopes and check expiry."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from contribkit.config import KitConfig
from contribkit.metadata import TTL_IN_SECONDS_KEY
from contribkit.pubsub.envelope import DecodeError, EnvelopeBuilder
from contribkit.pubsub.features import Feature

console = Console()

envelope_app = typer.Typer(
    name="envelope",
    help="Build and inspect CloudEvents envelopes.",
    no_args_is_help=True,
)


@envelope_app.command(name="build", help="Wrap a payload in a CloudEvents envelope.")
def build_cmd(
    data: str = typer.Option("", "--data", "-d", help="Payload text."),
    topic: str = typer.Option("", "--topic", help="Topic name."),
    pubsub_name: str = typer.Option("", "--pubsub", help="Pub/sub component name."),
    source: str = typer.Option("", "--source", help="Event source (default from settings)."),
    event_type: str = typer.Option("", "--type", help="Event type (default from settings)."),
    subject: str = typer.Option("", "--subject", help="Event subject."),
    content_type: str = typer.Option("", "--content-type", help="Payload content type."),
    trace_id: str = typer.Option("", "--trace-id", help="Trace id to stamp."),
    ttl_in_seconds: int = typer.Option(0, "--ttl-in-seconds", help="Emulated message TTL."),
    native_ttl: bool = typer.Option(
        False, "--native-ttl", help="Target broker expires messages itself."
    ),
) -> None:
    """Print the envelope as JSON on stdout."""
    builder = EnvelopeBuilder(defaults=KitConfig().envelope_defaults())
    envelope = builder.build(
        source=source,
        event_type=event_type,
        subject=subject,
        topic=topic,
        pubsub_name=pubsub_name,
        data_content_type=content_type,
        data=data,
        trace_id=trace_id,
    )
    if ttl_in_seconds:
        features = [Feature.MESSAGE_TTL] if native_ttl else []
        envelope = builder.apply_metadata(
            envelope, features, {TTL_IN_SECONDS_KEY: str(ttl_in_seconds)}
        )
    typer.echo(envelope.serialize().decode("utf-8"))


@envelope_app.command(name="check", help="Report whether an envelope has expired.")
def check_cmd(
    envelope_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Envelope JSON file."),
    trace_id: str = typer.Option("", "--trace-id", help="Trace id to stamp while parsing."),
) -> None:
    """Exit 0 when the envelope is live, 1 when expired, 2 when undecodable."""
    builder = EnvelopeBuilder()
    try:
        envelope = builder.from_cloud_event(envelope_file.read_bytes(), trace_id)
    except DecodeError as exc:
        console.print(f"[red]Cannot decode envelope:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2)

    if builder.has_expired(envelope):
        console.print(
            f"[yellow]Expired[/yellow] {escape(str(envelope.id))} "
            f"(expiration {escape(str(envelope.expiration))})"
        )
        raise typer.Exit(code=1)
    console.print(f"[green]Live[/green] {escape(str(envelope.id))}")
