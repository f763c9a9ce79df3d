"""``contribkit twins`` - dry-run and apply JSON Patch batches to twins.

``split`` shows how a batch would be demultiplexed without touching the
network.  ``patch`` runs the Azure Digital Twins binding against a real
instance, with credentials from options or ``CONTRIBKIT_ADT_*`` settings.
"""

from __future__ import annotations

import json
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from contribkit.bindings.azure.digitaltwins import (
    GROUP_BY_TWIN_PROPERTY,
    AzureDigitalTwinsBinding,
    create_client,
)
from contribkit.bindings.demux import group_by_twin, parse_patch_batch, split_patch_batch
from contribkit.bindings.errors import BindingError, InvalidRequestError, MetadataError
from contribkit.config import KitConfig
from contribkit.models.bindings import BindingMetadata, InvokeRequest

console = Console()

twins_app = typer.Typer(
    name="twins",
    help="Split and apply JSON Patch batches for Azure Digital Twins.",
    no_args_is_help=True,
)


@twins_app.command(name="split", help="Show how a batch splits per twin (no network).")
def split_cmd(
    data_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON Patch batch file."),
    group: bool = typer.Option(False, "--group-by-twin", "-g", help="Merge operations per twin."),
) -> None:
    """Demultiplex a batch whose paths embed the twin id."""
    try:
        patches = split_patch_batch(parse_patch_batch(data_file.read_bytes()))
    except InvalidRequestError as exc:
        console.print(f"[red]Rejected batch:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)

    if group:
        patches = group_by_twin(patches)

    table = Table(title=f"{len(patches)} update call(s)")
    table.add_column("#", justify="right")
    table.add_column("Twin", style="cyan")
    table.add_column("Patch")
    for index, patch in enumerate(patches):
        table.add_row(str(index), escape(patch.twin_id), escape(json.dumps(patch.to_document())))
    console.print(table)


@twins_app.command(name="patch", help="Apply a JSON Patch batch to Azure Digital Twins.")
def patch_cmd(
    data_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON Patch batch file."),
    twin_id: str = typer.Option("", "--twin-id", "-t", help="Target twin; omit to read twin ids from paths."),
    group: bool = typer.Option(False, "--group-by-twin", "-g", help="One update call per twin."),
    instance_url: str = typer.Option("", "--instance-url", help="ADT instance URL."),
    tenant_id: str = typer.Option("", "--tenant-id", help="Azure AD tenant id."),
    client_id: str = typer.Option("", "--client-id", help="Service principal client id."),
    client_secret: str = typer.Option("", "--client-secret", help="Service principal secret."),
) -> None:
    """Invoke the Azure Digital Twins binding once with the file's contents."""
    properties = KitConfig().adt_properties()
    overrides = {
        "adtInstanceUrl": instance_url,
        "tenantId": tenant_id,
        "clientId": client_id,
        "clientSecret": client_secret,
    }
    properties.update({key: value for key, value in overrides.items() if value})
    if group:
        properties[GROUP_BY_TWIN_PROPERTY] = "true"

    binding = AzureDigitalTwinsBinding(client_factory=create_client)
    try:
        binding.init(BindingMetadata(name="cli", properties=properties))
    except MetadataError as exc:
        console.print(f"[red]Configuration error:[/red] {escape(str(exc))}")
        raise typer.Exit(code=2)

    request = InvokeRequest(
        data=data_file.read_bytes(),
        metadata={"twinId": twin_id} if twin_id else {},
    )
    try:
        response = binding.invoke(request)
    except (InvalidRequestError, BindingError) as exc:
        console.print(f"[red]Patch failed:[/red] {escape(str(exc))}")
        raise typer.Exit(code=1)
    finally:
        binding.close()

    updated = json.loads(response.data)
    console.print(
        f"[green]Updated {len(updated)} twin(s)[/green] "
        f"with {response.metadata['operations']} operation(s) "
        f"in {response.metadata['updateCalls']} call(s): {escape(', '.join(updated))}"
    )
