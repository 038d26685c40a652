"""mgstream annotation -- stream annotations to stdout, inspect the source catalog."""

import json
import sys
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.table import Table

from mgstream import catalog
from mgstream.config import config
from mgstream.db import get_session_factory
from mgstream.exceptions import MGStreamError
from mgstream.models import RecordSchema, StreamState
from mgstream.services import sample_service
from mgstream.services.annotation_stream import AnnotationStream
from mgstream.services.blob_store import ShockClient
from mgstream.services.parameters import resolve_request

_SessionLocal = get_session_factory()

app = typer.Typer(no_args_is_help=True)
console = Console()
err_console = Console(stderr=True)


@app.command(name="sources")
def sources_cmd():
    """List annotation sources and the types they serve."""
    table = Table(title="Annotation sources")
    table.add_column("Source", style="cyan")
    table.add_column("Category")
    table.add_column("Description")
    for s in catalog.SOURCES:
        table.add_row(s.name, s.category.value, s.description)
    console.print(table)

    for annotation_type, levels in catalog.HIERARCHY.items():
        console.print(f"[bold]{annotation_type.value}[/bold] filter levels: {', '.join(levels)}")


@app.command(name="stream")
def stream_cmd(
    schema: RecordSchema = typer.Argument(..., help="sequence or similarity"),
    sample_id: str = typer.Argument(..., help="Metagenome id, e.g. mgm4447943.3"),
    annotation_type: Optional[str] = typer.Option(None, "--type", help="organism, function, ontology, feature, all"),
    source: Optional[str] = typer.Option(None, help="Annotation source, e.g. SwissProt"),
    output_format: Optional[str] = typer.Option(None, "--format", help="tab or fasta"),
    evalue: Optional[str] = typer.Option(None, help="Negative exponent of maximum e-value"),
    identity: Optional[str] = typer.Option(None, help="Minimum percent identity"),
    length: Optional[str] = typer.Option(None, help="Minimum alignment length"),
    version: Optional[str] = typer.Option(None, help="M5NR version"),
    text_filter: Optional[str] = typer.Option(None, "--filter", help="Keep annotations containing text"),
    filter_level: Optional[str] = typer.Option(None, help="Hierarchy level for --filter"),
    md5: list[str] = typer.Option([], "--md5", help="Restrict to these md5s (disables cutoffs)"),
    user: Optional[str] = typer.Option(None, help="Caller login for private samples"),
):
    """Stream annotated records for a metagenome to stdout."""
    params = {
        "type": annotation_type,
        "source": source,
        "format": output_format,
        "evalue": evalue,
        "identity": identity,
        "length": length,
        "version": version,
        "filter": text_filter,
        "filter_level": filter_level,
    }
    params = {k: v for k, v in params.items() if v is not None}
    method, body = "GET", None
    if md5:
        method, body = "POST", json.dumps({"md5s": md5}).encode()

    db = _SessionLocal()
    try:
        with httpx.Client(timeout=config.shock.timeout, follow_redirects=True) as http:
            sample = sample_service.get_visible_sample(db, sample_id, user)
            request = resolve_request(schema, sample, params, method=method, body=body)
            stream = AnnotationStream(request, db, ShockClient(http)).open()
            stream.write_to(sys.stdout)
    except MGStreamError as exc:
        err_console.print(f"[red]Error ({exc.status_code}): {exc}[/red]")
        raise typer.Exit(code=1)
    finally:
        db.close()

    if stream.state == StreamState.ABORTED:
        raise typer.Exit(code=2)
