"""mgstream samples -- register and list metagenomes."""

from typing import Optional

import typer
from rich.console import Console
from rich.table import Table
from sqlalchemy import select

from mgstream.db import get_session_factory
from mgstream.db.models.sample import Sample
from mgstream.exceptions import MGStreamError
from mgstream.services import sample_service

_SessionLocal = get_session_factory()

app = typer.Typer(no_args_is_help=True)
console = Console()


@app.command(name="add")
def add_cmd(
    sample_id: str = typer.Argument(..., help="Metagenome id, e.g. mgm4447943.3"),
    name: Optional[str] = typer.Option(None, help="Display name"),
    public: bool = typer.Option(False, "--public", help="Visible to everyone"),
    owner: Optional[str] = typer.Option(None, help="Owner login"),
):
    """Register a metagenome."""
    db = _SessionLocal()
    try:
        sample = sample_service.create_sample(db, sample_id, name=name, public=public, owner=owner)
        console.print(f"[green]Registered {sample.accession} as job {sample.job_id}[/green]")
    except MGStreamError as exc:
        console.print(f"[red]Error: {exc}[/red]")
        raise typer.Exit(code=1)
    finally:
        db.close()


@app.command(name="list")
def list_cmd():
    """List registered metagenomes."""
    db = _SessionLocal()
    try:
        samples = db.execute(select(Sample).order_by(Sample.job_id)).scalars().all()
        if not samples:
            console.print("[yellow]No samples found.[/yellow]")
            return

        table = Table(title=f"Samples ({len(samples)})")
        table.add_column("Job", style="dim", justify="right")
        table.add_column("Accession", style="cyan")
        table.add_column("Name")
        table.add_column("Public")
        table.add_column("Owner")
        for s in samples:
            table.add_row(
                str(s.job_id), s.accession, s.name or "-",
                "yes" if s.public else "no", s.owner or "-",
            )
        console.print(table)
    finally:
        db.close()
