"""CLI entry point."""

import logging

import typer
from rich.console import Console

from mgstream.config import config
from mgstream.cli.annotation import app as annotation_app
from mgstream.cli.samples import app as samples_app
from mgstream.db import Base, get_engine

app = typer.Typer(
    name="mgstream",
    help="mgstream — streamed metagenome annotations",
    no_args_is_help=True,
)

app.add_typer(annotation_app, name="annotation", help="Annotation streams and source catalog")
app.add_typer(samples_app, name="samples", help="Metagenome sample registry")
console = Console()


@app.callback()
def _configure_logging(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
):
    level = logging.DEBUG if (verbose or config.debug) else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")


@app.command(name="init")
def init_cmd():
    """Create any missing tables (use alembic for upgrades)."""
    engine = get_engine()
    Base.metadata.create_all(engine)
    console.print(f"[green]Tables ready on {engine.url.render_as_string(hide_password=True)}[/green]")


@app.command()
def serve(
    host: str = typer.Option("0.0.0.0", help="Bind address"),
    port: int = typer.Option(8000, help="Bind port"),
    reload: bool = typer.Option(False, help="Reload on code changes"),
):
    """Start the FastAPI server (uvicorn)."""
    import uvicorn

    uvicorn.run(
        "mgstream.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
    )


if __name__ == "__main__":
    app()
