from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from ftpphotos.config import load_config, write_default_config
from ftpphotos.errors import NoResultsError, PhotoServiceError
from ftpphotos.output_models import PhotoOutput, photos_to_json
from ftpphotos.paths import default_config_path
from ftpphotos.server.http import run_http_server
from ftpphotos.service import PhotoService
from ftpphotos.util.logging import setup_logging, use_color

app = typer.Typer(help="ftpphotos: photo metadata from an FTP tree")


@dataclass(slots=True)
class AppState:
    service: PhotoService
    console: Console
    config_path: Path


def _state(ctx: typer.Context) -> AppState:
    st = ctx.obj
    if not isinstance(st, AppState):
        raise RuntimeError("app state not initialized")
    return st


def _emit_table(console: Console, rows: list[dict]) -> None:
    table = Table(title="photos")
    table.add_column("name")
    table.add_column("path")
    table.add_column("creationTime", justify="right")
    table.add_column("size", justify="right")
    for row in rows:
        table.add_row(
            str(row.get("name", "")),
            str(row.get("path", "")),
            str(row.get("creationTime") or ""),
            str(row.get("size", "")),
        )
    console.print(table)


@app.callback()
def main(
    ctx: typer.Context,
    config: Annotated[Path | None, typer.Option("--config", help="Config YAML path")] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Verbose logging")] = False,
    log_file: Annotated[Path | None, typer.Option("--log-file", help="Also write logs to this file")] = None,
) -> None:
    setup_logging(verbose, log_file.expanduser() if log_file else None)
    cfg_path = config.expanduser() if config else default_config_path()
    color_on = use_color()
    console = Console(color_system="auto" if color_on else None, force_terminal=color_on)
    try:
        cfg = load_config(cfg_path)
    except PhotoServiceError as exc:
        console.print(f"[red]bad config {cfg_path}:[/red] {exc}")
        raise typer.Exit(1) from exc
    ctx.obj = AppState(service=PhotoService(cfg), console=console, config_path=cfg_path)


@app.command("init-config")
def init_config(
    ctx: typer.Context,
    path: Annotated[Path | None, typer.Option("--path", help="Write config to this path")] = None,
) -> None:
    st = _state(ctx)
    written = write_default_config(path.expanduser() if path else st.config_path)
    st.console.print(f"[green]config:[/green] {written}")


@app.command("photos")
def photos_cmd(
    ctx: typer.Context,
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    try:
        photos = st.service.get_photos()
    except NoResultsError as exc:
        st.console.print(f"[yellow]no photos:[/yellow] {exc}")
        raise typer.Exit(1) from exc
    except PhotoServiceError as exc:
        st.console.print(f"[red]retrieval failed:[/red] {exc}")
        raise typer.Exit(1) from exc

    rows = photos_to_json(photos)
    if json_out:
        typer.echo(json.dumps(rows, indent=2, ensure_ascii=False))
        return
    _emit_table(st.console, rows)
    stats = st.service.last_walk
    if stats is not None and stats.failures:
        st.console.print(f"[dim]{len(stats.failures)} folder(s) could not be listed[/dim]")


@app.command("photo")
def photo_cmd(
    ctx: typer.Context,
    path: Annotated[str, typer.Argument(help="Local file path")],
    json_out: Annotated[bool, typer.Option("--json")] = False,
) -> None:
    st = _state(ctx)
    photo = st.service.get_photo_info(path)
    if photo is None:
        st.console.print(f"[red]not found:[/red] {path}")
        raise typer.Exit(1)
    row = PhotoOutput.from_photo(photo).as_json()
    if json_out:
        typer.echo(json.dumps(row, indent=2, ensure_ascii=False))
        return
    for k, v in row.items():
        st.console.print(f"[bold]{k}[/bold]: {v}")


@app.command("serve")
def serve_cmd(
    ctx: typer.Context,
    host: Annotated[str | None, typer.Option("--host")] = None,
    port: Annotated[int | None, typer.Option("--port")] = None,
) -> None:
    st = _state(ctx)
    server_cfg = st.service.config.server
    code = run_http_server(
        st.service,
        host=host or server_cfg.host,
        port=port if port is not None else server_cfg.port,
    )
    raise typer.Exit(code)


if __name__ == "__main__":
    app()
