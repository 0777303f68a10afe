from __future__ import annotations

import logging
from pathlib import Path

import typer
import uvicorn
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler

from adapters.filesystem.board_repository import FileSystemBoardRepository
from adapters.filesystem.render_plan_repository import FileSystemRenderPlanRepository
from adapters.svg.renderer import render_board_svg
from app.config import AppSettings, load_settings
from app.web_main import create_app
from app.wiring import render_snapshot
from domain.models import BoardSnapshot, RenderPlan, RenderSkip

app = typer.Typer(no_args_is_help=True)
console = Console()


def configure_logging(settings: AppSettings) -> None:
    logging.basicConfig(
        level=settings.logging.level,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load_board(board_path: Path) -> BoardSnapshot:
    if not board_path.exists():
        console.print(f"[red]File not found:[/] {board_path}")
        raise typer.Exit(code=1)
    try:
        return FileSystemBoardRepository().load(board_path)
    except (ValueError, ValidationError) as exc:
        console.print(f"[red]Invalid board snapshot:[/] {exc}")
        raise typer.Exit(code=1) from exc


def _settings(config_path: Path | None) -> AppSettings:
    try:
        settings = load_settings(config_path)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/]")
        raise typer.Exit(code=1) from exc
    configure_logging(settings)
    return settings


@app.command("plans")
def plans(
    board_path: Path = typer.Argument(..., help="Board snapshot JSON file."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Where to write render plans (default: output_dir)."
    ),
    config: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = _settings(config)
    snapshot = _load_board(board_path)
    results = render_snapshot(settings, snapshot)

    target_path = output or settings.output_dir / f"{board_path.stem}.json"
    target_path.parent.mkdir(parents=True, exist_ok=True)
    FileSystemRenderPlanRepository().save(results, target_path)

    planned = sum(1 for result in results if isinstance(result, RenderPlan))
    skipped = len(results) - planned
    console.print(f"[green]Wrote[/] {target_path} ({planned} planned, {skipped} skipped)")


@app.command("plans-dir")
def plans_dir(
    input_dir: Path = typer.Option(..., help="Directory with board snapshot JSON files."),
    output_dir: Path | None = typer.Option(
        None, help="Directory to write render plans (default: output_dir)."
    ),
    config: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = _settings(config)
    try:
        pairs = FileSystemBoardRepository().load_all_with_paths(input_dir)
    except (ValueError, ValidationError) as exc:
        console.print(f"[red]Invalid board snapshot:[/] {exc}")
        raise typer.Exit(code=1) from exc
    if not pairs:
        console.print(f"[yellow]No board files found in {input_dir}[/]")
        raise typer.Exit(code=0)

    target_dir = output_dir or settings.output_dir
    target_dir.mkdir(parents=True, exist_ok=True)
    plan_repo = FileSystemRenderPlanRepository()
    for path, snapshot in pairs:
        target_path = target_dir / f"{path.stem}.json"
        plan_repo.save(render_snapshot(settings, snapshot), target_path)
        console.print(f"[green]Wrote[/] {target_path}")


@app.command("clear")
def clear(
    output_dir: Path | None = typer.Option(
        None, help="Directory with generated plans and SVGs (default: output_dir)."
    ),
    config: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = _settings(config)
    target_dir = output_dir or settings.output_dir
    removed = FileSystemRenderPlanRepository().clear_cache(target_dir)
    console.print(f"[green]Removed[/] {removed} file(s) from {target_dir}")


@app.command("svg")
def svg(
    board_path: Path = typer.Argument(..., help="Board snapshot JSON file."),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Where to write the SVG (default: output_dir)."
    ),
    margin: float = typer.Option(0.0, help="Extra space around the drawn connectors."),
    config: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = _settings(config)
    snapshot = _load_board(board_path)
    results = render_snapshot(settings, snapshot)
    drawable = [result for result in results if isinstance(result, RenderPlan)]

    target_path = output or settings.output_dir / f"{board_path.stem}.svg"
    target_path.parent.mkdir(parents=True, exist_ok=True)
    target_path.write_text(render_board_svg(drawable, margin=margin), encoding="utf-8")
    console.print(f"[green]Wrote[/] {target_path}")


@app.command("validate")
def validate(
    board_path: Path = typer.Argument(..., help="Board snapshot JSON file to validate."),
    config: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = _settings(config)
    snapshot = _load_board(board_path)
    skipped = [
        result for result in render_snapshot(settings, snapshot) if isinstance(result, RenderSkip)
    ]
    if skipped:
        for skip in skipped:
            console.print(f"[yellow]Skipped[/] {skip.connector_id}: {skip.reason}")
        console.print(f"[red]Validation failed:[/] {len(skipped)} connector(s) not renderable")
        raise typer.Exit(code=1)
    console.print(
        f"[green]Valid board snapshot:[/] {board_path} ({len(snapshot.connectors)} connectors)"
    )


@app.command("serve")
def serve(
    host: str = typer.Option("127.0.0.1", help="Interface to bind."),
    port: int = typer.Option(8080, help="Port to listen on."),
    config: Path | None = typer.Option(None, "--config", help="YAML settings file."),
) -> None:
    settings = _settings(config)
    uvicorn.run(
        create_app(settings),
        host=host,
        port=port,
        log_level=settings.logging.level.lower(),
    )


if __name__ == "__main__":
    app()
