"""Typer-based CLI for previewing and generating painted git histories."""

from __future__ import annotations

import json
import uuid
from pathlib import Path
from typing import Any

import typer
from pydantic import ValidationError as PydanticValidationError

from commit_canvas.config import AppConfig, load_config
from commit_canvas.dates import add_days
from commit_canvas.errors import CommitCanvasError, GitCommandError, ValidationError
from commit_canvas.git_client import git_available
from commit_canvas.grid import GRID_COLS, GRID_DAYS, GRID_ROWS, blank_levels
from commit_canvas.logging_setup import setup_logger
from commit_canvas.models import (
    AuthorInfo,
    DateRange,
    GenerateRequest,
    GridPayload,
    IntensityMap,
    PreviewRequest,
    ProgressState,
)
from commit_canvas.progress import ProgressTracker
from commit_canvas.service import generate as generate_history
from commit_canvas.service import preview as preview_history

app = typer.Typer(add_completion=False, help="commit-canvas: paint a contribution graph into git history")


def _echo_step(step: int, total: int, message: str) -> None:
    """Print a normalized progress step line."""
    typer.echo(f"[{step}/{total}] {message}")


def _echo_progress_state(state: ProgressState) -> None:
    """Print one progress snapshot as a JSON line."""
    typer.echo(json.dumps(state.to_payload()))


def _load_json(path: Path, what: str) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"Unable to read {what} file {path}: {exc}") from exc


def _load_grid(path: Path) -> GridPayload:
    """Load a grid file holding either a full payload or a bare ``levels`` matrix."""
    raw = _load_json(path, "grid")
    if isinstance(raw, list):
        raw = {"rows": len(raw), "cols": len(raw[0]) if raw else 0, "levels": raw}
    try:
        return GridPayload.model_validate(raw)
    except PydanticValidationError as exc:
        raise typer.BadParameter(f"Invalid grid file {path}: {exc}") from exc


def _load_intensity(path: Path | None) -> IntensityMap | None:
    if path is None:
        return None
    try:
        return IntensityMap.model_validate(_load_json(path, "intensity"))
    except PydanticValidationError as exc:
        raise typer.BadParameter(f"Invalid intensity file {path}: {exc}") from exc


def _date_range(start_date: str, end_date: str | None) -> DateRange:
    try:
        resolved_end = end_date or add_days(start_date, GRID_DAYS - 1)
    except ValidationError as exc:
        raise typer.BadParameter(exc.message) from exc
    return DateRange(start_date=start_date, end_date=resolved_end)


def _author(name: str | None, email: str | None) -> AuthorInfo | None:
    if not name and not email:
        return None
    if not name or not email:
        raise typer.BadParameter("Both --author-name and --author-email are required to override the author.")
    try:
        return AuthorInfo(name=name, email=email)
    except PydanticValidationError as exc:
        raise typer.BadParameter(f"Invalid author: {exc}") from exc


def _resolve_config(output_root: Path | None) -> AppConfig:
    config = load_config()
    if output_root is not None:
        config = config.model_copy(update={"output_root": output_root.expanduser().resolve()})
    return config


def _fail(exc: Exception) -> None:
    if isinstance(exc, ValidationError):
        raise typer.BadParameter(exc.message) from exc
    typer.echo(f"Error: {exc}", err=True)
    raise typer.Exit(code=1) from exc


@app.command("template")
def template(
    out: Path = typer.Argument(..., help="Where to write the grid JSON"),
    level: int = typer.Option(0, min=0, max=4, help="Level to fill every cell with"),
) -> None:
    """Write a 7x51 grid file to paint by hand."""
    payload = GridPayload(rows=GRID_ROWS, cols=GRID_COLS, levels=blank_levels(level))
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload.to_payload()), encoding="utf-8")
    typer.echo(f"Grid template written: {out}")


@app.command("preview")
def preview(
    grid_file: Path = typer.Argument(..., help="Grid JSON file"),
    start_date: str = typer.Option(..., "--start-date", help="First grid day (YYYY-MM-DD, a Sunday on GitHub)"),
    end_date: str | None = typer.Option(None, "--end-date", help="Last grid day; defaults to start + 356 days"),
    seed: str | None = typer.Option(None, help="Random seed"),
    intensity_file: Path | None = typer.Option(None, "--intensity", help="Intensity map JSON file"),
    folder_name: str = typer.Option("painted-history", "--folder", help="Target folder name to check"),
    as_json: bool = typer.Option(False, "--json", help="Print the full preview payload as JSON"),
) -> None:
    """Show the commit plan a grid would produce, without writing anything."""
    try:
        request = PreviewRequest(
            folder_name=folder_name,
            date_range=_date_range(start_date, end_date),
            grid=_load_grid(grid_file),
            intensity_map=_load_intensity(intensity_file),
            random_seed=seed,
        )
    except PydanticValidationError as exc:
        raise typer.BadParameter(f"Invalid preview request: {exc}") from exc
    try:
        response = preview_history(request, load_config())
    except CommitCanvasError as exc:
        _fail(exc)
        return

    if as_json:
        typer.echo(json.dumps(response.to_payload(), indent=2))
        return

    summary = response.summary
    typer.echo(
        f"Plan: commits={summary.total_commits} active_days={summary.active_days} "
        f"range={summary.first_grid_date}..{summary.last_grid_date}"
    )
    for warning in response.warnings:
        typer.echo(f"warning: {warning}")


@app.command("generate")
def generate(
    grid_file: Path = typer.Argument(..., help="Grid JSON file"),
    folder_name: str = typer.Argument(..., help="Repository folder to create under the output root"),
    start_date: str = typer.Option(..., "--start-date", help="First grid day (YYYY-MM-DD)"),
    end_date: str | None = typer.Option(None, "--end-date", help="Last grid day; defaults to start + 356 days"),
    seed: str | None = typer.Option(None, help="Random seed"),
    intensity_file: Path | None = typer.Option(None, "--intensity", help="Intensity map JSON file"),
    output_root: Path | None = typer.Option(None, "--output-root", help="Directory to create the repository in"),
    author_name: str | None = typer.Option(None, "--author-name", help="Commit author name"),
    author_email: str | None = typer.Option(None, "--author-email", help="Commit author email"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Plan and check the target without writing"),
    overwrite: bool = typer.Option(False, "--overwrite", help="Delete an existing folder first"),
    progress_id: str | None = typer.Option(None, "--progress-id", help="Correlation id for progress lines"),
    verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging"),
) -> None:
    """Create a git repository whose history paints the grid."""
    setup_logger("DEBUG" if verbose else "INFO")
    total_steps = 3

    _echo_step(1, total_steps, "Loading grid")
    try:
        request = GenerateRequest(
            folder_name=folder_name,
            date_range=_date_range(start_date, end_date),
            grid=_load_grid(grid_file),
            intensity_map=_load_intensity(intensity_file),
            random_seed=seed,
            author=_author(author_name, author_email),
            dry_run=dry_run,
            overwrite_existing=overwrite,
            progress_id=progress_id or uuid.uuid4().hex[:12],
        )
    except PydanticValidationError as exc:
        raise typer.BadParameter(f"Invalid generate request: {exc}") from exc

    _echo_step(2, total_steps, "Writing commits" if not dry_run else "Checking target (dry run)")
    tracker = ProgressTracker()
    unsubscribe = tracker.subscribe(request.progress_id, _echo_progress_state)
    try:
        response = generate_history(request, _resolve_config(output_root), tracker=tracker)
    except (CommitCanvasError, GitCommandError) as exc:
        _fail(exc)
        return
    finally:
        unsubscribe()
        tracker.close()

    _echo_step(3, total_steps, "Reading back history")
    for line in response.git_log_sample:
        typer.echo(f"    {line}")
    typer.echo(
        "Generate complete. "
        f"commits={response.summary.total_commits} active_days={response.summary.active_days} "
        f"path={response.repo_path}"
    )


@app.command("doctor")
def doctor() -> None:
    """Print local environment diagnostics used by the CLI."""
    config = load_config()
    typer.echo(f"Output root: {config.output_root} (exists: {config.output_root.exists()})")
    typer.echo(f"Default author: {config.default_author_name} <{config.default_author_email}>")
    typer.echo(f"Default branch: {config.default_branch}")
    typer.echo(f"git available: {git_available()}")


if __name__ == "__main__":
    app()
