"""Preview and generate operations over validated requests.

These functions hold the request-level policy around the engine: folder name
safety, output root resolution, overwrite handling, default identity and
intensity map, and the progress lifecycle of a generation run.
"""

from __future__ import annotations

import re
import shutil
from pathlib import Path

from loguru import logger

from commit_canvas.config import AppConfig
from commit_canvas.errors import CommitCanvasError, ValidationError
from commit_canvas.models import GenerateRequest, GenerateResponse, PreviewRequest, PreviewResponse
from commit_canvas.planner import PlanResult, create_plan
from commit_canvas.progress import ProgressTracker
from commit_canvas.synthesizer import GenerateRepoOptions, generate_repository

SAFE_FOLDER_RE = re.compile(r"^[A-Za-z0-9._-]+$")


def assert_safe_folder_name(value: str) -> None:
    """Reject folder names that are blank or could escape the output root."""
    if not value or not value.strip():
        raise ValidationError("Folder name is required.", kind="InvalidFolderName")
    if not SAFE_FOLDER_RE.match(value) or value in {".", ".."}:
        raise ValidationError(
            "Folder name may only contain letters, numbers, dots, underscores, and dashes.",
            kind="InvalidFolderName",
        )


def assert_path_within_root(target: Path, root: Path) -> None:
    resolved_root = Path(root).resolve()
    resolved_target = Path(target).resolve()
    if resolved_target == resolved_root or resolved_root not in resolved_target.parents:
        raise ValidationError("Target path must be within the output root.", kind="PathOutsideRoot")


def resolve_output_root(requested_root: str | None, config: AppConfig) -> Path:
    if requested_root and not config.allow_output_root_override:
        raise ValidationError("Output root override is disabled.", kind="OutputRootOverrideDisabled")
    return Path(requested_root).expanduser().resolve() if requested_root else config.output_root


def remove_existing_repo(repo_path: Path, output_root: Path) -> None:
    """Delete an existing repository folder that sits inside ``output_root``."""
    assert_path_within_root(repo_path, output_root)
    if not repo_path.exists():
        return
    if not repo_path.is_dir():
        raise ValidationError("Target path exists and is not a directory.", kind="InvalidTarget")
    logger.info(f"Removing existing repository at {repo_path}")
    shutil.rmtree(repo_path)


def _plan_request(request: PreviewRequest, config: AppConfig) -> PlanResult:
    return create_plan(
        request.grid,
        request.date_range,
        request.intensity_map or config.intensity_map,
        request.random_seed,
    )


def preview(request: PreviewRequest, config: AppConfig) -> PreviewResponse:
    """Plan a request without touching the filesystem."""
    assert_safe_folder_name(request.folder_name)
    resolve_output_root(request.output_root, config)
    result = _plan_request(request, config)
    return PreviewResponse(plan=result.plan, summary=result.summary, warnings=result.warnings)


def generate(
    request: GenerateRequest,
    config: AppConfig,
    tracker: ProgressTracker | None = None,
) -> GenerateResponse:
    """Plan a request and write its repository.

    When ``request.progress_id`` is set and a tracker is given, the run is
    reported as ``running`` with per-commit updates and ends ``complete`` or
    ``error``. Errors are re-raised after being reported; a request rejected
    before writing anything moves straight to ``error``.
    """
    progress_id = request.progress_id if tracker is not None else None
    try:
        assert_safe_folder_name(request.folder_name)
        output_root = resolve_output_root(request.output_root, config)
        repo_path = output_root / request.folder_name
        result = _plan_request(request, config)
    except CommitCanvasError as exc:
        if progress_id:
            tracker.fail(progress_id, str(exc))
        raise

    on_progress = None
    if progress_id:
        tracker.start(progress_id)

        def on_progress(percent: int, message: str) -> None:
            tracker.update(progress_id, percent, message)

    try:
        if request.overwrite_existing and not request.dry_run:
            remove_existing_repo(repo_path, output_root)

        author = request.author
        git_log_sample = generate_repository(
            GenerateRepoOptions(
                repo_path=repo_path,
                plan=result.plan,
                summary=result.summary,
                author_name=author.name if author else config.default_author_name,
                author_email=author.email if author else config.default_author_email,
                seed=request.random_seed,
                dry_run=request.dry_run,
                on_progress=on_progress,
                default_branch=config.default_branch,
            )
        )
    except Exception as exc:
        if progress_id:
            tracker.fail(progress_id, str(exc))
        raise

    if progress_id:
        tracker.complete(progress_id, "Dry run complete" if request.dry_run else "Repository generated")

    return GenerateResponse(
        summary=result.summary,
        warnings=result.warnings,
        repo_path=str(repo_path),
        git_log_sample=git_log_sample,
    )
