"""Replay a commit plan into a real git repository."""

from __future__ import annotations

import json
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from loguru import logger

from commit_canvas.dates import format_git_timestamp, utc_now_iso
from commit_canvas.errors import ConflictError, GitCommandError, InternalError
from commit_canvas.git_client import GitClient
from commit_canvas.models import CommitPlanEntry, CommitPlanSummary, Manifest
from commit_canvas.mutations import DUMP_FILE_NAME, append_mutation, build_mutation, ensure_dump_file
from commit_canvas.rng import create_rng
from commit_canvas.scheduler import build_commit_times

MANIFEST_FILE_NAME = "history.json"
LOG_SAMPLE_SIZE = 5

ProgressCallback = Callable[[int, str], None]


@dataclass
class GenerateRepoOptions:
    repo_path: Path
    plan: list[CommitPlanEntry]
    summary: CommitPlanSummary
    author_name: str
    author_email: str
    seed: str | None = None
    dry_run: bool = False
    on_progress: ProgressCallback | None = None
    default_branch: str = "main"


class _ProgressReporter:
    """Forward percentages to a callback, skipping repeats unless forced."""

    def __init__(self, callback: ProgressCallback | None):
        self._callback = callback
        self._last: int | None = None

    def report(self, percent: float, message: str, force: bool = False) -> None:
        rounded = round(percent)
        if self._callback is None or (not force and rounded == self._last):
            return
        self._last = rounded
        self._callback(rounded, message)


def assert_repo_does_not_exist(repo_path: Path) -> None:
    if repo_path.exists():
        raise ConflictError(
            f"Repository path already exists: {repo_path}. Choose another folder name.",
            kind="PathAlreadyExists",
        )


def write_manifest(repo_path: Path, summary: CommitPlanSummary) -> Path:
    """Write ``history.json`` with the generation time and plan summary."""
    manifest = Manifest(generated_at=utc_now_iso(), summary=summary)
    manifest_path = repo_path / MANIFEST_FILE_NAME
    manifest_path.write_text(json.dumps(manifest.to_payload(), indent=2), encoding="utf-8")
    return manifest_path


def generate_repository(options: GenerateRepoOptions) -> list[str]:
    """Create a repository whose history reproduces ``options.plan``.

    Commits are written strictly in plan order, one ``git`` process at a time.
    A failure part-way through leaves the partially written repository on disk.

    Returns:
        Up to five ``git log --oneline`` lines, or ``[]`` for a dry run.

    Raises:
        ConflictError: ``repo_path`` already exists.
        GitCommandError: A git command failed during replay.
        InternalError: The final log readback failed.
    """
    repo_path = Path(options.repo_path)
    assert_repo_does_not_exist(repo_path)

    if options.dry_run:
        logger.info(f"Dry run: skipping repository creation at {repo_path}")
        return []

    logger.info(f"Creating repository at {repo_path} ({options.summary.total_commits} commits)")
    repo_path.mkdir(parents=True)
    git = GitClient(repo_path)
    git.init(options.default_branch)
    git.set_identity(options.author_name, options.author_email)
    git.run(["config", "commit.gpgsign", "false"])

    write_manifest(repo_path, options.summary)
    dump_path = ensure_dump_file(repo_path)
    git.add(DUMP_FILE_NAME, MANIFEST_FILE_NAME)

    if options.seed is not None:
        base_seed = options.seed
    else:
        base_seed = f"{options.summary.first_grid_date}:{options.summary.last_grid_date}"
    rng = create_rng(f"{base_seed}:mutations")

    reporter = _ProgressReporter(options.on_progress)
    reporter.report(0, "Initializing repository", force=True)

    total = options.summary.total_commits
    completed = 0
    for entry in options.plan:
        if entry.commit_count <= 0:
            continue

        for index, moment in enumerate(build_commit_times(entry.date, entry.commit_count, rng), start=1):
            timestamp = format_git_timestamp(moment)
            append_mutation(dump_path, build_mutation(rng, entry.date, index))
            git.add(DUMP_FILE_NAME, MANIFEST_FILE_NAME)
            git.commit(f"chore(history): {entry.date} #{index}", timestamp)

            completed += 1
            if total > 0:
                reporter.report(completed / total * 100, "Writing commits")

    if total == 0:
        reporter.report(100, "No commits to write", force=True)
    else:
        reporter.report(100, "Finalizing", force=True)

    if completed == 0:
        # An unborn branch has no log to read back.
        return []

    try:
        sample = git.log_sample(LOG_SAMPLE_SIZE)
    except GitCommandError as exc:
        raise InternalError("Unable to read git log after generation.", kind="LogReadbackFailed") from exc

    logger.info(f"Wrote {completed} commits to {repo_path}")
    return sample
