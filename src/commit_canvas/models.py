"""Pydantic models shared across planning, synthesis, and the service layer."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ProgressStatus = Literal["pending", "running", "complete", "error"]


class CamelModel(BaseModel):
    """Base model serializing to the camelCase wire contract."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_payload(self) -> dict:
        """Return a JSON-ready dict using wire field names."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class GridPayload(CamelModel):
    """A painted canvas, ``levels[row][col]``, row 0 being Sunday.

    Cell values are kept as raw integers so that grid validation can report
    the offending coordinate instead of failing during parsing.
    """

    rows: int
    cols: int
    levels: list[list[int]]


class DateRange(CamelModel):
    start_date: str
    end_date: str


class IntensityMap(CamelModel):
    """Commit count bounds per intensity level."""

    min_by_level: dict[int, int] = Field(default_factory=dict)
    max_by_level: dict[int, int] = Field(default_factory=dict)


class AuthorInfo(CamelModel):
    name: str = Field(min_length=1)
    email: str = Field(min_length=3)


class CommitPlanEntry(CamelModel):
    model_config = ConfigDict(frozen=True)

    date: str
    level: int
    commit_count: int = Field(ge=0)


class CommitPlanSummary(CamelModel):
    model_config = ConfigDict(frozen=True)

    total_commits: int
    active_days: int
    first_grid_date: str
    last_grid_date: str
    requested_range: DateRange


class ProgressState(CamelModel):
    """Immutable snapshot of one generation run's progress."""

    model_config = ConfigDict(frozen=True)

    id: str
    status: ProgressStatus
    progress: int = Field(ge=0, le=100)
    message: str | None = None
    error: str | None = None
    updated_at: str

    @property
    def is_terminal(self) -> bool:
        return self.status in ("complete", "error")


class Manifest(CamelModel):
    """Metadata record written to ``history.json`` in a generated repository."""

    generated_at: str
    summary: CommitPlanSummary


class MutationRecord(CamelModel):
    timestamp: str
    commit_index: int
    payload: str


class PreviewRequest(CamelModel):
    folder_name: str
    output_root: str | None = None
    date_range: DateRange
    grid: GridPayload
    intensity_map: IntensityMap | None = None
    random_seed: str | None = None
    author: AuthorInfo | None = None


class GenerateRequest(PreviewRequest):
    dry_run: bool = False
    overwrite_existing: bool = False
    progress_id: str | None = Field(default=None, min_length=1)


class PreviewResponse(CamelModel):
    summary: CommitPlanSummary
    warnings: list[str] = Field(default_factory=list)
    plan: list[CommitPlanEntry]


class GenerateResponse(CamelModel):
    summary: CommitPlanSummary
    warnings: list[str] = Field(default_factory=list)
    repo_path: str
    git_log_sample: list[str] = Field(default_factory=list)


class CommitRecord(BaseModel):
    """One commit read back from a generated repository."""

    commit_hash: str
    subject: str
    author_date: datetime
    committer_date: datetime
