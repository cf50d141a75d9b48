"""Turn a painted grid into a per-day commit plan."""

from __future__ import annotations

from dataclasses import dataclass, field

from commit_canvas.dates import add_days, diff_in_days, parse_iso_date
from commit_canvas.errors import ValidationError
from commit_canvas.grid import GRID_DAYS, flatten_grid
from commit_canvas.models import (
    CommitPlanEntry,
    CommitPlanSummary,
    DateRange,
    GridPayload,
    IntensityMap,
)
from commit_canvas.rng import Rng, create_rng, random_int

HIGH_VOLUME_THRESHOLD = 2500
SPARSE_ACTIVE_DAYS = 30


def default_intensity_map() -> IntensityMap:
    return IntensityMap(
        min_by_level={0: 0, 1: 1, 2: 3, 3: 6, 4: 10},
        max_by_level={0: 0, 1: 2, 2: 5, 3: 9, 4: 14},
    )


@dataclass
class PlanResult:
    plan: list[CommitPlanEntry]
    summary: CommitPlanSummary
    warnings: list[str] = field(default_factory=list)


def build_commit_plan(
    grid: GridPayload,
    date_range: DateRange,
    intensity_map: IntensityMap,
    seed: str | None = None,
) -> tuple[list[CommitPlanEntry], CommitPlanSummary]:
    """Build the ordered commit plan and its summary.

    Args:
        grid: Painted 7x51 canvas.
        date_range: First and last day covered by the grid.
        intensity_map: Commit count bounds per level.
        seed: Optional seed; defaults to ``"{startDate}:{endDate}"``.

    Returns:
        A tuple of ``(plan, summary)``. Identical inputs yield identical output.

    Raises:
        ValidationError: On bad dates, a range that is not 357 days, a bad
            grid, or inverted intensity bounds.
    """
    parse_iso_date(date_range.start_date, "startDate")
    parse_iso_date(date_range.end_date, "endDate")

    expected_end = add_days(date_range.start_date, GRID_DAYS - 1)
    if date_range.end_date != expected_end:
        raise ValidationError(
            f"endDate must be {expected_end} for a 7x51 grid.",
            kind="DateRangeMismatch",
        )
    if diff_in_days(date_range.start_date, date_range.end_date) != GRID_DAYS - 1:
        raise ValidationError("Date range does not match 7x51 grid day count.", kind="DateRangeMismatch")

    effective_seed = seed if seed is not None else f"{date_range.start_date}:{date_range.end_date}"
    rng = create_rng(effective_seed)

    plan = [
        CommitPlanEntry(
            date=day,
            level=level,
            commit_count=_commit_count_for_level(level, intensity_map, rng),
        )
        for day, level in flatten_grid(grid, date_range.start_date)
    ]
    return plan, summarize_plan(plan, date_range)


def _commit_count_for_level(level: int, intensity_map: IntensityMap, rng: Rng) -> int:
    if level == 0:
        return 0

    minimum = intensity_map.min_by_level.get(level)
    maximum = intensity_map.max_by_level.get(level)
    if minimum is None or maximum is None:
        raise ValidationError(f"Missing intensity range for level {level}.", kind="InvalidIntensityRange")
    if minimum < 0 or minimum > maximum:
        raise ValidationError(
            f"Intensity range for level {level} is invalid ({minimum}..{maximum}).",
            kind="InvalidIntensityRange",
        )
    return random_int(rng, minimum, maximum)


def summarize_plan(plan: list[CommitPlanEntry], requested_range: DateRange) -> CommitPlanSummary:
    return CommitPlanSummary(
        total_commits=sum(entry.commit_count for entry in plan),
        active_days=sum(1 for entry in plan if entry.commit_count > 0),
        first_grid_date=plan[0].date if plan else requested_range.start_date,
        last_grid_date=plan[-1].date if plan else requested_range.end_date,
        requested_range=requested_range,
    )


def create_plan(
    grid: GridPayload,
    date_range: DateRange,
    intensity_map: IntensityMap,
    seed: str | None = None,
) -> PlanResult:
    """Build a plan and attach warnings suitable for display."""
    plan, summary = build_commit_plan(grid, date_range, intensity_map, seed)

    warnings: list[str] = []
    if summary.total_commits > HIGH_VOLUME_THRESHOLD:
        warnings.append(
            "High commit volume detected. Consider lowering intensity levels if you want a subtle graph."
        )
    if summary.active_days < SPARSE_ACTIVE_DAYS:
        warnings.append(
            "Very few active days. The graph may look sparse; increase some intensity levels if desired."
        )

    return PlanResult(plan=plan, summary=summary, warnings=warnings)
