"""Grid shape validation and cell-to-date mapping."""

from __future__ import annotations

from collections.abc import Iterator

from commit_canvas.dates import add_days, parse_iso_date
from commit_canvas.errors import ValidationError
from commit_canvas.models import GridPayload

GRID_ROWS = 7
GRID_COLS = 51
GRID_DAYS = GRID_ROWS * GRID_COLS
VALID_LEVELS = frozenset({0, 1, 2, 3, 4})


def validate_grid(grid: GridPayload) -> None:
    """Reject grids that are not exactly 7x51 cells of levels 0-4."""
    if grid.rows != GRID_ROWS or grid.cols != GRID_COLS:
        raise ValidationError(
            f"Grid must be {GRID_ROWS}x{GRID_COLS}, received {grid.rows}x{grid.cols}.",
            kind="InvalidGridShape",
        )
    if len(grid.levels) != grid.rows:
        raise ValidationError("Grid levels row count does not match rows.", kind="InvalidGridShape")

    for row_index, row in enumerate(grid.levels):
        if len(row) != grid.cols:
            raise ValidationError(
                f"Grid row {row_index} does not match column count.",
                kind="InvalidGridShape",
            )
        for col_index, level in enumerate(row):
            if level not in VALID_LEVELS:
                raise ValidationError(
                    f"Grid cell at ({row_index}, {col_index}) has invalid level {level}.",
                    kind="InvalidCellLevel",
                )


def date_for_cell(start_date: str, row: int, col: int) -> str:
    """Return the ISO date shown by the cell at ``(row, col)``."""
    return add_days(start_date, col * GRID_ROWS + row)


def flatten_grid(grid: GridPayload, start_date: str) -> Iterator[tuple[str, int]]:
    """Validate ``grid`` and return its cells as chronological ``(date, level)`` pairs.

    Validation happens immediately; the pairs are produced lazily, columns
    outer and rows inner, which is ascending date order.
    """
    validate_grid(grid)
    parse_iso_date(start_date, "startDate")
    return _iter_cells(grid, start_date)


def _iter_cells(grid: GridPayload, start_date: str) -> Iterator[tuple[str, int]]:
    for col in range(grid.cols):
        for row in range(grid.rows):
            yield date_for_cell(start_date, row, col), grid.levels[row][col]


def blank_levels(level: int = 0) -> list[list[int]]:
    """Build a 7x51 level matrix filled with ``level``."""
    return [[level] * GRID_COLS for _ in range(GRID_ROWS)]
