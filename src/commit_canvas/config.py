"""Runtime configuration resolved from environment variables."""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel, Field

from commit_canvas.models import IntensityMap
from commit_canvas.planner import default_intensity_map

DEFAULT_AUTHOR_NAME = "Draw Bot"
DEFAULT_AUTHOR_EMAIL = "drawbot@example.com"
DEFAULT_BRANCH = "main"


class AppConfig(BaseModel):
    output_root: Path
    default_author_name: str = DEFAULT_AUTHOR_NAME
    default_author_email: str = DEFAULT_AUTHOR_EMAIL
    default_branch: str = DEFAULT_BRANCH
    allow_output_root_override: bool = False
    intensity_map: IntensityMap = Field(default_factory=default_intensity_map)


def load_config(env: Mapping[str, str] | None = None) -> AppConfig:
    """Build an ``AppConfig`` from environment variables and defaults.

    Resolution:
    - ``OUTPUT_ROOT`` or the parent of the working directory.
    - ``GIT_AUTHOR_NAME`` / ``GIT_AUTHOR_EMAIL`` for the default identity.
    - ``ALLOW_OUTPUT_ROOT_OVERRIDE`` enables per-request roots only when ``"true"``.
    - ``COMMIT_CANVAS_DEFAULT_BRANCH`` for the initial branch name.
    """
    env = os.environ if env is None else env

    output_root = (env.get("OUTPUT_ROOT") or "").strip()
    resolved_root = Path(output_root).expanduser() if output_root else Path.cwd().parent

    return AppConfig(
        output_root=resolved_root.resolve(),
        default_author_name=(env.get("GIT_AUTHOR_NAME") or "").strip() or DEFAULT_AUTHOR_NAME,
        default_author_email=(env.get("GIT_AUTHOR_EMAIL") or "").strip() or DEFAULT_AUTHOR_EMAIL,
        default_branch=(env.get("COMMIT_CANVAS_DEFAULT_BRANCH") or "").strip() or DEFAULT_BRANCH,
        allow_output_root_override=env.get("ALLOW_OUTPUT_ROOT_OVERRIDE") == "true",
    )
