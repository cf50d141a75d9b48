"""Sequential git subprocess runner bound to one repository path."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Mapping
from datetime import datetime
from pathlib import Path

from loguru import logger

from commit_canvas.errors import GitCommandError
from commit_canvas.models import CommitRecord


def git_available() -> bool:
    """Return ``True`` when a ``git`` executable is on ``PATH``."""
    return shutil.which("git") is not None


def run_cmd(cmd: list[str], cwd: Path | None = None, env: Mapping[str, str] | None = None) -> str:
    """Run a command and return stdout, raising on failure."""
    proc = subprocess.run(
        cmd,
        cwd=str(cwd) if cwd else None,
        env=dict(env) if env is not None else None,
        capture_output=True,
        text=True,
        check=False,
    )
    if proc.returncode != 0:
        raise GitCommandError(cmd, proc.returncode, proc.stderr.strip())
    return proc.stdout


class GitClient:
    """Runs git commands against ``repo_path`` one at a time.

    A synthesizer run owns exactly one client; every call waits for the
    process to exit and checks its status before returning.
    """

    def __init__(self, repo_path: Path):
        self.repo_path = Path(repo_path)

    def run(self, args: list[str], extra_env: Mapping[str, str] | None = None) -> str:
        cmd = ["git", *args]
        env = None
        if extra_env:
            env = {**os.environ, **extra_env}
        logger.debug(f"git {' '.join(args)}")
        return run_cmd(cmd, cwd=self.repo_path, env=env).strip()

    def init(self, default_branch: str = "main") -> None:
        self.run(["init", "--quiet", f"--initial-branch={default_branch}"])

    def set_identity(self, name: str, email: str) -> None:
        self.run(["config", "user.name", name])
        self.run(["config", "user.email", email])

    def add(self, *paths: str) -> None:
        self.run(["add", *paths])

    def commit(self, message: str, timestamp: str) -> None:
        """Commit staged changes with author and committer dates both forced to ``timestamp``."""
        self.run(
            ["commit", "--quiet", "-m", message, "--date", timestamp],
            extra_env={"GIT_AUTHOR_DATE": timestamp, "GIT_COMMITTER_DATE": timestamp},
        )

    def log_sample(self, limit: int = 5) -> list[str]:
        output = self.run(["--no-pager", "log", f"-{limit}", "--oneline"])
        return output.splitlines() if output else []

    def list_commits(self, max_commits: int | None = None) -> list[CommitRecord]:
        """Return commits newest first with their author and committer dates."""
        args = ["--no-pager", "log", "--pretty=format:%H%x1f%s%x1f%aI%x1f%cI"]
        if max_commits:
            args.extend(["-n", str(max_commits)])
        output = self.run(args)
        commits: list[CommitRecord] = []
        for line in output.splitlines():
            if not line.strip():
                continue
            commit_hash, subject, author_ts, committer_ts = line.split("\x1f", maxsplit=3)
            commits.append(
                CommitRecord(
                    commit_hash=commit_hash,
                    subject=subject,
                    author_date=datetime.fromisoformat(author_ts.replace("Z", "+00:00")),
                    committer_date=datetime.fromisoformat(committer_ts.replace("Z", "+00:00")),
                )
            )
        return commits
