"""The append-only dump file mutated once per synthetic commit."""

from __future__ import annotations

from pathlib import Path

from commit_canvas.dates import utc_now_iso
from commit_canvas.models import MutationRecord
from commit_canvas.rng import Rng, random_int

DUMP_FILE_NAME = "dump.txt"
TOKEN_ALPHABET = "abcdefghijklmnopqrstuvwxyz0123456789"
TOKEN_LENGTH = 16
DUMP_HEADER = "\n".join(
    [
        "# Draw-on-Git-History",
        "# This file is mutated to create commit activity.",
        "",
    ]
)


def ensure_dump_file(repo_path: Path) -> Path:
    """Create the dump file with its header and return its path."""
    file_path = repo_path / DUMP_FILE_NAME
    file_path.write_text(DUMP_HEADER, encoding="utf-8")
    return file_path


def generate_token(rng: Rng, length: int = TOKEN_LENGTH) -> str:
    return "".join(TOKEN_ALPHABET[random_int(rng, 0, len(TOKEN_ALPHABET) - 1)] for _ in range(length))


def build_mutation(rng: Rng, date_label: str, commit_index: int) -> MutationRecord:
    """Build the record for the ``commit_index``-th commit of ``date_label``."""
    token = generate_token(rng)
    return MutationRecord(
        timestamp=utc_now_iso(),
        commit_index=commit_index,
        payload=f"{date_label}::{commit_index}::{token}",
    )


def format_mutation(mutation: MutationRecord) -> str:
    return f"{mutation.timestamp} :: {mutation.commit_index} :: {mutation.payload}\n"


def append_mutation(file_path: Path, mutation: MutationRecord) -> None:
    with file_path.open("a", encoding="utf-8") as handle:
        handle.write(format_mutation(mutation))
