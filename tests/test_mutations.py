from __future__ import annotations

import re

from commit_canvas.mutations import (
    DUMP_HEADER,
    TOKEN_ALPHABET,
    append_mutation,
    build_mutation,
    ensure_dump_file,
    generate_token,
)
from commit_canvas.rng import create_rng

LINE_RE = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z :: 3 :: 2023-05-07::3::[a-z0-9]{16}$"
)


def test_generate_token_given_seeded_rng_when_generated_then_token_is_reproducible_and_alphanumeric() -> None:
    # Given
    first_rng = create_rng("token")
    second_rng = create_rng("token")

    # When
    first = generate_token(first_rng)
    second = generate_token(second_rng)

    # Then
    assert first == second
    assert len(first) == 16
    assert set(first) <= set(TOKEN_ALPHABET)


def test_build_mutation_given_date_and_index_when_built_then_payload_encodes_both() -> None:
    # Given
    rng = create_rng("payload")

    # When
    mutation = build_mutation(rng, "2023-05-07", 3)

    # Then
    assert mutation.commit_index == 3
    assert mutation.payload.startswith("2023-05-07::3::")
    assert len(mutation.payload.rsplit("::", 1)[1]) == 16


def test_append_mutation_given_dump_file_when_appended_then_one_line_per_mutation_follows_header(tmp_path) -> None:
    # Given
    dump_path = ensure_dump_file(tmp_path)
    rng = create_rng("lines")

    # When
    append_mutation(dump_path, build_mutation(rng, "2023-05-07", 3))
    append_mutation(dump_path, build_mutation(rng, "2023-05-07", 3))

    # Then
    text = dump_path.read_text(encoding="utf-8")
    assert text.startswith(DUMP_HEADER)
    lines = text[len(DUMP_HEADER):].splitlines()
    assert len(lines) == 2
    assert all(LINE_RE.match(line) for line in lines)
    assert lines[0] != lines[1]
