from __future__ import annotations

import pytest

from commit_canvas.errors import ValidationError
from commit_canvas.rng import create_rng, hash_seed, random_int


def test_hash_seed_given_reference_inputs_when_hashed_then_fnv1a_values_are_returned() -> None:
    # Given
    inputs = ["", "a", "foobar"]

    # When
    hashes = [hash_seed(value) for value in inputs]

    # Then
    assert hashes == [2166136261, 0xE40C292C, 0xBF9CF968]


def test_create_rng_given_same_seed_when_drawn_then_sequences_match() -> None:
    # Given
    rng_a = create_rng("2023-01-01:2023-12-23")
    rng_b = create_rng("2023-01-01:2023-12-23")

    # When
    draws_a = [rng_a() for _ in range(200)]
    draws_b = [rng_b() for _ in range(200)]

    # Then
    assert draws_a == draws_b
    assert all(0.0 <= value < 1.0 for value in draws_a)


def test_create_rng_given_different_seeds_when_drawn_then_sequences_differ() -> None:
    # Given
    rng_a = create_rng("alpha")
    rng_b = create_rng("beta")

    # When
    draws_a = [rng_a() for _ in range(10)]
    draws_b = [rng_b() for _ in range(10)]

    # Then
    assert draws_a != draws_b


def test_create_rng_given_two_generators_when_interleaved_then_state_is_not_shared() -> None:
    # Given
    solo = create_rng("seed")
    expected = [solo() for _ in range(5)]
    first = create_rng("seed")
    second = create_rng("seed")

    # When
    interleaved = []
    for _ in range(5):
        interleaved.append(first())
        second()

    # Then
    assert interleaved == expected


def test_random_int_given_fractional_bounds_when_drawn_then_bounds_are_rounded_inward() -> None:
    # Given
    rng = create_rng("bounds")

    # When
    values = {random_int(rng, 1.2, 3.8) for _ in range(300)}

    # Then
    assert values == {2, 3}


def test_random_int_given_extreme_draws_when_mapped_then_range_ends_are_reached() -> None:
    # Given
    lowest = lambda: 0.0  # noqa: E731
    highest = lambda: 0.999999  # noqa: E731

    # When
    low = random_int(lowest, 10, 14)
    high = random_int(highest, 10, 14)

    # Then
    assert low == 10
    assert high == 14


def test_random_int_given_inverted_range_when_drawn_then_invalid_range_is_raised() -> None:
    # Given
    rng = create_rng("x")

    # When
    with pytest.raises(ValidationError) as excinfo:
        random_int(rng, 5, 4)

    # Then
    assert excinfo.value.kind == "InvalidRange"


@pytest.mark.parametrize(
    ("seed", "expected_hash", "expected_draws"),
    [
        ("test", 2949673445, [3079946387, 1488242721, 1149230787, 1078269322, 3765337915]),
        ("héllo✓😀", 1281149889, [2325827220, 3873055206, 4160780075, 1021179799, 779943786]),
    ],
)
def test_create_rng_given_reference_seeds_when_drawn_then_known_sequences_are_reproduced(
    seed,
    expected_hash,
    expected_draws,
) -> None:
    # Given
    rng = create_rng(seed)

    # When
    draws = [rng() * 4294967296 for _ in range(5)]

    # Then
    assert hash_seed(seed) == expected_hash
    assert draws == expected_draws
