"""Tests for the member-count level tiers."""

import pytest

from app.services.levels import party_level


@pytest.mark.parametrize("count,expected", [
    (0, 1), (1, 1), (10, 1),
    (11, 2), (100, 2),
    (101, 3), (1000, 3),
    (1001, 4), (250000, 4),
])
def test_boundaries(count, expected):
    assert party_level(count) == expected


def test_monotonic_non_decreasing():
    levels = [party_level(n) for n in range(0, 2500)]
    assert all(a <= b for a, b in zip(levels, levels[1:]))
    assert set(levels) == {1, 2, 3, 4}


def test_negative_count_is_level_one():
    assert party_level(-5) == 1
