import math
import random
import pytest
from placement import place, resolve_collisions

def pairwise_distances(points):
    return [
        math.dist(points[i], points[j])
        for i in range(len(points))
        for j in range(i + 1, len(points))
    ]

@pytest.mark.parametrize("count", range(1, 13))
def test_place_returns_one_position_per_clone(count, rng):
    positions = place((500, 500), count, rng=rng)
    assert len(positions) == count

def test_place_non_positive_count_is_empty(rng):
    assert place((500, 500), 0, rng=rng) == []
    assert place((500, 500), -3, rng=rng) == []

def test_three_clones_around_center():
    positions = place((500, 500), 3, rng=random.Random(7))
    for x, y in positions:
        assert 130 - 1e-6 <= math.dist((x, y), (500, 500)) <= 170 + 1e-6
    assert all(d >= 80 for d in pairwise_distances(positions))

def test_place_is_repeatable_with_seed():
    assert place((0, 0), 5, rng=random.Random(99)) == place((0, 0), 5, rng=random.Random(99))

def test_coincident_points_are_split():
    positions, passes = resolve_collisions([(100, 100), (100, 100)], min_distance=80, max_iterations=10)
    assert passes < 10
    assert math.dist(positions[0], positions[1]) >= 80 - 1e-9
    assert positions[0][1] == pytest.approx(100)

@pytest.mark.parametrize("count", [4, 8, 16, 30])
def test_separation_converges_or_hits_cap(count):
    rng = random.Random(count)
    crowded = [(rng.uniform(0, 60), rng.uniform(0, 60)) for _ in range(count)]
    positions, passes = resolve_collisions(crowded, min_distance=80, max_iterations=10)
    assert len(positions) == count
    assert passes <= 10
    if passes < 10:
        assert all(d >= 80 - 1e-9 for d in pairwise_distances(positions))

def test_separated_points_are_untouched():
    points = [(0, 0), (200, 0), (0, 200)]
    positions, passes = resolve_collisions(points, min_distance=80, max_iterations=10)
    assert passes == 0
    assert [tuple(p) for p in positions] == points
