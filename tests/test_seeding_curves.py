import os
import sys

import numpy as np
import pytest

ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)

from delve_config import CHUNK_WIDTH, CHUNK_HEIGHT
import seeding
import value_curves


def test_derive_is_stable_and_order_sensitive():
    a = seeding.derive(82981925813, [3, 432])
    assert a == seeding.derive(82981925813, [3, 432])
    assert 0 <= a < 2**64
    assert a != seeding.derive(82981925813, [432, 3])
    assert a != seeding.derive(82981925814, [3, 432])
    assert seeding.derive(5) != seeding.derive(5, [0])


def test_derive_spreads_neighbouring_inputs():
    seeds = {seeding.derive(1, [n]) for n in range(1000)}
    assert len(seeds) == 1000


def test_sample_range_and_repeatability():
    rng = np.random.RandomState(1337)
    for seed in rng.randint(1, 1_000_000, size=10):
        values = value_curves.sample(int(seed), 64, 3, 10)
        assert len(values) == 64
        assert values.min() >= 3 and values.max() < 10
        assert np.array_equal(values, value_curves.sample(int(seed), 64, 3, 10))


def test_evaluate_hits_control_points():
    points = [3, 7, 5, 12, 4, 4, 9, 15, 3, 6, 8, 10, 11, 2, 5, 7]
    step = CHUNK_WIDTH // len(points) + 1
    for k in range(len(points) - 1):
        assert value_curves.evaluate(k * step, points) == pytest.approx(points[k])


def test_evaluate_smoothstep_between_points():
    points = [0, 10, 10, 10]
    step = CHUNK_WIDTH // len(points) + 1
    # halfway between two points the smoothstep weight is exactly one half
    assert step % 2 == 1
    mid = value_curves.evaluate(step / 2, points)
    assert mid == pytest.approx(5.0)
    values = [value_curves.evaluate(x, points) for x in range(step + 1)]
    assert all(b >= a for a, b in zip(values, values[1:])), "curve must rise monotonically between rising points"
    # flat at the control point: the first step is smaller than the middle one
    assert values[1] - values[0] < values[step // 2 + 1] - values[step // 2]


def test_evaluate_rejects_columns_past_last_point():
    with pytest.raises(ValueError):
        value_curves.evaluate(CHUNK_WIDTH - 1, [1, 2])


def test_all_generator_curves_cover_the_chunk():
    for count in (16, 32, 64):
        points = list(range(count))
        rows = value_curves.curve_rows(points)
        assert len(rows) == CHUNK_WIDTH


def test_round_half_up():
    assert value_curves.round_half_up(2.5) == 3
    assert value_curves.round_half_up(2.49) == 2
    assert value_curves.round_half_up(-2.5) == -3
    assert value_curves.round_half_up(0.0) == 0


def test_feature_tags_are_distinct_and_above_vein_indices():
    assert len(set(seeding.FEATURE_TAGS)) == len(seeding.FEATURE_TAGS)
    trials = CHUNK_WIDTH * CHUNK_HEIGHT
    for tag in seeding.FEATURE_TAGS:
        assert tag > trials, f"tag {tag} could be mistaken for a vein index"
        assert tag < 2**64
