"""
Unit tests for running entity statistics.
"""

import random
from math import isclose

import pytest

from ratingwatch.anomaly.statistics import EntityStatistics
from ratingwatch.core.exceptions import EmptyStatistics


def test_update_accumulates_moments():
    stats = EntityStatistics()
    stats.update(2.0)
    stats.update(-3.0)

    assert stats.count == 2
    assert stats.sum == -1.0
    assert stats.sum_of_squares == 13.0


def test_empty_statistics_fail():
    stats = EntityStatistics()

    with pytest.raises(EmptyStatistics):
        stats.mean()
    with pytest.raises(EmptyStatistics):
        stats.std_dev()


@pytest.mark.parametrize("rating", [0.0, 1.0, -7.5, 3.3, 1e12, -1e-9])
def test_single_sample_std_dev_is_zero(rating):
    stats = EntityStatistics.from_ratings([rating])

    assert stats.mean() == rating
    assert stats.std_dev() == 0.0


@pytest.mark.parametrize("rating", [0.1, -2.7, 1e6])
def test_identical_ratings_have_zero_spread(rating):
    stats = EntityStatistics.from_ratings([rating] * 7)

    assert stats.std_dev() == 0.0


def test_known_mean_and_population_std():
    stats = EntityStatistics.from_ratings([4.0, 6.0])

    assert stats.mean() == 5.0
    assert stats.std_dev() == 1.0


def test_population_std_matches_definition():
    ratings = [2.0, 4.0, 4.0, 4.0, 5.0, 5.0, 7.0, 9.0]
    stats = EntityStatistics.from_ratings(ratings)

    assert isclose(stats.mean(), 5.0)
    assert isclose(stats.std_dev(), 2.0)


def test_fold_order_does_not_matter():
    rng = random.Random(7)
    ratings = [rng.uniform(-50.0, 50.0) for _ in range(200)]
    shuffled = list(ratings)
    rng.shuffle(shuffled)

    forward = EntityStatistics.from_ratings(ratings)
    backward = EntityStatistics.from_ratings(reversed(ratings))
    mixed = EntityStatistics.from_ratings(shuffled)

    for other in (backward, mixed):
        assert other.count == forward.count
        assert isclose(other.mean(), forward.mean(), rel_tol=1e-9, abs_tol=1e-9)
        assert isclose(other.std_dev(), forward.std_dev(), rel_tol=1e-9)


def test_merge_matches_single_fold():
    left = EntityStatistics.from_ratings([1.0, 2.0, 3.0])
    right = EntityStatistics.from_ratings([10.0, -4.0])

    merged = left.merge(right)
    folded = EntityStatistics.from_ratings([1.0, 2.0, 3.0, 10.0, -4.0])

    assert merged.count == folded.count
    assert isclose(merged.mean(), folded.mean())
    assert isclose(merged.std_dev(), folded.std_dev())


def test_merge_of_uniform_runs_keeps_zero_spread_only_when_equal():
    same = EntityStatistics.from_ratings([2.5, 2.5]).merge(EntityStatistics.from_ratings([2.5]))
    different = EntityStatistics.from_ratings([2.5, 2.5]).merge(EntityStatistics.from_ratings([3.5]))

    assert same.std_dev() == 0.0
    assert different.std_dev() > 0.0


def test_merge_with_empty_is_identity():
    stats = EntityStatistics.from_ratings([1.0, 3.0])

    assert stats.merge(EntityStatistics()).std_dev() == stats.std_dev()
    assert EntityStatistics().merge(stats).mean() == stats.mean()


def test_built_from_accumulators_uses_formula():
    stats = EntityStatistics(sum=10.0, sum_of_squares=52.0, count=2)

    assert stats.mean() == 5.0
    assert stats.std_dev() == 1.0


def test_accumulator_record_keeps_dynamic_threshold(classifier):
    stats = EntityStatistics(sum=10.0, sum_of_squares=52.0, count=2)

    assert classifier.classify(7.5, stats) is True
    assert classifier.classify(6.5, stats) is False


def test_accumulator_record_merged_with_folded_ratings():
    merged = EntityStatistics(sum=8.0, sum_of_squares=32.0, count=2).merge(
        EntityStatistics.from_ratings([4.0])
    )

    # Accumulators of [4.0, 4.0] plus 4.0: formula gives zero spread as well.
    assert merged.std_dev() == 0.0
    assert merged.count == 3


def test_internal_flags_not_in_init_or_repr():
    with pytest.raises(TypeError):
        EntityStatistics(_uniform=False)

    assert "_uniform" not in repr(EntityStatistics())
