"""
Unit tests for interaction payload validation.
"""

import math

import pytest
from pydantic import ValidationError

from ratingwatch.anomaly.schema import NewInteraction


def test_accepts_signed_ratings_of_any_magnitude():
    assert NewInteraction(source=1, target=1, rating=-1e12).rating == -1e12
    assert NewInteraction(source=-5, target=7, rating=0.0).rating == 0.0


@pytest.mark.parametrize("rating", [math.nan, math.inf, -math.inf, "NaN", "Infinity"])
def test_rejects_non_finite_ratings(rating):
    with pytest.raises(ValidationError):
        NewInteraction(source=1, target=2, rating=rating)


def test_rejects_unknown_fields_and_out_of_range_ids():
    with pytest.raises(ValidationError):
        NewInteraction(source=1, target=2, rating=1.0, timestamp=5)
    with pytest.raises(ValidationError):
        NewInteraction(source=2**31, target=2, rating=1.0)
