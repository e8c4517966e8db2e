import math

import pytest

from livetrack.schemas.tracking import Position
from livetrack.services.motion import MotionAggregator
from livetrack.utils.geo import haversine_m


def P(lat, lon, t):
    return Position(latitude=lat, longitude=lon, timestamp=t)


def test_first_sample_has_zero_speeds():
    agg = MotionAggregator()
    state = agg.update(P(35.70, 51.40, 0.0))
    assert state.current_speed_mps == 0.0
    assert state.average_speed_mps == 0.0
    assert state.total_distance_m == 0.0
    assert state.previous_position == P(35.70, 51.40, 0.0)
    assert not math.isnan(state.average_speed_mps)


def test_speed_between_two_samples():
    agg = MotionAggregator()
    agg.update(P(35.70, 51.40, 0.0))
    state = agg.update(P(35.701, 51.40, 10.0))
    d = haversine_m((35.70, 51.40), (35.701, 51.40))
    assert state.current_speed_mps == pytest.approx(d / 10.0)
    assert state.average_speed_mps == pytest.approx(d / 10.0)
    assert state.total_distance_m == pytest.approx(d)


def test_total_is_sum_of_pairwise_distances_and_never_decreases():
    samples = [
        P(35.700, 51.400, 0.0),
        P(35.701, 51.400, 1.0),
        P(35.701, 51.400, 2.0),  # standing still
        P(35.702, 51.401, 3.0),
        P(35.700, 51.400, 5.0),  # heading back still adds distance
    ]
    agg = MotionAggregator()
    totals = []
    for s in samples:
        totals.append(agg.update(s).total_distance_m)
    assert totals == sorted(totals)
    expected = sum(
        haversine_m((a.latitude, a.longitude), (b.latitude, b.longitude))
        for a, b in zip(samples, samples[1:])
    )
    assert totals[-1] == pytest.approx(expected)
    assert agg.state.average_speed_mps == pytest.approx(expected / 5.0)


def test_zero_elapsed_does_not_divide():
    agg = MotionAggregator()
    agg.update(P(35.70, 51.40, 3.0))
    state = agg.update(P(35.701, 51.40, 3.0))
    assert state.current_speed_mps == 0.0
    assert state.average_speed_mps == 0.0
    assert state.total_distance_m > 0


def test_nan_sample_is_rejected_without_advancing():
    agg = MotionAggregator()
    agg.update(P(35.70, 51.40, 0.0))
    assert agg.update(P(float("nan"), 51.40, 1.0)) is None
    assert agg.state.previous_position.timestamp == 0.0
    assert agg.state.samples == 1


def test_out_of_order_sample_is_rejected():
    agg = MotionAggregator()
    agg.update(P(35.70, 51.40, 5.0))
    assert agg.update(P(35.701, 51.40, 4.0)) is None
    assert agg.state.total_distance_m == 0.0


def test_reset_starts_over():
    agg = MotionAggregator()
    agg.update(P(35.70, 51.40, 0.0))
    agg.update(P(35.701, 51.40, 1.0))
    agg.reset()
    assert agg.state.previous_position is None
    assert agg.state.total_distance_m == 0.0
