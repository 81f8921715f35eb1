"""
Tests for reward computation
"""
from decimal import Decimal

import pytest

from conftest import make_quality
from depin.services.reward_engine import (MAX_REWARD, calculate_reward,
                                          latency_multiplier, reward_breakdown,
                                          signal_multiplier,
                                          throughput_multiplier, uptime_bonus)


def test_scenario_a_fresh_device():
    """1.5 x 1.2 x 1.3 x 0.95 x 1.0 = 2.223"""
    assert calculate_reward(make_quality(), device_uptime=0) == 2223


def test_scenario_b_uptime_bonus_capped():
    """Uptime 600 caps the bonus at 1.5: 3.3345 truncates to 3334"""
    assert calculate_reward(make_quality(), device_uptime=600) == 3334


def test_scenario_c_poor_quality():
    quality = make_quality(signal_strength=-85, latency=150, throughput=100_000, availability=0.5)
    assert calculate_reward(quality, device_uptime=0) == 63


@pytest.mark.parametrize("signal,expected", [
    (-50, Decimal("1.5")),
    (-69, Decimal("1.5")),
    (-70, Decimal("0.8")),
    (-79, Decimal("0.8")),
    (-80, Decimal("0.3")),
    (-120, Decimal("0.3")),
])
def test_signal_tiers(signal, expected):
    assert signal_multiplier(signal) == expected


@pytest.mark.parametrize("latency,expected", [
    (0, Decimal("1.2")),
    (49, Decimal("1.2")),
    (50, Decimal("1.0")),
    (99, Decimal("1.0")),
    (100, Decimal("0.6")),
])
def test_latency_tiers(latency, expected):
    assert latency_multiplier(latency) == expected


@pytest.mark.parametrize("throughput,expected", [
    (1_000_001, Decimal("1.3")),
    (1_000_000, Decimal("1.0")),
    (500_001, Decimal("1.0")),
    (500_000, Decimal("0.7")),
    (0, Decimal("0.7")),
])
def test_throughput_tiers(throughput, expected):
    assert throughput_multiplier(throughput) == expected


def test_uptime_bonus_grows_then_caps():
    assert uptime_bonus(0) == Decimal("1")
    assert uptime_bonus(1) == Decimal("1.001")
    assert uptime_bonus(499) == Decimal("1.499")
    assert uptime_bonus(500) == Decimal("1.5")
    assert uptime_bonus(10_000) == Decimal("1.5")


def test_reward_is_deterministic():
    quality = make_quality(signal_strength=-72, latency=75, throughput=750_000, availability=0.81)
    first = calculate_reward(quality, device_uptime=42)
    assert all(calculate_reward(quality, device_uptime=42) == first for _ in range(10))


def test_zero_availability_earns_nothing():
    assert calculate_reward(make_quality(availability=0.0), device_uptime=0) == 0


def test_negative_availability_earns_nothing():
    assert calculate_reward(make_quality(availability=-0.5), device_uptime=100) == 0


def test_nan_availability_earns_nothing():
    assert calculate_reward(make_quality(availability=float("nan")), device_uptime=0) == 0


def test_infinite_availability_saturates():
    assert calculate_reward(make_quality(availability=float("inf")), device_uptime=0) == MAX_REWARD


def test_availability_above_one_is_not_clamped():
    # 1000 x 1.5 x 1.2 x 1.3 x 2.0
    assert calculate_reward(make_quality(availability=2.0), device_uptime=0) == 4680


def test_breakdown_reports_multipliers():
    breakdown = reward_breakdown(make_quality(), device_uptime=0)

    assert breakdown.total_multiplier == Decimal("2.22300")
    data = breakdown.to_dict()
    assert data["signal"] == "1.5"
    assert data["availability"] == "0.95"
    assert data["amount"] == 2223
