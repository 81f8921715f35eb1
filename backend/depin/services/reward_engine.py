"""
Reward computation for telemetry submissions

Pure functions: the reward depends only on the submitted measurement and
the device's count of previously rewarded submissions.
"""
from dataclasses import dataclass
from decimal import ROUND_DOWN, Decimal
from typing import Union

from depin.models.telemetry import NetworkQualityData

BASE_REWARD = Decimal("1000")
UPTIME_BONUS_DIVISOR = Decimal("1000")
UPTIME_BONUS_CAP = Decimal("0.5")
# Rewards are unsigned 64-bit units
MAX_REWARD = 2 ** 64 - 1


def _decimal(value: Union[int, float]) -> Decimal:
    # str() gives the shortest repr, so 0.95 becomes Decimal("0.95")
    return Decimal(str(value))


def signal_multiplier(signal_strength: int) -> Decimal:
    if signal_strength > -70:
        return Decimal("1.5")
    if signal_strength > -80:
        return Decimal("0.8")
    return Decimal("0.3")


def latency_multiplier(latency: int) -> Decimal:
    if latency < 50:
        return Decimal("1.2")
    if latency < 100:
        return Decimal("1.0")
    return Decimal("0.6")


def throughput_multiplier(throughput: int) -> Decimal:
    if throughput > 1_000_000:
        return Decimal("1.3")
    if throughput > 500_000:
        return Decimal("1.0")
    return Decimal("0.7")


def uptime_bonus(device_uptime: int) -> Decimal:
    """1.0 plus 0.001 per rewarded submission, capped at 1.5"""
    return Decimal(1) + min(Decimal(int(device_uptime)) / UPTIME_BONUS_DIVISOR, UPTIME_BONUS_CAP)


@dataclass(frozen=True)
class RewardBreakdown:
    """Multipliers behind a reward amount"""
    signal: Decimal
    latency: Decimal
    throughput: Decimal
    availability: Decimal
    uptime: Decimal

    @property
    def total_multiplier(self) -> Decimal:
        return self.signal * self.latency * self.throughput * self.availability * self.uptime

    @property
    def amount(self) -> int:
        """Reward units: base times the multipliers, truncated toward zero"""
        product = BASE_REWARD * self.total_multiplier
        if product.is_nan() or product <= 0:
            return 0
        if product.is_infinite():
            return MAX_REWARD
        return min(int(product.to_integral_value(rounding=ROUND_DOWN)), MAX_REWARD)

    def to_dict(self) -> dict:
        return {
            "signal": str(self.signal),
            "latency": str(self.latency),
            "throughput": str(self.throughput),
            "availability": str(self.availability),
            "uptime": str(self.uptime),
            "amount": self.amount,
        }


def reward_breakdown(quality: NetworkQualityData, device_uptime: int) -> RewardBreakdown:
    """Compute every multiplier for a measurement"""
    return RewardBreakdown(
        signal=signal_multiplier(quality.signal_strength),
        latency=latency_multiplier(quality.latency),
        throughput=throughput_multiplier(quality.throughput),
        availability=_decimal(quality.availability),
        uptime=uptime_bonus(device_uptime),
    )


def calculate_reward(quality: NetworkQualityData, device_uptime: int) -> int:
    """
    Reward units earned by a submission

    Args:
        quality: Submitted telemetry
        device_uptime: Number of the device's previously rewarded submissions

    Returns:
        Non-negative integer reward amount
    """
    return reward_breakdown(quality, device_uptime).amount
