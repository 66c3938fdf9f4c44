"""Unit tests for the spot versus on-demand cost estimate."""

import pytest
from datetime import timedelta

from ec2spot.models.price_collection import SpotPriceCollection
from ec2spot.models.spot_data import InstanceTypeInfo
from ec2spot.services.cost_estimator import CostEstimate, estimate_cost
from tests.fixtures.mock_responses import FIXED_NOW, PriceSampleFactory


make = PriceSampleFactory.sample
INFO = InstanceTypeInfo("C4 High-CPU Large", 2, 3.75, 0.10)


def at_hour(hour: int, minute: int = 30):
    """Instant inside the hour-th hourly bucket of a one-day window ending at FIXED_NOW."""
    return FIXED_NOW - timedelta(days=1) + timedelta(hours=hour, minutes=minute)


class TestEstimateCost:
    """Test cases for estimate_cost."""

    def test_on_demand_cost_covers_every_hour(self):
        estimate = estimate_cost(SpotPriceCollection(), INFO, days=1, now=FIXED_NOW)

        assert estimate.hours == 24
        assert estimate.on_demand_cost == pytest.approx(2.4)
        assert estimate.spot_cost == 0.0
        assert estimate.hours_without_data == 24
        assert estimate.times_outbid == 0

    def test_charges_hourly_max_without_bid(self):
        prices = SpotPriceCollection([
            make(0.03, at_hour(0, 10), availability_zone="us-east-1a"),
            make(0.04, at_hour(0, 20), availability_zone="us-east-1b"),
            make(0.05, at_hour(5)),
        ])

        estimate = estimate_cost(prices, INFO, days=1, now=FIXED_NOW)

        assert estimate.max_bid == pytest.approx(0.05)
        assert estimate.spot_cost == pytest.approx(0.09)
        assert estimate.times_outbid == 0
        assert estimate.hours_without_data == 22

    def test_bid_below_prices_counts_outbid_hours(self):
        prices = SpotPriceCollection([
            make(0.03, at_hour(1)),
            make(0.08, at_hour(2), availability_zone="us-east-1a"),
            make(0.09, at_hour(2, 40), availability_zone="us-east-1b"),
        ])

        estimate = estimate_cost(prices, INFO, days=1, max_bid=0.05, now=FIXED_NOW)

        assert estimate.max_bid == 0.05
        assert estimate.times_outbid == 1
        assert estimate.spot_cost == pytest.approx(0.03)

    def test_hours_without_prices_are_not_outbid(self):
        prices = SpotPriceCollection([
            make(0.03, at_hour(1)),
            make(0.09, at_hour(2)),
        ])

        estimate = estimate_cost(prices, INFO, days=1, max_bid=0.05, now=FIXED_NOW)

        assert estimate.times_outbid == 1
        assert estimate.hours_without_data == 22
        assert estimate.spot_cost == pytest.approx(0.03)
        running_hours = estimate.hours - estimate.times_outbid - estimate.hours_without_data
        assert running_hours == 1

    def test_one_affordable_zone_keeps_instance_running(self):
        prices = SpotPriceCollection([
            make(0.04, at_hour(3), availability_zone="us-east-1a"),
            make(0.20, at_hour(3, 45), availability_zone="us-east-1b"),
        ])

        estimate = estimate_cost(prices, INFO, days=1, max_bid=0.05, now=FIXED_NOW)

        assert estimate.times_outbid == 0
        assert estimate.spot_cost == pytest.approx(0.20)

    def test_bid_above_max_is_capped(self):
        prices = SpotPriceCollection([make(0.03, at_hour(1))])

        estimate = estimate_cost(prices, INFO, days=1, max_bid=1.0, now=FIXED_NOW)

        assert estimate.max_bid == pytest.approx(0.03)

    def test_multi_day_window(self):
        estimate = estimate_cost(SpotPriceCollection(), INFO, days=7, now=FIXED_NOW)

        assert estimate.hours == 168
        assert estimate.days == 7


class TestCostEstimate:
    """Test cases for CostEstimate."""

    def test_savings_percentage(self):
        estimate = CostEstimate(1, 24, 0.1, 2.4, 0.6, 0.05, 0, 0)

        assert estimate.savings_percentage == pytest.approx(75.0)

    def test_savings_without_on_demand_price(self):
        estimate = CostEstimate(1, 24, 0.0, 0.0, 0.6, 0.05, 0, 0)

        assert estimate.savings_percentage == 0.0
