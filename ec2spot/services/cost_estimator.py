"""
Spot versus on-demand cost estimate over a lookback window.

The window is cut into hours. For every hour that has samples, the
instance is assumed to run whenever at least one zone's highest price in
that hour is within the bid, paying the hour's highest price.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from ec2spot.models.price_collection import SpotPriceCollection
from ec2spot.models.spot_data import InstanceTypeInfo
from ec2spot.utils.timerange import days_ago, utc_now


logger = logging.getLogger(__name__)

ONE_HOUR = timedelta(hours=1)


@dataclass(frozen=True)
class CostEstimate:
    """
    Result of a cost estimate.

    Attributes:
        days: Length of the window in days
        hours: Number of hourly buckets in the window
        on_demand_price: On-demand USD/hour used for the comparison
        on_demand_cost: Cost of running on-demand for every hour
        spot_cost: Cost of running on spot for every hour not outbid
        max_bid: Bid actually applied
        times_outbid: Hours in which every zone's price exceeded the bid
        hours_without_data: Hours with no price samples (not charged)
    """
    days: int
    hours: int
    on_demand_price: float
    on_demand_cost: float
    spot_cost: float
    max_bid: float
    times_outbid: int
    hours_without_data: int

    @property
    def savings_percentage(self) -> float:
        """Share of the on-demand cost saved by running on spot."""
        if self.on_demand_cost <= 0:
            return 0.0
        return (self.on_demand_cost - self.spot_cost) / self.on_demand_cost * 100


def estimate_cost(
    prices: SpotPriceCollection,
    info: InstanceTypeInfo,
    days: int,
    max_bid: float = 0.0,
    now: Optional[datetime] = None
) -> CostEstimate:
    """
    Estimate spot and on-demand cost over the last ``days`` days.

    Args:
        prices: Samples for a single region and instance type
        info: Instance metadata supplying the on-demand price
        days: Length of the window
        max_bid: Highest price willing to pay; 0 means the highest observed price
        now: End of the window (defaults to current UTC time)

    Returns:
        CostEstimate
    """
    hours = days_ago(now or utc_now(), days).split(ONE_HOUR)

    bid = prices.max()
    if max_bid > 0 and bid > max_bid:
        bid = max_bid

    spot_cost = 0.0
    times_outbid = 0
    empty = 0

    for bucket in prices.buckets(hours):
        if not bucket.prices:
            empty += 1
            continue

        running = any(
            bid >= bucket.prices.by_availability_zone(zone).max()
            for zone in bucket.prices.availability_zones()
        )
        if running:
            spot_cost += bucket.max_price
        else:
            times_outbid += 1

    estimate = CostEstimate(
        days=days,
        hours=len(hours),
        on_demand_price=info.on_demand_price,
        on_demand_cost=info.on_demand_price * len(hours),
        spot_cost=spot_cost,
        max_bid=bid,
        times_outbid=times_outbid,
        hours_without_data=empty
    )
    logger.debug(f"Cost estimate: {estimate}")
    return estimate
