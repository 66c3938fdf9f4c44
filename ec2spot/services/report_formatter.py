"""
Text and JSON rendering of fetched spot prices.

Produces the per region / instance type report: header, price histograms
for all zones together and for each zone, and the cost estimate.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from ec2spot.models.price_collection import SpotPriceCollection
from ec2spot.models.spot_data import InstanceTypeInfo
from ec2spot.services.cost_estimator import CostEstimate


logger = logging.getLogger(__name__)


class ReportFormatter:
    """Formats price collections and cost estimates for terminal or JSON output."""

    DEFAULT_BINS = 3
    DEFAULT_WIDTH = 40
    LABEL_WIDTH = 20

    def __init__(self, bins: int = DEFAULT_BINS, width: int = DEFAULT_WIDTH):
        self.bins = bins
        self.width = width

    def format_histogram(self, prices: SpotPriceCollection) -> str:
        """
        Render a fixed-bin histogram of prices.

        Bins split ``[min, max]`` evenly; the top bin includes the max.
        Returns a placeholder line for an empty collection.
        """
        if not prices:
            return "  (no prices)"

        values = prices.prices()
        low, high = min(values), max(values)
        step = (high - low) / self.bins

        counts = [0] * self.bins
        for value in values:
            idx = int((value - low) / step) if step > 0 else 0
            counts[min(idx, self.bins - 1)] += 1

        peak = max(counts)
        lines = []
        for idx, count in enumerate(counts):
            lower = low + idx * step
            bar = "#" * (round(count / peak * self.width) if peak else 0)
            share = count / len(values) * 100
            lines.append(f"{lower:>10.6g} {share:6.2f}% {bar:<{self.width}} {count}")

        return "\n".join(lines)

    def format_header(self, region: str, instance_type: str, info: InstanceTypeInfo) -> str:
        rows = [
            ("Region:", region),
            ("Instance Type:", instance_type),
        ]
        if info.is_known:
            rows.append(("Description:", f"{info.display_name} ({info.vcpu} vCPU, {info.memory_gib:g} GiB)"))
        rows.append(("On-Demand Price:", f"${info.on_demand_price:.6f}"))
        return "\n".join(f"{label:<{self.LABEL_WIDTH}}{value}" for label, value in rows)

    def format_cost_estimate(self, estimate: CostEstimate) -> str:
        return "\n".join([
            f"Time range is {estimate.days} days, or {estimate.hours} hours",
            f"At on-demand price of ${estimate.on_demand_price:.4g} (across all azs): "
            f"${estimate.on_demand_cost:.4g}",
            f"At maximum spot bid of ${estimate.max_bid:.4g} (across all azs): "
            f"${estimate.spot_cost:.4g} ({estimate.savings_percentage:.2f}% saved vs on-demand)",
            f"Time outbid: {estimate.times_outbid} hours",
            f"Hours without price data: {estimate.hours_without_data}",
        ])

    def format_section(
        self,
        region: str,
        instance_type: str,
        prices: SpotPriceCollection,
        info: InstanceTypeInfo,
        estimate: Optional[CostEstimate] = None
    ) -> str:
        """Render the report block for one region and instance type."""
        zones = prices.availability_zones()
        parts = [
            self.format_header(region, instance_type, info),
            "",
            prices.summary(),
            f"\nAll Availability Zones {','.join(zones)}",
            self.format_histogram(prices),
        ]
        for zone in zones:
            parts.append(f"\nAvailability Zone {zone}")
            parts.append(self.format_histogram(prices.by_availability_zone(zone)))

        if estimate is not None:
            parts.append("")
            parts.append(self.format_cost_estimate(estimate))

        return "\n".join(parts)

    def format_section_dict(
        self,
        region: str,
        instance_type: str,
        prices: SpotPriceCollection,
        info: InstanceTypeInfo,
        estimate: Optional[CostEstimate] = None
    ) -> Dict[str, Any]:
        """JSON-ready summary of one region and instance type."""
        section: Dict[str, Any] = {
            "region": region,
            "instance_type": instance_type,
            "on_demand_price": info.on_demand_price,
            "sample_count": len(prices),
            "availability_zones": prices.availability_zones(),
        }
        if prices:
            section.update({
                "min_price": prices.min(),
                "max_price": prices.max(),
                "average_price": prices.average(),
            })
        if estimate is not None:
            section["cost_estimate"] = {
                "hours": estimate.hours,
                "on_demand_cost": estimate.on_demand_cost,
                "spot_cost": estimate.spot_cost,
                "max_bid": estimate.max_bid,
                "times_outbid": estimate.times_outbid,
                "hours_without_data": estimate.hours_without_data,
                "savings_percentage": round(estimate.savings_percentage, 2),
            }
        return section

    def format_error_response(self, error: BaseException) -> Dict[str, Any]:
        """Error payload for JSON output, using to_dict() when the error has one."""
        if hasattr(error, 'to_dict'):
            return error.to_dict()
        return {
            "error": True,
            "error_code": type(error).__name__,
            "message": str(error),
            "details": {}
        }

    def to_json_string(self, data: Any, indent: Optional[int] = 2) -> str:
        return json.dumps(data, indent=indent, default=str)

    def format_report(self, sections: List[str]) -> str:
        return ("\n\n" + "=" * 60 + "\n\n").join(sections)
