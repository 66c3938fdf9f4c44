# Business logic services

from .query_expander import expand, DEFAULT_CHUNK_SIZE
from .spot_price_fetcher import ClientRegistry, SpotPriceFetcher
from .batch_fetcher import BatchFetcher, batch_fetch
from .cost_estimator import CostEstimate, estimate_cost
from .instance_catalog import get_instance_type_info
from .report_formatter import ReportFormatter

__all__ = [
    "expand",
    "DEFAULT_CHUNK_SIZE",
    "ClientRegistry",
    "SpotPriceFetcher",
    "BatchFetcher",
    "batch_fetch",
    "CostEstimate",
    "estimate_cost",
    "get_instance_type_info",
    "ReportFormatter",
]
