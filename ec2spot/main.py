#!/usr/bin/env python3
"""
EC2 Spot Price Fetcher - Main Entry Point

Fetches spot price history for the requested regions, instance types and
zones, then prints price histograms and a spot versus on-demand cost
estimate for each region and instance type.
"""

import argparse
import logging
import sys
from datetime import timedelta
from typing import Any, Dict, List, Optional

from ec2spot.models.spot_data import build_batch_request
from ec2spot.services.batch_fetcher import BatchFetcher
from ec2spot.services.cost_estimator import estimate_cost
from ec2spot.services.instance_catalog import get_instance_type_info
from ec2spot.services.report_formatter import ReportFormatter
from ec2spot.services.spot_price_fetcher import ClientRegistry, SpotPriceFetcher
from ec2spot.utils.concurrency import CancellationToken
from ec2spot.utils.config import load_config
from ec2spot.utils.exceptions import ConfigurationError, SpotFetchBaseError
from ec2spot.utils.logging_config import setup_logging


logger = logging.getLogger(__name__)

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def parse_args(argv: Optional[List[str]], config: Dict[str, Any]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="ec2spot",
        description="Fetch EC2 spot price history and estimate spot costs.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
        epilog="""
Examples:
  %(prog)s --region us-east-1 --instance c4.large --days 7
  %(prog)s --region us-west-2 --instance c5.large,m5.large --azs a,b --max-bid 0.05
        """,
    )
    parser.add_argument("--days", type=int, default=config['lookback_days'],
                        help="How many days to go back")
    parser.add_argument("--instance", default="c4.large",
                        help="Instance type, or multiple comma delimited")
    parser.add_argument("--product", default=config['product_description'],
                        help="Product description to filter on")
    parser.add_argument("--region", default=config['aws_default_region'],
                        help="Region, or multiple comma delimited")
    parser.add_argument("--azs", default="",
                        help="Only include specific availability zones of the first region (e.g a,b,c)")
    parser.add_argument("--concurrency", type=int, default=config['concurrency'],
                        help="How many concurrent AWS requests to make")
    parser.add_argument("--chunk-hours", type=int, default=config['chunk_hours'],
                        help="Hours of history covered by a single API request")
    parser.add_argument("--max-bid", type=float, default=0.0,
                        help="Maximum bid to use in estimates (0 = highest observed price)")
    parser.add_argument("--json", action="store_true",
                        help="Print a JSON summary instead of histograms")
    parser.add_argument("--log-level", default=config['log_level'], type=str.upper, choices=LOG_LEVELS,
                        help="Logging level")
    parser.add_argument("--structured-logs", action="store_true",
                        help="Emit logs as JSON")
    return parser.parse_args(argv)


def parse_availability_zones(regions: List[str], azs_flag: str) -> List[str]:
    """Expand zone suffixes like "a,b" into full zone names in the first region."""
    return [regions[0] + suffix.strip() for suffix in azs_flag.split(",") if suffix.strip()]


def run(argv: Optional[List[str]] = None, fetcher: Optional[BatchFetcher] = None) -> int:
    """
    Run the command line tool.

    Args:
        argv: Command line arguments (defaults to sys.argv)
        fetcher: BatchFetcher to use instead of one talking to AWS

    Returns:
        Process exit code
    """
    config = load_config()
    args = parse_args(argv, config)
    try:
        setup_logging(args.log_level, structured=args.structured_logs)
    except ValueError as e:
        raise ConfigurationError(str(e), config_key="LOG_LEVEL", config_value=args.log_level, original_error=e)

    regions = [r.strip() for r in args.region.split(",") if r.strip()]
    formatter = ReportFormatter()
    token = CancellationToken()

    try:
        request = build_batch_request({
            'instance_types': args.instance,
            'regions': regions,
            'availability_zones': parse_availability_zones(regions, args.azs) if regions else [],
            'product_description': args.product,
            'lookback_days': args.days,
        })

        batch_fetcher = fetcher or BatchFetcher(
            fetcher=SpotPriceFetcher(ClientRegistry()),
            concurrency=args.concurrency,
            queue_capacity=config['queue_capacity'],
            output_capacity=config['output_capacity'],
            chunk_size=timedelta(hours=args.chunk_hours),
        )
        prices = batch_fetcher.fetch_all(request, token)

    except KeyboardInterrupt:
        token.cancel()
        logger.warning("Interrupted")
        return 130

    except Exception as e:
        logger.error(f"Fetch failed: {e}")
        if args.json:
            print(formatter.to_json_string(formatter.format_error_response(e)))
        return 1

    sections = []
    for region in request.regions:
        for instance_type in request.instance_types:
            sliced = prices.by_region(region).by_instance_type(instance_type)
            info = get_instance_type_info(region, instance_type)
            estimate = estimate_cost(sliced, info, request.lookback_days, max_bid=args.max_bid)
            if args.json:
                sections.append(formatter.format_section_dict(region, instance_type, sliced, info, estimate))
            else:
                sections.append(formatter.format_section(region, instance_type, sliced, info, estimate))

    if args.json:
        print(formatter.to_json_string({"results": sections}))
    else:
        print(formatter.format_report(sections))

    return 0


def main() -> None:
    """Console script entry point."""
    try:
        sys.exit(run())
    except SpotFetchBaseError as e:
        # Configuration errors surface before logging is set up
        print(f"ec2spot: {e}", file=sys.stderr)
        sys.exit(2)


if __name__ == "__main__":
    main()
