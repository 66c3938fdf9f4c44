"""
Expansion of a batch request into atomic spot price queries.

The EC2 spot price history API silently truncates large result sets, so a
request is broken into one query per region, instance type, zone filter and
short time chunk. The chunk size is a static, conservative choice.
"""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ec2spot.models.spot_data import AtomicQuery, BatchRequest
from ec2spot.utils.timerange import days_ago, utc_now


logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = timedelta(hours=8)


def expand(
    request: BatchRequest,
    chunk_size: timedelta = DEFAULT_CHUNK_SIZE,
    now: Optional[datetime] = None
) -> List[AtomicQuery]:
    """
    Expand a batch request into the ordered list of atomic queries.

    Order is region, then instance type, then zone, then chunk, each
    following the order given in the request. Duplicates in the request
    produce duplicate queries.

    Args:
        request: The batch request to expand
        chunk_size: Maximum time span of a single query
        now: End of the lookback window (defaults to current UTC time)

    Returns:
        List of AtomicQuery objects
    """
    window = days_ago(now or utc_now(), request.lookback_days)
    chunks = window.split(chunk_size)

    queries = [
        AtomicQuery(
            region=region,
            instance_type=instance_type,
            availability_zone=zone,
            product_description=request.product_description,
            time_range=chunk
        )
        for region in request.regions
        for instance_type in request.instance_types
        for zone in request.zone_filters
        for chunk in chunks
    ]

    logger.debug(
        f"Expanded request into {len(queries)} queries "
        f"({len(chunks)} chunks of {chunk_size} over {window})"
    )
    return queries
