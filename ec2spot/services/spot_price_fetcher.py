"""
Spot price history fetching from the EC2 API.

One AtomicQuery maps to one paginated DescribeSpotPriceHistory call. AWS
errors are logged and re-raised exactly as botocore produced them; the
batch pipeline decides what a failure means for the rest of the work.
"""

import logging
import math
import threading
from typing import Any, Callable, Dict, List, Optional

import boto3
from botocore.exceptions import ClientError, BotoCoreError

from ec2spot.models.spot_data import AtomicQuery, PriceSample
from ec2spot.utils.concurrency import CancellationToken


logger = logging.getLogger(__name__)


class ClientRegistry:
    """
    Per-run cache of EC2 clients, one per region.

    Clients are created lazily; the check-and-create step is guarded by a
    lock. botocore clients are thread-safe, so a cached client is shared by
    every worker querying its region.
    """

    def __init__(
        self,
        session: Optional[boto3.session.Session] = None,
        client_factory: Optional[Callable[[str], Any]] = None
    ):
        """
        Args:
            session: boto3 session to create clients from (default session if None)
            client_factory: Callable taking a region name and returning a client;
                overrides session when given
        """
        self._session = session
        self._client_factory = client_factory or self._create_client
        self._clients: Dict[str, Any] = {}
        self._lock = threading.Lock()

    def _create_client(self, region: str):
        if self._session is not None:
            return self._session.client('ec2', region_name=region)
        return boto3.client('ec2', region_name=region)

    def get(self, region: str):
        """Return the EC2 client for region, creating it on first use."""
        with self._lock:
            client = self._clients.get(region)
            if client is None:
                client = self._client_factory(region)
                self._clients[region] = client
                logger.debug(f"EC2 client created for region: {region}")
            return client

    def __len__(self) -> int:
        with self._lock:
            return len(self._clients)


class SpotPriceFetcher:
    """Executes atomic queries against DescribeSpotPriceHistory."""

    def __init__(self, registry: Optional[ClientRegistry] = None):
        self.registry = registry if registry is not None else ClientRegistry()

    def __call__(self, query: AtomicQuery, token: Optional[CancellationToken] = None) -> List[PriceSample]:
        return self.fetch(query, token)

    def fetch(self, query: AtomicQuery, token: Optional[CancellationToken] = None) -> List[PriceSample]:
        """
        Fetch every price record for a query, following pagination to the end.

        Args:
            query: The query to execute
            token: Checked between pages; a cancelled token stops the fetch

        Returns:
            List of PriceSample objects in API order

        Raises:
            ClientError: AWS rejected the request (re-raised unmodified)
            BotoCoreError: Transport-level failure (re-raised unmodified)
            OperationCancelledError: If token was cancelled mid-fetch
        """
        logger.info(f"Fetching {query}")

        params = {
            'InstanceTypes': [query.instance_type],
            'ProductDescriptions': [query.product_description],
            'StartTime': query.time_range.start,
            'EndTime': query.time_range.end,
        }
        if query.availability_zone:
            params['AvailabilityZone'] = query.availability_zone

        samples: List[PriceSample] = []
        try:
            client = self.registry.get(query.region)
            paginator = client.get_paginator('describe_spot_price_history')

            for page in paginator.paginate(**params):
                if token is not None:
                    token.raise_if_cancelled(f"fetch {query}")
                for record in page.get('SpotPriceHistory', []):
                    samples.append(self._convert_record(record, query))

        except (ClientError, BotoCoreError) as e:
            logger.error(f"Spot price history request failed for {query}: {e}")
            raise

        logger.debug(f"Fetched {len(samples)} prices for {query}")
        return samples

    def _convert_record(self, record: Dict[str, Any], query: AtomicQuery) -> PriceSample:
        """Translate one SpotPriceHistory record into a PriceSample."""
        return PriceSample(
            region=query.region,
            instance_type=record.get('InstanceType', query.instance_type),
            availability_zone=record.get('AvailabilityZone', query.availability_zone),
            price=parse_price(record.get('SpotPrice'), query),
            timestamp=record['Timestamp'],
        )


def parse_price(raw: Any, query: Optional[AtomicQuery] = None) -> float:
    """
    Parse a SpotPrice string.

    Unparsable, negative and non-finite values become 0.0 rather than
    failing the whole fetch; each occurrence is logged so bad upstream
    data stays visible.
    """
    try:
        price = float(raw)
    except (TypeError, ValueError):
        logger.warning(f"Unparsable spot price {raw!r} for {query}; using 0.0")
        return 0.0

    if price < 0 or not math.isfinite(price):
        logger.warning(f"Invalid spot price {raw!r} for {query}; using 0.0")
        return 0.0
    return price
