"""
Data models for the EC2 spot price fetcher.

This module contains the value types that flow through the acquisition
pipeline: the user-level batch request, the atomic queries it expands to,
and the price samples parsed from the EC2 API.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Tuple

from pydantic import BaseModel, Field, field_validator, ValidationError

from ec2spot.utils.exceptions import DataValidationError
from ec2spot.utils.timerange import TimeRange


@dataclass(frozen=True)
class BatchRequest:
    """
    A user-level request for spot price history.

    Attributes:
        instance_types: EC2 instance types (e.g., 'c4.large'), in query order
        regions: AWS region identifiers (e.g., 'us-east-1'), in query order
        availability_zones: Zones to filter on; empty means all zones
        product_description: Product filter (e.g., 'Linux/UNIX (Amazon VPC)')
        lookback_days: How many days of history to fetch
    """
    instance_types: Tuple[str, ...]
    regions: Tuple[str, ...]
    availability_zones: Tuple[str, ...] = ()
    product_description: str = 'Linux/UNIX (Amazon VPC)'
    lookback_days: int = 7

    def __post_init__(self) -> None:
        # Accept any iterable but store tuples so the request stays hashable
        object.__setattr__(self, 'instance_types', tuple(self.instance_types))
        object.__setattr__(self, 'regions', tuple(self.regions))
        object.__setattr__(self, 'availability_zones', tuple(self.availability_zones))
        self._validate()

    def _validate(self) -> None:
        """
        Validate the request fields.

        Raises:
            DataValidationError: If any field contains invalid data
        """
        if not self.instance_types:
            raise DataValidationError(
                message="At least one instance type is required",
                field_name="instance_types",
                validation_rule="non-empty"
            )

        if not self.regions:
            raise DataValidationError(
                message="At least one region is required",
                field_name="regions",
                validation_rule="non-empty"
            )

        if not isinstance(self.lookback_days, int) or self.lookback_days < 1:
            raise DataValidationError(
                message="Lookback days must be a positive integer",
                field_name="lookback_days",
                field_value=self.lookback_days,
                validation_rule="> 0"
            )

    @property
    def zone_filters(self) -> Tuple[str, ...]:
        """Zones to query, with ``""`` standing in for "no zone filter"."""
        return self.availability_zones or ("",)


@dataclass(frozen=True)
class AtomicQuery:
    """
    One call's worth of work against the spot price history API.

    Attributes:
        region: AWS region to query
        instance_type: Single instance type to query
        availability_zone: Zone filter, empty for all zones
        product_description: Product filter
        time_range: Window of history to fetch
    """
    region: str
    instance_type: str
    availability_zone: str
    product_description: str
    time_range: TimeRange

    def __str__(self) -> str:
        zone = self.availability_zone or "*"
        return f"{self.region}/{zone}/{self.instance_type} {self.time_range}"


@dataclass(frozen=True)
class PriceSample:
    """
    A spot price observed at an instant.

    Attributes:
        region: AWS region the sample was fetched from
        instance_type: EC2 instance type
        availability_zone: Availability zone the price applies to
        price: Hourly spot price in USD
        timestamp: When the price took effect
    """
    region: str
    instance_type: str
    availability_zone: str
    price: float
    timestamp: datetime

    def __post_init__(self) -> None:
        # Zero is allowed: unparsable API prices are coerced to 0.0
        if not isinstance(self.price, (int, float)) or self.price < 0:
            raise DataValidationError(
                message="Spot price must be a non-negative number",
                field_name="price",
                field_value=self.price,
                validation_rule=">= 0"
            )

        if not isinstance(self.timestamp, datetime):
            raise DataValidationError(
                message="Timestamp must be a datetime object",
                field_name="timestamp",
                field_value=self.timestamp
            )


@dataclass(frozen=True)
class InstanceTypeInfo:
    """
    Static metadata about an instance type in a region.

    A zero-valued instance (the default) means the type is unknown there.
    """
    display_name: str = ""
    vcpu: int = 0
    memory_gib: float = 0.0
    on_demand_price: float = 0.0

    @property
    def is_known(self) -> bool:
        return bool(self.display_name)


class BatchRequestModel(BaseModel):
    """Pydantic validator for user-supplied batch request data."""
    instance_types: Tuple[str, ...] = Field(..., min_length=1, description="EC2 instance types")
    regions: Tuple[str, ...] = Field(..., min_length=1, description="AWS regions")
    availability_zones: Tuple[str, ...] = Field(default=(), description="Zone filters")
    product_description: str = Field('Linux/UNIX (Amazon VPC)', min_length=1)
    lookback_days: int = Field(7, ge=1, description="Days of history to fetch")

    @field_validator('instance_types', 'regions', 'availability_zones', mode='before')
    @classmethod
    def split_comma_separated(cls, v: Any) -> Any:
        """Allow "a,b,c" strings as well as sequences; drop blank entries."""
        if isinstance(v, str):
            v = v.split(',')
        return tuple(item.strip() for item in v if item and item.strip())

    @field_validator('instance_types')
    @classmethod
    def validate_instance_types(cls, v: Tuple[str, ...]) -> Tuple[str, ...]:
        for instance_type in v:
            if '.' not in instance_type:
                raise ValueError(f'Instance type {instance_type!r} must be in format like c4.large')
        return v


def build_batch_request(data: Dict[str, Any]) -> BatchRequest:
    """
    Validate and create a BatchRequest from a dictionary.

    Args:
        data: Dictionary of request fields; list fields may be comma-separated strings

    Returns:
        Validated BatchRequest

    Raises:
        DataValidationError: If data is invalid
    """
    try:
        validated = BatchRequestModel(**data)
    except ValidationError as e:
        raise DataValidationError(
            message=f"Invalid batch request: {e}",
            original_error=e
        )

    return BatchRequest(
        instance_types=validated.instance_types,
        regions=validated.regions,
        availability_zones=validated.availability_zones,
        product_description=validated.product_description,
        lookback_days=validated.lookback_days
    )
