# Data models and dataclasses

from .spot_data import (
    BatchRequest,
    AtomicQuery,
    PriceSample,
    InstanceTypeInfo,
    BatchRequestModel,
    build_batch_request,
)
from .price_collection import SpotPriceCollection, PriceBucket

__all__ = [
    "BatchRequest",
    "AtomicQuery",
    "PriceSample",
    "InstanceTypeInfo",
    "BatchRequestModel",
    "build_batch_request",
    "SpotPriceCollection",
    "PriceBucket",
]
