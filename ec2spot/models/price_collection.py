"""
In-memory collection of fetched price samples.

Samples are kept in arrival order, which across concurrent workers has no
relation to timestamp order. Views return new collections and never
mutate the original.
"""

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Optional

from ec2spot.models.spot_data import PriceSample
from ec2spot.utils.exceptions import InsufficientDataError
from ec2spot.utils.timerange import TimeRange


class SpotPriceCollection:
    """Ordered sequence of PriceSample with filter and aggregate views."""

    def __init__(self, samples: Optional[Iterable[PriceSample]] = None):
        self._samples: List[PriceSample] = list(samples) if samples is not None else []

    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PriceSample]:
        return iter(self._samples)

    def __getitem__(self, index: int) -> PriceSample:
        return self._samples[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SpotPriceCollection):
            return NotImplemented
        return self._samples == other._samples

    def __repr__(self) -> str:
        return f"SpotPriceCollection({len(self._samples)} samples)"

    def __str__(self) -> str:
        return self.summary()

    def append(self, sample: PriceSample) -> None:
        self._samples.append(sample)

    def extend(self, samples: Iterable[PriceSample]) -> None:
        self._samples.extend(samples)

    def prices(self) -> List[float]:
        return [sample.price for sample in self._samples]

    # Views

    def subset(self, time_range: TimeRange) -> "SpotPriceCollection":
        """Samples whose timestamp falls within time_range, both ends inclusive."""
        return SpotPriceCollection(s for s in self._samples if time_range.contains(s.timestamp))

    def by_region(self, region: str) -> "SpotPriceCollection":
        return SpotPriceCollection(s for s in self._samples if s.region == region)

    def by_instance_type(self, instance_type: str) -> "SpotPriceCollection":
        return SpotPriceCollection(s for s in self._samples if s.instance_type == instance_type)

    def by_availability_zone(self, availability_zone: str) -> "SpotPriceCollection":
        return SpotPriceCollection(s for s in self._samples if s.availability_zone == availability_zone)

    def availability_zones(self) -> List[str]:
        """Distinct zones in order of first appearance."""
        return list(dict.fromkeys(s.availability_zone for s in self._samples))

    def sorted_by_time(self) -> "SpotPriceCollection":
        return SpotPriceCollection(sorted(self._samples, key=lambda s: s.timestamp))

    def buckets(self, ranges: List[TimeRange]) -> List["PriceBucket"]:
        """
        Group samples into the given consecutive ranges.

        Ranges are expected to come from ``TimeRange.split`` or
        ``TimeRange.days``; a sample on a shared boundary lands in the later
        range only, and the last range also keeps samples on its end.
        """
        buckets = [PriceBucket(time_range=r) for r in ranges]
        last = len(ranges) - 1

        for sample in self._samples:
            for idx, bucket in enumerate(buckets):
                if bucket.time_range.owns(sample.timestamp, final=idx == last):
                    bucket.prices.append(sample)
                    break

        return buckets

    # Aggregates

    def max(self) -> float:
        """Highest price; 0.0 for an empty collection."""
        return max(self.prices(), default=0.0)

    def min(self) -> float:
        """
        Lowest price.

        Raises:
            InsufficientDataError: If the collection is empty
        """
        self._require_samples("min")
        return min(self.prices())

    def average(self) -> float:
        """
        Mean price.

        Raises:
            InsufficientDataError: If the collection is empty
        """
        self._require_samples("average")
        return sum(self.prices()) / len(self._samples)

    def summary(self) -> str:
        if not self._samples:
            return "Price range (0 points)"
        return (
            f"Price range ({len(self)} points): "
            f"Min {self.min():.5f} Max {self.max():.5f} Avg {self.average():.5f}"
        )

    def _require_samples(self, aggregate: str) -> None:
        if not self._samples:
            raise InsufficientDataError(
                message=f"Cannot compute {aggregate} of an empty price collection",
                required_count=1,
                available_count=0
            )


@dataclass
class PriceBucket:
    """Samples falling within one time range."""
    time_range: TimeRange
    prices: SpotPriceCollection = field(default_factory=SpotPriceCollection)

    @property
    def max_price(self) -> float:
        return self.prices.max()

    def __str__(self) -> str:
        return f"{self.time_range} - {self.max_price:.4g} ({len(self.prices)} prices)"
