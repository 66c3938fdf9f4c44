"""Unit tests for ReportFormatter."""

import json
import pytest
from datetime import timedelta

from ec2spot.models.price_collection import SpotPriceCollection
from ec2spot.models.spot_data import InstanceTypeInfo
from ec2spot.services.cost_estimator import CostEstimate
from ec2spot.services.report_formatter import ReportFormatter
from ec2spot.utils.exceptions import DataValidationError
from tests.fixtures.mock_responses import FIXED_NOW, PriceSampleFactory


make = PriceSampleFactory.sample
INFO = InstanceTypeInfo("C4 High-CPU Large", 2, 3.75, 0.10)
ESTIMATE = CostEstimate(1, 24, 0.10, 2.4, 0.6, 0.05, 2, 3)


class TestReportFormatter:
    """Test cases for ReportFormatter."""

    def setup_method(self):
        self.formatter = ReportFormatter()
        self.prices = SpotPriceCollection([
            make(0.03, FIXED_NOW - timedelta(hours=1), availability_zone="us-east-1a"),
            make(0.03, FIXED_NOW - timedelta(hours=2), availability_zone="us-east-1a"),
            make(0.06, FIXED_NOW - timedelta(hours=3), availability_zone="us-east-1b"),
        ])

    def test_histogram_bins(self):
        lines = self.formatter.format_histogram(self.prices).splitlines()

        assert len(lines) == 3
        assert lines[0].endswith(" 2")
        assert lines[1].endswith(" 0")
        assert lines[2].endswith(" 1")
        assert "#" * 40 in lines[0]
        assert "66.67%" in lines[0]

    def test_histogram_single_value(self):
        lines = self.formatter.format_histogram(SpotPriceCollection([make(0.05), make(0.05)])).splitlines()

        assert lines[0].endswith(" 2")
        assert all(line.endswith(" 0") for line in lines[1:])

    def test_histogram_empty(self):
        assert self.formatter.format_histogram(SpotPriceCollection()) == "  (no prices)"

    def test_header(self):
        header = self.formatter.format_header("us-east-1", "c4.large", INFO)

        assert "Region:             us-east-1" in header
        assert "On-Demand Price:    $0.100000" in header
        assert "2 vCPU" in header

    def test_header_unknown_instance(self):
        header = self.formatter.format_header("us-east-1", "x1.odd", InstanceTypeInfo())

        assert "Description" not in header
        assert "$0.000000" in header

    def test_cost_estimate_text(self):
        text = self.formatter.format_cost_estimate(ESTIMATE)

        assert "Time range is 1 days, or 24 hours" in text
        assert "75.00% saved" in text
        assert "Time outbid: 2 hours" in text
        assert "Hours without price data: 3" in text

    def test_section_lists_each_zone(self):
        section = self.formatter.format_section("us-east-1", "c4.large", self.prices, INFO, ESTIMATE)

        assert "All Availability Zones us-east-1a,us-east-1b" in section
        assert "Availability Zone us-east-1a" in section
        assert "Availability Zone us-east-1b" in section
        assert "Price range (3 points)" in section

    def test_section_dict(self):
        section = self.formatter.format_section_dict("us-east-1", "c4.large", self.prices, INFO, ESTIMATE)

        assert section["sample_count"] == 3
        assert section["max_price"] == pytest.approx(0.06)
        assert section["cost_estimate"]["savings_percentage"] == 75.0
        json.loads(self.formatter.to_json_string(section))

    def test_section_dict_without_prices(self):
        section = self.formatter.format_section_dict("us-east-1", "c4.large", SpotPriceCollection(), INFO)

        assert section["sample_count"] == 0
        assert "min_price" not in section
        assert "cost_estimate" not in section

    def test_error_response(self):
        custom = self.formatter.format_error_response(DataValidationError("bad", field_name="days"))
        plain = self.formatter.format_error_response(RuntimeError("boom"))

        assert custom["error_code"] == "DATA_VALIDATION_ERROR"
        assert plain == {"error": True, "error_code": "RuntimeError", "message": "boom", "details": {}}
