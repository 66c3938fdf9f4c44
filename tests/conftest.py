"""Shared fixtures for the spot price fetcher tests."""

import logging

import pytest

from tests.fixtures.mock_responses import MockResponses, PriceSampleFactory, FIXED_NOW


# Configure logging for tests
logging.basicConfig(level=logging.DEBUG)


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake credentials so no test can reach a real AWS account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def mock_responses():
    return MockResponses()


@pytest.fixture
def sample_factory():
    return PriceSampleFactory()


@pytest.fixture
def fixed_now():
    return FIXED_NOW
