"""Configuration management utilities."""

import os
from typing import Dict, Any

from dotenv import load_dotenv

from ec2spot.utils.exceptions import ConfigurationError


DEFAULT_PRODUCT_DESCRIPTION = 'Linux/UNIX (Amazon VPC)'


def _get_int(name: str, default: int, minimum: int = 1) -> int:
    """
    Read a positive integer from the environment.

    Raises:
        ConfigurationError: If the value is not an integer or is below minimum
    """
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError as e:
        raise ConfigurationError(
            message=f"{name} must be an integer, got {raw!r}",
            config_key=name,
            config_value=raw,
            expected_type="int",
            original_error=e
        )

    if value < minimum:
        raise ConfigurationError(
            message=f"{name} must be >= {minimum}, got {value}",
            config_key=name,
            config_value=value,
            expected_type="int"
        )
    return value


def load_config() -> Dict[str, Any]:
    """
    Load configuration from environment variables.

    Returns:
        Dict containing configuration values

    Raises:
        ConfigurationError: If a numeric setting is malformed
    """
    # Load environment variables from .env file if it exists
    load_dotenv()

    config = {
        'aws_default_region': os.getenv('AWS_DEFAULT_REGION', 'us-east-1'),
        'log_level': os.getenv('LOG_LEVEL', 'INFO'),
        'concurrency': _get_int('SPOT_CONCURRENCY', 10),
        'chunk_hours': _get_int('SPOT_CHUNK_HOURS', 8),
        'queue_capacity': _get_int('SPOT_QUEUE_CAPACITY', 100),
        'output_capacity': _get_int('SPOT_OUTPUT_CAPACITY', 1000),
        'lookback_days': _get_int('SPOT_LOOKBACK_DAYS', 7),
        'product_description': os.getenv(
            'SPOT_PRODUCT_DESCRIPTION',
            DEFAULT_PRODUCT_DESCRIPTION
        ),
    }

    return config
