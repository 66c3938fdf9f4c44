"""
Static instance type metadata and Linux on-demand prices.

The table covers the instance types and regions the tool is normally run
against. Lookups for anything else return a zero-valued InstanceTypeInfo,
which downstream cost estimation treats as "no on-demand price known".
"""

import logging
from typing import Dict, Tuple

from ec2spot.models.spot_data import InstanceTypeInfo


logger = logging.getLogger(__name__)

# instance type -> (display name, vCPUs, memory GiB)
_INSTANCE_SPECS: Dict[str, Tuple[str, int, float]] = {
    't3.micro': ('T3 Micro', 2, 1.0),
    't3.large': ('T3 Large', 2, 8.0),
    'c4.large': ('C4 High-CPU Large', 2, 3.75),
    'c4.xlarge': ('C4 High-CPU Extra Large', 4, 7.5),
    'c5.large': ('C5 High-CPU Large', 2, 4.0),
    'c5.xlarge': ('C5 High-CPU Extra Large', 4, 8.0),
    'm5.large': ('M5 General Purpose Large', 2, 8.0),
    'm5.xlarge': ('M5 General Purpose Extra Large', 4, 16.0),
    'r5.large': ('R5 Memory Optimized Large', 2, 16.0),
    'p5.48xlarge': ('P5 48xlarge', 192, 2048.0),
}

# region -> instance type -> Linux on-demand USD/hour
_ON_DEMAND_PRICES: Dict[str, Dict[str, float]] = {
    'us-east-1': {
        't3.micro': 0.0104, 't3.large': 0.0832,
        'c4.large': 0.10, 'c4.xlarge': 0.199,
        'c5.large': 0.085, 'c5.xlarge': 0.17,
        'm5.large': 0.096, 'm5.xlarge': 0.192,
        'r5.large': 0.126, 'p5.48xlarge': 98.32,
    },
    'us-west-2': {
        't3.micro': 0.0104, 't3.large': 0.0832,
        'c4.large': 0.10, 'c4.xlarge': 0.199,
        'c5.large': 0.085, 'c5.xlarge': 0.17,
        'm5.large': 0.096, 'm5.xlarge': 0.192,
        'r5.large': 0.126, 'p5.48xlarge': 98.32,
    },
    'eu-west-1': {
        't3.micro': 0.0114, 't3.large': 0.0912,
        'c4.large': 0.113, 'c4.xlarge': 0.226,
        'c5.large': 0.096, 'c5.xlarge': 0.192,
        'm5.large': 0.107, 'm5.xlarge': 0.214,
        'r5.large': 0.141,
    },
    'ap-southeast-2': {
        't3.micro': 0.0132, 't3.large': 0.1056,
        'c4.large': 0.13, 'c4.xlarge': 0.261,
        'c5.large': 0.111, 'c5.xlarge': 0.222,
        'm5.large': 0.12, 'm5.xlarge': 0.24,
        'r5.large': 0.151,
    },
}


def get_instance_type_info(region: str, instance_type: str) -> InstanceTypeInfo:
    """
    Look up metadata and on-demand price for an instance type in a region.

    Args:
        region: AWS region identifier
        instance_type: EC2 instance type

    Returns:
        InstanceTypeInfo, zero-valued if the instance type is unknown. A known
        type in a region without pricing keeps its specs with a 0.0 price.
    """
    spec = _INSTANCE_SPECS.get(instance_type)
    if spec is None:
        logger.warning(f"No instance data for {instance_type}")
        return InstanceTypeInfo()

    display_name, vcpu, memory_gib = spec
    price = _ON_DEMAND_PRICES.get(region, {}).get(instance_type, 0.0)
    if not price:
        logger.warning(f"No on-demand price for {instance_type} in {region}")

    return InstanceTypeInfo(
        display_name=display_name,
        vcpu=vcpu,
        memory_gib=memory_gib,
        on_demand_price=price
    )
