"""Vendor endpoint providers."""

from .base import EndpointProvider
from .hyundai import HyundaiEndpointProvider
from .hyundai_eu import HyundaiEUEndpointProvider
from .kia import KiaEndpointProvider

__all__ = [
    "EndpointProvider",
    "HyundaiEUEndpointProvider",
    "HyundaiEndpointProvider",
    "KiaEndpointProvider",
]
