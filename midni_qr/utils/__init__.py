"""
Utils Package

Contains utility modules for certificate handling, logging and monitoring.
"""

from .cert_utils import (
    describe_certificate,
    get_certificate_reference,
    is_certificate_valid_at,
)
from .logger import QRLogger
from .metrics import MetricsCollector, get_metrics_collector, reset_metrics_collector

__all__ = [
    # Certificate utilities
    "describe_certificate",
    "get_certificate_reference",
    "is_certificate_valid_at",
    # Logging
    "QRLogger",
    # Metrics
    "MetricsCollector",
    "get_metrics_collector",
    "reset_metrics_collector",
]
