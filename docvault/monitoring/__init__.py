"""
Monitoring module for application metrics
"""

from docvault.monitoring.metrics import get_metrics, metrics_middleware, metrics_registry

__all__ = [
    "get_metrics",
    "metrics_middleware",
    "metrics_registry",
]
