"""
Parse AI Observability Module.

Provides in-process metrics collection for pipeline stages, errors, and response paths.
"""

from parseai.observability.metrics import MetricsStore, get_metrics_store

__all__ = ["MetricsStore", "get_metrics_store"]
