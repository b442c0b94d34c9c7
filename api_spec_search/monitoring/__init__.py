"""Monitoring package for API Spec Search."""

from .metrics_manager import MetricsManager

__all__ = ["MetricsManager"]
