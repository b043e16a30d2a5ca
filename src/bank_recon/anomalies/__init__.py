"""Anomaly detection passes."""

from .detector import AnomalyDetector

__all__ = ["AnomalyDetector"]
