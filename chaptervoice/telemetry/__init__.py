"""Telemetry and observability helpers.

This package emits structured conversion events for deterministic auditing.
"""

from .logger import RunLogger

__all__ = ["RunLogger"]
