"""Shared helpers for fleet-controller."""

from fc_common.api import FCError, configure_logging

__all__ = ["configure_logging", "FCError"]
