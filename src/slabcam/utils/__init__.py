"""Utility functions for slabcam.

This module provides utility functions including:

- Logging setup and configuration
- Job progress and statistics tracking
"""

from slabcam.utils.logging import (
    JobLogger,
    JobStats,
    configure_logging,
)

__all__ = [
    "JobLogger",
    "JobStats",
    "configure_logging",
]
