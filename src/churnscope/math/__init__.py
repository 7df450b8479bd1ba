"""Mathematical utilities for history and graph analysis."""

from .statistics import Statistics

__all__ = ["Statistics"]
