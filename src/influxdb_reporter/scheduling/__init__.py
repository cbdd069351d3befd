"""Scheduling of periodic report cycles."""

from .scheduled_reporter import ScheduledReporter

__all__ = ["ScheduledReporter"]
