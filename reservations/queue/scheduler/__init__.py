"""Scheduler helpers for the booking scan loop."""

from .metrics import SchedulerStats
from .outcome import OutcomeRecord, record_for_outcome
from .pipeline import ScanEvaluation, classify_pending, days_until
from .timing import next_midnight, wait_until

__all__ = [
    "SchedulerStats",
    "OutcomeRecord",
    "record_for_outcome",
    "ScanEvaluation",
    "classify_pending",
    "days_until",
    "next_midnight",
    "wait_until",
]
