"""Statistics helpers for the booking scheduler."""

from __future__ import annotations
from tracking import t

from dataclasses import dataclass


@dataclass
class SchedulerStats:
    """Mutable counters tracking scan and booking results."""

    scans: int = 0
    scan_errors: int = 0
    successful_bookings: int = 0
    failed_bookings: int = 0

    def record_scan(self) -> None:
        t('reservations.queue.scheduler.metrics.SchedulerStats.record_scan')
        self.scans += 1

    def record_scan_error(self) -> None:
        t('reservations.queue.scheduler.metrics.SchedulerStats.record_scan_error')
        self.scan_errors += 1

    def record_success(self) -> None:
        t('reservations.queue.scheduler.metrics.SchedulerStats.record_success')
        self.successful_bookings += 1

    def record_failure(self) -> None:
        t('reservations.queue.scheduler.metrics.SchedulerStats.record_failure')
        self.failed_bookings += 1

    @property
    def total_attempts(self) -> int:
        return self.successful_bookings + self.failed_bookings

    @property
    def success_rate(self) -> float:
        t('reservations.queue.scheduler.metrics.SchedulerStats.success_rate')
        if self.total_attempts == 0:
            return 0.0
        return (self.successful_bookings / self.total_attempts) * 100

    def format_report(self) -> str:
        t('reservations.queue.scheduler.metrics.SchedulerStats.format_report')
        return "\n".join([
            "📊 Booking Scheduler Report",
            f"🔁 Scans: {self.scans} ({self.scan_errors} with errors)",
            f"✅ Successful: {self.successful_bookings}",
            f"❌ Failed: {self.failed_bookings}",
            f"🏆 Success Rate: {self.success_rate:.2f}%",
        ])
