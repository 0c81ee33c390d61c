"""Daily scan for past-due tasks that raises one overdue alert per task per day."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from sqlalchemy.orm import Session

from tasktracker.services.notification_service import NotificationService
from tasktracker.services.task_service import TaskService

logger = logging.getLogger("tasktracker.sweep")


@dataclass(slots=True)
class SweepReport:
    """Outcome of one sweep run."""

    processed: int = 0
    sent: int = 0
    skipped: int = 0
    failed: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class OverdueSweep:
    """Find overdue tasks and dispatch notifications for those not yet alerted today."""

    @staticmethod
    def run(db: Session) -> SweepReport:
        report = SweepReport()
        tasks = TaskService.get_overdue_tasks(db)
        logger.info(f"Overdue sweep started: {len(tasks)} overdue task(s)")

        for task in tasks:
            report.processed += 1
            task_id = task.id
            try:
                if NotificationService.overdue_notified_on(db, task_id):
                    report.skipped += 1
                    continue
                if NotificationService.notify_task_overdue(db, task):
                    report.sent += 1
                else:
                    # Nothing stored, so no dedup row either; the next run retries
                    report.failed += 1
                    logger.warning(f"No overdue notification stored for task {task_id}")
            except Exception as e:
                # No retries; the next run picks the task up again
                db.rollback()
                report.failed += 1
                logger.error(f"Overdue notification failed for task {task_id}: {e}", exc_info=True)

        logger.info(
            f"Overdue sweep finished: processed={report.processed} sent={report.sent} "
            f"skipped={report.skipped} failed={report.failed}"
        )
        return report
