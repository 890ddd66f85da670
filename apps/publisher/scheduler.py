"""
Publish Scheduler - Cron and On-Demand Inbox Publishing

Scans the inbox directory for transaction CSV files and publishes their rows
to SQS, using APScheduler for periodic runs.

Features:
- Cron-based scheduling (configurable via PUBLISH_SCHEDULE_CRON)
- RUN_ONCE mode for immediate execution
- Rejected rows stored in S3
- Published files moved to the archive directory
- Graceful shutdown handling

Usage:
    # Scheduled mode (default)
    python -m apps.publisher

    # Run once and exit
    RUN_ONCE=true python -m apps.publisher
"""

import asyncio
import logging
import os
import shutil
import signal
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.cron import CronTrigger

from apps.publisher.csv_reader import read_transactions
from apps.publisher.publisher import SqsPublisher, discard_rejected
from utils.aws import create_client
from utils.config import settings
from utils.logging import setup_logging
from utils.storage import S3Storage

setup_logging(level=settings.LOG_LEVEL, format_type=settings.LOG_FORMAT)

logger = logging.getLogger(__name__)


@dataclass
class FileReport:
    """Outcome of publishing one CSV file."""

    path: Path
    published: int = 0
    rejected: int = 0
    failed: int = 0

    @property
    def complete(self) -> bool:
        return self.failed == 0


class PublishScheduler:
    """
    Scheduler for periodic or on-demand inbox publishing.

    Handles:
    - APScheduler setup and management
    - Per-file publishing and archiving
    - Signal handling for graceful shutdown
    """

    def __init__(
        self,
        publisher: SqsPublisher,
        storage: S3Storage,
        inbox_dir: Optional[str] = None,
        archive_dir: Optional[str] = None,
        run_once: bool = False,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            publisher: Queue publisher for valid rows
            storage: Storage adapter for rejected rows
            inbox_dir: Directory scanned for CSV files, defaults to settings.INBOX_DIR
            archive_dir: Directory published files are moved to, defaults to settings.ARCHIVE_DIR
            run_once: If True, publish the inbox once and exit
        """
        self.publisher = publisher
        self.storage = storage
        self.inbox_dir = Path(inbox_dir or settings.INBOX_DIR)
        self.archive_dir = Path(archive_dir or settings.ARCHIVE_DIR)
        self.run_once = run_once
        self.scheduler: AsyncIOScheduler | None = None
        self.shutdown_event = asyncio.Event()

        logger.info(
            "PublishScheduler initialized",
            extra={
                "run_once": run_once,
                "cron_schedule": settings.PUBLISH_SCHEDULE_CRON,
                "inbox_dir": str(self.inbox_dir),
            },
        )

    async def publish_file(self, path: Path) -> FileReport:
        """
        Publish every valid row of one CSV file and store its rejected rows.

        A row that cannot be sent is counted as failed; the file then stays
        in the inbox and is published again on the next run.

        Raises:
            FileNotFoundError, ValueError, IOError: If the file can't be read
        """
        report = FileReport(path=path)
        events, rejected = await asyncio.to_thread(read_transactions, path)

        for event in events:
            try:
                await asyncio.to_thread(self.publisher.publish, event)
                report.published += 1
            except Exception as e:
                report.failed += 1
                logger.error(
                    "Failed to publish transaction: file=%s, transaction_id=%s, error=%s",
                    path.name, event.transactionId, str(e),
                )

        for row in rejected:
            try:
                await asyncio.to_thread(
                    discard_rejected, self.storage, settings.S3_REJECTED_BUCKET_NAME, row, path.name
                )
                report.rejected += 1
            except Exception as e:
                report.failed += 1
                logger.error(
                    "Failed to store rejected row: file=%s, line=%d, error=%s",
                    path.name, row.line_number, str(e),
                )

        logger.info(
            "File publishing complete: file=%s, published=%d, rejected=%d, failed=%d",
            path.name, report.published, report.rejected, report.failed,
        )
        return report

    def archive_file(self, path: Path) -> Path:
        """Move a fully published file out of the inbox."""
        self.archive_dir.mkdir(parents=True, exist_ok=True)
        target = self.archive_dir / path.name
        shutil.move(str(path), str(target))
        logger.info("Archived file: %s -> %s", str(path), str(target))
        return target

    async def execute_publishing(self) -> list[FileReport]:
        """
        Publish all CSV files currently in the inbox.

        A file that can't be read is logged and left in place.
        """
        logger.info("Starting inbox scan: %s", str(self.inbox_dir))
        reports: list[FileReport] = []

        try:
            if not self.inbox_dir.is_dir():
                logger.warning("Inbox directory not found: %s", str(self.inbox_dir))
                return reports

            csv_files = sorted(self.inbox_dir.glob("*.csv"))
            if not csv_files:
                logger.info("No new CSV files to publish")
                return reports

            for path in csv_files:
                try:
                    report = await self.publish_file(path)
                except (OSError, ValueError) as e:
                    logger.error("Failed to read file, leaving it in the inbox: file=%s, error=%s", path.name, str(e))
                    continue

                reports.append(report)
                if report.complete:
                    self.archive_file(path)
                else:
                    logger.warning("File left in inbox for retry: %s", path.name)

            return reports

        finally:
            if self.run_once:
                logger.info("Single run finished, shutting down")
                self.shutdown_event.set()

    def request_shutdown(self, signame: str) -> None:
        logger.info("Shutdown requested by %s", signame)
        self.shutdown_event.set()

    def setup_signal_handlers(self) -> None:
        """Stop the scheduler on SIGINT/SIGTERM."""
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, self.request_shutdown, sig.name)

    def schedule_publishing(self) -> AsyncIOScheduler:
        """Start APScheduler with the inbox scan on PUBLISH_SCHEDULE_CRON."""
        scheduler = AsyncIOScheduler()
        scheduler.start()
        job = scheduler.add_job(
            self.execute_publishing,
            trigger=CronTrigger.from_crontab(settings.PUBLISH_SCHEDULE_CRON),
            id="publish_job",
            max_instances=1,
            replace_existing=True,
        )
        logger.info(
            "Inbox publishing scheduled",
            extra={"schedule": settings.PUBLISH_SCHEDULE_CRON, "next_run": str(job.next_run_time)},
        )
        return scheduler

    async def start(self) -> None:
        """Publish the inbox once, or on the cron schedule until shutdown."""
        self.setup_signal_handlers()

        if self.run_once:
            await self.execute_publishing()
            return

        self.scheduler = self.schedule_publishing()
        try:
            await self.shutdown_event.wait()
        finally:
            self.scheduler.shutdown(wait=True)
            logger.info("Publish scheduler stopped")


def build_scheduler(run_once: bool) -> PublishScheduler:
    """Wire a PublishScheduler to SQS and S3 clients built from settings."""
    return PublishScheduler(
        publisher=SqsPublisher(create_client("sqs")),
        storage=S3Storage(create_client("s3")),
        run_once=run_once,
    )


async def main() -> None:
    run_once = os.getenv("RUN_ONCE", "false").lower() in ("true", "1", "yes")

    try:
        await build_scheduler(run_once).start()
    except Exception:
        logger.exception("Publish scheduler failed")
        sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
