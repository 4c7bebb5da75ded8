"""Background task that reconciles the blob root with the metadata store."""

import asyncio
import time
from dataclasses import dataclass, field
from typing import List

from common.logging_config import get_logger
from server.blob_store import BlobStore
from server.config import CLEANUP_INTERVAL_SECONDS, ORPHAN_GRACE_SECONDS
from server.repositories.file_repository import FileRepository

logger = get_logger(__name__)


@dataclass
class CleanupReport:
    removed_blobs: List[str] = field(default_factory=list)
    failed_blobs: List[str] = field(default_factory=list)
    skipped_recent_blobs: List[str] = field(default_factory=list)
    missing_blob_records: List[int] = field(default_factory=list)


class OrphanedBlobCleaner:
    """
    Removes orphan blobs and reports records whose blob is missing.

    Blobs younger than ``grace_seconds`` are left alone: an upload writes its
    blob before its record, so a fresh unreferenced blob may still be in
    flight. Records with a missing blob are only reported.
    """

    def __init__(
        self,
        file_repo: FileRepository,
        blob_store: BlobStore,
        interval_seconds: int = CLEANUP_INTERVAL_SECONDS,
        grace_seconds: int = ORPHAN_GRACE_SECONDS,
    ):
        self.file_repo = file_repo
        self.blob_store = blob_store
        self.interval_seconds = interval_seconds
        self.grace_seconds = grace_seconds
        self._running = False
        self._task = None

    async def start(self) -> None:
        """Start the background cleanup task."""
        if self.interval_seconds <= 0:
            logger.info("Orphan cleanup disabled (interval is 0)")
            return

        if self._running:
            logger.warning("Cleanup task already running")
            return

        self._running = True
        self._task = asyncio.create_task(self._run())
        logger.info(f"Started orphan blob cleanup task (interval: {self.interval_seconds}s)")

    async def stop(self) -> None:
        """Stop the background cleanup task."""
        if not self._running:
            return

        self._running = False
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            self._task = None

        logger.info("Stopped orphan blob cleanup task")

    async def _run(self) -> None:
        while self._running:
            try:
                await asyncio.sleep(self.interval_seconds)

                if not self._running:
                    break

                await asyncio.to_thread(self.run_once)

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Error in cleanup task: {e}", exc_info=True)

    def run_once(self) -> CleanupReport:
        """Execute one cleanup cycle."""
        report = CleanupReport()

        referenced = self.file_repo.list_stored_names()
        on_disk = self.blob_store.list_blobs()
        cutoff = time.time() - self.grace_seconds

        for stored_name in on_disk:
            if stored_name in referenced:
                continue

            mtime = self.blob_store.blob_mtime(stored_name)
            if mtime is None:
                continue
            if mtime > cutoff:
                report.skipped_recent_blobs.append(stored_name)
                continue

            try:
                self.blob_store.delete_blob(stored_name)
                report.removed_blobs.append(stored_name)
                logger.info(f"Cleaned orphan blob {stored_name}")
            except Exception as e:
                report.failed_blobs.append(stored_name)
                logger.warning(f"Error cleaning orphan blob {stored_name}: {e}")

        on_disk_set = set(on_disk)
        for listing in self.file_repo.list_files():
            if listing.record.filename not in on_disk_set:
                report.missing_blob_records.append(listing.record.id)
                logger.error(
                    f"Record without blob [file_id={listing.record.id}] "
                    f"[filename={listing.record.filename}]"
                )

        logger.info(
            f"Cleanup cycle complete: {len(report.removed_blobs)} removed, "
            f"{len(report.failed_blobs)} failed, {len(report.skipped_recent_blobs)} too recent, "
            f"{len(report.missing_blob_records)} records missing blobs"
        )
        return report
