"""
Sync Engine - fetch, classify and merge job-application emails

Full sync:        newest FULL_SYNC_LIMIT matching messages become the record set.
Incremental sync: messages received after the watermark are merged into
                  the existing record set (new record wins on a shared id).

A pass either returns a complete SyncResult or raises; callers persist the
result's records and watermark together, so a failed pass changes nothing.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Iterable, List, Optional

from apptrack.classifier import MessageClassifier
from apptrack.models import ApplicationRecord, RecordSet

logger = logging.getLogger(__name__)

SUBJECT_QUERY = "subject:(job OR application OR applied OR position OR opportunity OR software)"

FULL_SYNC_LIMIT = 100
# Wider cap: the window since the last pass may span downtime
INCREMENTAL_SYNC_LIMIT = 1000

# Concurrent Gmail detail fetches per pass
DEFAULT_MAX_WORKERS = 8


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(ts: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision."""
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    ts = ts.astimezone(timezone.utc)
    return ts.strftime("%Y-%m-%dT%H:%M:%S.") + f"{ts.microsecond // 1000:03d}Z"


def watermark_from_millis(epoch_millis) -> datetime:
    """Convert a JavaScript epoch-milliseconds value into a UTC datetime."""
    return datetime.fromtimestamp(float(epoch_millis) / 1000, tz=timezone.utc)


def build_query(after: Optional[datetime] = None) -> str:
    """
    Build the Gmail search query for job-related mail.

    Args:
        after: Only match messages received after this time (incremental mode)
    """
    if after is None:
        return SUBJECT_QUERY
    return f"{SUBJECT_QUERY} after:{format_timestamp(after)}"


def merge_records(existing: RecordSet, new: Iterable[ApplicationRecord]) -> RecordSet:
    """
    Merge freshly classified records into a record set.

    Returns a new dict; neither input is modified. A new record replaces an
    existing one with the same id, and among duplicates in new the last
    one wins.
    """
    merged = dict(existing)
    for record in new:
        merged[record.id] = record
    return merged


@dataclass
class SyncResult:
    """Outcome of one successful sync pass."""

    mode: str
    records: RecordSet
    new_records: List[ApplicationRecord] = field(default_factory=list)
    watermark: datetime = field(default_factory=utcnow)


class SyncEngine:
    """
    Runs sync passes against one mailbox.

    Args:
        client: Object with search_messages(query, max_results) and
            get_message(msg_id, format) (normally a GmailClient)
        classifier: MessageClassifier used for every fetched message
        max_workers: Upper bound on concurrent detail fetches
        clock: Returns the current time; the watermark is taken from it
            when a pass completes
    """

    def __init__(
        self,
        client,
        classifier: Optional[MessageClassifier] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
        full_limit: int = FULL_SYNC_LIMIT,
        incremental_limit: int = INCREMENTAL_SYNC_LIMIT,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.client = client
        self.classifier = classifier or MessageClassifier()
        self.max_workers = max(1, max_workers)
        self.full_limit = full_limit
        self.incremental_limit = incremental_limit
        self._clock = clock

    def _fetch_and_classify_one(self, msg_id: str) -> ApplicationRecord:
        message = self.client.get_message(msg_id, format="full") or {}
        return self.classifier.classify(message, msg_id=msg_id)

    def fetch_and_classify(self, query: str, limit: int) -> List[ApplicationRecord]:
        """
        List matching messages and classify each one.

        Detail fetches run concurrently, bounded by max_workers. Results
        keep the order Gmail listed them in.

        Raises:
            MailProviderError: If the list call or any detail fetch fails
        """
        ids = self.client.search_messages(query, max_results=limit)
        if not ids:
            logger.info("No messages found matching the criteria")
            return []

        logger.info(f"Classifying {len(ids)} messages ({min(self.max_workers, len(ids))} workers)")
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(ids))) as executor:
            futures = [executor.submit(self._fetch_and_classify_one, msg_id) for msg_id in ids]
            wait(futures)

        # Every task has finished; the first failure aborts the pass
        return [future.result() for future in futures]

    def full_sync(self) -> SyncResult:
        """Rebuild the record set from the newest matching messages."""
        records = self.fetch_and_classify(build_query(), self.full_limit)
        result = SyncResult(
            mode="full",
            records=merge_records({}, records),
            new_records=records,
            watermark=self._clock(),
        )
        logger.info(
            f"Full sync complete: {len(result.records)} applications",
            extra={"mode": "full", "total": len(result.records)},
        )
        return result

    def incremental_sync(self, existing: RecordSet, watermark: datetime) -> SyncResult:
        """
        Classify messages received after watermark and merge them in.

        Args:
            existing: Record set from the previous pass (not modified)
            watermark: Completion time of the previous successful pass
        """
        records = self.fetch_and_classify(build_query(after=watermark), self.incremental_limit)
        result = SyncResult(
            mode="incremental",
            records=merge_records(existing, records),
            new_records=records,
            watermark=self._clock(),
        )
        logger.info(
            f"Incremental sync complete: {len(records)} new, {len(result.records)} total",
            extra={"mode": "incremental", "new": len(records), "total": len(result.records)},
        )
        return result


class SyncCoordinator:
    """
    Single-writer owner of the stored record set and watermark.

    Only one pass runs at a time; a tick that arrives while a pass is in
    flight is skipped rather than queued.
    """

    def __init__(self, store):
        self.store = store
        self._lock = threading.Lock()
        self.last_result: Optional[SyncResult] = None
        self.last_error: Optional[str] = None

    @property
    def in_progress(self) -> bool:
        return self._lock.locked()

    def run_once(self, engine: SyncEngine) -> Optional[SyncResult]:
        """
        Run one pass and persist its outcome.

        Performs a full sync when nothing has been stored yet, otherwise an
        incremental sync from the stored watermark.

        Returns:
            The SyncResult, or None if another pass was already running

        Raises:
            Any error from the pass; the store is left untouched
        """
        if not self._lock.acquire(blocking=False):
            logger.info("Previous sync pass still running, skipping")
            return None

        try:
            watermark = self.store.load_watermark()
            if watermark is None:
                result = engine.full_sync()
            else:
                result = engine.incremental_sync(self.store.load_records(), watermark)

            self.store.save(result.records, result.watermark)
            self.last_result = result
            self.last_error = None
            return result
        except Exception as e:
            logger.error(f"Sync pass failed, keeping previous applications: {e}")
            self.last_error = str(e)
            raise
        finally:
            self._lock.release()
