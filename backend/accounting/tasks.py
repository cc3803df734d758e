"""
Celery tasks for the posting layer.

Tasks:
- retry_source_entry: journal a business document whose automatic entry
  could not be written inline (database error while posting)

Usage:
    from accounting.tasks import retry_source_entry
    retry_source_entry.delay("BILL", str(bill.id))
"""
import logging

from celery import shared_task
from django.db import DatabaseError

logger = logging.getLogger(__name__)


@shared_task(
    bind=True,
    max_retries=3,
    autoretry_for=(DatabaseError,),
    retry_backoff=True,
)
def retry_source_entry(self, source_type: str, source_id: str) -> dict:
    """
    Post the automatic entry of one document, unless it already has one.

    A retryable posting failure is re-raised as DatabaseError so Celery
    retries with backoff.

    Returns:
        Dict with status (posted, exists, skipped, failed) and details
    """
    from accounting.commands import has_journal_entries
    from accounting.posting import post_source_entry

    if has_journal_entries(source_type, source_id):
        logger.info(
            "journal_entry.retry_not_needed",
            extra={"source_type": source_type, "source_id": str(source_id)},
        )
        return {"status": "exists"}

    result = post_source_entry(source_type, source_id)

    if result.success:
        return {"status": "posted", "entry_number": result.data.entry_number}
    if result.skipped:
        return {"status": "skipped", "reason": result.error}
    if result.retryable:
        logger.warning(
            "journal_entry.retry_scheduled",
            extra={
                "source_type": source_type,
                "source_id": str(source_id),
                "attempt": self.request.retries,
            },
        )
        raise DatabaseError(result.error)
    return {"status": "failed", "error": result.error}
