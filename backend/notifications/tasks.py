"""
Celery tasks for notification delivery.

Commands never send e-mail inline. They call schedule_notification(),
which enqueues deliver_notification only after the surrounding
transaction commits. A failure to enqueue or deliver is logged and
counted; it never reaches the operation that triggered it.

Usage:
    from notifications.tasks import schedule_notification
    schedule_notification(contact.email, subject, html, kind="order_sent")
"""
import logging

from celery import shared_task
from django.db import transaction

from notifications.email_service import notify
from ops.metrics import record_notification_failure

logger = logging.getLogger(__name__)


@shared_task(bind=True, ignore_result=True)
def deliver_notification(self, recipient_email: str, subject: str, content: str, kind: str = "generic") -> bool:
    """Deliver one notification; False results are counted, not retried."""
    sent = notify(recipient_email, subject, content)
    if not sent:
        record_notification_failure(kind)
        logger.warning(
            f"Notification '{subject}' to {recipient_email} was not delivered",
            extra={"kind": kind},
        )
    return sent


def enqueue_notification(recipient_email: str, subject: str, content: str, kind: str) -> None:
    try:
        deliver_notification.delay(recipient_email, subject, content, kind)
    except Exception as e:
        record_notification_failure(kind)
        logger.error(f"Could not enqueue notification '{subject}' to {recipient_email}: {e}")


def schedule_notification(recipient_email: str, subject: str, content: str, kind: str = "generic") -> None:
    """Enqueue delivery once the current transaction has committed."""
    transaction.on_commit(lambda: enqueue_notification(recipient_email, subject, content, kind))
