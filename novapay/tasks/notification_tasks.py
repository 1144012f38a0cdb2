"""
Notification Celery tasks — async delivery of transaction e-mails.

Offloads delivery to background workers so API responses never wait on
the e-mail provider. Transport errors from the provider are retried with
exponential backoff.
"""

import asyncio
import logging

import httpx

from novapay.tasks.celery_app import celery_app
from novapay.services.notification_service import notification_service

logger = logging.getLogger(__name__)

RETRY_OPTIONS = {
    "autoretry_for": (httpx.HTTPError,),
    "retry_backoff": True,
    "max_retries": 3,
}


def _run(coro):
    loop = asyncio.new_event_loop()
    try:
        return loop.run_until_complete(coro)
    finally:
        loop.close()


@celery_app.task(name="novapay.tasks.notification_tasks.send_transaction_created", **RETRY_OPTIONS)
def send_transaction_created(email: str, details: dict):
    """E-mail the sender a receipt for a new transaction."""
    result = _run(notification_service.notify_transaction_created(email, details))
    logger.info("Creation notice sent for %s", details.get("transaction_id"))
    return result


@celery_app.task(name="novapay.tasks.notification_tasks.send_admin_transaction_alert", **RETRY_OPTIONS)
def send_admin_transaction_alert(details: dict):
    """Alert operators about a new transaction. Retried independently of the receipt."""
    return _run(notification_service.notify_admin_transaction_created(details))


@celery_app.task(name="novapay.tasks.notification_tasks.send_status_update", **RETRY_OPTIONS)
def send_status_update(email: str, transaction_id: str, new_status: str):
    """Notify a user about a transaction status change."""
    result = _run(notification_service.notify_status_change(email, transaction_id, new_status))
    logger.info("Status update sent to %s for %s", email, transaction_id)
    return result
