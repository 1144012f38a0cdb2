"""
Notification service — transactional e-mail delivery.

Posts messages to the configured e-mail HTTP API. When no API URL is
configured (local development, tests) messages are logged and reported
as ``not_configured`` instead of being sent.
"""

import logging

import httpx

from novapay.config import settings

logger = logging.getLogger(__name__)


def _summary(details: dict) -> str:
    return (
        f"Transaction {details['transaction_id']}: "
        f"{details['send_amount']} {details['send_currency']} -> "
        f"{details['receive_amount']} {details['receive_currency']} "
        f"(fee {details['fee_amount']}, total {details['total_amount']})."
    )


class NotificationService:
    """Delivers transaction e-mails to users and operators."""

    def __init__(self):
        self.api_url = settings.EMAIL_API_URL
        self.api_key = settings.EMAIL_API_KEY
        self.sender = settings.EMAIL_FROM
        self.admin_email = settings.ADMIN_NOTIFICATION_EMAIL

    async def send_email(self, to: str, subject: str, body: str) -> dict:
        """Send one e-mail through the provider API."""
        if not self.api_url:
            logger.info("E-mail API not configured; skipping %r to %s", subject, to)
            return {"to": to, "subject": subject, "status": "not_configured"}

        async with httpx.AsyncClient(timeout=10) as client:
            resp = await client.post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={"from": self.sender, "to": to, "subject": subject, "text": body},
            )
            resp.raise_for_status()

        return {"to": to, "subject": subject, "status": "sent"}

    async def notify_transaction_created(self, email: str, details: dict) -> dict:
        """Send the sender a receipt for a new transaction."""
        return await self.send_email(
            email, f"Your NovaPay transfer {details['transaction_id']}", _summary(details),
        )

    async def notify_admin_transaction_created(self, details: dict) -> dict:
        """Alert the operators about a new transaction, if an address is set."""
        if not self.admin_email:
            logger.debug("No admin address; skipping alert for %s", details["transaction_id"])
            return {"status": "not_configured"}
        return await self.send_email(
            self.admin_email, f"New transaction {details['transaction_id']}", _summary(details),
        )

    async def notify_status_change(self, email: str, transaction_id: str, new_status: str) -> dict:
        message = f"Transaction {transaction_id}: status updated to {new_status}."
        return await self.send_email(email, f"Transfer {transaction_id} is {new_status}", message)


notification_service = NotificationService()
