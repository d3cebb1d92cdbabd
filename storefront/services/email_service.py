import logging
import re
from typing import List

import requests

from storefront.config import Settings
from storefront.utils.template import render_template

logger = logging.getLogger(__name__)

BREVO_API_URL = "https://api.brevo.com/v3/smtp/email"


def is_valid_email(email) -> bool:
    if not email:
        return False

    return re.match(r"[^@]+@[^@]+\.[^@]+", email) is not None


def send_email(
    *,
    to: str,
    subject: str,
    html: str,
    api_key: str,
    sender_email: str,
    sender_name: str,
) -> bool:
    """Send email via Brevo. Returns False instead of raising."""

    if not is_valid_email(to):
        logger.warning(f"Not sending email, invalid address: {to}")
        return False

    payload = {
        "sender": {
            "email": sender_email,
            "name": sender_name,
        },
        "to": [{"email": to}],
        "subject": subject,
        "htmlContent": html,
    }

    headers = {
        "api-key": api_key,
        "Content-Type": "application/json",
    }

    try:
        response = requests.post(
            BREVO_API_URL,
            json=payload,
            headers=headers,
            timeout=10,
        )
    except requests.RequestException:
        logger.exception("Brevo email exception")
        return False

    if response.status_code >= 400:
        logger.error(
            f"Brevo email failed ({response.status_code}): {response.text}"
        )
        return False

    logger.info(f"Brevo email sent to {to}")
    return True


class Mailer:
    def __init__(self, settings: Settings):
        self.settings = settings

    def download_url(self, download_token: str) -> str:
        return f"{self.settings.base_url.rstrip('/')}/products/download/{download_token}"

    def send(self, to: str, subject: str, html: str) -> bool:
        return send_email(
            to=to,
            subject=subject,
            html=html,
            api_key=self.settings.brevo_api_key,
            sender_email=self.settings.mail_from,
            sender_name=self.settings.store_name,
        )

    def send_purchase_receipt(self, *, email: str, order, product, download_token: str) -> bool:
        html = render_template(
            "user_emails/purchase_receipt.html",
            store_name=self.settings.store_name,
            order=order,
            product=product,
            download_url=self.download_url(download_token),
        )
        return self.send(email, "Order Confirmation", html)

    def send_order_history(self, *, email: str, orders: List[dict]) -> bool:
        """``orders`` items: ``order``, ``product`` and ``download_token``."""
        html = render_template(
            "user_emails/order_history.html",
            store_name=self.settings.store_name,
            orders=[
                {**item, "download_url": self.download_url(item["download_token"])}
                for item in orders
            ],
        )
        return self.send(email, "Order History", html)
