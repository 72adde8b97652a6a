"""
SMTP delivery for price alerts.
"""

from __future__ import annotations

import html
import logging
import smtplib
from email.message import EmailMessage

from pricewatch.config import SMTPSettings
from pricewatch.notifications.base import PriceAlert, PriceAlertNotifier
from pricewatch.scraping.logging_utils import log_event

logger = logging.getLogger(__name__)


def format_amount(value: float, currency: str) -> str:
    """
    Format with space-grouped thousands, e.g. ``12 990 HUF`` or ``1 234.50 EUR``.
    """

    if float(value).is_integer():
        grouped = f"{value:,.0f}"
    else:
        grouped = f"{value:,.2f}"
    return f"{grouped.replace(',', ' ')} {currency}"


class SMTPPriceAlertNotifier(PriceAlertNotifier):
    """
    Sends multipart (plain text + HTML) alert emails through an SMTP relay.
    """

    def __init__(self, settings: SMTPSettings) -> None:
        if not settings.host:
            raise ValueError("SMTP host is required to send price alerts.")
        self._settings = settings

    def send(self, alert: PriceAlert) -> None:
        message = self.build_message(alert)
        with smtplib.SMTP(
            self._settings.host,
            self._settings.port,
            timeout=self._settings.timeout_seconds,
        ) as client:
            if self._settings.use_tls:
                client.starttls()
            if self._settings.username and self._settings.password:
                client.login(self._settings.username, self._settings.password)
            client.send_message(message)

        log_event(
            logger,
            logging.INFO,
            "price_alert_sent",
            recipient=alert.recipient,
            competitor=alert.competitor_name,
            product=alert.product_name,
        )

    def build_message(self, alert: PriceAlert) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._settings.sender
        message["To"] = alert.recipient
        if alert.competitor_is_cheaper:
            message["Subject"] = f"{alert.competitor_name} is cheaper on {alert.product_name}"
        else:
            message["Subject"] = f"Price change at {alert.competitor_name}: {alert.product_name}"

        own = format_amount(alert.own_price, alert.currency)
        competitor = format_amount(alert.competitor_price, alert.currency)
        difference = alert.difference_pct
        difference_text = f" ({difference:+.1f}%)" if difference is not None else ""

        message.set_content(
            "\n".join(
                [
                    f"{alert.competitor_name} changed its price.",
                    "",
                    f"Product: {alert.product_name}",
                    f"Your price: {own}",
                    f"{alert.competitor_name} price: {competitor}{difference_text}",
                    "",
                    f"View product: {alert.url}",
                ]
            )
        )
        message.add_alternative(
            "<div style=\"font-family: sans-serif; max-width: 600px;\">"
            f"<h2>{html.escape(message['Subject'])}</h2>"
            "<table style=\"border-collapse: collapse;\">"
            f"<tr><td>Product</td><td><strong>{html.escape(alert.product_name)}</strong></td></tr>"
            f"<tr><td>Your price</td><td>{html.escape(own)}</td></tr>"
            f"<tr><td>{html.escape(alert.competitor_name)} price</td>"
            f"<td>{html.escape(competitor + difference_text)}</td></tr>"
            "</table>"
            f"<p><a href=\"{html.escape(alert.url, quote=True)}\">View product</a></p>"
            "</div>",
            subtype="html",
        )
        return message
