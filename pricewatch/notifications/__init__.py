"""
Price alert notification exports.
"""

from pricewatch.notifications.base import PriceAlert, PriceAlertNotifier
from pricewatch.notifications.smtp import SMTPPriceAlertNotifier

__all__ = ["PriceAlert", "PriceAlertNotifier", "SMTPPriceAlertNotifier"]
