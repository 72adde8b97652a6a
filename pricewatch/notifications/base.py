"""
Price alert payload and notifier interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class PriceAlert:
    """
    A competitor undercut our own price for a product.
    """

    recipient: str
    product_name: str
    competitor_name: str
    competitor_price: float
    own_price: float
    currency: str
    url: str

    @property
    def difference_pct(self) -> float | None:
        if not self.own_price:
            return None
        return round((self.competitor_price - self.own_price) / self.own_price * 100, 1)

    @property
    def competitor_is_cheaper(self) -> bool:
        return self.competitor_price < self.own_price


class PriceAlertNotifier(ABC):
    """
    Delivers price alerts. Delivery errors propagate to the caller.
    """

    @abstractmethod
    def send(self, alert: PriceAlert) -> None:
        """
        Deliver one alert.
        """
