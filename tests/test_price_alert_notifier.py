from __future__ import annotations

import smtplib
import unittest
from unittest import mock

from pricewatch.config import SMTPSettings
from pricewatch.notifications import PriceAlert, SMTPPriceAlertNotifier
from pricewatch.notifications.smtp import format_amount


def _alert(**overrides: object) -> PriceAlert:
    values: dict[str, object] = {
        "recipient": "owner@example.com",
        "product_name": "Espresso grinder",
        "competitor_name": "Shop <One>",
        "competitor_price": 12990.0,
        "own_price": 14990.0,
        "currency": "HUF",
        "url": "https://shop1.example/product?id=1&ref=x",
    }
    values.update(overrides)
    return PriceAlert(**values)  # type: ignore[arg-type]


class TestPriceAlert(unittest.TestCase):
    def test_difference_pct(self) -> None:
        self.assertEqual(_alert().difference_pct, -13.3)
        self.assertTrue(_alert().competitor_is_cheaper)

    def test_difference_pct_without_own_price(self) -> None:
        self.assertIsNone(_alert(own_price=0.0).difference_pct)


class TestFormatAmount(unittest.TestCase):
    def test_groups_thousands_with_spaces(self) -> None:
        self.assertEqual(format_amount(12990.0, "HUF"), "12 990 HUF")
        self.assertEqual(format_amount(1234.5, "EUR"), "1 234.50 EUR")
        self.assertEqual(format_amount(99, "USD"), "99 USD")


class TestSMTPPriceAlertNotifier(unittest.TestCase):
    def setUp(self) -> None:
        self.settings = SMTPSettings(
            host="smtp.example.com",
            port=2525,
            username="mailer",
            password="secret",
            sender="alerts@pricewatch.example",
            use_tls=True,
            timeout_seconds=7.0,
        )

    def test_requires_host(self) -> None:
        with self.assertRaises(ValueError):
            SMTPPriceAlertNotifier(SMTPSettings())

    def test_build_message(self) -> None:
        message = SMTPPriceAlertNotifier(self.settings).build_message(_alert())

        self.assertEqual(message["To"], "owner@example.com")
        self.assertEqual(message["From"], "alerts@pricewatch.example")
        self.assertEqual(message["Subject"], "Shop <One> is cheaper on Espresso grinder")
        plain = message.get_body(preferencelist=("plain",)).get_content()
        html_body = message.get_body(preferencelist=("html",)).get_content()
        self.assertIn("Your price: 14 990 HUF", plain)
        self.assertIn("Shop <One> price: 12 990 HUF (-13.3%)", plain)
        self.assertIn("Shop &lt;One&gt;", html_body)
        self.assertIn("id=1&amp;ref=x", html_body)

    def test_subject_when_competitor_is_not_cheaper(self) -> None:
        message = SMTPPriceAlertNotifier(self.settings).build_message(
            _alert(competitor_price=15990.0)
        )

        self.assertTrue(message["Subject"].startswith("Price change at Shop <One>"))

    def test_send_uses_tls_and_login(self) -> None:
        with mock.patch("pricewatch.notifications.smtp.smtplib.SMTP") as smtp_cls:
            client = smtp_cls.return_value.__enter__.return_value
            with self.assertLogs("pricewatch.notifications.smtp", level="INFO") as logs:
                SMTPPriceAlertNotifier(self.settings).send(_alert())

        smtp_cls.assert_called_once_with("smtp.example.com", 2525, timeout=7.0)
        client.starttls.assert_called_once_with()
        client.login.assert_called_once_with("mailer", "secret")
        client.send_message.assert_called_once()
        self.assertEqual(client.send_message.call_args.args[0]["To"], "owner@example.com")
        self.assertIn("price_alert_sent", logs.output[0])

    def test_send_without_tls_or_credentials(self) -> None:
        settings = SMTPSettings(host="localhost", port=25, use_tls=False)
        with mock.patch("pricewatch.notifications.smtp.smtplib.SMTP") as smtp_cls:
            client = smtp_cls.return_value.__enter__.return_value
            SMTPPriceAlertNotifier(settings).send(_alert())

        client.starttls.assert_not_called()
        client.login.assert_not_called()
        client.send_message.assert_called_once()

    def test_delivery_errors_propagate(self) -> None:
        with mock.patch("pricewatch.notifications.smtp.smtplib.SMTP") as smtp_cls:
            client = smtp_cls.return_value.__enter__.return_value
            client.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
            with self.assertRaises(smtplib.SMTPRecipientsRefused):
                SMTPPriceAlertNotifier(self.settings).send(_alert())


if __name__ == "__main__":
    unittest.main()
