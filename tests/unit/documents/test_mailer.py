"""Unit tests for EmailDelivery."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from coursereg.documents import DeliveryError, EmailDelivery


@pytest.fixture
def delivery() -> EmailDelivery:
    return EmailDelivery(
        host="smtp.example.com",
        port=587,
        username="mailer",
        password="secret",
        sender="noreply@example.com",
    )


@pytest.mark.unit
class TestBuildMessage:
    """Tests for EmailDelivery.build_message."""

    def test_attaches_document(self, delivery: EmailDelivery) -> None:
        msg = delivery.build_message(
            "somchai@hospital.go.th", b"<html></html>", "Subject", "Body", "reg.html"
        )

        assert msg["To"] == "somchai@hospital.go.th"
        assert msg["From"] == "noreply@example.com"
        assert msg["Subject"] == "Subject"
        attachments = list(msg.iter_attachments())
        assert len(attachments) == 1
        assert attachments[0].get_filename() == "reg.html"
        assert attachments[0].get_content_type() == "text/html"


@pytest.mark.unit
class TestSend:
    """Tests for EmailDelivery.send."""

    def test_starttls_and_login(self, delivery: EmailDelivery) -> None:
        msg = delivery.build_message("a@b.co", b"x", "S", "B", "f.html")
        with patch("coursereg.documents.mailer.smtplib.SMTP") as smtp_cls:
            server = smtp_cls.return_value.__enter__.return_value

            delivery.send(msg)

        smtp_cls.assert_called_once_with("smtp.example.com", 587, timeout=30.0)
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "secret")
        server.send_message.assert_called_once_with(msg)

    def test_implicit_tls_on_465(self) -> None:
        delivery = EmailDelivery(host="smtp.example.com", port=465)
        msg = delivery.build_message("a@b.co", b"x", "S", "B", "f.html")
        with patch("coursereg.documents.mailer.smtplib.SMTP_SSL") as ssl_cls:
            server = ssl_cls.return_value.__enter__.return_value

            delivery.send(msg)

        server.login.assert_not_called()
        server.send_message.assert_called_once_with(msg)

    def test_smtp_failure_raises_delivery_error(self, delivery: EmailDelivery) -> None:
        msg = delivery.build_message("a@b.co", b"x", "S", "B", "f.html")
        with patch("coursereg.documents.mailer.smtplib.SMTP") as smtp_cls:
            smtp_cls.side_effect = smtplib.SMTPConnectError(421, b"busy")

            with pytest.raises(DeliveryError):
                delivery.send(msg)


@pytest.mark.unit
class TestDeliver:
    """Tests for EmailDelivery.deliver."""

    def test_returns_true_on_success(self, delivery: EmailDelivery) -> None:
        with patch.object(delivery, "send") as send:
            assert delivery.deliver("a@b.co", b"doc") is True

        send.assert_called_once()

    def test_disabled_skips_sending(self) -> None:
        delivery = EmailDelivery(enabled=False)
        with patch.object(delivery, "send") as send:
            assert delivery.deliver("a@b.co", b"doc") is False

        send.assert_not_called()

    def test_failure_returns_false(self, delivery: EmailDelivery) -> None:
        with patch.object(delivery, "send", MagicMock(side_effect=DeliveryError("down"))):
            assert delivery.deliver("a@b.co", b"doc") is False
