"""E-mail delivery of confirmation documents over SMTP."""

from __future__ import annotations

import logging
import smtplib
import ssl
from email.message import EmailMessage

from coursereg.documents.exceptions import DeliveryError

logger = logging.getLogger(__name__)


class EmailDelivery:
    """Sends documents as e-mail attachments.

    Delivery is best-effort: ``deliver`` reports failure through its return
    value and never raises.
    """

    def __init__(
        self,
        host: str = "localhost",
        port: int = 25,
        username: str = "",
        password: str = "",
        sender: str = "registration@localhost",
        enabled: bool = True,
        timeout: float = 30.0,
    ) -> None:
        """Initialize the delivery collaborator.

        Args:
            host: SMTP server host.
            port: SMTP server port. 465 uses implicit TLS, anything else
                  upgrades with STARTTLS when credentials are configured.
            username: SMTP login. Empty means no authentication.
            password: SMTP password.
            sender: From address.
            enabled: When False every delivery is skipped and reported as failed.
            timeout: Socket timeout in seconds.
        """
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.enabled = enabled
        self.timeout = timeout

    def build_message(
        self,
        recipient: str,
        document: bytes,
        subject: str,
        body: str,
        filename: str,
        content_type: str = "text/html",
    ) -> EmailMessage:
        """Compose the message with the document attached."""
        maintype, _, subtype = content_type.partition(";")[0].strip().partition("/")
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.sender
        msg["To"] = recipient
        msg.set_content(body)
        msg.add_attachment(
            document,
            maintype=maintype or "application",
            subtype=subtype or "octet-stream",
            filename=filename,
        )
        return msg

    def send(self, msg: EmailMessage) -> None:
        """Send a composed message.

        Raises:
            DeliveryError: If the SMTP exchange fails.
        """
        try:
            if self.port == 465:
                with smtplib.SMTP_SSL(
                    self.host, self.port, timeout=self.timeout, context=ssl.create_default_context()
                ) as s:
                    if self.username:
                        s.login(self.username, self.password)
                    s.send_message(msg)
            else:
                with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as s:
                    if self.username:
                        s.starttls(context=ssl.create_default_context())
                        s.login(self.username, self.password)
                    s.send_message(msg)
        except (smtplib.SMTPException, OSError) as e:
            raise DeliveryError(f"SMTP delivery to {msg['To']} failed: {e}") from e

    def deliver(
        self,
        recipient: str,
        document: bytes,
        subject: str = "Registration confirmation",
        body: str = "Your registration confirmation is attached.",
        filename: str = "registration.html",
        content_type: str = "text/html",
    ) -> bool:
        """Deliver a document to a recipient.

        Returns:
            True if the mail server accepted the message.
        """
        if not self.enabled:
            logger.warning("E-mail delivery disabled; skipping %s", filename)
            return False

        msg = self.build_message(recipient, document, subject, body, filename, content_type)
        try:
            self.send(msg)
        except DeliveryError as e:
            logger.error("%s", e)
            return False

        logger.info("Sent %s via %s:%d", filename, self.host, self.port)
        return True
