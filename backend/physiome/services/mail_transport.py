"""SMTP submission channel used for every outbound PhysioMe email."""
import asyncio
import logging
import smtplib
import ssl
from dataclasses import dataclass
from email.errors import MessageError
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

from physiome.config import MailSettings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmailMessageData:
    sender: Optional[str]
    to: str
    subject: str
    html: str


@dataclass
class TransportResult:
    ok: bool
    message: str
    error: Optional[str] = None


class SMTPTransport:
    """
    Thin wrapper around smtplib. SMTP, socket and message-building failures
    are returned in the result, never raised. Every call opens its own connection, so one
    instance can be shared by concurrent sends.
    """

    def __init__(self, mail_settings: MailSettings):
        self.settings = mail_settings

    def _tls_context(self) -> ssl.SSLContext:
        context = ssl.create_default_context()
        if not self.settings.tls_reject_unauthorized:
            context.check_hostname = False
            context.verify_mode = ssl.CERT_NONE
        return context

    def _connect(self) -> smtplib.SMTP:
        s = self.settings
        if s.secure:
            server = smtplib.SMTP_SSL(s.host, s.port, timeout=s.timeout, context=self._tls_context())
        else:
            server = smtplib.SMTP(s.host, s.port, timeout=s.timeout)
        try:
            if not s.secure:
                server.ehlo()
                server.starttls(context=self._tls_context())
                server.ehlo()
            # Missing credentials are not short-circuited; the server's refusal is the diagnostic.
            server.login(s.user or "", s.password or "")
        except Exception:
            server.close()
            raise
        return server

    def _build(self, message: EmailMessageData) -> MIMEMultipart:
        mime = MIMEMultipart("alternative")
        mime["From"] = message.sender or ""
        mime["To"] = message.to
        mime["Subject"] = message.subject
        mime.attach(MIMEText(message.html, "html", "utf-8"))
        return mime

    def verify(self) -> TransportResult:
        try:
            server = self._connect()
            server.quit()
            logger.info("SMTP connection to %s:%s verified", self.settings.host, self.settings.port)
            return TransportResult(ok=True, message="Email connection verified")
        except (smtplib.SMTPException, MessageError, OSError) as e:
            logger.error("SMTP connection check failed: %s", e)
            return TransportResult(ok=False, message="Email connection failed", error=str(e))

    def send(self, message: EmailMessageData) -> TransportResult:
        try:
            server = self._connect()
            try:
                server.send_message(self._build(message))
            finally:
                server.quit()
            return TransportResult(ok=True, message=f"Email sent to {message.to}")
        except (smtplib.SMTPException, MessageError, OSError) as e:
            logger.error("SMTP send to %s failed: %s", message.to, e)
            return TransportResult(ok=False, message=f"Failed to send email to {message.to}", error=str(e))

    # SMTP is blocking; run it in a worker thread so the event loop stays free
    async def averify(self) -> TransportResult:
        return await asyncio.to_thread(self.verify)

    async def asend(self, message: EmailMessageData) -> TransportResult:
        return await asyncio.to_thread(self.send, message)
