import logging
import re
import smtplib
from collections.abc import Callable
from email.message import EmailMessage
from email.utils import formataddr
from html import unescape

from oneuptime.core.config import Settings, get_settings
from oneuptime.core.errors import DeliveryError
from oneuptime.notifications.messages import EmailEnvelope, MailServer
from oneuptime.notifications.templates import render_email

logger = logging.getLogger(__name__)

SmtpFactory = Callable[[MailServer], smtplib.SMTP]

_TAG_PATTERN = re.compile(r"<[^>]+>")


def _default_smtp_factory(server: MailServer) -> smtplib.SMTP:
    if server.secure and server.port == 465:
        return smtplib.SMTP_SSL(server.hostname, server.port, timeout=30)
    smtp = smtplib.SMTP(server.hostname, server.port, timeout=30)
    if server.secure:
        smtp.starttls()
    return smtp


def _html_to_text(html: str) -> str:
    text = _TAG_PATTERN.sub("", html)
    lines = [line.strip() for line in unescape(text).splitlines()]
    return "\n".join(line for line in lines if line)


class MailService:
    def __init__(
        self,
        settings: Settings | None = None,
        smtp_factory: SmtpFactory | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.smtp_factory = smtp_factory or _default_smtp_factory

    def build_message(self, envelope: EmailEnvelope, server: MailServer) -> EmailMessage:
        if not envelope.to_email:
            raise DeliveryError("email", "Recipient email is missing.")

        html = render_email(envelope.template_type, envelope.vars)
        message = EmailMessage()
        # header values must stay on one line
        message["Subject"] = " ".join(envelope.subject.split())
        message["From"] = formataddr((server.from_name or "", server.from_email))
        message["To"] = envelope.to_email
        message.set_content(_html_to_text(html))
        message.add_alternative(html, subtype="html")
        return message

    def send_mail(self, envelope: EmailEnvelope, mail_server: MailServer | None = None) -> None:
        server = mail_server or MailServer.from_settings(self.settings)
        try:
            message = self.build_message(envelope, server)
        except ValueError as exc:
            raise DeliveryError("email", f"Invalid email message: {exc}") from exc

        try:
            with self.smtp_factory(server) as smtp:
                if server.username and server.password:
                    smtp.login(server.username, server.password)
                smtp.send_message(message)
        except (smtplib.SMTPException, OSError) as exc:
            raise DeliveryError("email", str(exc)) from exc

        logger.info(
            "Sent %s email to %s via %s",
            envelope.template_type,
            envelope.to_email,
            server.hostname,
        )
