"""
Email Dispatch Module

Builds the offer email for each generated letter and hands it to the SMTP relay.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from typing import Optional

from .config import MailerConfig, get_config
from .exceptions import DispatchError
from .jobs import GeneratedLetter, LetterJob
from .templates import build_letter_context, render_email_body, render_email_subject

logger = logging.getLogger(__name__)

ATTACHMENT_FILENAME = "OfferLetter.pdf"


class SMTPTransport:
    """
    Sends messages through the configured SMTP relay

    A fresh connection is opened for every message.
    """

    def __init__(self, config: Optional[MailerConfig] = None):
        self.config = config or get_config()

    def _connect(self) -> smtplib.SMTP:
        if self.config.smtp_use_ssl:
            return smtplib.SMTP_SSL(
                self.config.smtp_host,
                self.config.smtp_port,
                timeout=self.config.smtp_timeout,
                context=ssl.create_default_context(),
            )
        return smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=self.config.smtp_timeout)

    def send(self, message: EmailMessage) -> None:
        """
        Deliver one message

        Raises:
            DispatchError: If the configuration is invalid or the relay rejects the message
        """
        is_valid, error_message = self.config.validate_config()
        if not is_valid:
            raise DispatchError(f"SMTP configuration error: {error_message}")

        try:
            with self._connect() as server:
                if self.config.smtp_starttls:
                    server.starttls(context=ssl.create_default_context())
                if self.config.smtp_username:
                    server.login(self.config.smtp_username, self.config.smtp_password)
                server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            raise DispatchError(f"Failed to send email to {message['To']}: {e}") from e


def build_offer_email(letter: GeneratedLetter, config: Optional[MailerConfig] = None) -> EmailMessage:
    """
    Build the offer email with the letter PDF attached

    Args:
        letter: Generated letter to deliver
        config: Configuration supplying sender identity and CC list

    Returns:
        Ready-to-send email message
    """
    config = config or get_config()
    context = build_letter_context(vars(letter), config)

    message = EmailMessage()
    message['Subject'] = render_email_subject(context)
    message['From'] = config.sender
    message['To'] = letter.email
    if config.mail_cc:
        message['Cc'] = ", ".join(config.mail_cc)

    html_body = render_email_body(context)
    message.set_content("This message contains an HTML offer letter. Please view it in an HTML capable mail client.")
    message.add_alternative(html_body, subtype='html')
    message.add_attachment(
        letter.pdf_bytes,
        maintype='application',
        subtype='pdf',
        filename=ATTACHMENT_FILENAME,
    )
    return message


def dispatch_job(job: LetterJob, transport, config: Optional[MailerConfig] = None) -> int:
    """
    Send one offer email per letter in the job, in order

    The first failure aborts the remaining sends.

    Args:
        job: Job holding the generated letters
        transport: Object with a send(EmailMessage) method
        config: Configuration supplying sender identity and CC list

    Returns:
        Number of emails sent

    Raises:
        DispatchError: If any single send fails
    """
    config = config or get_config()
    sent = 0

    for letter in job.letters:
        if not letter.email:
            raise DispatchError(f"Failed to send email to {letter.name or 'unnamed candidate'}: no email address")
        message = build_offer_email(letter, config)
        transport.send(message)
        sent += 1
        logger.info(f"Offer letter sent to {letter.name} <{letter.email}>")

    logger.info(f"Job {job.job_id}: dispatched {sent} emails")
    return sent
