"""
Email Dispatch Tests
"""
import smtplib

import pytest

from offer_mailer import email_sender
from offer_mailer.email_sender import ATTACHMENT_FILENAME, SMTPTransport, build_offer_email, dispatch_job
from offer_mailer.exceptions import DispatchError
from offer_mailer.jobs import GeneratedLetter, JobStore


def _html(message):
    return message.get_body(preferencelist=('html',)).get_content()


class FakeSMTP:
    """Stand-in for smtplib.SMTP that records the conversation"""
    instances = []

    def __init__(self, host, port, timeout=None, **kwargs):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.calls = []
        self.messages = []
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.calls.append('quit')
        return False

    def starttls(self, context=None):
        self.calls.append('starttls')

    def login(self, username, password):
        self.calls.append(('login', username, password))

    def send_message(self, message):
        self.calls.append('send_message')
        self.messages.append(message)


class RefusingSMTP(FakeSMTP):
    def send_message(self, message):
        raise smtplib.SMTPRecipientsRefused({message['To']: (550, b'No such user')})


@pytest.fixture(autouse=True)
def reset_fake_smtp():
    FakeSMTP.instances = []


class TestBuildOfferEmail:
    """Test offer email construction"""

    def test_headers(self, config, letter):
        message = build_offer_email(letter, config)
        assert message['Subject'] == 'Congratulations! Selected for Engineer at SKH Group'
        sender = message['From'].addresses[0]
        assert (sender.display_name, sender.addr_spec) == ('Factorykaam', 'offers@example.com')
        assert message['To'] == 'john@x.com'
        assert [address.addr_spec for address in message['Cc'].addresses] == ['hr@example.com', 'audit@example.com']

    def test_no_cc_header_without_cc_list(self, config, letter):
        config.mail_cc = []
        message = build_offer_email(letter, config)
        assert message['Cc'] is None

    def test_pdf_attachment(self, config, letter):
        message = build_offer_email(letter, config)
        attachments = list(message.iter_attachments())
        assert len(attachments) == 1
        assert attachments[0].get_filename() == ATTACHMENT_FILENAME
        assert attachments[0].get_content_type() == 'application/pdf'
        assert attachments[0].get_content() == letter.pdf_bytes

    def test_html_body_with_coordinator(self, config, letter):
        body = _html(build_offer_email(letter, config))
        assert 'Dear John Doe' in body
        assert 'Name: Jane' in body
        assert 'will be shared with you near to the date of joining' not in body

    def test_html_body_without_coordinator(self, config, letter):
        letter.coordinator = None
        body = _html(build_offer_email(letter, config))
        assert 'will be shared with you near to the date of joining' in body
        assert 'Jane' not in body


class TestDispatchJob:
    """Test sequential dispatch of a job"""

    def _job(self, count):
        letters = [
            GeneratedLetter(
                name=f'Candidate {i}',
                position='Welder',
                start_date='2025-03-01',
                email=f'candidate{i}@x.com',
                pdf_bytes=b'%PDF-1.4 fake',
            )
            for i in range(count)
        ]
        return JobStore().create_job(letters)

    def test_sends_one_email_per_letter_in_order(self, config, transport_factory):
        transport = transport_factory()
        sent = dispatch_job(self._job(3), transport, config)
        assert sent == 3
        assert [message['To'] for message in transport.sent] == [
            'candidate0@x.com', 'candidate1@x.com', 'candidate2@x.com'
        ]

    def test_empty_job_sends_nothing(self, config, transport_factory):
        transport = transport_factory()
        assert dispatch_job(self._job(0), transport, config) == 0
        assert transport.sent == []

    def test_letter_without_email_aborts(self, config, transport_factory):
        job = self._job(2)
        job.letters[1].email = ''
        transport = transport_factory()
        with pytest.raises(DispatchError, match='Candidate 1: no email address'):
            dispatch_job(job, transport, config)
        assert [message['To'] for message in transport.sent] == ['candidate0@x.com']

    def test_failure_aborts_remaining_sends(self, config, transport_factory):
        transport = transport_factory(fail_on=1)
        with pytest.raises(DispatchError):
            dispatch_job(self._job(3), transport, config)
        assert len(transport.sent) == 1


class TestSMTPTransport:
    """Test the smtplib-backed transport"""

    def test_starttls_login_and_send(self, config, letter, monkeypatch):
        monkeypatch.setattr(email_sender.smtplib, 'SMTP', FakeSMTP)
        message = build_offer_email(letter, config)

        SMTPTransport(config).send(message)

        server = FakeSMTP.instances[0]
        assert (server.host, server.port) == ('smtp.example.com', 587)
        assert server.calls == ['starttls', ('login', 'offers@example.com', 'secret'), 'send_message', 'quit']
        assert server.messages == [message]

    def test_no_login_without_username(self, config, letter, monkeypatch):
        monkeypatch.setattr(email_sender.smtplib, 'SMTP', FakeSMTP)
        config.smtp_username = ''
        config.smtp_starttls = False

        SMTPTransport(config).send(build_offer_email(letter, config))

        assert FakeSMTP.instances[0].calls == ['send_message', 'quit']

    def test_ssl_connection(self, config, letter, monkeypatch):
        monkeypatch.setattr(email_sender.smtplib, 'SMTP_SSL', FakeSMTP)
        config.smtp_use_ssl = True
        config.smtp_starttls = False
        config.smtp_port = 465

        SMTPTransport(config).send(build_offer_email(letter, config))

        server = FakeSMTP.instances[0]
        assert server.port == 465
        assert 'starttls' not in server.calls

    def test_relay_failure_raises_dispatch_error(self, config, letter, monkeypatch):
        monkeypatch.setattr(email_sender.smtplib, 'SMTP', RefusingSMTP)
        with pytest.raises(DispatchError, match='john@x.com'):
            SMTPTransport(config).send(build_offer_email(letter, config))

    def test_invalid_config_raises_dispatch_error(self, config, letter, monkeypatch):
        monkeypatch.setattr(email_sender.smtplib, 'SMTP', FakeSMTP)
        config.smtp_password = ''
        with pytest.raises(DispatchError, match='SMTP_PASSWORD'):
            SMTPTransport(config).send(build_offer_email(letter, config))
        assert FakeSMTP.instances == []
