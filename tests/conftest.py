"""
Test Configuration and Fixtures
"""
import pytest
from fastapi.testclient import TestClient

from offer_mailer.config import MailerConfig, get_config, reset_config
from offer_mailer.exceptions import DispatchError
from offer_mailer.jobs import GeneratedLetter, JobStore, get_job_store
from offer_mailer.main import app, get_mail_transport


class RecordingTransport:
    """Mail transport that records messages instead of talking to SMTP"""

    def __init__(self, fail_on=None):
        self.sent = []
        self.fail_on = fail_on

    def send(self, message):
        if self.fail_on is not None and len(self.sent) == self.fail_on:
            raise DispatchError(f"Failed to send email to {message['To']}: relay refused")
        self.sent.append(message)


@pytest.fixture(scope='function')
def config(monkeypatch):
    """Fresh configuration built from a controlled environment"""
    monkeypatch.setenv('APP_ENV', 'development')
    monkeypatch.setenv('COMPANY_NAME', 'SKH Group')
    monkeypatch.setenv('SMTP_HOST', 'smtp.example.com')
    monkeypatch.setenv('SMTP_PORT', '587')
    monkeypatch.setenv('SMTP_USERNAME', 'offers@example.com')
    monkeypatch.setenv('SMTP_PASSWORD', 'secret')
    monkeypatch.setenv('SMTP_STARTTLS', 'true')
    monkeypatch.setenv('SMTP_USE_SSL', 'false')
    monkeypatch.setenv('MAIL_FROM', 'offers@example.com')
    monkeypatch.setenv('MAIL_FROM_NAME', 'Factorykaam')
    monkeypatch.setenv('MAIL_CC', 'hr@example.com, audit@example.com')
    monkeypatch.setenv('LOGO_URL', '')
    monkeypatch.setenv('LOGO_PATH', '')
    monkeypatch.setenv('MAX_CSV_ROWS', '50')
    reset_config()
    yield MailerConfig()
    reset_config()


@pytest.fixture(scope='function')
def store():
    return JobStore(ttl_seconds=600)


@pytest.fixture(scope='function')
def transport():
    return RecordingTransport()


@pytest.fixture
def transport_factory():
    return RecordingTransport


@pytest.fixture(scope='function')
def client(config, store, transport):
    """Test client wired to the fixture config, job store and transport"""
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_job_store] = lambda: store
    app.dependency_overrides[get_mail_transport] = lambda: transport
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def roster_row():
    return {
        'name': 'John Doe',
        'position': 'Engineer',
        'start_date': '2025-01-01',
        'email': 'john@x.com',
        'coordinator': 'Jane',
        'coordinator_contact': '555-1234',
        'location': 'Plant A',
    }


@pytest.fixture
def letter(roster_row):
    return GeneratedLetter.from_row(roster_row, b'%PDF-1.4 fake')
