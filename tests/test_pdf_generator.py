"""
PDF Generation Tests
"""
from io import BytesIO

import httpx
import pytest
from PIL import Image as PilImage
from pypdf import PdfReader

from offer_mailer import pdf_generator
from offer_mailer.pdf_generator import build_letter_pdf, fetch_logo, split_paragraphs
from offer_mailer.templates import build_letter_context


def _pdf_text(pdf_bytes):
    reader = PdfReader(BytesIO(pdf_bytes))
    text = " ".join(page.extract_text() or "" for page in reader.pages)
    return reader, " ".join(text.split())


@pytest.fixture
def png_logo():
    buffer = BytesIO()
    PilImage.new('RGB', (200, 100), color=(200, 30, 30)).save(buffer, format='PNG')
    return buffer.getvalue()


class TestBuildLetterPdf:
    """Test PDF materialization"""

    def test_single_a4_page(self, config, roster_row):
        pdf_bytes = build_letter_pdf(build_letter_context(roster_row, config))
        assert pdf_bytes.startswith(b'%PDF')

        reader, _ = _pdf_text(pdf_bytes)
        assert len(reader.pages) == 1
        page = reader.pages[0]
        assert float(page.mediabox.width) == pytest.approx(595.27, abs=0.1)
        assert float(page.mediabox.height) == pytest.approx(841.89, abs=0.1)

    def test_letter_content(self, config, roster_row):
        _, text = _pdf_text(build_letter_pdf(build_letter_context(roster_row, config)))
        assert 'Letter of Intent' in text
        assert 'John Doe' in text
        assert 'Engineer' in text
        assert '555-1234' in text
        assert 'signature and stamp are not required' in text

    def test_letter_fallback_content(self, config, roster_row):
        roster_row['coordinator'] = ''
        roster_row['coordinator_contact'] = ''
        _, text = _pdf_text(build_letter_pdf(build_letter_context(roster_row, config)))
        assert 'near to the date of joining' in text
        assert 'Jane' not in text

    def test_logo_is_embedded(self, config, roster_row, png_logo):
        context = build_letter_context(roster_row, config)
        with_logo = build_letter_pdf(context, png_logo)
        without_logo = build_letter_pdf(context)

        reader, _ = _pdf_text(with_logo)
        assert len(reader.pages) == 1
        assert len(with_logo) > len(without_logo)

    def test_broken_logo_is_skipped(self, config, roster_row):
        pdf_bytes = build_letter_pdf(build_letter_context(roster_row, config), b'not an image')
        _, text = _pdf_text(pdf_bytes)
        assert 'Letter of Intent' in text


class TestFetchLogo:
    """Test best-effort logo loading"""

    def test_no_logo_configured(self, config):
        assert fetch_logo(config) is None

    def test_logo_from_path(self, config, tmp_path, png_logo):
        logo_file = tmp_path / 'logo.png'
        logo_file.write_bytes(png_logo)
        config.logo_path = str(logo_file)
        assert fetch_logo(config) == png_logo

    def test_missing_logo_path(self, config, tmp_path):
        config.logo_path = str(tmp_path / 'missing.png')
        assert fetch_logo(config) is None

    def test_logo_from_url(self, config, monkeypatch, png_logo):
        config.logo_url = 'https://cdn.example.com/logo.png'

        def fake_get(url, **kwargs):
            return httpx.Response(200, content=png_logo, request=httpx.Request('GET', url))

        monkeypatch.setattr(pdf_generator.httpx, 'get', fake_get)
        assert fetch_logo(config) == png_logo

    def test_logo_fetch_failure_returns_none(self, config, monkeypatch):
        config.logo_url = 'https://cdn.example.com/logo.png'

        def failing_get(url, **kwargs):
            raise httpx.ConnectError('connection refused', request=httpx.Request('GET', url))

        monkeypatch.setattr(pdf_generator.httpx, 'get', failing_get)
        assert fetch_logo(config) is None

    def test_logo_http_error_returns_none(self, config, monkeypatch):
        config.logo_url = 'https://cdn.example.com/logo.png'

        def not_found(url, **kwargs):
            return httpx.Response(404, request=httpx.Request('GET', url))

        monkeypatch.setattr(pdf_generator.httpx, 'get', not_found)
        assert fetch_logo(config) is None


def test_split_paragraphs():
    assert split_paragraphs("One\n\n\n  \nTwo\nstill two\n\n") == ["One", "Two\nstill two"]
