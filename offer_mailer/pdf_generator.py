"""
PDF Generation Module

Materializes rendered offer letters as in-memory A4 PDF documents using ReportLab.
"""

import logging
import re
from io import BytesIO
from pathlib import Path
from typing import List, Optional
from xml.sax.saxutils import escape

import httpx
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, ListFlowable, ListItem, Paragraph, SimpleDocTemplate, Spacer

from .config import MailerConfig, get_config
from .exceptions import RenderError
from .templates import LETTER_FOOTER, LETTER_HEADING, render_letter_body

logger = logging.getLogger(__name__)

PAGE_MARGIN = 50
FOOTER_HEIGHT = 70
LOGO_WIDTH = 110
BULLET = "•"

_PARAGRAPH_BREAK = re.compile(r"\n\s*\n")


def fetch_logo(config: Optional[MailerConfig] = None) -> Optional[bytes]:
    """
    Load the company logo from LOGO_PATH or fetch it from LOGO_URL

    Never raises: any failure is logged and the letter is rendered without a logo.

    Returns:
        Logo image bytes, or None when no logo is configured or it is unavailable
    """
    config = config or get_config()

    if config.logo_path:
        try:
            return Path(config.logo_path).read_bytes()
        except OSError as e:
            logger.warning(f"Error reading logo from {config.logo_path}: {e}")
            return None

    if not config.logo_url:
        return None

    try:
        response = httpx.get(config.logo_url, timeout=config.logo_timeout, follow_redirects=True)
        response.raise_for_status()
        return response.content
    except httpx.HTTPError as e:
        logger.warning(f"Error fetching logo from {config.logo_url}: {e}")
        return None


def _letter_styles() -> dict:
    styles = getSampleStyleSheet()
    return {
        'heading': ParagraphStyle(
            'LetterHeading',
            parent=styles['Title'],
            fontName='Helvetica-Bold',
            fontSize=20,
            leading=24,
            alignment=TA_CENTER,
            spaceAfter=18,
        ),
        'body': ParagraphStyle(
            'LetterBody',
            parent=styles['Normal'],
            fontName='Helvetica',
            fontSize=12,
            leading=15,
            alignment=TA_JUSTIFY,
            spaceAfter=8,
        ),
        'bullet': ParagraphStyle(
            'LetterBullet',
            parent=styles['Normal'],
            fontName='Helvetica',
            fontSize=12,
            leading=15,
        ),
        'signature': ParagraphStyle(
            'LetterSignature',
            parent=styles['Normal'],
            fontName='Helvetica-Bold',
            fontSize=12,
            leading=15,
            spaceBefore=16,
        ),
    }


def _logo_flowable(logo_bytes: bytes) -> Optional[Image]:
    try:
        reader = ImageReader(BytesIO(logo_bytes))
        width, height = reader.getSize()
        logo = Image(BytesIO(logo_bytes), width=LOGO_WIDTH, height=LOGO_WIDTH * height / width)
        logo.hAlign = 'CENTER'
        return logo
    except Exception as e:
        logger.warning(f"Error adding logo: {e}")
        return None


def split_paragraphs(body: str) -> List[str]:
    """Split a rendered letter body into its non-empty paragraphs"""
    return [block.strip() for block in _PARAGRAPH_BREAK.split(body) if block.strip()]


def _body_flowables(body: str, styles: dict) -> list:
    flowables = []
    for block in split_paragraphs(body):
        lines = [line.strip() for line in block.splitlines() if line.strip()]
        if all(line.startswith(BULLET) for line in lines):
            items = [ListItem(Paragraph(line.lstrip(BULLET).strip(), styles['bullet'])) for line in lines]
            flowables.append(ListFlowable(items, bulletType='bullet', start=BULLET, leftIndent=20))
            flowables.append(Spacer(1, 8))
        else:
            flowables.append(Paragraph(" ".join(lines), styles['body']))
    return flowables


def _draw_footer(canvas, doc):
    canvas.saveState()
    canvas.setFont('Helvetica', 10)
    canvas.setFillColor(colors.gray)
    for index, text in enumerate(LETTER_FOOTER):
        canvas.drawString(PAGE_MARGIN, FOOTER_HEIGHT + PAGE_MARGIN - 30 - index * 20, text)
    canvas.restoreState()


def build_letter_pdf(context: dict, logo_bytes: Optional[bytes] = None) -> bytes:
    """
    Render one offer letter to PDF bytes

    Args:
        context: Letter context from templates.build_letter_context
        logo_bytes: Optional logo image drawn centered above the heading

    Returns:
        PDF document bytes

    Raises:
        RenderError: If the template or the PDF layout fails
    """
    body = render_letter_body(context)
    styles = _letter_styles()

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=PAGE_MARGIN,
        rightMargin=PAGE_MARGIN,
        topMargin=PAGE_MARGIN,
        bottomMargin=PAGE_MARGIN + FOOTER_HEIGHT,
        title=f"Offer Letter - {context.get('name', '')}",
        author=context.get('company_name', ''),
    )

    story = []
    if logo_bytes:
        logo = _logo_flowable(logo_bytes)
        if logo is not None:
            story.append(logo)
            story.append(Spacer(1, 20))

    story.append(Paragraph(LETTER_HEADING, styles['heading']))
    story.extend(_body_flowables(body, styles))
    story.append(Paragraph(escape(context.get('company_name', '')), styles['signature']))

    try:
        doc.build(story, onFirstPage=_draw_footer, onLaterPages=_draw_footer)
    except Exception as e:
        raise RenderError(f"Error building PDF for {context.get('name', 'unknown')}: {e}") from e

    logger.info(f"PDF generated successfully for {context.get('name')}")
    return buffer.getvalue()
