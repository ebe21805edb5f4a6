"""
Letter Generation Module

Turns parsed roster rows into generated offer letters, one PDF per row.
"""

import logging
import time
from typing import Dict, List, Optional

from .config import MailerConfig, get_config
from .jobs import GeneratedLetter
from .pdf_generator import build_letter_pdf, fetch_logo
from .templates import build_letter_context

logger = logging.getLogger(__name__)


def generate_single_letter(row: Dict[str, str], config: MailerConfig, logo_bytes: Optional[bytes] = None) -> GeneratedLetter:
    """
    Render and materialize the offer letter for one roster row

    Args:
        row: Roster row keyed by lowercase column name
        config: Configuration supplying letter branding
        logo_bytes: Optional logo image

    Returns:
        GeneratedLetter holding the row fields and PDF bytes
    """
    context = build_letter_context(row, config)
    pdf_bytes = build_letter_pdf(context, logo_bytes)
    return GeneratedLetter.from_row(row, pdf_bytes)


def generate_letters(rows: List[Dict[str, str]], config: Optional[MailerConfig] = None) -> List[GeneratedLetter]:
    """
    Generate offer letters for every roster row, in order

    The logo is fetched once per batch. Any render failure propagates and
    the partially generated batch is discarded by the caller.

    Args:
        rows: Parsed roster rows
        config: Configuration supplying branding and logo settings

    Returns:
        Generated letters in roster order
    """
    config = config or get_config()
    start_time = time.time()

    logo_bytes = fetch_logo(config)
    if logo_bytes is None:
        logger.info("Generating letters without a logo")

    letters = [generate_single_letter(row, config, logo_bytes) for row in rows]

    logger.info(f"Generated {len(letters)} offer letters in {time.time() - start_time:.2f}s")
    return letters
