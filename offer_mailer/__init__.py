"""
Offer Letter Mailer - FastAPI application for generating offer-letter PDFs from CSV data.

This package parses a CSV roster of selected candidates, renders one personalized
offer letter PDF per row and emails each candidate their letter through an SMTP relay.
"""

__version__ = "1.0.0"
__author__ = "Offer Letter Mailer Maintainers"
__description__ = "FastAPI application for batch offer letter generation and delivery"
