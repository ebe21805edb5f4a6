"""
Utility Functions Module

Common helper functions used across the Offer Letter Mailer application.
"""

import uuid


def generate_job_id() -> str:
    """
    Generate a short, unique job ID for tracking a generated batch

    Returns:
        12-character hex string
    """
    return uuid.uuid4().hex[:12]


def format_error_message(error: Exception, expose_details: bool) -> str:
    """
    Build the user-facing message for an API error response

    Args:
        error: The exception that aborted the request
        expose_details: Whether the exception text may be shown (development only)

    Returns:
        Exception text in development, a generic message otherwise
    """
    return str(error) if expose_details else "Internal server error"


def calculate_file_size_mb(content: bytes) -> float:
    """
    Calculate file size in MB from raw content

    Args:
        content: Bytes to measure

    Returns:
        File size in megabytes
    """
    return round(len(content) / (1024 * 1024), 2)
