"""
CSV Processing Module

Handles roster parsing, validation and normalization for the Offer Letter Mailer.
"""

import csv
import io
import logging
from typing import Dict, List, Union

import pandas as pd

from .exceptions import IngestionError

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ['name', 'position', 'start_date', 'email']
OPTIONAL_COLUMNS = ['coordinator', 'coordinator_contact', 'location']


def _is_blank(fields: List[str]) -> bool:
    return len(fields) <= 1 and not any(field.strip() for field in fields)


def read_roster_csv(contents: Union[bytes, str]) -> pd.DataFrame:
    """
    Parse raw CSV content into a DataFrame of trimmed string values

    Column names are lowercased and trimmed. Empty lines are skipped and any
    row whose field count differs from the header's is dropped.

    Args:
        contents: Raw CSV bytes (UTF-8, optional BOM) or already decoded text

    Returns:
        DataFrame with one row per valid CSV record, in file order

    Raises:
        IngestionError: If the content cannot be decoded or yields no valid rows
    """
    if isinstance(contents, bytes):
        try:
            contents = contents.decode('utf-8-sig')
        except UnicodeDecodeError:
            raise IngestionError("File encoding not supported. Please use UTF-8 encoded CSV")

    records = [fields for fields in csv.reader(io.StringIO(contents)) if not _is_blank(fields)]
    if not records:
        raise IngestionError("CSV file is empty")

    headers = [header.strip().lower() for header in records[0]]

    # First occurrence of a normalized column name wins
    kept_indexes = []
    for index, header in enumerate(headers):
        if header in headers[:index]:
            logger.warning(f"Ignoring duplicate CSV column '{records[0][index].strip()}' (column {index + 1})")
            continue
        kept_indexes.append(index)

    rows = []
    for line_number, fields in enumerate(records[1:], start=2):
        if len(fields) != len(headers):
            logger.debug(f"Dropping CSV record {line_number}: {len(fields)} fields, expected {len(headers)}")
            continue
        rows.append([fields[index].strip() for index in kept_indexes])

    if not rows:
        raise IngestionError("No valid data found in CSV file")

    return pd.DataFrame(rows, columns=[headers[index] for index in kept_indexes], dtype=str)


def validate_and_enhance_roster(df: pd.DataFrame) -> pd.DataFrame:
    """
    Add any missing roster columns as empty strings

    Letter columns: name, position, start_date, email
    Optional columns: coordinator, coordinator_contact, location

    A missing letter column is only logged; rows without an email address
    fail later, when the letter is dispatched.
    """
    missing_columns = [col for col in REQUIRED_COLUMNS if col not in df.columns]
    if missing_columns:
        logger.warning(
            f"Roster is missing columns: {', '.join(missing_columns)}. Expected: {', '.join(REQUIRED_COLUMNS)}"
        )

    for column in REQUIRED_COLUMNS + OPTIONAL_COLUMNS:
        if column not in df.columns:
            df[column] = ''
        else:
            df[column] = df[column].fillna('').astype(str)

    return df


def validate_csv_size(df: pd.DataFrame, max_rows: int) -> None:
    """
    Validate roster size against maximum allowed rows

    Raises:
        IngestionError: If the roster exceeds the size limit
    """
    if len(df) > max_rows:
        raise IngestionError(f"CSV too large. Maximum allowed rows: {max_rows}, received: {len(df)}")


def get_roster_info(df: pd.DataFrame) -> dict:
    """
    Get information about the roster structure and content

    Args:
        df: Validated roster DataFrame

    Returns:
        Dictionary with roster metadata
    """
    if 'coordinator' in df.columns and 'coordinator_contact' in df.columns:
        with_coordinator = int(((df['coordinator'] != '') & (df['coordinator_contact'] != '')).sum())
    else:
        with_coordinator = 0

    return {
        "total_rows": len(df),
        "columns": list(df.columns),
        "rows_with_coordinator": with_coordinator,
        "rows_without_coordinator": len(df) - with_coordinator,
    }


def dataframe_to_rows(df: pd.DataFrame) -> List[Dict[str, str]]:
    """Convert a roster DataFrame into an ordered list of row dictionaries"""
    return df.to_dict(orient='records')


def parse_roster(contents: Union[bytes, str], max_rows: int) -> List[Dict[str, str]]:
    """
    Full ingestion pipeline: parse, validate and convert a roster upload

    Args:
        contents: Raw CSV upload content
        max_rows: Maximum allowed roster rows

    Returns:
        Ordered list of row mappings keyed by lowercase column name
    """
    df = read_roster_csv(contents)
    df = validate_and_enhance_roster(df)
    validate_csv_size(df, max_rows)

    logger.info(f"Roster parsed: {get_roster_info(df)}")
    return dataframe_to_rows(df)
