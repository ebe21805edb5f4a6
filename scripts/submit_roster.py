#!/usr/bin/env python3
"""
Roster Submission Client

Parses a roster CSV locally to preview what will be sent, uploads it to the
Offer Letter Mailer and immediately triggers email dispatch for the new job.

Usage:
    python scripts/submit_roster.py uploads/roster_25.csv
    python scripts/submit_roster.py roster.csv --server http://localhost:3001 --preview-only
    python scripts/submit_roster.py roster.csv --no-send
"""

import argparse
import os
import sys
from pathlib import Path

import httpx

sys.path.append(os.path.join(os.path.dirname(__file__), '..'))
from offer_mailer.csv_processor import get_roster_info, read_roster_csv
from offer_mailer.exceptions import IngestionError

DEFAULT_SERVER = os.getenv("OFFER_MAILER_URL", "http://localhost:3001")


def preview_roster(contents: bytes) -> int:
    """Print the parsed roster and return the number of valid rows"""
    df = read_roster_csv(contents)
    info = get_roster_info(df)

    print(f"Successfully loaded {info['total_rows']} records")
    print(f"Columns: {', '.join(info['columns'])}")
    print(df.to_string(index=False, max_rows=20))
    return info['total_rows']


def generate_letters(client: httpx.Client, path: Path, contents: bytes) -> dict:
    response = client.post(
        "/api/generate-letters",
        files={"file": (path.name, contents, "text/csv")},
    )
    result = response.json()
    if response.status_code != 200:
        raise RuntimeError(result.get('error') or 'Failed to generate offer letters')
    return result


def send_emails(client: httpx.Client, job_id: str) -> dict:
    response = client.post("/api/send-emails", json={"job_id": job_id})
    result = response.json()
    if response.status_code != 200:
        raise RuntimeError(result.get('error') or 'Failed to send emails')
    return result


def main() -> None:
    ap = argparse.ArgumentParser(description="Upload a roster CSV and email the generated offer letters")
    ap.add_argument("csv", help="Path to the roster CSV")
    ap.add_argument("--server", default=DEFAULT_SERVER, help="Offer Letter Mailer base URL")
    ap.add_argument("--preview-only", action="store_true", help="Parse and preview the roster without uploading")
    ap.add_argument("--no-send", action="store_true", help="Generate letters but do not send emails")
    ap.add_argument("--timeout", type=float, default=300.0, help="Request timeout in seconds")
    args = ap.parse_args()

    path = Path(args.csv)
    if path.suffix.lower() != '.csv':
        raise SystemExit("Please upload a CSV file")

    contents = path.read_bytes()
    try:
        preview_roster(contents)
    except IngestionError as e:
        raise SystemExit(f"Error parsing CSV file: {e}")

    if args.preview_only:
        return

    print("Processing offer letters...")
    try:
        with httpx.Client(base_url=args.server, timeout=args.timeout) as client:
            generated = generate_letters(client, path, contents)
            print(f"Generated {len(generated['files'])} offer letters (job {generated['job_id']})")

            if args.no_send:
                return

            sent = send_emails(client, generated['job_id'])
            print(f"Successfully generated and sent {sent['sent']} offer letters!")
    except (httpx.HTTPError, RuntimeError) as e:
        raise SystemExit(f"Error processing offer letters: {e}")


if __name__ == "__main__":
    main()
