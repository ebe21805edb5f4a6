#!/usr/bin/env python3
"""
Roster CSV Test Data Generator for the Offer Letter Mailer

Generates roster CSV files with:
- Required columns: name, position, start_date, email
- Coordinator columns: coordinator, coordinator_contact, location
  (filled for a configurable percentage of rows, default 60%, empty otherwise)
- Optional malformed rows with a wrong field count, to exercise row dropping

Usage:
    python scripts/generate_test_data.py [number_of_entries] [output_filename] [--coordinator-percent N] [--bad-rows N]

Examples:
    python scripts/generate_test_data.py 25                                  # 25 entries, 60% with coordinator
    python scripts/generate_test_data.py 100 roster.csv --coordinator-percent 0
    python scripts/generate_test_data.py 50 messy.csv --bad-rows 5           # 50 valid + 5 malformed rows

CSV Format:
    name,position,start_date,email,coordinator,coordinator_contact,location
"""

import csv
import random
import sys
from datetime import date, timedelta
from pathlib import Path

FIRST_NAMES = [
    "James", "Mary", "John", "Patricia", "Robert", "Jennifer", "Michael", "Linda",
    "William", "Elizabeth", "David", "Barbara", "Richard", "Susan", "Joseph", "Jessica",
    "Aarav", "Priya", "Rohan", "Ananya", "Vikram", "Sneha", "Arjun", "Kavya",
    "Rahul", "Pooja", "Amit", "Neha", "Karan", "Divya", "Sanjay", "Meera"
]

LAST_NAMES = [
    "Smith", "Johnson", "Williams", "Brown", "Jones", "Garcia", "Miller", "Davis",
    "Sharma", "Verma", "Gupta", "Singh", "Kumar", "Patel", "Reddy", "Nair",
    "Iyer", "Mehta", "Joshi", "Chopra", "Malhotra", "Bose", "Das", "Rao"
]

POSITIONS = [
    "Machine Operator", "Quality Inspector", "Production Supervisor", "Maintenance Technician",
    "Assembly Line Worker", "Store Keeper", "Shift Engineer", "Welder", "Fitter",
    "Electrician", "Forklift Operator", "Safety Officer", "Process Engineer"
]

LOCATIONS = [
    "Plant 1, Manesar, Haryana", "Plant 2, Bawal, Haryana", "Plant 3, Pune, Maharashtra",
    "Plant 4, Sanand, Gujarat", "Plant 5, Chennai, Tamil Nadu"
]

FIELDNAMES = ['name', 'position', 'start_date', 'email', 'coordinator', 'coordinator_contact', 'location']


def generate_name():
    """Generate a random full name"""
    return f"{random.choice(FIRST_NAMES)} {random.choice(LAST_NAMES)}"


def generate_email(name):
    """Generate an example.com email address based on the name"""
    username = name.lower().replace(" ", random.choice([".", "_", ""]))
    return f"{username}{random.randint(1, 99)}@example.com"


def generate_start_date():
    """Generate a start date within the next 60 days"""
    return (date.today() + timedelta(days=random.randint(7, 60))).isoformat()


def generate_phone():
    """Generate a 10-digit mobile number"""
    return f"{random.choice('6789')}{random.randint(100000000, 999999999)}"


def generate_row(coordinator_percentage=60):
    """Generate one roster row; coordinator details are filled with the given probability"""
    name = generate_name()
    row = {
        'name': name,
        'position': random.choice(POSITIONS),
        'start_date': generate_start_date(),
        'email': generate_email(name),
        'coordinator': '',
        'coordinator_contact': '',
        'location': '',
    }
    if random.random() < coordinator_percentage / 100.0:
        row['coordinator'] = generate_name()
        row['coordinator_contact'] = generate_phone()
        row['location'] = random.choice(LOCATIONS)
    return row


def generate_roster_csv(filename, num_entries=25, coordinator_percentage=60, bad_rows=0):
    """Generate a roster CSV file, optionally with malformed rows mixed in"""
    print(f"Generating {num_entries:,} roster entries ({coordinator_percentage}% with coordinator details)...")

    uploads_dir = Path("uploads")
    uploads_dir.mkdir(exist_ok=True)
    filepath = uploads_dir / filename

    rows = [[generate_row(coordinator_percentage)[field] for field in FIELDNAMES] for _ in range(num_entries)]
    for _ in range(bad_rows):
        valid = [generate_row(coordinator_percentage)[field] for field in FIELDNAMES]
        malformed = valid[:random.randint(2, len(FIELDNAMES) - 1)] if random.random() < 0.5 else valid + ["extra"]
        rows.insert(random.randint(0, len(rows)), malformed)

    with open(filepath, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(FIELDNAMES)
        writer.writerows(rows)

    file_size = filepath.stat().st_size
    print(f"Successfully generated {filepath}")
    print(f"File size: {file_size / 1024:.1f} KB ({file_size:,} bytes)")
    print(f"Valid entries: {num_entries:,}, malformed entries: {bad_rows:,}")

    return str(filepath)


def _pop_option(args, flag, default):
    for i, arg in enumerate(args):
        if arg == flag and i + 1 < len(args):
            value = args[i + 1]
            del args[i:i + 2]
            return int(value)
        if arg.startswith(flag + "="):
            del args[i]
            return int(arg.split("=", 1)[1])
    return default


def main():
    """Main function to handle command-line arguments"""
    args = sys.argv[1:]
    if '-h' in args or '--help' in args:
        print(__doc__)
        return

    try:
        coordinator_percentage = _pop_option(args, '--coordinator-percent', 60)
        bad_rows = _pop_option(args, '--bad-rows', 0)
        num_entries = int(args[0]) if args else 25
    except ValueError:
        print(__doc__)
        sys.exit(1)

    if not 0 <= coordinator_percentage <= 100:
        print("Error: --coordinator-percent must be between 0 and 100")
        sys.exit(1)

    filename = args[1] if len(args) > 1 else f"roster_{num_entries}.csv"
    generate_roster_csv(filename, num_entries, coordinator_percentage, bad_rows)


if __name__ == "__main__":
    main()
