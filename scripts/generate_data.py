"""
Synthetic data generator for the de-identification tool.

Writes a person table and a directory of purchase tables with deterministic
pseudo-random content, suitable for demos, load tests and fixtures.
"""

from __future__ import annotations

import csv
import random
import sys
import time
from datetime import date, datetime, timedelta
from pathlib import Path

import typer

from deidentify.domain.models import PERSON_COLUMNS, PROCESSED_AT_FORMAT, PURCHASE_COLUMNS

app = typer.Typer(help="Generate synthetic people and purchase tables (CSV).")

GENDERS = ["F", "M", "X", "U"]
PRODUCTS = ["Membership", "Clinic", "Tournament Entry", "Camp", "Donation"]
DIVISIONS = ["Youth", "Adult", "Masters", "Open"]
REGISTRATION_STATUSES = ["registered", "waitlisted", "cancelled"]
STATUSES = ["complete", "pending", "refunded"]
# Includes restricted prefixes so suppression shows up in generated output.
POSTAL_PREFIXES = ["021", "100", "606", "941", "036", "692", "878", "303", "752"]


def _generate_people_csv(csv_path: Path, people: int, seed: int) -> None:
    rng = random.Random(seed)
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(PERSON_COLUMNS)
        for person_id in range(1, people + 1):
            birth_date = ""
            if rng.random() > 0.1:
                birth_date = (date(1940, 1, 1) + timedelta(days=rng.randint(0, 365 * 70))).isoformat()
            postal_code = f"{rng.choice(POSTAL_PREFIXES)}{rng.randint(0, 99):02d}"
            if rng.random() < 0.3:
                postal_code += f"-{rng.randint(0, 9999):04d}"
            writer.writerow([person_id, birth_date, rng.choice(GENDERS), postal_code])


def _generate_purchases_csv(
    csv_path: Path, rows: int, people: int, seed: int, missing_rate: float = 0.0
) -> None:
    rng = random.Random(seed)
    base = datetime(2019, 1, 1)
    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(PURCHASE_COLUMNS)
        for _ in range(rows):
            person_id = rng.randint(1, people)
            if rng.random() < missing_rate:
                person_id = people + rng.randint(1, 1_000)
            has_event = rng.random() > 0.3
            start = base + timedelta(days=rng.randint(0, 700))
            cost = round(rng.uniform(5, 500), 2)
            paid = round(cost * rng.choice([0.0, 0.5, 1.0]), 2)
            processed_at = start - timedelta(days=rng.randint(1, 60), seconds=rng.randint(0, 86_399))
            writer.writerow(
                [
                    person_id,
                    rng.randint(1, 500),
                    rng.randint(1, 10_000) if has_event else "",
                    start.date().isoformat() if has_event else "",
                    (start + timedelta(days=rng.randint(0, 5))).date().isoformat() if has_event else "",
                    rng.choice(PRODUCTS),
                    f"Event {rng.randint(1, 50)}" if has_event else "",
                    rng.choice(DIVISIONS),
                    rng.choice(REGISTRATION_STATUSES),
                    f"{cost:.2f}",
                    f"{paid:.2f}",
                    "0.00",
                    f"{cost - paid:.2f}",
                    rng.choice(STATUSES),
                    processed_at.strftime(PROCESSED_AT_FORMAT),
                    rng.randint(1, 4),
                ]
            )


@app.command()
def main(
    output: Path = typer.Option(
        Path("data"),
        "--output",
        "-o",
        help="Directory to write people.csv and purchases/ into.",
    ),
    people: int = typer.Option(
        1_000,
        "--people",
        "-p",
        help="Number of people to generate.",
    ),
    rows: int = typer.Option(
        10_000,
        "--rows",
        "-r",
        help="Number of purchase rows per table.",
    ),
    tables: int = typer.Option(
        1,
        "--tables",
        "-t",
        help="Number of purchase tables.",
    ),
    missing_rate: float = typer.Option(
        0.01,
        "--missing-rate",
        help="Fraction of purchases that reference an unknown person.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
) -> None:
    """
    Generate a person table and purchase tables under OUTPUT.
    """
    start = time.perf_counter()
    purchases_dir = output / "purchases"
    purchases_dir.mkdir(parents=True, exist_ok=True)

    people_path = output / "people.csv"
    typer.echo(f"Generating {people:,} people -> {people_path} (seed={seed})")
    _generate_people_csv(people_path, people=people, seed=seed)

    for index in range(tables):
        table_path = purchases_dir / f"purchases-{index:03d}.csv"
        typer.echo(f"Generating {rows:,} purchases -> {table_path}")
        _generate_purchases_csv(
            table_path, rows=rows, people=people, seed=seed + index + 1, missing_rate=missing_rate
        )

    duration = time.perf_counter() - start
    typer.echo(f"Generation completed in {duration:.2f}s")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
