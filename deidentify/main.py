from __future__ import annotations

import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer

from deidentify.config import get_settings
from deidentify.errors import DeidentifyError, InvalidConfiguration
from deidentify.orchestrator import run_clean, run_join
from deidentify.privacy.codec import PseudonymCodec
from deidentify.reporter import print_summary
from deidentify.utils.logging import configure_logging

app = typer.Typer(help="De-identify transaction records before they leave a controlled environment.")

SALT_HELP = "The salt to use for id hashing (defaults to DEID_SALT)."


def _resolve_salt(salt: Optional[str]) -> str:
    value = salt if salt is not None else get_settings().salt_value()
    if value is None:
        raise InvalidConfiguration("no salt given; pass SALT or set DEID_SALT")
    return value


def _fail(exc: DeidentifyError) -> NoReturn:
    typer.echo(f"error: {exc}", err=True)
    raise typer.Exit(code=1)


@app.callback()
def configure(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Logging level (default from LOG_LEVEL)."
    ),
    json_logs: Optional[bool] = typer.Option(
        None, "--json-logs/--console-logs", help="Emit logs as JSON (default from LOG_JSON)."
    ),
) -> None:
    """
    Configure logging for every command.
    """
    settings = get_settings()
    configure_logging(
        level=(log_level or settings.log_level).upper(),
        json_logs=settings.log_json if json_logs is None else json_logs,
    )


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"env={settings.app_env} | salt={'set' if settings.salt else 'not set'} | "
        f"reject_duplicate_people={settings.reject_duplicate_people} "
        f"first_only={settings.first_only} pattern={settings.source_pattern!r} | "
        f"log_level={settings.log_level} log_json={settings.log_json}"
    )


@app.command()
def join(
    people: Path = typer.Argument(..., help="The csv file containing the people."),
    purchases: Path = typer.Argument(..., help="The csv file or directory containing the purchases."),
    salt: Optional[str] = typer.Argument(None, help=SALT_HELP),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write records here instead of stdout."
    ),
    reject_duplicates: Optional[bool] = typer.Option(
        None,
        "--reject-duplicates/--allow-duplicates",
        help="Fail on duplicate person ids instead of keeping the last row.",
    ),
    summary: bool = typer.Option(True, "--summary/--no-summary", help="Print a run summary to stderr."),
) -> None:
    """
    Join purchases to people and write de-identified records.
    """
    try:
        result = run_join(
            people,
            purchases,
            salt=_resolve_salt(salt),
            output=output,
            reject_duplicates=reject_duplicates,
        )
    except DeidentifyError as exc:
        _fail(exc)
    if summary:
        print_summary(result)


@app.command()
def clean(
    source: Path = typer.Argument(..., help="The merged csv file or directory to clean."),
    salt: Optional[str] = typer.Argument(None, help=SALT_HELP),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Write cleaned rows here instead of stdout."
    ),
    first_only: Optional[bool] = typer.Option(
        None,
        "--first-only/--all-rows",
        help="Emit only the first row of each table (legacy behaviour).",
    ),
    summary: bool = typer.Option(True, "--summary/--no-summary", help="Print a run summary to stderr."),
) -> None:
    """
    Pseudonymize raw ids and generalize postal codes in already-merged tables.
    """
    try:
        result = run_clean(source, salt=_resolve_salt(salt), output=output, first_only=first_only)
    except DeidentifyError as exc:
        _fail(exc)
    if summary:
        print_summary(result)


@app.command()
def reveal(
    pseudonym: str = typer.Argument(..., help="The pseudonym to decode."),
    salt: Optional[str] = typer.Argument(None, help=SALT_HELP),
) -> None:
    """
    Decode a pseudonym back to its person id (requires the original salt).
    """
    try:
        codec = PseudonymCodec(_resolve_salt(salt))
        typer.echo(str(codec.decode(pseudonym)))
    except DeidentifyError as exc:
        _fail(exc)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
