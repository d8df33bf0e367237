from __future__ import annotations

"""crpt_client.app.cli
=================================
Command-line interface powered by Typer.

Usage examples
--------------
$ crpt-client sample > doc.json                             # write the demo document
$ crpt-client create doc.json --signature signature123      # post it through the rate limiter
$ crpt-client --log-level DEBUG create doc.json -s sig --limit 5 --interval 1 --unit SECONDS
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from pydantic import ValidationError
from typing_extensions import Annotated

from .api import CrptApi
from ..core.domain.enums import TimeUnit
from ..core.domain.errors import CrptClientError
from ..infra.schemas import Document, sample_document


app = typer.Typer(add_completion=False, help="CRPT document client with client-side rate limiting")


class LogLevel(str, Enum):
    OFF = "OFF"
    CRITICAL = "CRITICAL"
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    DEBUG = "DEBUG"
    NOTSET = "NOTSET"


@app.callback()
def main(
    log_level: Annotated[
        Optional[LogLevel],
        typer.Option(
            "--log-level",
            help="Set log level (OFF, CRITICAL, ERROR, WARNING, INFO, DEBUG, NOTSET). Default: OFF",
        ),
    ] = None,
) -> None:
    """Root command callback to configure logging if requested."""
    if log_level in (None, LogLevel.OFF):
        return

    level = logging.getLevelNamesMapping().get(log_level.value, logging.INFO)

    package_name = __package__.split(".", 1)[0] if __package__ else "crpt_client"
    logger = logging.getLogger(package_name)

    has_stream = any(isinstance(h, logging.StreamHandler) for h in logger.handlers)
    if not has_stream:
        handler = logging.StreamHandler()  # stderr
        handler.setFormatter(logging.Formatter("%(levelname)s | %(name)s | %(message)s"))
        logger.addHandler(handler)

    # avoid duplicate output through the root logger
    logger.propagate = False
    logger.setLevel(level)


@app.command(help="Print the demo document as JSON.")
def sample() -> None:
    typer.echo(sample_document().model_dump_json(by_alias=True, indent=2))


@app.command(help="Post a document JSON file to the create endpoint, respecting the rate limit.")
def create(
    document_file: Path = typer.Argument(..., exists=True, dir_okay=False, readable=True, help="Path to a document JSON file"),
    signature: str = typer.Option(..., "--signature", "-s", help="Value of the Signature header"),
    api_url: Optional[str] = typer.Option(None, "--api-url", help="Endpoint URL (default: CRPT_API_URL or production)"),
    limit: Optional[int] = typer.Option(None, "--limit", help="Requests per window (default: CRPT_REQUEST_LIMIT or 10)"),
    interval: Optional[float] = typer.Option(None, "--interval", help="Window length in --unit (default: CRPT_TIME_INTERVAL_SECONDS or 1s)"),
    unit: str = typer.Option("SECONDS", "--unit", help="Unit of --interval: MILLISECONDS, SECONDS, MINUTES, HOURS, DAYS"),
) -> None:
    try:
        document = Document.model_validate(json.loads(document_file.read_text(encoding="utf-8")))
    except (json.JSONDecodeError, ValidationError) as e:
        typer.echo(f"Invalid document: {e}", err=True)
        raise typer.Exit(code=1)

    time_unit = TimeUnit.from_str(unit)
    if time_unit is None:
        typer.echo(f"Unknown time unit: {unit}", err=True)
        raise typer.Exit(code=2)

    try:
        with CrptApi(time_unit if interval is not None else None, interval, limit, api_url=api_url) as api:
            response = api.create_document(document, signature)
    except CrptClientError as e:
        typer.echo(f"Request failed: {e}", err=True)
        raise typer.Exit(code=1)

    typer.echo(f"Status: {response.status_code}")
    typer.echo(response.text)
    if not response.ok:
        raise typer.Exit(code=1)


if __name__ == "__main__":  # pragma: no cover
    app()
