#!/usr/bin/env python
"""Load ranked battle reports from a JSON or JSONL file into the database."""
from __future__ import annotations

import argparse
import asyncio
import json
import logging
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from tekkenstats.db.connection import dispose_engine, get_session_context
from tekkenstats.schemas.battle import BattleReport, IngestionResult
from tekkenstats.services.ingestion_service import (
    BattleIngestionService,
    InvalidBattleReportError,
    validate_battle_report,
)
from tekkenstats.settings import get_settings, validate_environment

# Load environment variables
load_dotenv()

console = Console()
logger = logging.getLogger(__name__)

DEFAULT_BATCH_SIZE = 500


def _iter_raw_records(path: Path) -> Iterator[tuple[int, Any]]:
    """Yield ``(record_number, payload)`` pairs from a JSON array or JSONL file."""
    if path.suffix == ".jsonl":
        with path.open(encoding="utf-8") as handle:
            for line_num, line in enumerate(handle, 1):
                line = line.strip()
                if not line:
                    continue
                try:
                    yield line_num, json.loads(line)
                except json.JSONDecodeError as e:
                    logger.warning(f"Line {line_num}: JSON decode error: {e}")
        return

    with path.open(encoding="utf-8") as handle:
        payload = json.load(handle)
    if isinstance(payload, dict):
        payload = payload.get("battles", [])
    if not isinstance(payload, list):
        raise ValueError(f"{path} must contain a list of battle reports")
    yield from enumerate(payload, 1)


def read_battle_reports(path: Path) -> tuple[list[BattleReport], int]:
    """Parse every record in ``path``; return valid reports and the rejected count."""
    reports: list[BattleReport] = []
    rejected = 0
    for record_num, raw in _iter_raw_records(path):
        try:
            report = BattleReport.model_validate(raw)
            validate_battle_report(report)
        except ValidationError as e:
            rejected += 1
            logger.warning(
                f"Record {record_num}: invalid battle report ({e.error_count()} errors)"
            )
            continue
        except InvalidBattleReportError as e:
            rejected += 1
            logger.warning(f"Record {record_num}: {e}")
            continue
        reports.append(report)
    return reports, rejected


def _batched(reports: list[BattleReport], size: int) -> Iterator[list[BattleReport]]:
    for start in range(0, len(reports), size):
        yield reports[start : start + size]


async def main(args: argparse.Namespace) -> None:
    """Main battle loading function."""
    console.print("[bold blue]Tekken Battle Loader[/bold blue]\n")

    path = Path(args.path)
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        return

    reports, rejected = read_battle_reports(path)
    console.print(f"Parsed {len(reports)} reports ({rejected} rejected)")

    if args.dry_run:
        console.print("[yellow]DRY RUN MODE - No data will be written to database[/yellow]")
        return

    reports.sort(key=lambda report: report.battle_at)
    total = IngestionResult()
    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
        ) as progress:
            task = progress.add_task("Ingesting battles...", total=len(reports))
            for batch in _batched(reports, args.batch_size):
                async with get_session_context() as session:
                    result = await BattleIngestionService(session).ingest(batch)
                total.processed += result.processed
                total.duplicates += result.duplicates
                progress.advance(task, len(batch))
    finally:
        await dispose_engine()

    console.print(
        f"\n[bold green]✓ Ingested {total.processed} battles "
        f"({total.duplicates} duplicates skipped)[/bold green]"
    )


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Load battle reports into the database")
    parser.add_argument("path", help="JSON array or JSONL file of battle reports")
    parser.add_argument(
        "--batch-size",
        type=int,
        default=DEFAULT_BATCH_SIZE,
        help=f"Reports applied per transaction (default: {DEFAULT_BATCH_SIZE})",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Validate the file without writing to the database",
    )
    args = parser.parse_args()

    logging.basicConfig(
        level=get_settings().log_level_numeric,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    validate_environment()
    asyncio.run(main(args))
