"""CLI to validate a capsule archive and show its completion report."""
import argparse
import asyncio
import logging
import os
import sys
import zipfile
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from capsule.config import ScoringPolicy
from capsule.models.inspection import InspectionResult
from capsule.tools.archive_storage import ZipArchiveStorage, open_archive
from capsule.tools.errors import CapsuleError
from capsule.tools.inspection import inspect_archive
from capsule.tools.observer import LoggingObserver
from capsule.tools.pdf_metadata import extract_pdf_metadata


console = Console()

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_MANIFEST_ERRORS = 2


def _mark(passed: bool) -> str:
    return "[green]✅[/green]" if passed else "[red]❌[/red]"


def print_errors(result: InspectionResult) -> None:
    """Table of manifest errors with the offending fields."""
    table = Table(title=f"Errors in {result.manifest_name}")
    table.add_column("Line", justify="right", style="cyan")
    table.add_column("Error", style="red")
    table.add_column("Fields", style="yellow")
    table.add_column("Expected", style="dim")

    for error in result.errors:
        fields = []
        for part in error.problematic_parts:
            if not part.is_problematic:
                continue
            label = part.field_name
            if part.is_missing:
                label += " (missing)"
            elif part.is_empty:
                label += " (empty)"
            fields.append(label)
        table.add_row(
            str(error.line_number),
            f"{escape(error.message)}\n[dim]{escape(error.raw_line)}[/dim]",
            ", ".join(fields),
            escape(error.expected_format_hint),
        )

    console.print(table)


def print_report(result: InspectionResult) -> None:
    """Category scores, per-item rows, file consistency and overall score."""
    report = result.report

    categories = Table(title="Completion")
    categories.add_column("Category")
    categories.add_column("Progress", justify="right")
    categories.add_column("", justify="center")
    for category in report.categories:
        categories.add_row(
            category.name,
            f"{category.achieved}/{category.required}",
            _mark(category.passed),
        )
    console.print(categories)

    if report.tag_checks:
        tags = Table(title="Tags")
        tags.add_column("Item")
        tags.add_column("Type")
        tags.add_column("Tags", justify="right")
        tags.add_column("", justify="center")
        for check in report.tag_checks:
            tags.add_row(
                escape(check.title),
                check.type + (" (PDF)" if check.is_pdf else ""),
                f"{check.tag_count}/{check.required_tags}",
                _mark(check.passed),
            )
        console.print(tags)

    if report.explanation_checks:
        words = Table(title="Explanations")
        words.add_column("Item")
        words.add_column("Explanation file")
        words.add_column("Words", justify="right")
        words.add_column("", justify="center")
        for check in report.explanation_checks:
            words.add_row(
                escape(check.title),
                escape(check.explanation_file) if check.explanation_file else f"[red]{escape(check.error or '')}[/red]",
                f"{check.word_count}/{check.required_words}",
                _mark(check.passed),
            )
        console.print(words)

    for name in report.extra_files:
        console.print(f"[yellow]Extra file (not in manifest):[/yellow] {escape(name)}")
    for name in report.missing_files:
        console.print(f"[red]Missing file (in manifest, not in archive):[/red] {escape(name)}")

    style = "green" if report.is_complete else "yellow"
    console.print(
        f"\n[bold {style}]Overall: {report.achieved}/{report.required} "
        f"({report.percentage}%)[/bold {style}]"
    )


def main():
    load_dotenv()
    parser = argparse.ArgumentParser(
        description="Validate a digital time capsule archive and score its completeness"
    )
    parser.add_argument(
        "archive",
        type=Path,
        help="Path to a .zip archive or an unpacked archive directory"
    )
    parser.add_argument(
        "--manifest",
        type=str,
        default=os.getenv("CAPSULE_MANIFEST_NAME", "manifest.txt"),
        help="Manifest filename inside the archive (default: manifest.txt)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print the inspection result as JSON"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging with operation tracing"
    )

    args = parser.parse_args()

    # Configure logging
    env_level = os.getenv("CAPSULE_LOG_LEVEL", "").upper()
    if args.debug:
        log_level = logging.DEBUG
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    elif args.verbose:
        log_level = logging.INFO
        log_format = "%(asctime)s - %(levelname)s - %(message)s"
    else:
        log_level = getattr(logging, env_level, logging.WARNING) if env_level else logging.WARNING
        log_format = "%(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ]
    )

    try:
        policy = ScoringPolicy(manifest_name=args.manifest)
        storage = open_archive(args.archive)
    except (ValueError, OSError, zipfile.BadZipFile) as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_FAILURE)

    observer = LoggingObserver() if args.debug else None

    try:
        result = asyncio.run(inspect_archive(
            storage,
            metadata_extractor=extract_pdf_metadata,
            policy=policy,
            observer=observer,
        ))
    except CapsuleError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(EXIT_FAILURE)
    finally:
        if isinstance(storage, ZipArchiveStorage):
            storage.close()

    if args.json:
        console.print_json(result.model_dump_json())
    elif result.has_errors:
        print_errors(result)
    else:
        print_report(result)

    sys.exit(EXIT_MANIFEST_ERRORS if result.has_errors else EXIT_OK)


if __name__ == "__main__":
    main()
