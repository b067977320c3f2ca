"""
Console script for gradex_ingest.

Usage:
    gradex-ingest ingest --deadline 2020-04-22-16-00 --classlist MATH00000_enrolment.csv \\
        --learndir MATH00000 --outputdir MATH00000_examno
    gradex-ingest validate --classlist MATH00000_enrolment.csv

Workflow:
    1. Unzip the Learn download into the learn folder and run ``ingest``.
    2. Bad submissions are left in the learn folder and listed in the errors
       report. Where possible, replace all the Learn files for a submission
       with a single file called ``<uun>.pdf`` (e.g. ``s1234567.pdf``).
    3. Re-run ``ingest``; the ``<uun>.pdf`` files are picked up.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table

from .config.loader import ConfigLoader
from .config.models import IngestConfig
from .errors import IngestError
from .main import RunResult, run_ingest
from .processing.classlist import load_class_list
from .processing.identifiers import check_exam_number, check_identifier
from .utils.logging import setup_logging

load_dotenv()

app = typer.Typer(help="Ingest Learn exam submissions into anonymised, consistently named scripts.")
console = Console()


def _print_summary(result: RunResult) -> None:
    table = Table(title="Ingest summary")
    table.add_column("Outcome")
    table.add_column("Count", justify="right")

    counts: dict[str, int] = {}
    for outcome in result.successes:
        counts[outcome.status.value] = counts.get(outcome.status.value, 0) + 1
    for outcome in result.bad_submissions:
        key = type(outcome).__name__
        counts[key] = counts.get(key, 0) + 1

    for key, count in counts.items():
        table.add_row(key, str(count))
    table.add_row("[bold]Total[/bold]", f"[bold]{len(result.outcomes)}[/bold]")

    console.print(table)
    console.print(f"Successful submissions: {len(result.successes)}")
    console.print(f"Bad submissions: {len(result.bad_submissions)}")
    console.print(f"Success report: {result.success_report}")
    console.print(f"Errors report:  {result.errors_report}")


@app.command()
def ingest(
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", envvar="GRADEX_CONFIG", help="Course configuration YAML file"
    ),
    course: Optional[str] = typer.Option(
        None, "--course", envvar="GRADEX_COURSE", help="Course code, e.g. MATH00000"
    ),
    deadline: Optional[str] = typer.Option(
        None, "--deadline", envvar="GRADEX_DEADLINE", help="Normal submission deadline, YYYY-MM-DD-HH-MM"
    ),
    class_list: Optional[Path] = typer.Option(
        None,
        "--classlist",
        envvar="GRADEX_CLASSLIST",
        help="CSV with UUN, Exam Number, First Name, Last Name, Minutes of Extra Time Allowed",
    ),
    ingest_dir: Optional[Path] = typer.Option(
        None, "--learndir", envvar="GRADEX_LEARNDIR", help="Folder containing the unzipped Learn download"
    ),
    output_dir: Optional[Path] = typer.Option(
        None, "--outputdir", envvar="GRADEX_OUTPUTDIR", help="Folder where the anonymised scripts go"
    ),
    report_dir: Optional[Path] = typer.Option(
        None, "--reportdir", envvar="GRADEX_REPORTDIR", help="Folder for the CSV reports (default: outputdir)"
    ),
    count_pages: Optional[bool] = typer.Option(
        None, "--count-pages/--no-count-pages", help="Record page counts of placed scripts"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logging"),
    log_file: Optional[Path] = typer.Option(None, "--log-file", help="Also log to this file"),
) -> None:
    """Place one anonymised script per student and write the audit reports."""
    setup_logging(level=logging.DEBUG if verbose else logging.INFO, log_file=log_file)

    try:
        base = ConfigLoader().load_course(config_file) if config_file else IngestConfig()
        config = base.merged(
            course=course,
            deadline=deadline,
            class_list=class_list,
            ingest_dir=ingest_dir,
            output_dir=output_dir,
            report_dir=report_dir,
            count_pages=count_pages,
        )
        result = run_ingest(config)
    except IngestError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    _print_summary(result)


@app.command()
def validate(
    class_list: Path = typer.Option(..., "--classlist", envvar="GRADEX_CLASSLIST", help="Class list CSV"),
    identifier_prefix: str = typer.Option("s", help="Reserved leading letter for identifiers"),
    exam_number_prefix: str = typer.Option("b", help="Reserved leading letter for exam numbers"),
) -> None:
    """Report class-list identifiers and exam numbers that fail the format checks."""
    try:
        students = load_class_list(class_list)
    except IngestError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(code=1)

    table = Table(title=f"Class list check: {class_list}")
    table.add_column("UUN")
    table.add_column("Exam Number")
    table.add_column("Problem")

    problems = 0
    for student in students:
        for label, reason in (
            ("identifier", check_identifier(student.identifier, identifier_prefix)),
            ("exam number", check_exam_number(student.exam_number, exam_number_prefix)),
        ):
            if reason:
                problems += 1
                table.add_row(student.identifier, student.exam_number, f"{label}: {reason}")

    if problems:
        console.print(table)
    console.print(f"{len(students)} students checked, {problems} problem(s)")


if __name__ == "__main__":
    app()
