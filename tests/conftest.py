"""Shared fixtures: Learn exports and class lists built on disk."""

from __future__ import annotations

import csv
import io
from datetime import datetime
from pathlib import Path

import pypdf
import pytest

ASSIGNMENT = "Exam Drop Box"
CLASS_LIST_HEADER = ["UUN", "Exam Number", "First Name", "Last Name", "Minutes of Extra Time Allowed"]


def pdf_bytes(pages: int = 1) -> bytes:
    """Build a small valid PDF with the given number of blank pages."""
    writer = pypdf.PdfWriter()
    for _ in range(pages):
        writer.add_blank_page(width=72, height=72)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def receipt_text(
    uun: str,
    submitted: datetime,
    filenames: list[tuple[str, str]],
    name: str = "Jane Doe",
) -> str:
    """Render a Learn receipt. ``filenames`` holds (original, exported) pairs."""
    lines = [
        f"Name: {name} ({uun})",
        f"Assignment: {ASSIGNMENT}",
        f"Date Submitted: {submitted:%A, %d %B %Y %H:%M:%S} o'clock BST",
        "Current Mark: Needs Marking",
        "",
        "Submission Field:",
        "There is no student submission text data for this assignment.",
        "",
        "Comments:",
        "There are no student comments for this assignment.",
        "",
        "Files:",
    ]
    for original, exported in filenames:
        lines.append(f"\tOriginal filename: {original}")
        lines.append(f"\tFilename: {exported}")
        lines.append("")
    return "\n".join(lines)


def write_learn_submission(
    learn_dir: Path,
    uun: str,
    submitted: str,
    originals: list[str] | None = None,
    content: bytes | None = None,
) -> tuple[Path, list[Path]]:
    """
    Write a receipt and its submitted files as Learn exports them.

    Args:
        learn_dir: Ingest folder
        uun: Lower-case UUN, e.g. "s1234567"
        submitted: Attempt stamp YYYY-MM-DD-HH-MM-SS
        originals: Original filenames of the submitted files
        content: Bytes written to every submitted file

    Returns:
        Tuple of (receipt path, submitted file paths)
    """
    originals = originals if originals is not None else ["exam.pdf"]
    content = content if content is not None else pdf_bytes()
    when = datetime.strptime(submitted, "%Y-%m-%d-%H-%M-%S")
    prefix = f"{ASSIGNMENT}_{uun}_attempt_{submitted}"

    pairs = [(original, f"{prefix}_{original}") for original in originals]
    receipt = learn_dir / f"{prefix}.txt"
    receipt.write_text(receipt_text(uun, when, pairs), encoding="utf-8")

    files = []
    for _, exported in pairs:
        path = learn_dir / exported
        path.write_bytes(content)
        files.append(path)
    return receipt, files


def write_class_list(path: Path, rows: list[list[str]], header: bool = True) -> Path:
    """Write a class list CSV."""
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        if header:
            writer.writerow(CLASS_LIST_HEADER)
        writer.writerows(rows)
    return path


def read_report(path: Path) -> list[dict[str, str]]:
    with open(path, encoding="utf-8", newline="") as f:
        return list(csv.DictReader(f))


@pytest.fixture
def learn_dir(tmp_path: Path) -> Path:
    path = tmp_path / "learn"
    path.mkdir()
    return path


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path
