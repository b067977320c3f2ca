"""End-to-end tests of an ingest run."""

import os
from datetime import datetime
from pathlib import Path

import pytest

from conftest import pdf_bytes, read_report, receipt_text, write_class_list, write_learn_submission
from gradex_ingest.config.models import IngestConfig
from gradex_ingest.errors import ClassListError, ConfigurationError, DeadlineFormatError
from gradex_ingest.main import IngestPipeline, run_ingest
from gradex_ingest.processing.models import Placed, PlacementStatus, Quarantined, Unmatched

DEADLINE = "2020-04-22-16-00"
FIRST_RUN = datetime(2020, 4, 22, 17, 0, 0)
SECOND_RUN = datetime(2020, 4, 22, 18, 0, 0)


def make_config(tmp_path: Path, rows: list[list[str]], **overrides) -> IngestConfig:
    class_list = write_class_list(tmp_path / "classlist.csv", rows)
    values = dict(
        course="MATH00000",
        deadline=DEADLINE,
        class_list=class_list,
        ingest_dir=tmp_path / "learn",
        output_dir=tmp_path / "out",
        report_dir=tmp_path / "reports",
    )
    values.update(overrides)
    return IngestConfig(**values)


def pdf_names(directory: Path) -> list[str]:
    return sorted(p.name for p in directory.glob("*.pdf"))


def test_scenario_a_on_time(tmp_path: Path, learn_dir: Path):
    write_learn_submission(learn_dir, "s1234567", "2020-04-22-15-59-00")
    config = make_config(tmp_path, [["S1234567", "1234567", "Jane", "Doe", "0"]])

    result = run_ingest(config, FIRST_RUN)

    (outcome,) = result.outcomes
    assert isinstance(outcome, Placed)
    assert outcome.output_path == config.output_dir / "1234567.pdf"
    assert not outcome.late
    assert outcome.status is PlacementStatus.CREATED


def test_scenario_b_extra_time(tmp_path: Path, learn_dir: Path):
    write_learn_submission(learn_dir, "s1234567", "2020-04-22-16-20-00")
    config = make_config(tmp_path, [["S1234567", "1234567", "Jane", "Doe", "30"]])

    (outcome,) = run_ingest(config, FIRST_RUN).outcomes

    assert isinstance(outcome, Placed)
    assert outcome.output_path.name == "1234567.pdf"
    assert not outcome.late


def test_scenario_c_late(tmp_path: Path, learn_dir: Path):
    write_learn_submission(learn_dir, "s1234567", "2020-04-22-16-05-00")
    config = make_config(tmp_path, [["S1234567", "1234567", "Jane", "Doe", "0"]])

    (outcome,) = run_ingest(config, FIRST_RUN).outcomes

    assert isinstance(outcome, Placed)
    assert outcome.output_path == config.output_dir / "LATE-1234567.pdf"
    assert outcome.late


def test_scenario_d_two_files_quarantined(tmp_path: Path, learn_dir: Path):
    receipt, files = write_learn_submission(
        learn_dir, "s1234567", "2020-04-22-15-59-00", originals=["p1.pdf", "p2.pdf"]
    )
    config = make_config(tmp_path, [["S1234567", "1234567", "Jane", "Doe", "0"]])

    result = run_ingest(config, FIRST_RUN)

    (outcome,) = result.outcomes
    assert isinstance(outcome, Quarantined)
    assert "declares 2" in outcome.reason
    assert pdf_names(config.output_dir) == []
    assert receipt.exists() and all(f.exists() for f in files)

    rows = read_report(result.errors_report)
    assert rows[0]["identifier"] == "S1234567"
    assert rows[0]["declared_file_count"] == "2"


def test_scenario_e_manual_fallback_never_late(tmp_path: Path, learn_dir: Path):
    (learn_dir / "s1234567.pdf").write_bytes(pdf_bytes())
    config = make_config(tmp_path, [["S1234567", "1234567", "Jane", "Doe", "0"]])

    (outcome,) = run_ingest(config, FIRST_RUN).outcomes

    assert isinstance(outcome, Placed)
    assert outcome.output_path == config.output_dir / "1234567.pdf"
    assert not outcome.late
    assert not (learn_dir / "s1234567.pdf").exists()


def test_every_student_gets_exactly_one_outcome(tmp_path: Path, learn_dir: Path):
    write_learn_submission(learn_dir, "s1111111", "2020-04-22-15-00-00")
    write_learn_submission(learn_dir, "s2222222", "2020-04-22-16-30-00")
    write_learn_submission(learn_dir, "s3333333", "2020-04-22-15-00-00", originals=["a.docx"])
    (learn_dir / "s4444444.pdf").write_bytes(pdf_bytes())
    write_learn_submission(learn_dir, "s9999999", "2020-04-22-15-00-00")  # not enrolled
    rows = [
        ["S1111111", "1111111", "A", "A", "0"],
        ["S2222222", "2222222", "B", "B", "0"],
        ["S3333333", "3333333", "C", "C", "0"],
        ["S4444444", "4444444", "D", "D", ""],
        ["S5555555", "5555555", "E", "E", "15"],
    ]
    config = make_config(tmp_path, rows)

    result = run_ingest(config, FIRST_RUN)

    assert len(result.outcomes) == len(rows)
    assert len(result.successes) + len(result.bad_submissions) == len(rows)
    assert [o.student.identifier for o in result.outcomes] == [r[0] for r in rows]
    assert pdf_names(config.output_dir) == ["1111111.pdf", "4444444.pdf", "LATE-2222222.pdf"]
    assert isinstance(result.outcomes[2], Quarantined)
    assert isinstance(result.outcomes[4], Unmatched)

    success_rows = read_report(result.success_report)
    error_rows = read_report(result.errors_report)
    assert [r["identifier"] for r in success_rows] == ["S1111111", "S2222222", "S4444444"]
    assert [r["identifier"] for r in error_rows] == ["S3333333", "S5555555"]


def test_rerun_is_idempotent(tmp_path: Path, learn_dir: Path):
    write_learn_submission(learn_dir, "s1111111", "2020-04-22-15-00-00", content=pdf_bytes(1))
    write_learn_submission(learn_dir, "s2222222", "2020-04-22-16-30-00", content=pdf_bytes(2))
    config = make_config(
        tmp_path,
        [["S1111111", "1111111", "A", "A", "0"], ["S2222222", "2222222", "B", "B", "0"]],
    )

    first = run_ingest(config, FIRST_RUN)
    snapshot = {p.name: p.read_bytes() for p in config.output_dir.glob("*.pdf")}

    second = run_ingest(config, SECOND_RUN)

    assert {p.name: p.read_bytes() for p in config.output_dir.glob("*.pdf")} == snapshot
    assert [type(o) for o in second.outcomes] == [Placed, Placed]
    assert all(o.status is PlacementStatus.PREVIOUSLY_PLACED for o in second.successes)
    assert [o.output_path for o in second.successes] == [o.output_path for o in first.successes]
    assert second.successes[1].late


def test_rerun_with_the_same_export_again(tmp_path: Path, learn_dir: Path):
    content = pdf_bytes(2)
    write_learn_submission(learn_dir, "s1111111", "2020-04-22-16-30-00", content=content)
    config = make_config(tmp_path, [["S1111111", "1111111", "A", "A", "0"]])
    run_ingest(config, FIRST_RUN)

    write_learn_submission(learn_dir, "s1111111", "2020-04-22-16-30-00", content=content)
    (outcome,) = run_ingest(config, SECOND_RUN).outcomes

    assert isinstance(outcome, Placed)
    assert outcome.status in (PlacementStatus.REPLACED, PlacementStatus.ALREADY_EXISTS)
    assert pdf_names(config.output_dir) == ["LATE-1111111.pdf"]
    assert (config.output_dir / "LATE-1111111.pdf").read_bytes() == content


def test_duplicate_exam_number_is_flagged(tmp_path: Path, learn_dir: Path):
    content = pdf_bytes(1)
    write_learn_submission(learn_dir, "s1111111", "2020-04-22-15-00-00", content=content)
    write_learn_submission(learn_dir, "s2222222", "2020-04-22-15-00-00", content=pdf_bytes(3))
    config = make_config(
        tmp_path,
        [["S1111111", "1234567", "A", "A", "0"], ["S2222222", "1234567", "B", "B", "0"]],
    )

    result = run_ingest(config, FIRST_RUN)

    first, second = result.outcomes
    assert isinstance(first, Placed)
    assert isinstance(second, Quarantined)
    assert second.reason.startswith("Collision")
    assert (config.output_dir / "1234567.pdf").read_bytes() == content


def test_multiple_receipts_quarantined(tmp_path: Path, learn_dir: Path):
    write_learn_submission(learn_dir, "s1234567", "2020-04-22-15-00-00")
    write_learn_submission(learn_dir, "s1234567", "2020-04-22-15-30-00")
    config = make_config(tmp_path, [["S1234567", "1234567", "Jane", "Doe", "0"]])

    (outcome,) = run_ingest(config, FIRST_RUN).outcomes

    assert isinstance(outcome, Quarantined)
    assert outcome.reason.startswith("Multiple receipts")
    assert pdf_names(config.output_dir) == []


def test_failure_on_one_student_does_not_stop_the_run(tmp_path: Path, learn_dir: Path, monkeypatch):
    write_learn_submission(learn_dir, "s1111111", "2020-04-22-15-00-00")
    write_learn_submission(learn_dir, "s2222222", "2020-04-22-15-00-00")
    config = make_config(
        tmp_path,
        [["S1111111", "1111111", "A", "A", "0"], ["S2222222", "2222222", "B", "B", "0"]],
    )
    pipeline = IngestPipeline(config)
    original = pipeline.engine.place

    def flaky_place(student, candidate, late):
        if student.identifier == "S1111111":
            raise RuntimeError("boom")
        return original(student, candidate, late)

    monkeypatch.setattr(pipeline.engine, "place", flaky_place)

    result = pipeline.run(FIRST_RUN)

    first, second = result.outcomes
    assert isinstance(first, Quarantined)
    assert "boom" in first.reason
    assert isinstance(second, Placed)


def test_reports_default_to_output_dir_and_are_written_when_empty(tmp_path: Path, learn_dir: Path):
    config = make_config(tmp_path, [], report_dir=None)

    result = run_ingest(config, FIRST_RUN)

    assert result.outcomes == ()
    assert result.success_report.parent == config.output_dir
    assert result.success_report.exists()
    assert result.errors_report.exists()


def test_page_counts_recorded_when_requested(tmp_path: Path, learn_dir: Path):
    write_learn_submission(learn_dir, "s1234567", "2020-04-22-15-00-00", content=pdf_bytes(3))
    config = make_config(
        tmp_path, [["S1234567", "1234567", "Jane", "Doe", "0"]], count_pages=True
    )

    result = run_ingest(config, FIRST_RUN)

    assert result.successes[0].pages == 3
    assert read_report(result.success_report)[0]["pages"] == "3"


def test_output_dir_is_created(tmp_path: Path, learn_dir: Path):
    config = make_config(tmp_path, [], output_dir=tmp_path / "new" / "out")
    IngestPipeline(config)
    assert (tmp_path / "new" / "out").is_dir()


def test_bad_deadline_is_fatal(tmp_path: Path, learn_dir: Path):
    config = make_config(tmp_path, [], deadline="22/04/2020 16:00")
    with pytest.raises(DeadlineFormatError):
        IngestPipeline(config)


def test_missing_learn_dir_is_fatal(tmp_path: Path):
    config = make_config(tmp_path, [], ingest_dir=tmp_path / "nowhere")
    with pytest.raises(ConfigurationError):
        IngestPipeline(config)


def test_missing_class_list_is_fatal(tmp_path: Path, learn_dir: Path):
    config = make_config(tmp_path, [], class_list=tmp_path / "missing.csv")
    with pytest.raises(ClassListError):
        run_ingest(config, FIRST_RUN)


def test_receipt_cannot_consume_files_outside_learn_folder(tmp_path: Path, learn_dir: Path):
    outside = tmp_path / "precious.pdf"
    outside.write_bytes(pdf_bytes())
    receipt = learn_dir / "Exam_s1234567_attempt_2020-04-22-15-59-00.txt"
    receipt.write_text(
        receipt_text("s1234567", datetime(2020, 4, 22, 15, 59), [("exam.pdf", "../precious.pdf")]),
        encoding="utf-8",
    )
    config = make_config(tmp_path, [["S1234567", "1234567", "Jane", "Doe", "0"]])

    (outcome,) = run_ingest(config, FIRST_RUN).outcomes

    assert isinstance(outcome, Quarantined)
    assert "outside the Learn folder" in outcome.reason
    assert outside.exists()
    assert receipt.exists()
    assert pdf_names(config.output_dir) == []


def test_kept_late_variant_is_reported_late(tmp_path: Path, learn_dir: Path):
    config = make_config(tmp_path, [["S1234567", "1234567", "Jane", "Doe", "0"]])
    config.output_dir.mkdir()
    existing = config.output_dir / "LATE-1234567.pdf"
    existing.write_bytes(pdf_bytes(2))
    _, files = write_learn_submission(learn_dir, "s1234567", "2020-04-22-15-00-00")
    os.utime(files[0], (1_000_000, 1_000_000))

    result = run_ingest(config, FIRST_RUN)

    (outcome,) = result.outcomes
    assert outcome.status is PlacementStatus.ALREADY_EXISTS
    assert outcome.output_path == existing
    assert outcome.late
    assert read_report(result.success_report)[0]["late"] == "LATE"
