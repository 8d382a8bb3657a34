"""End-to-end tests for the CLI pipeline."""

import json
from datetime import datetime, timezone

import pandas as pd
import pytest

from activity_buckets import pipeline
from activity_buckets.groups import build_groups
from activity_buckets.pipeline import build_summary, main, run
from activity_buckets.loader import load_records


EXPORT = """\
"Activity type","Duration","From","To","Comment"
"Sleep","08:00","2021-01-01 23:00","2021-01-02 07:00",""
"Meeting","01:30","2021-01-04 09:00","2021-01-04 10:30",""
"Other","02:00","2021-01-04 12:00","2021-01-04 14:00",""
"Sleep","07:00","2021-01-04 23:30","2021-01-05 06:30",""
"Meeting","","2021-01-05 09:00","",""
"""


@pytest.fixture
def export_csv(tmp_path):
    path = tmp_path / "report.csv"
    path.write_text(EXPORT, encoding="utf-8")
    return path


@pytest.fixture
def groups_json(tmp_path):
    path = tmp_path / "groups.json"
    path.write_text(json.dumps({"Work": ["Meeting"], "Sleep": ["Sleep"]}), encoding="utf-8")
    return path


def test_main_writes_all_artifacts(export_csv, groups_json, tmp_path):
    out_dir = tmp_path / "out"

    code = main(["--data", str(export_csv), "--groups", str(groups_json), "--out", str(out_dir)])

    assert code == 0
    for name in ["daily.csv", "weekly.csv", "weekly_groups.csv", "summary.json", "quality_report.json"]:
        assert (out_dir / name).exists(), name

    daily = pd.read_csv(out_dir / "daily.csv")
    assert list(daily["date"]) == ["2021-01-02", "2021-01-03", "2021-01-04", "2021-01-05"]
    assert pd.isna(daily.loc[1, "total_hours"])
    assert daily.loc[2, "total_hours"] == pytest.approx(3.5)

    weekly = pd.read_csv(out_dir / "weekly.csv")
    assert list(weekly["week_start"]) == ["2020-12-28", "2021-01-04"]
    assert list(weekly["days_with_data"]) == [1, 2]

    groups = pd.read_csv(out_dir / "weekly_groups.csv")
    assert list(groups.columns) == ["week_start", "Work", "Sleep"]
    assert list(groups["Work"]) == [0.0, 1.5]
    assert list(groups["Sleep"]) == [8.0, 7.0]

    quality = json.loads((out_dir / "quality_report.json").read_text(encoding="utf-8"))
    assert len(quality["invalid_rows"]) == 1


def test_main_activity_filter(export_csv, groups_json, tmp_path):
    out_dir = tmp_path / "out"

    code = main(
        ["--data", str(export_csv), "--groups", str(groups_json), "--out", str(out_dir), "--activity", "Sleep"]
    )

    assert code == 0
    daily = pd.read_csv(out_dir / "daily.csv")
    assert daily["total_hours"].sum() == pytest.approx(15.0)


def test_main_missing_file(tmp_path):
    assert main(["--data", str(tmp_path / "missing.csv"), "--out", str(tmp_path / "out")]) == 1


def test_main_no_valid_records(tmp_path):
    path = tmp_path / "report.csv"
    path.write_text('"Activity type","Duration","From","To"\n"Work","","2021-01-05 09:00",""\n', encoding="utf-8")

    assert main(["--data", str(path), "--out", str(tmp_path / "out")]) == 1


def test_main_unknown_activity_filter(export_csv, tmp_path):
    code = main(["--data", str(export_csv), "--out", str(tmp_path / "out"), "--activity", "Nope"])
    assert code == 1


def test_build_summary(export_csv):
    records, _ = load_records(export_csv)
    groups = build_groups({"Work": ["Meeting"], "Sleep": ["Sleep"]})

    summary = build_summary(records, groups, now=datetime(2021, 1, 5, 12, 0))

    assert summary["date_range"] == {"start": "2021-01-02", "end": "2021-01-05"}
    assert summary["total_days"] == 4
    assert summary["days_with_data"] == 3
    assert summary["total_hours"] == pytest.approx(18.5)
    assert summary["week_to_date"]["activities"] == {"Meeting": "01:30", "Other": "02:00", "Sleep": "07:00"}
    assert summary["week_to_date"]["groups"] == {"Work": "01:30", "Sleep": "07:00"}
    assert summary["sleep"]["daily_hours"] == {"2021-01-02": 8.0, "2021-01-03": None, "2021-01-04": None, "2021-01-05": 7.0}
    assert summary["sleep"]["deviation_from_average"]["2021-01-02"] == pytest.approx(0.5)


def test_run_returns_paths(export_csv, tmp_path):
    groups = build_groups({"Work": ["Meeting"]})
    saved = run(export_csv, tmp_path / "out", groups, now=datetime(2021, 1, 5, 12, 0))

    assert set(saved) == {"quality_report", "daily", "weekly", "weekly_groups", "summary"}
    assert all(path.exists() for path in saved.values())


OFFSET_EXPORT = """\
"Activity type","Duration","From","To","Comment"
"Sleep","08:00","2021-01-01 23:00+01:00","2021-01-02 07:00+01:00",""
"Meeting","01:30","2021-01-04 09:00+01:00","2021-01-04 10:30+01:00",""
"Sleep","07:00","2021-01-03 23:30+01:00","2021-01-04 06:30+01:00",""
"""


def test_main_with_offset_timestamps(tmp_path, groups_json):
    path = tmp_path / "report.csv"
    path.write_text(OFFSET_EXPORT, encoding="utf-8")
    out_dir = tmp_path / "out"

    code = main(["--data", str(path), "--groups", str(groups_json), "--out", str(out_dir)])

    assert code == 0
    summary = json.loads((out_dir / "summary.json").read_text(encoding="utf-8"))
    assert summary["date_range"] == {"start": "2021-01-02", "end": "2021-01-04"}
    assert summary["total_hours"] == pytest.approx(16.5)


def test_run_accepts_aware_now(export_csv, tmp_path):
    groups = build_groups({"Work": ["Meeting"]})
    saved = run(export_csv, tmp_path / "out", groups, now=datetime(2021, 1, 5, 12, 0, tzinfo=timezone.utc))

    assert saved["summary"].exists()


def test_run_writes_no_bucket_files_when_summary_fails(export_csv, tmp_path, monkeypatch):
    def broken_summary(*args, **kwargs):
        raise ValueError("summary failed")

    monkeypatch.setattr(pipeline, "build_summary", broken_summary)
    out_dir = tmp_path / "out"

    with pytest.raises(ValueError):
        run(export_csv, out_dir, build_groups({"Work": ["Meeting"]}))

    assert not (out_dir / "daily.csv").exists()
    assert not (out_dir / "weekly.csv").exists()
    assert not (out_dir / "weekly_groups.csv").exists()
