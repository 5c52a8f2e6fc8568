# -*- coding: utf-8 -*-
"""Tests for the gradebook command line dashboard."""
import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from dashboard.run import main


@pytest.fixture
def data_file(tmp_path: Path) -> Path:
    return tmp_path / "gradebook.json"


def run(data_file: Path, *args: str):
    return CliRunner().invoke(main, ["--data", str(data_file), *args])


def saved(data_file: Path) -> dict:
    return json.loads(data_file.read_text(encoding="utf-8"))


def test_setup_saves_profile(data_file: Path) -> None:
    result = run(data_file, "setup", "--name", "Sam", "--start", "2024-09-01", "--end", "2025-01-31")

    assert result.exit_code == 0, result.output
    assert "Welcome, Sam!" in result.output
    assert saved(data_file)["userName"] == "Sam"
    assert saved(data_file)["isFirstTime"] is False


def test_setup_rejects_reversed_dates(data_file: Path) -> None:
    result = run(data_file, "setup", "--name", "Sam", "--start", "2025-01-31", "--end", "2024-09-01")

    assert result.exit_code == 1
    assert "End date must be after start date." in result.output


def test_add_subject_and_assignments(data_file: Path) -> None:
    assert run(data_file, "add-subject", "Math").exit_code == 0

    result = run(data_file, "add-assignment", "Math", "Unit Test", "80", "--category", "ku")
    assert result.exit_code == 0, result.output
    assert "Added Unit Test to Math" in result.output

    result = run(data_file, "add-assignment", "1", "Project", "45", "--max", "50", "-c", "A")
    assert result.exit_code == 0, result.output
    # 80*.25 + 90*.25
    assert "43%" in result.output

    assignments = saved(data_file)["subjects"][0]["assignments"]
    assert [(a["name"], a["grade"], a["maxGrade"], a["category"]) for a in assignments] == [
        ("Unit Test", 80, 100, "KU"),
        ("Project", 45, 50, "A"),
    ]


def test_subject_limit(data_file: Path) -> None:
    for name in ["Math", "Art", "History", "Physics"]:
        assert run(data_file, "add-subject", name).exit_code == 0

    result = run(data_file, "add-subject", "Music")

    assert result.exit_code == 1
    assert "You can only have up to 4 subjects." in result.output


def test_set_weight_warns_when_total_is_not_100(data_file: Path) -> None:
    run(data_file, "add-subject", "Math")

    result = run(data_file, "set-weight", "Math", "KU", "40")

    assert result.exit_code == 0, result.output
    assert "KU = 40%" in result.output
    assert "weights add up to 115%" in result.output
    assert saved(data_file)["subjects"][0]["categoryWeights"]["KU"] == 40


def test_negative_values_are_read_as_arguments(data_file: Path) -> None:
    run(data_file, "add-subject", "Math")

    result = run(data_file, "add-assignment", "Math", "Penalty", "-5", "-c", "C")
    assert result.exit_code == 0, result.output

    result = run(data_file, "set-weight", "Math", "TI", "-10")
    assert result.exit_code == 0, result.output
    assert "TI = -10%" in result.output

    subject = saved(data_file)["subjects"][0]
    assert subject["assignments"][0]["grade"] == -5
    assert subject["assignments"][0]["category"] == "C"
    assert subject["categoryWeights"]["TI"] == -10


def test_unknown_subject(data_file: Path) -> None:
    result = run(data_file, "subject", "Chemistry")
    assert result.exit_code == 1
    assert "Subject 'Chemistry' not found." in result.output


def test_show_dashboard(data_file: Path) -> None:
    run(data_file, "setup", "--name", "Sam", "--start", "2000-01-01", "--end", "2001-01-01")
    run(data_file, "add-subject", "Math")
    run(data_file, "set-weight", "Math", "KU", "100")
    run(data_file, "add-assignment", "Math", "Final", "92")

    result = run(data_file, "show")

    assert result.exit_code == 0, result.output
    assert "Hi, Sam!" in result.output
    assert "Overall average: 92%" in result.output
    assert "Math" in result.output
    assert "100%" in result.output  # semester over


def test_show_without_subjects(data_file: Path) -> None:
    result = run(data_file, "show")
    assert result.exit_code == 0, result.output
    assert "No subjects yet" in result.output
    assert "gradebook setup" in result.output


def test_subject_detail(data_file: Path) -> None:
    run(data_file, "add-subject", "Math")
    run(data_file, "add-assignment", "Math", "Inquiry", "17", "--max", "20", "-c", "TI")

    result = run(data_file, "subject", "math")

    assert result.exit_code == 0, result.output
    assert "Inquiry" in result.output
    assert "17/20" in result.output
    assert "85%" in result.output
    assert "N/A" in result.output


def test_remove_assignment_and_subject(data_file: Path) -> None:
    run(data_file, "add-subject", "Math")
    run(data_file, "add-assignment", "Math", "Quiz", "5", "--max", "10")
    assignment_id = saved(data_file)["subjects"][0]["assignments"][0]["id"]

    result = run(data_file, "remove-assignment", "Math", assignment_id[:8])
    assert result.exit_code == 0, result.output
    assert saved(data_file)["subjects"][0]["assignments"] == []

    result = run(data_file, "remove-subject", "Math")
    assert result.exit_code == 0, result.output
    assert saved(data_file)["subjects"] == []


def test_reset(data_file: Path) -> None:
    run(data_file, "add-subject", "Math")

    result = run(data_file, "reset", "--yes")

    assert result.exit_code == 0, result.output
    assert saved(data_file) == {}
