# -*- coding: utf-8 -*-
"""Tests for the MCP tool functions of the gradebook server."""
import pytest

from gradebook_server.errors import SubjectLimitReached, SubjectNotFound
from gradebook_server.server import (
    _add_assignment,
    _add_subject,
    _get_overall_average,
    _get_semester_progress,
    _get_subject_grade,
    _list_subjects,
    _remove_assignment,
    _remove_subject,
    _set_category_weight,
    _setup_profile,
    format_subject_detail,
    format_subjects,
    mcp,
)
from gradebook_server.store import GradebookStore


def test_server_is_named() -> None:
    assert mcp.name == "GradeTracker"


def test_subject_grade_tool_reports_categories(store: GradebookStore) -> None:
    subject = _add_subject("Math")
    _add_assignment(subject.id, "Test", 80, 100, "KU")
    _add_assignment(subject.id, "Project", 90, 100, "A")

    result = _get_subject_grade(subject.id)

    assert result["grade"] == 43
    assert result["tier"] == "D"
    assert result["color"] == "#F44336"
    assert result["categories"] == {"KU": 80, "A": 90, "TI": None, "C": None}


def test_weights_change_the_grade(store: GradebookStore) -> None:
    subject = _add_subject("Math")
    _add_assignment(subject.id, "Test", 80, 100, "KU")

    _set_category_weight(subject.id, "KU", 100)

    assert _get_subject_grade(subject.id)["grade"] == 80


def test_overall_average_tool(store: GradebookStore) -> None:
    assert _get_overall_average() == 0

    math = _add_subject("Math")
    _add_assignment(math.id, "Test", 90, 100, "KU")
    _set_category_weight(math.id, "KU", 100)
    art = _add_subject("Art")
    _add_assignment(art.id, "Sketch", 70, 100, "C")
    _set_category_weight(art.id, "C", 100)

    assert _get_overall_average() == 80


def test_semester_progress_tool_without_setup_is_zero(store: GradebookStore) -> None:
    assert _get_semester_progress() == 0


def test_semester_progress_tool_after_setup(store: GradebookStore) -> None:
    _setup_profile("Sam", "2000-01-01", "2001-01-01")
    assert _get_semester_progress() == 100


def test_subject_limit_and_removal(store: GradebookStore) -> None:
    subjects = [_add_subject(f"S{i}") for i in range(4)]
    with pytest.raises(SubjectLimitReached):
        _add_subject("S5")

    _remove_subject(subjects[0].id)

    assert [s.name for s in _list_subjects()] == ["S1", "S2", "S3"]
    with pytest.raises(SubjectNotFound):
        _get_subject_grade(subjects[0].id)


def test_remove_assignment_tool(store: GradebookStore) -> None:
    subject = _add_subject("Math")
    assignment = _add_assignment(subject.id, "Test", 80, 100, "KU")

    removed = _remove_assignment(subject.id, assignment.id)

    assert removed.name == "Test"
    assert _get_subject_grade(subject.id)["grade"] == 0


def test_format_subjects(store: GradebookStore) -> None:
    assert format_subjects([]) == "📚 No subjects yet."

    subject = _add_subject("Math")
    _add_assignment(subject.id, "Test", 80, 100, "KU")
    _add_assignment(subject.id, "Project", 90, 100, "A")
    text = format_subjects(_list_subjects())

    assert "Math" in text
    assert "43%" in text
    assert "Overall average: 43%" in text


def test_format_subject_detail(store: GradebookStore) -> None:
    subject = _add_subject("Math")
    _add_assignment(subject.id, "Unit test", 17, 20, "TI")

    text = format_subject_detail(store.get_subject(subject.id))

    assert text.startswith("📘 MATH")
    assert "TI (Thinking & Inquiry): 85%" in text
    assert "KU (Knowledge & Understanding): N/A" in text
    assert "17/20 (85%)" in text
    assert text.count("No assignments in this category") == 3
