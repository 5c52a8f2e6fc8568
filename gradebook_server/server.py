# -*- coding: utf-8 -*-
import typing as t

from fastmcp import FastMCP

from grade_engine.calculator import (
    assignment_percentage,
    calculate_overall_average,
    calculate_semester_progress,
    calculate_subject_grade,
    category_percentages,
    grade_color,
    grade_tier,
)
from grade_engine.models import Assignment, Category, Profile, Subject
from gradebook_server.store import get_store

mcp = FastMCP("GradeTracker")


def _add_subject(name: str) -> Subject:
    """Creates a subject with equal category weights.

    :param name: Display name of the subject.
    :return: The created Subject.
    """
    return get_store().add_subject(name)


def _add_assignment(
        subject_id: str,
        name: str,
        grade: float,
        max_grade: float = 100,
        category: str = "KU",
) -> Assignment:
    """Records an assignment in a subject.

    :param subject_id: Id of the subject.
    :param name: Name of the assignment.
    :param grade: Points achieved.
    :param max_grade: Points possible (default 100).
    :param category: One of KU, A, TI, C.
    :return: The created Assignment.
    """
    return get_store().add_assignment(subject_id, name, grade, max_grade, category)


def _set_category_weight(subject_id: str, category: str, weight: float) -> Subject:
    """Changes the weight of one category in a subject.

    :param subject_id: Id of the subject.
    :param category: One of KU, A, TI, C.
    :param weight: New weight as a percentage.
    :return: The updated Subject.
    """
    return get_store().update_category_weight(subject_id, category, weight)


def _remove_subject(subject_id: str) -> Subject:
    return get_store().remove_subject(subject_id)


def _remove_assignment(subject_id: str, assignment_id: str) -> Assignment:
    return get_store().remove_assignment(subject_id, assignment_id)


def _list_subjects() -> list[Subject]:
    return get_store().subjects


def _get_subject_grade(subject_id: str) -> dict[str, t.Any]:
    """Computes the weighted grade of one subject.

    :param subject_id: Id of the subject.
    :return: Grade, tier, colour and per-category percentages (None = N/A).
    """
    subject = get_store().get_subject(subject_id)
    grade = calculate_subject_grade(subject)
    return {
        "subject_id": subject.id,
        "name": subject.name,
        "grade": grade,
        "tier": grade_tier(grade).value,
        "color": grade_color(grade),
        "categories": {c.value: p for c, p in category_percentages(subject).items()},
    }


def _get_overall_average() -> int:
    return calculate_overall_average(get_store().subjects)


def _get_semester_progress() -> int:
    semester = get_store().profile.semester
    return calculate_semester_progress(semester.start, semester.end)


def _setup_profile(user_name: str, semester_start: str, semester_end: str) -> Profile:
    """Completes first-run setup.

    :param user_name: The student's name.
    :param semester_start: Start date, YYYY-MM-DD.
    :param semester_end: End date, YYYY-MM-DD, after the start date.
    :return: The saved Profile.
    """
    return get_store().complete_setup(user_name, semester_start, semester_end)


def format_subjects(subjects: list[Subject]) -> str:
    """Formats subjects and their grades as a table.

    :param subjects: Subjects to list.
    :return: Table string, or a message if there are no subjects.
    """
    if not subjects:
        return "📚 No subjects yet."

    lines = []
    lines.append("📚 SUBJECTS")
    lines.append("=" * 72)
    lines.append(f"{'#':<4} {'Subject':<30} {'Grade':<8} {'Tier':<6} {'Assignments':<12}")
    lines.append("-" * 72)

    for idx, subject in enumerate(subjects, 1):
        name = subject.name[:29] if len(subject.name) > 29 else subject.name
        grade = calculate_subject_grade(subject)
        lines.append(
            f"{idx:<4} {name:<30} {str(grade) + '%':<8} {grade_tier(grade).value:<6} "
            f"{len(subject.assignments):<12}"
        )

    lines.append("=" * 72)
    lines.append(f"Overall average: {calculate_overall_average(subjects)}%")
    return "\n".join(lines)


def format_subject_detail(subject: Subject) -> str:
    """Formats one subject's weights and assignments grouped by category.

    :param subject: The subject to describe.
    :return: Multi-line string.
    """
    grade = calculate_subject_grade(subject)
    percentages = category_percentages(subject)

    lines = []
    lines.append(f"📘 {subject.name.upper()}  {grade}%")
    lines.append("=" * 72)
    weights = "  ".join(
        f"{c.value}: {subject.category_weights.get(c)}%" for c in Category
    )
    lines.append(f"Weights  {weights}")

    for category in Category:
        percentage = percentages[category]
        shown = f"{percentage}%" if percentage is not None else "N/A"
        lines.append("-" * 72)
        lines.append(f"{category.value} ({category.label}): {shown}")
        assignments = [a for a in subject.assignments if a.category == category]
        if not assignments:
            lines.append("   No assignments in this category")
        for assignment in assignments:
            pct = assignment_percentage(assignment)
            lines.append(
                f"   {assignment.name:<40} {assignment.grade}/{assignment.max_grade} "
                f"({pct if pct is not None else '—'}%)"
            )

    lines.append("=" * 72)
    return "\n".join(lines)


@mcp.tool()
def add_subject(name: str) -> Subject:
    """Creates a subject with equal category weights (at most 4 subjects)."""
    return _add_subject(name)


@mcp.tool()
def add_assignment(
        subject_id: str,
        name: str,
        grade: float,
        max_grade: float = 100,
        category: str = "KU",
) -> Assignment:
    """Records an assignment (category KU, A, TI or C) in a subject."""
    return _add_assignment(subject_id, name, grade, max_grade, category)


@mcp.tool()
def set_category_weight(subject_id: str, category: str, weight: float) -> Subject:
    """Changes the weight of one category in a subject."""
    return _set_category_weight(subject_id, category, weight)


@mcp.tool()
def remove_subject(subject_id: str) -> Subject:
    """Deletes a subject and all of its assignments."""
    return _remove_subject(subject_id)


@mcp.tool()
def remove_assignment(subject_id: str, assignment_id: str) -> Assignment:
    """Deletes one assignment from a subject."""
    return _remove_assignment(subject_id, assignment_id)


@mcp.tool()
def list_subjects() -> list[Subject]:
    """Lists all subjects with their assignments and weights."""
    return _list_subjects()


@mcp.tool()
def get_subject_grade(subject_id: str) -> dict[str, t.Any]:
    """Computes the weighted grade and per-category percentages of a subject."""
    return _get_subject_grade(subject_id)


@mcp.tool()
def get_overall_average() -> int:
    """Unweighted average of all subject grades."""
    return _get_overall_average()


@mcp.tool()
def get_semester_progress() -> int:
    """Percentage of the configured semester elapsed as of today."""
    return _get_semester_progress()


@mcp.tool()
def setup_profile(user_name: str, semester_start: str, semester_end: str) -> Profile:
    """Saves the user's name and semester dates."""
    return _setup_profile(user_name, semester_start, semester_end)


@mcp.tool()
def show_subjects() -> str:
    """Displays all subjects with grades in a formatted table."""
    return format_subjects(get_store().subjects)


@mcp.tool()
def show_subject_detail(subject_id: str) -> str:
    """Displays one subject's weights and assignments by category."""
    return format_subject_detail(get_store().get_subject(subject_id))


if __name__ == "__main__":
    mcp.run()
