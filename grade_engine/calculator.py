"""
Grade computation for subjects and the semester.

Every function here is pure and total: degenerate input (no subjects, no
populated categories, a missing or invalid date range) yields 0 rather than
an error, and nothing is cached between calls.
"""
from __future__ import annotations

import math
import typing as t
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum

from grade_engine.models import Assignment, Category, Number, Subject


class GradeTier(str, Enum):
    """Four-tier classification used to colour grades."""
    A = "A"
    B = "B"
    C = "C"
    D = "D"


GRADE_TIER_COLORS: dict[GradeTier, str] = {
    GradeTier.A: "#4CAF50",
    GradeTier.B: "#FF9800",
    GradeTier.C: "#FFC107",
    GradeTier.D: "#F44336",
}


@dataclass(frozen=True)
class CategoryTotals:
    """Summed achieved and possible points for one category."""
    achieved: Number = 0
    possible: Number = 0


def round_half_up(value: float) -> int:
    """Rounds .5 upwards, unlike the builtin round() which rounds to even."""
    return int(math.floor(value + 0.5))


def aggregate_categories(subject: Subject) -> dict[Category, CategoryTotals]:
    """Sums achieved and possible points per category.

    :param subject: The subject whose assignments are aggregated.
    :return: Totals for all four categories; empty categories are (0, 0).
    """
    achieved: dict[Category, Number] = {category: 0 for category in Category}
    possible: dict[Category, Number] = {category: 0 for category in Category}

    for assignment in subject.assignments:
        category = Category(assignment.category)
        achieved[category] += assignment.grade
        possible[category] += assignment.max_grade

    return {
        category: CategoryTotals(achieved=achieved[category], possible=possible[category])
        for category in Category
    }


def calculate_subject_grade(subject: Subject) -> int:
    """Computes the weighted percentage grade of a subject.

    Only categories with possible points contribute, each scaled by its full
    weight. The result is NOT renormalised over the populated categories, so
    a subject missing whole categories grades lower than the mean of the
    categories it has. 0 when no weighted category is populated.

    :param subject: The subject to grade.
    :return: The grade as a whole percentage (may exceed 100).
    """
    weighted_total = 0.0
    total_weight: Number = 0

    for category, totals in aggregate_categories(subject).items():
        if totals.possible > 0:
            weight = subject.category_weights.get(category)
            category_percentage = (totals.achieved / totals.possible) * 100
            weighted_total += category_percentage * (weight / 100)
            total_weight += weight

    return round_half_up(weighted_total) if total_weight > 0 else 0


def category_percentages(subject: Subject) -> dict[Category, t.Optional[int]]:
    """Each category's own percentage, or None when it has no possible points."""
    percentages: dict[Category, t.Optional[int]] = {}
    for category, totals in aggregate_categories(subject).items():
        if totals.possible > 0:
            percentages[category] = round_half_up((totals.achieved / totals.possible) * 100)
        else:
            percentages[category] = None
    return percentages


def assignment_percentage(assignment: Assignment) -> t.Optional[int]:
    """Percentage scored on a single assignment, None if max_grade is not positive."""
    if assignment.max_grade <= 0:
        return None
    return round_half_up((assignment.grade / assignment.max_grade) * 100)


def calculate_overall_average(subjects: t.Sequence[Subject]) -> int:
    """Unweighted mean of subject grades; 0 when there are no subjects."""
    if not subjects:
        return 0
    total = sum(calculate_subject_grade(subject) for subject in subjects)
    return round_half_up(total / len(subjects))


def _parse_date(value: t.Optional[str]) -> t.Optional[date]:
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except (ValueError, AttributeError):
        return None


def calculate_semester_progress(
        start: t.Optional[str],
        end: t.Optional[str],
        today: t.Optional[date] = None,
) -> int:
    """Percentage of the semester elapsed as of today.

    :param start: Semester start date, YYYY-MM-DD.
    :param end: Semester end date, YYYY-MM-DD.
    :param today: Evaluation date; defaults to the current date on every call.
    :return: Whole percentage in [0, 100]; 0 if either date is missing or
        malformed, or if start is not before end.
    """
    start_date = _parse_date(start)
    end_date = _parse_date(end)
    if start_date is None or end_date is None:
        return 0
    if start_date >= end_date:
        return 0

    if today is None:
        today = date.today()

    total_days = (end_date - start_date).days
    days_passed = (today - start_date).days
    progress = max(0.0, min(100.0, (days_passed / total_days) * 100))
    return round_half_up(progress)


def grade_tier(percentage: Number) -> GradeTier:
    """Classifies a percentage: >=90 A, >=80 B, >=70 C, anything else D."""
    if percentage >= 90:
        return GradeTier.A
    if percentage >= 80:
        return GradeTier.B
    if percentage >= 70:
        return GradeTier.C
    return GradeTier.D


def grade_color(percentage: Number) -> str:
    """Hex colour for a percentage's tier."""
    return GRADE_TIER_COLORS[grade_tier(percentage)]
