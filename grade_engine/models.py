"""
Data models for subjects, assignments and grading categories.

This module contains all the dataclasses used to represent a student's
gradebook: subjects with weighted categories, the assignments recorded in
them, and the profile that owns the semester window.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import typing as t


MAX_SUBJECTS = 4
DEFAULT_CATEGORY_WEIGHT = 25
DEFAULT_MAX_GRADE = 100

# New ids are uuid hex strings; ids loaded from older data may be integers
Identifier = t.Union[str, int]
Number = t.Union[int, float]


class Category(str, Enum):
    """The four fixed assessment dimensions every assignment is tagged with."""
    KU = "KU"  # Knowledge & Understanding
    A = "A"    # Application
    TI = "TI"  # Thinking & Inquiry
    C = "C"    # Communication

    @property
    def label(self) -> str:
        return CATEGORY_LABELS[self]


CATEGORY_LABELS: dict[Category, str] = {
    Category.KU: "Knowledge & Understanding",
    Category.A: "Application",
    Category.TI: "Thinking & Inquiry",
    Category.C: "Communication",
}


@dataclass
class CategoryWeights:
    """Weight (as a percentage) for each category. Totals are not checked."""
    KU: Number = DEFAULT_CATEGORY_WEIGHT
    A: Number = DEFAULT_CATEGORY_WEIGHT
    TI: Number = DEFAULT_CATEGORY_WEIGHT
    C: Number = DEFAULT_CATEGORY_WEIGHT

    def get(self, category: Category) -> Number:
        return getattr(self, Category(category).value)

    def with_weight(self, category: Category, weight: Number) -> CategoryWeights:
        """Returns a copy with one category's weight replaced."""
        values = {c.value: self.get(c) for c in Category}
        values[Category(category).value] = weight
        return CategoryWeights(**values)

    def total(self) -> Number:
        return sum(self.get(c) for c in Category)


@dataclass
class Assignment:
    """One graded piece of work recorded in a subject."""
    id: Identifier
    name: str
    grade: Number
    max_grade: Number = DEFAULT_MAX_GRADE
    category: Category = Category.KU


@dataclass
class Subject:
    """A course with its assignments (in insertion order) and category weights."""
    id: Identifier
    name: str
    assignments: list[Assignment] = field(default_factory=list)
    category_weights: CategoryWeights = field(default_factory=CategoryWeights)


@dataclass
class SemesterWindow:
    """Semester start and end dates as YYYY-MM-DD strings ("" when unset)."""
    start: str = ""
    end: str = ""


@dataclass
class Profile:
    """User-level settings captured by the first-run setup."""
    user_name: str = ""
    is_first_time: bool = True
    semester: SemesterWindow = field(default_factory=SemesterWindow)
