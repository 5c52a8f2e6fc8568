"""
Shared Pydantic models for REST API serialization.

This module contains Pydantic equivalents of the grade_engine dataclasses,
using the same camelCase field names as the stored JSON so API payloads and
saved data look alike.
"""
from __future__ import annotations

import typing as t
from pydantic import BaseModel, ConfigDict, Field

from grade_engine.models import (
    DEFAULT_CATEGORY_WEIGHT,
    DEFAULT_MAX_GRADE,
    Assignment as AssignmentData,
    Profile as ProfileData,
    Subject as SubjectData,
)
from grade_engine.serialization import assignment_to_dict, subject_to_dict


# Type literals for commonly used values
CategoryCode = t.Literal["KU", "A", "TI", "C"]
GradeTierCode = t.Literal["A", "B", "C", "D"]
Identifier = t.Union[str, int]
Number = t.Union[int, float]


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CategoryWeights(CamelModel):
    """Weight per category; totals are not required to reach 100."""
    KU: Number = DEFAULT_CATEGORY_WEIGHT
    A: Number = DEFAULT_CATEGORY_WEIGHT
    TI: Number = DEFAULT_CATEGORY_WEIGHT
    C: Number = DEFAULT_CATEGORY_WEIGHT


class Assignment(CamelModel):
    """A graded assignment inside a subject."""
    id: Identifier
    name: str
    grade: Number
    max_grade: Number = Field(default=DEFAULT_MAX_GRADE, alias="maxGrade")
    category: CategoryCode = "KU"

    @classmethod
    def from_data(cls, assignment: AssignmentData) -> Assignment:
        return cls.model_validate(assignment_to_dict(assignment))


class Subject(CamelModel):
    """A subject with its assignments and category weights."""
    id: Identifier
    name: str
    assignments: list[Assignment] = Field(default_factory=list)
    category_weights: CategoryWeights = Field(default_factory=CategoryWeights, alias="categoryWeights")

    @classmethod
    def from_data(cls, subject: SubjectData) -> Subject:
        return cls.model_validate(subject_to_dict(subject))


class Profile(CamelModel):
    """User profile captured by first-run setup."""
    user_name: str = Field(default="", alias="userName")
    is_first_time: bool = Field(default=True, alias="isFirstTime")
    semester_start_date: str = Field(default="", alias="semesterStartDate")
    semester_end_date: str = Field(default="", alias="semesterEndDate")

    @classmethod
    def from_data(cls, profile: ProfileData) -> Profile:
        return cls(
            user_name=profile.user_name,
            is_first_time=profile.is_first_time,
            semester_start_date=profile.semester.start,
            semester_end_date=profile.semester.end,
        )


# Request/Response Models for API endpoints
class CreateSubjectRequest(CamelModel):
    """Request model for creating a subject."""
    name: str


class CreateAssignmentRequest(CamelModel):
    """Request model for adding an assignment.

    Grades may be sent as numbers or numeric text ("85").
    """
    name: str
    grade: t.Union[int, float, str]
    max_grade: t.Union[int, float, str] = Field(default=DEFAULT_MAX_GRADE, alias="maxGrade")
    category: CategoryCode = "KU"


class UpdateWeightRequest(CamelModel):
    """Request model for changing one category weight."""
    weight: t.Union[int, float, str]


class SetupProfileRequest(CamelModel):
    """Request model for first-run setup."""
    user_name: str = Field(alias="userName")
    semester_start_date: str = Field(alias="semesterStartDate")
    semester_end_date: str = Field(alias="semesterEndDate")


class SubjectGradeResponse(CamelModel):
    """Response model for a subject's computed grade."""
    subject_id: Identifier = Field(alias="subjectId")
    name: str
    grade: int
    tier: GradeTierCode
    color: str
    categories: dict[str, t.Optional[int]]


class SummaryResponse(CamelModel):
    """Response model for the dashboard summary."""
    user_name: str = Field(alias="userName")
    overall_average: int = Field(alias="overallAverage")
    overall_tier: GradeTierCode = Field(alias="overallTier")
    semester_progress: int = Field(alias="semesterProgress")
    subjects: list[SubjectGradeResponse] = Field(default_factory=list)
