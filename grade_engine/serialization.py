# -*- coding: utf-8 -*-
"""
Conversion between gradebook dataclasses and their stored JSON shape.

The stored shape uses camelCase keys (``maxGrade``, ``categoryWeights``) so
existing saved data keeps loading unchanged.
"""
from __future__ import annotations

import json
import typing as t

from grade_engine.models import (
    DEFAULT_CATEGORY_WEIGHT,
    DEFAULT_MAX_GRADE,
    Assignment,
    Category,
    CategoryWeights,
    Subject,
)


def weights_to_dict(weights: CategoryWeights) -> dict[str, t.Any]:
    return {category.value: weights.get(category) for category in Category}


def weights_from_dict(data: t.Optional[dict[str, t.Any]]) -> CategoryWeights:
    data = data or {}
    return CategoryWeights(**{
        category.value: data.get(category.value, DEFAULT_CATEGORY_WEIGHT)
        for category in Category
    })


def assignment_to_dict(assignment: Assignment) -> dict[str, t.Any]:
    return {
        "id": assignment.id,
        "name": assignment.name,
        "grade": assignment.grade,
        "maxGrade": assignment.max_grade,
        "category": Category(assignment.category).value,
    }


def assignment_from_dict(data: dict[str, t.Any]) -> Assignment:
    """Builds an Assignment from its stored form.

    :raises ValueError: If the category tag is not one of KU, A, TI, C.
    :raises KeyError: If id, name or grade is missing.
    """
    return Assignment(
        id=data["id"],
        name=data["name"],
        grade=data["grade"],
        max_grade=data.get("maxGrade", DEFAULT_MAX_GRADE),
        category=Category(data.get("category", Category.KU.value)),
    )


def subject_to_dict(subject: Subject) -> dict[str, t.Any]:
    return {
        "id": subject.id,
        "name": subject.name,
        "assignments": [assignment_to_dict(a) for a in subject.assignments],
        "categoryWeights": weights_to_dict(subject.category_weights),
    }


def subject_from_dict(data: dict[str, t.Any]) -> Subject:
    return Subject(
        id=data["id"],
        name=data["name"],
        assignments=[assignment_from_dict(a) for a in data.get("assignments", [])],
        category_weights=weights_from_dict(data.get("categoryWeights")),
    )


def subjects_to_json(subjects: t.Iterable[Subject]) -> str:
    """Serializes subjects to a JSON array, preserving order."""
    return json.dumps([subject_to_dict(s) for s in subjects])


def subjects_from_json(payload: str) -> list[Subject]:
    """Inverse of subjects_to_json."""
    return [subject_from_dict(item) for item in json.loads(payload)]
