# -*- coding: utf-8 -*-
"""Shared fixtures for gradebook tests."""
import typing as t

import pytest

from grade_engine.models import Assignment, Category, CategoryWeights, Subject
from gradebook_server.store import GradebookStore, MemoryStorage, set_store


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def store(storage: MemoryStorage) -> GradebookStore:
    """A fresh store that is also installed as the process-wide store."""
    store = GradebookStore(storage)
    set_store(store)
    return store


@pytest.fixture(autouse=True)
def reset_global_store() -> t.Iterator[None]:
    """Make sure no test leaks its store into the next one."""
    yield
    set_store(None)


def make_subject(
        *scores: tuple[float, float, str],
        weights: t.Optional[dict[str, float]] = None,
        name: str = "Math",
) -> Subject:
    """Build a subject from (grade, max_grade, category) tuples."""
    assignments = [
        Assignment(id=f"a{i}", name=f"Assignment {i}", grade=grade, max_grade=max_grade, category=Category(cat))
        for i, (grade, max_grade, cat) in enumerate(scores, 1)
    ]
    return Subject(
        id=f"subject-{name.lower()}",
        name=name,
        assignments=assignments,
        category_weights=CategoryWeights(**(weights or {})),
    )
