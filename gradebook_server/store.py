# -*- coding: utf-8 -*-
"""
Application state for the grade tracker.

GradebookStore owns the subjects and the user profile and mirrors every
change into a key-value storage backend. Updates replace Subject objects
rather than mutating them, so a snapshot handed to the grade engine never
changes underneath it.
"""
from __future__ import annotations

import json
import logging
import math
import os
import re
import tempfile
import typing as t
import uuid
from dataclasses import replace
from datetime import date, datetime
from pathlib import Path

from grade_engine.models import (
    DEFAULT_MAX_GRADE,
    MAX_SUBJECTS,
    Assignment,
    Category,
    Identifier,
    Number,
    Profile,
    SemesterWindow,
    Subject,
)
from grade_engine.serialization import subject_from_dict, subject_to_dict
from gradebook_server.errors import (
    AssignmentNotFound,
    SubjectLimitReached,
    SubjectNotFound,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Storage location - configurable via environment variable
GRADEBOOK_DATA_PATH = os.getenv("GRADEBOOK_DATA_PATH", "~/.gradebook/data.json")


class StorageKeys:
    """Named slots in the key-value store."""
    IS_FIRST_TIME = "isFirstTime"
    USER_NAME = "userName"
    SEMESTER_START = "semesterStartDate"
    SEMESTER_END = "semesterEndDate"
    SUBJECTS = "subjects"
    ASSIGNMENTS = "assignments"

    @classmethod
    def all(cls) -> list[str]:
        return [
            cls.IS_FIRST_TIME,
            cls.USER_NAME,
            cls.SEMESTER_START,
            cls.SEMESTER_END,
            cls.SUBJECTS,
            cls.ASSIGNMENTS,
        ]


class Storage(t.Protocol):
    """Key-value backend holding JSON-compatible values."""

    def get(self, key: str) -> t.Any: ...

    def set(self, key: str, value: t.Any) -> None: ...

    def remove_many(self, keys: t.Iterable[str]) -> None: ...


class MemoryStorage:
    """Dict-backed storage, used for tests and ephemeral sessions."""

    def __init__(self, initial: t.Optional[dict[str, t.Any]] = None) -> None:
        self.data: dict[str, t.Any] = dict(initial or {})

    def get(self, key: str) -> t.Any:
        return self.data.get(key)

    def set(self, key: str, value: t.Any) -> None:
        # Round-trip through JSON so stored values match what a file would hold
        self.data[key] = json.loads(json.dumps(value))

    def remove_many(self, keys: t.Iterable[str]) -> None:
        for key in keys:
            self.data.pop(key, None)


class JsonFileStorage:
    """Stores all slots in a single JSON document on disk.

    Writes go to a temporary file in the same directory which then replaces
    the original, so a crash mid-write never leaves a truncated document.
    """

    def __init__(self, path: t.Union[str, Path]) -> None:
        self.path = Path(path).expanduser()

    def _read(self) -> dict[str, t.Any]:
        if not self.path.is_file():
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Expected a JSON object in {self.path}")
        return data

    def _write(self, data: dict[str, t.Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> t.Any:
        return self._read().get(key)

    def set(self, key: str, value: t.Any) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def remove_many(self, keys: t.Iterable[str]) -> None:
        data = self._read()
        for key in keys:
            data.pop(key, None)
        self._write(data)


_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def _parse_int_prefix(value: t.Any) -> t.Optional[int]:
    """Parses the leading integer of a string ("85.5" -> 85, "abc" -> None)."""
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None


def _coerce_number(value: t.Any, field_name: str) -> Number:
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number.")
    if isinstance(value, (int, float)):
        if not math.isfinite(value):
            raise ValidationError(f"{field_name} must be a number.")
        return value
    parsed = _parse_int_prefix(value)
    if parsed is None:
        raise ValidationError(f"{field_name} must be a number.")
    return parsed


def _parse_setup_date(value: str) -> date:
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date '{value}'. Please use YYYY-MM-DD.")


def _new_id() -> str:
    return uuid.uuid4().hex


class GradebookStore:
    """Owns subjects and profile state and persists them on every change."""

    def __init__(self, storage: t.Optional[Storage] = None) -> None:
        self.storage: Storage = storage if storage is not None else MemoryStorage()
        self._subjects: list[Subject] = []
        self._profile = Profile()

    @classmethod
    def from_path(cls, path: t.Union[str, Path] = GRADEBOOK_DATA_PATH) -> GradebookStore:
        """Creates a store backed by a JSON file and loads its contents."""
        store = cls(JsonFileStorage(path))
        store.load()
        return store

    # -- persistence -----------------------------------------------------

    def _save(self, key: str, value: t.Any) -> None:
        try:
            self.storage.set(key, value)
        except (OSError, TypeError, ValueError):
            # In-memory state stays authoritative; the next save retries
            logger.exception("Error saving %s", key)

    def _load_slot(self, key: str) -> t.Any:
        try:
            return self.storage.get(key)
        except (OSError, ValueError):
            logger.exception("Error loading %s", key)
            return None

    def _save_subjects(self) -> None:
        self._save(StorageKeys.SUBJECTS, [subject_to_dict(s) for s in self._subjects])

    def load(self) -> None:
        """Reads all slots; any slot that is absent or unreadable keeps its default."""
        is_first_time = self._load_slot(StorageKeys.IS_FIRST_TIME)
        user_name = self._load_slot(StorageKeys.USER_NAME)
        start = self._load_slot(StorageKeys.SEMESTER_START)
        end = self._load_slot(StorageKeys.SEMESTER_END)
        subjects = self._load_slot(StorageKeys.SUBJECTS)

        profile = Profile()
        if is_first_time is not None:
            profile.is_first_time = bool(is_first_time)
        if user_name:
            profile.user_name = user_name
        profile.semester = SemesterWindow(start=start or "", end=end or "")
        self._profile = profile

        self._subjects = []
        if subjects:
            try:
                self._subjects = [subject_from_dict(item) for item in subjects]
            except (KeyError, TypeError, ValueError):
                logger.exception("Error loading saved subjects")
        logger.debug("Loaded %d subject(s)", len(self._subjects))

    def clear_all_data(self) -> None:
        """Removes every storage slot and resets in-memory state."""
        try:
            self.storage.remove_many(StorageKeys.all())
        except (OSError, ValueError):
            logger.exception("Error clearing data")
        self._subjects = []
        self._profile = Profile()
        logger.info("All data cleared")

    # -- reads -----------------------------------------------------------

    @property
    def subjects(self) -> list[Subject]:
        return list(self._subjects)

    @property
    def profile(self) -> Profile:
        return self._profile

    def get_subject(self, subject_id: Identifier) -> Subject:
        for subject in self._subjects:
            if subject.id == subject_id or str(subject.id) == str(subject_id):
                return subject
        raise SubjectNotFound(f"Subject '{subject_id}' not found.")

    def _replace_subject(self, updated: Subject) -> Subject:
        self._subjects = [updated if s.id == updated.id else s for s in self._subjects]
        self._save_subjects()
        return updated

    # -- subjects --------------------------------------------------------

    def add_subject(self, name: str) -> Subject:
        """Adds an empty subject with default (equal) category weights.

        :raises ValidationError: If the name is blank.
        :raises SubjectLimitReached: If MAX_SUBJECTS already exist.
        """
        if len(self._subjects) >= MAX_SUBJECTS:
            raise SubjectLimitReached(f"You can only have up to {MAX_SUBJECTS} subjects.")
        name = (name or "").strip()
        if not name:
            raise ValidationError("Please enter a subject name.")

        subject = Subject(id=_new_id(), name=name)
        self._subjects = [*self._subjects, subject]
        self._save_subjects()
        logger.info("Added subject %s (%s)", subject.name, subject.id)
        return subject

    def remove_subject(self, subject_id: Identifier) -> Subject:
        subject = self.get_subject(subject_id)
        self._subjects = [s for s in self._subjects if s.id != subject.id]
        self._save_subjects()
        logger.info("Removed subject %s (%s)", subject.name, subject.id)
        return subject

    def update_category_weight(
            self,
            subject_id: Identifier,
            category: t.Union[Category, str],
            weight: t.Any,
    ) -> Subject:
        """Replaces one category weight. Non-numeric text counts as 0.

        :raises ValueError: If category is not one of KU, A, TI, C.
        :raises ValidationError: If weight is infinite or NaN.
        """
        subject = self.get_subject(subject_id)
        category = Category(category)
        if isinstance(weight, (int, float)) and not isinstance(weight, bool):
            if not math.isfinite(weight):
                raise ValidationError("Weight must be a number.")
            value: Number = weight
        else:
            value = _parse_int_prefix(weight) or 0
        updated = replace(
            subject,
            category_weights=subject.category_weights.with_weight(category, value),
        )
        return self._replace_subject(updated)

    # -- assignments -----------------------------------------------------

    def add_assignment(
            self,
            subject_id: Identifier,
            name: str,
            grade: t.Any,
            max_grade: t.Any = DEFAULT_MAX_GRADE,
            category: t.Union[Category, str] = Category.KU,
    ) -> Assignment:
        """Appends an assignment to a subject.

        Grades given as text are read as integers ("85" -> 85). Grades above
        max_grade are accepted.

        :raises ValidationError: If the name is blank or a grade is not numeric.
        :raises SubjectNotFound: If the subject does not exist.
        """
        subject = self.get_subject(subject_id)
        name = (name or "").strip()
        if not name or grade is None or grade == "":
            raise ValidationError("Please fill in all fields.")
        try:
            category = Category(category)
        except ValueError:
            raise ValidationError(f"Unknown category '{category}'.")

        assignment = Assignment(
            id=_new_id(),
            name=name,
            grade=_coerce_number(grade, "Grade"),
            max_grade=_coerce_number(max_grade, "Max grade"),
            category=category,
        )
        self._replace_subject(replace(subject, assignments=[*subject.assignments, assignment]))
        logger.info("Added assignment %s to %s", assignment.name, subject.name)
        return assignment

    def remove_assignment(self, subject_id: Identifier, assignment_id: Identifier) -> Assignment:
        subject = self.get_subject(subject_id)
        for assignment in subject.assignments:
            if assignment.id == assignment_id or str(assignment.id) == str(assignment_id):
                remaining = [a for a in subject.assignments if a is not assignment]
                self._replace_subject(replace(subject, assignments=remaining))
                return assignment
        raise AssignmentNotFound(
            f"Assignment '{assignment_id}' not found in subject '{subject.name}'."
        )

    # -- profile ---------------------------------------------------------

    def complete_setup(self, user_name: str, start: str, end: str) -> Profile:
        """Records the first-run profile and marks setup as done.

        :raises ValidationError: If a field is blank or start is not before end.
        """
        user_name = (user_name or "").strip()
        start = (start or "").strip()
        end = (end or "").strip()
        if not user_name:
            raise ValidationError("Please enter your name.")
        if not start:
            raise ValidationError("Please select your semester start date.")
        if not end:
            raise ValidationError("Please select your semester end date.")
        if _parse_setup_date(start) >= _parse_setup_date(end):
            raise ValidationError("End date must be after start date.")

        self._profile = Profile(
            user_name=user_name,
            is_first_time=False,
            semester=SemesterWindow(start=start, end=end),
        )
        self._save(StorageKeys.IS_FIRST_TIME, False)
        self._save(StorageKeys.USER_NAME, user_name)
        self._save(StorageKeys.SEMESTER_START, start)
        self._save(StorageKeys.SEMESTER_END, end)
        logger.info("Profile set up for %s", user_name)
        return self._profile


_store: t.Optional[GradebookStore] = None


def get_store() -> GradebookStore:
    """Returns the process-wide store, loading it from GRADEBOOK_DATA_PATH on first use."""
    global _store
    if _store is None:
        _store = GradebookStore.from_path(GRADEBOOK_DATA_PATH)
    return _store


def set_store(store: t.Optional[GradebookStore]) -> None:
    """Replaces the process-wide store (None forces a reload on next use)."""
    global _store
    _store = store
