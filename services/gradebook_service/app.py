"""
FastAPI service for the grade tracker.

This service exposes the gradebook store and the grade engine as REST API
endpoints. Every grade in a response is computed from the current snapshot
on each request; nothing is cached between requests.
"""
from __future__ import annotations

import os
import typing as t
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException

from grade_engine.calculator import (
    calculate_overall_average,
    calculate_semester_progress,
    calculate_subject_grade,
    category_percentages,
    grade_color,
    grade_tier,
)
from grade_engine.models import Category, Subject as SubjectData
from gradebook_server.errors import (
    GradebookError,
    SubjectLimitReached,
    SubjectNotFound,
    AssignmentNotFound,
    ValidationError,
)
from gradebook_server.store import GradebookStore, get_store
from services.shared.models import (
    Assignment,
    CategoryCode,
    CreateAssignmentRequest,
    CreateSubjectRequest,
    Profile,
    SetupProfileRequest,
    Subject,
    SubjectGradeResponse,
    SummaryResponse,
    UpdateWeightRequest,
)


SERVICE_HOST = os.getenv("GRADEBOOK_SERVICE_HOST", "0.0.0.0")
SERVICE_PORT = int(os.getenv("GRADEBOOK_SERVICE_PORT", "8004"))


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Load the store on startup so the first request doesn't pay for it."""
    app.dependency_overrides.get(get_store, get_store)()
    yield


app = FastAPI(
    title="Grade Tracker Service",
    description="REST API for subjects, assignments and weighted grades",
    version="1.0.0",
    lifespan=lifespan,
)


def _raise_http(error: GradebookError) -> t.NoReturn:
    message = error.args[0] if error.args else str(error)
    if isinstance(error, (SubjectNotFound, AssignmentNotFound)):
        raise HTTPException(status_code=404, detail=message)
    if isinstance(error, SubjectLimitReached):
        raise HTTPException(status_code=409, detail=message)
    if isinstance(error, ValidationError):
        raise HTTPException(status_code=422, detail=message)
    raise HTTPException(status_code=500, detail=message)


def _grade_response(subject: SubjectData) -> SubjectGradeResponse:
    grade = calculate_subject_grade(subject)
    return SubjectGradeResponse(
        subject_id=subject.id,
        name=subject.name,
        grade=grade,
        tier=grade_tier(grade).value,
        color=grade_color(grade),
        categories={c.value: p for c, p in category_percentages(subject).items()},
    )


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "healthy", "service": "gradebook-service"}


@app.get("/subjects", response_model=list[Subject])
async def list_subjects(store: GradebookStore = Depends(get_store)) -> list[Subject]:
    """List all subjects in insertion order."""
    return [Subject.from_data(s) for s in store.subjects]


@app.post("/subjects", response_model=Subject, status_code=201)
async def create_subject(
        request: CreateSubjectRequest,
        store: GradebookStore = Depends(get_store),
) -> Subject:
    """
    Create a subject with equal category weights.

    At most four subjects may exist at once.
    """
    try:
        return Subject.from_data(store.add_subject(request.name))
    except GradebookError as e:
        _raise_http(e)


@app.delete("/subjects/{subject_id}", response_model=Subject)
async def delete_subject(subject_id: str, store: GradebookStore = Depends(get_store)) -> Subject:
    """Delete a subject and its assignments."""
    try:
        return Subject.from_data(store.remove_subject(subject_id))
    except GradebookError as e:
        _raise_http(e)


@app.post("/subjects/{subject_id}/assignments", response_model=Assignment, status_code=201)
async def create_assignment(
        subject_id: str,
        request: CreateAssignmentRequest,
        store: GradebookStore = Depends(get_store),
) -> Assignment:
    """Append an assignment to a subject."""
    try:
        assignment = store.add_assignment(
            subject_id,
            name=request.name,
            grade=request.grade,
            max_grade=request.max_grade,
            category=request.category,
        )
        return Assignment.from_data(assignment)
    except GradebookError as e:
        _raise_http(e)


@app.delete("/subjects/{subject_id}/assignments/{assignment_id}", response_model=Assignment)
async def delete_assignment(
        subject_id: str,
        assignment_id: str,
        store: GradebookStore = Depends(get_store),
) -> Assignment:
    """Delete one assignment from a subject."""
    try:
        return Assignment.from_data(store.remove_assignment(subject_id, assignment_id))
    except GradebookError as e:
        _raise_http(e)


@app.put("/subjects/{subject_id}/weights/{category}", response_model=Subject)
async def update_weight(
        subject_id: str,
        category: CategoryCode,
        request: UpdateWeightRequest,
        store: GradebookStore = Depends(get_store),
) -> Subject:
    """
    Change one category weight.

    Weights are not required to sum to 100.
    """
    try:
        return Subject.from_data(
            store.update_category_weight(subject_id, Category(category), request.weight)
        )
    except GradebookError as e:
        _raise_http(e)


@app.get("/subjects/{subject_id}/grade", response_model=SubjectGradeResponse)
async def subject_grade(subject_id: str, store: GradebookStore = Depends(get_store)) -> SubjectGradeResponse:
    """Weighted grade, tier and per-category percentages of one subject."""
    try:
        return _grade_response(store.get_subject(subject_id))
    except GradebookError as e:
        _raise_http(e)


@app.get("/summary", response_model=SummaryResponse)
async def summary(store: GradebookStore = Depends(get_store)) -> SummaryResponse:
    """
    Dashboard summary.

    Semester progress is evaluated against today's date on every request.
    """
    subjects = store.subjects
    profile = store.profile
    overall = calculate_overall_average(subjects)
    return SummaryResponse(
        user_name=profile.user_name,
        overall_average=overall,
        overall_tier=grade_tier(overall).value,
        semester_progress=calculate_semester_progress(profile.semester.start, profile.semester.end),
        subjects=[_grade_response(s) for s in subjects],
    )


@app.get("/profile", response_model=Profile)
async def get_profile(store: GradebookStore = Depends(get_store)) -> Profile:
    """Return the user profile."""
    return Profile.from_data(store.profile)


@app.put("/profile", response_model=Profile)
async def setup_profile(
        request: SetupProfileRequest,
        store: GradebookStore = Depends(get_store),
) -> Profile:
    """Complete first-run setup with name and semester dates."""
    try:
        profile = store.complete_setup(
            request.user_name,
            request.semester_start_date,
            request.semester_end_date,
        )
        return Profile.from_data(profile)
    except GradebookError as e:
        _raise_http(e)


@app.delete("/data")
async def clear_data(store: GradebookStore = Depends(get_store)):
    """Remove all stored data."""
    store.clear_all_data()
    return {"status": "cleared"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=SERVICE_HOST, port=SERVICE_PORT)
