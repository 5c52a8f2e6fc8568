# -*- coding: utf-8 -*-
import logging
import os
import typing as t

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress_bar import ProgressBar
from rich.table import Table
from rich.text import Text

from grade_engine.calculator import (
    assignment_percentage,
    calculate_overall_average,
    calculate_semester_progress,
    calculate_subject_grade,
    category_percentages,
    grade_color,
)
from grade_engine.models import Category, Subject
from gradebook_server.errors import GradebookError, SubjectNotFound, AssignmentNotFound
from gradebook_server.store import GradebookStore, get_store, set_store


console = Console()
error_console = Console(stderr=True)

LOG_LEVEL = os.getenv("GRADEBOOK_LOG_LEVEL", "WARNING")


def configure_logging(level: str = LOG_LEVEL) -> None:
    """Route log records through rich so they match the rest of the output."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=error_console, rich_tracebacks=True)],
    )


def colored_percentage(percentage: t.Optional[int]) -> Text:
    """Render a percentage in its tier colour, or a dim N/A."""
    if percentage is None:
        return Text("N/A", style="dim")
    return Text(f"{percentage}%", style=f"bold {grade_color(percentage)}")


def resolve_subject(store: GradebookStore, ref: str) -> Subject:
    """Find a subject by 1-based position, id, or case-insensitive name."""
    subjects = store.subjects
    if ref.isdigit() and 1 <= int(ref) <= len(subjects):
        return subjects[int(ref) - 1]
    for subject in subjects:
        if str(subject.id) == ref or subject.name.lower() == ref.lower():
            return subject
    raise SubjectNotFound(f"Subject '{ref}' not found.")


def create_subjects_table(subjects: list[Subject]) -> Table:
    """Create a table with one row per subject and its weighted grade."""
    table = Table(title="📚 Subjects", show_header=True, header_style="bold magenta")
    table.add_column("#", style="cyan", width=3)
    table.add_column("Subject", style="white")
    table.add_column("Assignments", justify="right")
    table.add_column("Grade", justify="right")

    for idx, subject in enumerate(subjects, 1):
        table.add_row(
            str(idx),
            subject.name,
            str(len(subject.assignments)),
            colored_percentage(calculate_subject_grade(subject)),
        )
    return table


def create_subject_detail(subject: Subject) -> Table:
    """Create a table of a subject's assignments grouped by category."""
    percentages = category_percentages(subject)
    table = Table(
        show_header=True,
        header_style="bold magenta",
        caption=" · ".join(f"{c.value} {c.label}" for c in Category),
    )
    table.add_column("Category", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Assignment", style="white")
    table.add_column("Score", justify="right", no_wrap=True)
    table.add_column("%", justify="right", no_wrap=True)

    for category in Category:
        weight = subject.category_weights.get(category)
        table.add_row(
            Text(category.value, style="bold cyan"),
            f"{weight}%",
            "",
            "",
            colored_percentage(percentages[category]),
        )
        assignments = [a for a in subject.assignments if a.category == category]
        if not assignments:
            table.add_row("", "", Text("No assignments in this category", style="dim"), "", "")
        for assignment in assignments:
            table.add_row(
                "",
                "",
                f"{assignment.name} [dim]({str(assignment.id)[:8]})[/dim]",
                f"{assignment.grade}/{assignment.max_grade}",
                colored_percentage(assignment_percentage(assignment)),
            )
        table.add_section()
    return table


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--data",
    "data_path",
    type=click.Path(dir_okay=False),
    default=None,
    help="JSON data file (defaults to $GRADEBOOK_DATA_PATH).",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose logging.")
def main(data_path: t.Optional[str], verbose: bool) -> None:
    """Track weighted grades for up to four subjects."""
    configure_logging("DEBUG" if verbose else LOG_LEVEL)
    if data_path:
        set_store(GradebookStore.from_path(data_path))


def _fail(error: Exception) -> t.NoReturn:
    message = error.args[0] if error.args else str(error)
    error_console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(1)


@main.command()
@click.option("--name", prompt="What's your name?", help="Your name.")
@click.option("--start", prompt="Semester start date (YYYY-MM-DD)", help="Semester start date.")
@click.option("--end", prompt="Semester end date (YYYY-MM-DD)", help="Semester end date.")
def setup(name: str, start: str, end: str) -> None:
    """Save your name and semester dates."""
    try:
        profile = get_store().complete_setup(name, start, end)
    except GradebookError as e:
        _fail(e)
    console.print(f"[bold green]✅ Welcome, {profile.user_name}![/bold green]")


@main.command("add-subject")
@click.argument("name")
def add_subject(name: str) -> None:
    """Add a subject (at most four)."""
    try:
        subject = get_store().add_subject(name)
    except GradebookError as e:
        _fail(e)
    console.print(f"   ✓ Added subject [bold]{subject.name}[/bold]")


@main.command("add-assignment", context_settings={"ignore_unknown_options": True})
@click.argument("subject")
@click.argument("name")
@click.argument("grade")
@click.option("--max", "max_grade", default="100", show_default=True, help="Maximum possible score.")
@click.option(
    "--category",
    "-c",
    type=click.Choice([c.value for c in Category], case_sensitive=False),
    default=Category.KU.value,
    show_default=True,
    help="Assessment category.",
)
def add_assignment(subject: str, name: str, grade: str, max_grade: str, category: str) -> None:
    """Record an assignment in SUBJECT (position, id or name)."""
    store = get_store()
    try:
        target = resolve_subject(store, subject)
        assignment = store.add_assignment(target.id, name, grade, max_grade, category.upper())
    except GradebookError as e:
        _fail(e)
    updated = store.get_subject(target.id)
    console.print(
        f"   ✓ Added [bold]{assignment.name}[/bold] to {updated.name} "
        f"→ grade now ", colored_percentage(calculate_subject_grade(updated)),
    )


@main.command("set-weight", context_settings={"ignore_unknown_options": True})
@click.argument("subject")
@click.argument("category", type=click.Choice([c.value for c in Category], case_sensitive=False))
@click.argument("weight")
def set_weight(subject: str, category: str, weight: str) -> None:
    """Set the weight (percentage) of CATEGORY in SUBJECT."""
    store = get_store()
    try:
        target = resolve_subject(store, subject)
        updated = store.update_category_weight(target.id, category.upper(), weight)
    except GradebookError as e:
        _fail(e)
    total = updated.category_weights.total()
    console.print(f"   ✓ {updated.name}: {category.upper()} = {updated.category_weights.get(Category(category.upper()))}%")
    if total != 100:
        console.print(f"[yellow]Note:[/yellow] weights add up to {total}%, not 100%.")


@main.command("remove-subject")
@click.argument("subject")
def remove_subject(subject: str) -> None:
    """Delete SUBJECT and its assignments."""
    store = get_store()
    try:
        removed = store.remove_subject(resolve_subject(store, subject).id)
    except GradebookError as e:
        _fail(e)
    console.print(f"   ✓ Removed subject [bold]{removed.name}[/bold]")


@main.command("remove-assignment")
@click.argument("subject")
@click.argument("assignment")
def remove_assignment(subject: str, assignment: str) -> None:
    """Delete ASSIGNMENT (id or id prefix) from SUBJECT."""
    store = get_store()
    try:
        target = resolve_subject(store, subject)
        matches = [a for a in target.assignments if str(a.id).startswith(assignment)]
        if len(matches) != 1:
            raise AssignmentNotFound(f"Assignment '{assignment}' not found in subject '{target.name}'.")
        removed = store.remove_assignment(target.id, matches[0].id)
    except GradebookError as e:
        _fail(e)
    console.print(f"   ✓ Removed assignment [bold]{removed.name}[/bold]")


@main.command()
def show() -> None:
    """Show the dashboard: overall average, semester progress and subjects."""
    store = get_store()
    profile = store.profile
    subjects = store.subjects

    greeting = f"Hi, {profile.user_name}!" if profile.user_name else "Grade Tracker"
    overall = calculate_overall_average(subjects)
    stats_text = Text()
    stats_text.append("Overall average: ", style="white")
    stats_text.append_text(colored_percentage(overall))
    console.print(Panel(stats_text, title=f"🎓 {greeting}", border_style="blue"))

    if profile.semester.start and profile.semester.end:
        progress_value = calculate_semester_progress(profile.semester.start, profile.semester.end)
        console.print(
            f"Semester {profile.semester.start} → {profile.semester.end}: "
            f"[bold]{progress_value}%[/bold] complete"
        )
        console.print(ProgressBar(total=100, completed=progress_value, width=50))
    elif profile.is_first_time:
        console.print("[dim]Run 'gradebook setup' to set your semester dates.[/dim]")

    if not subjects:
        console.print("📚 No subjects yet. Add one with 'gradebook add-subject NAME'.")
        return
    console.print(create_subjects_table(subjects))


@main.command()
@click.argument("subject")
def subject(subject: str) -> None:
    """Show SUBJECT's weights and assignments by category."""
    store = get_store()
    try:
        target = resolve_subject(store, subject)
    except GradebookError as e:
        _fail(e)
    header = Text(f"{target.name}  ", style="bold")
    header.append_text(colored_percentage(calculate_subject_grade(target)))
    console.print(Panel.fit(header, border_style="blue"))
    console.print(create_subject_detail(target))


@main.command()
@click.confirmation_option(prompt="Delete all subjects, assignments and profile data?")
def reset() -> None:
    """Delete all stored data."""
    get_store().clear_all_data()
    console.print("[bold green]✅ All data cleared.[/bold green]")


if __name__ == "__main__":
    main()
