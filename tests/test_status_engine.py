# tests/test_status_engine.py

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, date, datetime, timedelta
from zoneinfo import ZoneInfo

import pytest

from taskflow.core.errors import InvalidInput, InvalidTransition
from taskflow.tasks.status_engine import (
    apply_due_date_edit,
    apply_progress_edit,
    apply_status_edit,
    display_status,
    overdue_days,
)
from taskflow.tasks.task_models import DisplayKind, Task, TaskStatus

CST = ZoneInfo("Asia/Shanghai")
REF = datetime(2024, 1, 10, 0, 0, tzinfo=CST)


def make_task(**overrides) -> Task:
    base = Task(
        id="t1",
        title="Prepare report",
        content="",
        status=TaskStatus.NOT_STARTED,
        progress=0,
        due_date=date(2024, 1, 10),
        creator_id="u0",
        assignee_id="u1",
    )
    return replace(base, **overrides)


# ---- overdue_days ----


def test_overdue_days_past_same_day_and_future() -> None:
    assert overdue_days(date(2024, 1, 1), REF) == 9
    assert overdue_days(date(2024, 1, 9), REF) == 1
    assert overdue_days(date(2024, 1, 10), REF) == 0
    assert overdue_days(date(2024, 1, 11), REF) == -1


def test_overdue_days_uses_reference_timezone_day_boundary() -> None:
    # 2024-01-09 17:00 UTC is already 2024-01-10 01:00 in Shanghai.
    late_evening_utc = datetime(2024, 1, 9, 17, 0, tzinfo=UTC)
    assert overdue_days(date(2024, 1, 9), late_evening_utc) == 1
    # 15:59 UTC is still 23:59 on the 9th in Shanghai.
    assert overdue_days(date(2024, 1, 9), datetime(2024, 1, 9, 15, 59, tzinfo=UTC)) == 0


def test_overdue_days_end_of_day_is_still_on_time() -> None:
    assert overdue_days(date(2024, 1, 10), datetime(2024, 1, 10, 23, 59, 59, tzinfo=CST)) == 0


def test_overdue_days_with_configured_timezone() -> None:
    ref = datetime(2024, 1, 10, 3, 0, tzinfo=UTC)
    # In New York it is still the 9th.
    assert overdue_days(date(2024, 1, 9), ref, "America/New_York") == 0
    assert overdue_days(date(2024, 1, 9), ref, "Asia/Shanghai") == 1


# ---- display_status ----


def test_display_status_precedence_overdue_beats_in_progress() -> None:
    task = make_task(status=TaskStatus.IN_PROGRESS, progress=50, due_date=date(2024, 1, 5))
    shown = display_status(task, REF)
    assert shown.kind is DisplayKind.OVERDUE
    assert shown.days == 5
    assert shown.percent is None


def test_display_status_overdue_beats_not_started() -> None:
    shown = display_status(make_task(due_date=date(2024, 1, 9)), REF)
    assert shown.kind is DisplayKind.OVERDUE
    assert shown.days == 1
    assert shown.label == "Overdue 1 day"


def test_display_status_completed_variants_ignore_due_date() -> None:
    done = make_task(status=TaskStatus.COMPLETED, due_date=date(2023, 1, 1), completed_at=REF)
    late = make_task(status=TaskStatus.COMPLETED_LATE, due_date=date(2023, 1, 1), completed_at=REF)
    assert display_status(done, REF).kind is DisplayKind.DONE_ON_TIME
    assert display_status(late, REF).kind is DisplayKind.DONE_LATE


def test_display_status_not_started_and_in_progress() -> None:
    assert display_status(make_task(), REF).kind is DisplayKind.NOT_STARTED

    shown = display_status(make_task(status=TaskStatus.IN_PROGRESS, progress=40), REF)
    assert shown.kind is DisplayKind.IN_PROGRESS
    assert shown.percent == 40
    assert shown.label == "In progress 40%"


def test_display_status_does_not_touch_stored_status() -> None:
    task = make_task(status=TaskStatus.IN_PROGRESS, progress=50, due_date=date(2024, 1, 1))
    display_status(task, REF)
    assert task.status is TaskStatus.IN_PROGRESS


# ---- apply_status_edit ----


@pytest.mark.parametrize("terminal", [TaskStatus.COMPLETED, TaskStatus.COMPLETED_LATE])
@pytest.mark.parametrize("requested", list(TaskStatus))
def test_terminal_tasks_reject_every_status_edit(terminal: TaskStatus, requested: TaskStatus) -> None:
    task = make_task(status=terminal, completed_at=REF)
    with pytest.raises(InvalidTransition):
        apply_status_edit(task, requested, REF, progress=30)


def test_completing_overdue_task_records_completed_late() -> None:
    task = make_task(status=TaskStatus.IN_PROGRESS, due_date=date(2024, 1, 1))
    result = apply_status_edit(task, TaskStatus.COMPLETED, REF)
    assert result.status is TaskStatus.COMPLETED_LATE
    assert result.completed_at == REF
    # The input snapshot is left alone.
    assert task.status is TaskStatus.IN_PROGRESS
    assert task.completed_at is None


def test_completing_task_not_yet_due_records_completed() -> None:
    now = datetime.now(UTC)
    task = make_task(status=TaskStatus.NOT_STARTED, due_date=date(2099, 1, 1))
    result = apply_status_edit(task, TaskStatus.COMPLETED, now)
    assert result.status is TaskStatus.COMPLETED
    assert result.completed_at == now


def test_completing_on_the_due_day_is_on_time() -> None:
    task = make_task(status=TaskStatus.IN_PROGRESS, due_date=date(2024, 1, 10))
    result = apply_status_edit(task, TaskStatus.COMPLETED, datetime(2024, 1, 10, 23, 0, tzinfo=CST))
    assert result.status is TaskStatus.COMPLETED


def test_explicit_completed_late_is_kept() -> None:
    task = make_task(due_date=date(2099, 1, 1))
    result = apply_status_edit(task, TaskStatus.COMPLETED_LATE, REF)
    assert result.status is TaskStatus.COMPLETED_LATE
    assert result.completed_at == REF


def test_completion_does_not_change_progress() -> None:
    task = make_task(status=TaskStatus.IN_PROGRESS, progress=70, due_date=date(2099, 1, 1))
    result = apply_status_edit(task, TaskStatus.COMPLETED, REF, progress=10)
    assert result.progress == 70


@pytest.mark.parametrize(
    ("requested", "expected"),
    [(150, 100), (-10, 0), (55, 55), ("80", 80), ("35%", 35), (42.0, 42)],
)
def test_in_progress_clamps_progress(requested: object, expected: int) -> None:
    task = make_task(due_date=date(2099, 1, 1))
    result = apply_status_edit(task, TaskStatus.IN_PROGRESS, REF, progress=requested)
    assert result.status is TaskStatus.IN_PROGRESS
    assert result.progress == expected
    assert result.completed_at is None


def test_in_progress_without_progress_keeps_value() -> None:
    task = make_task(progress=20)
    assert apply_status_edit(task, TaskStatus.IN_PROGRESS, REF).progress == 20


@pytest.mark.parametrize("bad", ["abc", "", 12.5, True])
def test_non_integer_progress_is_invalid_input(bad: object) -> None:
    with pytest.raises(InvalidInput):
        apply_status_edit(make_task(), TaskStatus.IN_PROGRESS, REF, progress=bad)


def test_back_to_not_started_keeps_progress() -> None:
    task = make_task(status=TaskStatus.IN_PROGRESS, progress=60)
    result = apply_status_edit(task, TaskStatus.NOT_STARTED, REF, progress=90)
    assert result.status is TaskStatus.NOT_STARTED
    assert result.progress == 60


def test_in_progress_on_overdue_task_stays_in_progress() -> None:
    task = make_task(due_date=date(2024, 1, 1))
    result = apply_status_edit(task, TaskStatus.IN_PROGRESS, REF, progress=10)
    assert result.status is TaskStatus.IN_PROGRESS
    assert display_status(result, REF).kind is DisplayKind.OVERDUE


# ---- progress slider ----


def test_progress_edit_starts_a_not_started_task() -> None:
    result = apply_progress_edit(make_task(), 25, REF)
    assert result.status is TaskStatus.IN_PROGRESS
    assert result.progress == 25


def test_progress_edit_on_completed_task_is_rejected() -> None:
    with pytest.raises(InvalidTransition):
        apply_progress_edit(make_task(status=TaskStatus.COMPLETED, completed_at=REF), 25, REF)


# ---- apply_due_date_edit ----


def test_due_date_edit_replaces_field_only() -> None:
    task = make_task(status=TaskStatus.IN_PROGRESS, progress=30)
    result = apply_due_date_edit(task, "2024-02-01")
    assert result.due_date == date(2024, 2, 1)
    assert result.status is TaskStatus.IN_PROGRESS
    assert result.progress == 30


def test_due_date_edit_does_not_rewrite_history() -> None:
    task = make_task(status=TaskStatus.COMPLETED_LATE, due_date=date(2024, 1, 1), completed_at=REF)
    result = apply_due_date_edit(task, "2099-12-31")
    assert result.status is TaskStatus.COMPLETED_LATE
    assert display_status(result, REF).kind is DisplayKind.DONE_LATE


@pytest.mark.parametrize("bad", ["", "   ", None, "next friday", "2024-13-01"])
def test_due_date_edit_rejects_bad_dates(bad: object) -> None:
    with pytest.raises(InvalidInput):
        apply_due_date_edit(make_task(), bad)


def test_due_date_edit_accepts_timestamps() -> None:
    # 2024-01-31T20:00Z is Feb 1st in Shanghai.
    result = apply_due_date_edit(make_task(), "2024-01-31T20:00:00Z")
    assert result.due_date == date(2024, 2, 1)
    assert result.due_date - date(2024, 1, 31) == timedelta(days=1)
