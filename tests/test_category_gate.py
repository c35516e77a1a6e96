"""Tests for the category daily-limit gate."""

from datetime import datetime, timedelta

from dayfocus.engine.category_gate import check_category_limits

TODAY = datetime(2025, 1, 6)


class TestCategoryLimitGate:
    """Work has a daily limit of two tasks in these tests."""

    def test_rejects_when_limit_reached(self, make_task, work_category):
        existing = [make_task(category=work_category, start_date=TODAY) for _ in range(2)]
        new_task = make_task(category=work_category)

        check = check_category_limits(existing, new_task, TODAY)

        assert not check.allowed
        assert check.message == (
            "You've reached your daily limit of 2 tasks for Work. "
            "Focus on completing existing tasks first."
        )

    def test_allows_below_limit(self, make_task, work_category):
        existing = [make_task(category=work_category, start_date=TODAY)]
        check = check_category_limits(existing, make_task(category=work_category), TODAY)
        assert check.allowed
        assert check.message is None

    def test_future_task_always_allowed(self, make_task, work_category):
        existing = [make_task(category=work_category, start_date=TODAY) for _ in range(5)]
        tomorrow = make_task(category=work_category, due_date=TODAY + timedelta(days=1))

        assert check_category_limits(existing, tomorrow, TODAY).allowed

    def test_overdue_new_task_is_gated(self, make_task, work_category):
        existing = [make_task(category=work_category, start_date=TODAY) for _ in range(2)]
        overdue = make_task(category=work_category, due_date=TODAY - timedelta(days=2))

        assert not check_category_limits(existing, overdue, TODAY).allowed

    def test_completed_tasks_not_counted(self, make_task, work_category):
        existing = [make_task(category=work_category, start_date=TODAY, completed=True) for _ in range(3)]
        assert check_category_limits(existing, make_task(category=work_category), TODAY).allowed

    def test_future_due_tasks_not_counted(self, make_task, work_category):
        # Pulled forward onto today but not due until next week
        existing = [
            make_task(category=work_category, start_date=TODAY, due_date=TODAY + timedelta(days=7))
            for _ in range(2)
        ]
        assert check_category_limits(existing, make_task(category=work_category), TODAY).allowed

    def test_start_date_takes_precedence_over_due_date(self, make_task, work_category):
        # Overdue tasks already scheduled for another day don't sit on today
        existing = [
            make_task(category=work_category, due_date=TODAY - timedelta(days=1), start_date=TODAY + timedelta(days=1))
            for _ in range(2)
        ]
        assert check_category_limits(existing, make_task(category=work_category), TODAY).allowed

    def test_due_date_used_when_unscheduled(self, make_task, work_category):
        existing = [make_task(category=work_category, start_date=None) for _ in range(2)]
        assert not check_category_limits(existing, make_task(category=work_category), TODAY).allowed

    def test_other_categories_ignored(self, make_task, work_category, home_category):
        existing = [make_task(category=home_category, start_date=TODAY) for _ in range(4)]
        assert check_category_limits(existing, make_task(category=work_category), TODAY).allowed
