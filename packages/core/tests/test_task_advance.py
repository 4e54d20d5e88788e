"""Task.advance() 日期规则测试

规则 1：报名截止日期已过且 AVAILABLE -> APPLICATION_ENDED
规则 2：活动日期已过且非 ENDED -> ENDED
"""

from datetime import UTC, date, datetime, timedelta

import pytest
from volunteerhub.core.exceptions import InvalidTransitionError, ReminderAlreadySentError
from volunteerhub.core.models import ReminderStatus, TaskStatus

TODAY = date(2024, 6, 10)


class TestAdvanceRules:
    def test_deadline_passed_ends_application(self, make_task):
        """截止 6/9 的可报名任务，6/10 推进为 APPLICATION_ENDED"""
        task = make_task(
            "T1",
            event_date=date(2024, 6, 20),
            application_deadline=date(2024, 6, 9),
        )
        assert task.advance(TODAY) == TaskStatus.APPLICATION_ENDED
        assert task.status == TaskStatus.APPLICATION_ENDED

    def test_event_passed_ends_task(self, make_task):
        """活动 6/9 的 APPLICATION_ENDED 任务，6/10 推进为 ENDED"""
        task = make_task(
            "T2",
            event_date=date(2024, 6, 9),
            application_deadline=date(2024, 6, 1),
            status=TaskStatus.APPLICATION_ENDED,
        )
        assert task.advance(TODAY) == TaskStatus.ENDED

    def test_both_rules_apply_in_one_evaluation(self, make_task):
        """截止与活动都已过的 AVAILABLE 任务，一次推进直接到 ENDED"""
        task = make_task(
            "T3",
            event_date=date(2024, 6, 5),
            application_deadline=date(2024, 6, 1),
        )
        assert task.advance(TODAY) == TaskStatus.ENDED

    def test_deadline_today_is_not_passed(self, make_task):
        """截止日期当天不算已过（严格早于）"""
        task = make_task("T4", event_date=date(2024, 6, 20), application_deadline=TODAY)
        assert task.advance(TODAY) is None
        assert task.status == TaskStatus.AVAILABLE

    def test_event_today_is_not_passed(self, make_task):
        """活动当天不结束任务"""
        task = make_task(
            "T5",
            event_date=TODAY,
            application_deadline=TODAY - timedelta(days=3),
            status=TaskStatus.APPLICATION_ENDED,
        )
        assert task.advance(TODAY) is None

    def test_ended_task_never_changes(self, make_task):
        task = make_task(
            "T6",
            event_date=date(2024, 1, 1),
            application_deadline=date(2023, 12, 1),
            status=TaskStatus.ENDED,
        )
        assert task.advance(TODAY) is None
        assert task.status == TaskStatus.ENDED

    @pytest.mark.parametrize(
        "event_date,deadline",
        [
            (None, None),
            (None, date(2024, 6, 20)),
            (date(2024, 6, 20), None),
        ],
    )
    def test_missing_dates_do_not_fire(self, make_task, event_date, deadline):
        """日期缺失时对应规则不触发"""
        task = make_task("T7", event_date=event_date, application_deadline=deadline)
        assert task.advance(TODAY) is None
        assert task.status == TaskStatus.AVAILABLE

    def test_missing_deadline_with_passed_event_still_ends(self, make_task):
        task = make_task("T8", event_date=date(2024, 6, 1), application_deadline=None)
        assert task.advance(TODAY) == TaskStatus.ENDED

    def test_advance_is_idempotent(self, make_task):
        """同一天重复推进不再改变状态"""
        task = make_task(
            "T9",
            event_date=date(2024, 6, 20),
            application_deadline=date(2024, 6, 9),
        )
        task.advance(TODAY)
        assert task.advance(TODAY) is None
        assert task.status == TaskStatus.APPLICATION_ENDED

    def test_status_never_moves_backward(self, make_task):
        """日期被改到未来也不会回退状态"""
        task = make_task(
            "T10",
            event_date=date(2024, 7, 1),
            application_deadline=date(2024, 6, 30),
            status=TaskStatus.APPLICATION_ENDED,
        )
        assert task.advance(TODAY) is None
        assert task.status == TaskStatus.APPLICATION_ENDED



class TestDomainStatuses:
    """CRUD 层写入的其他领域状态"""

    @pytest.mark.parametrize("status", ["IN_PROGRESS", "CANCELLED", "DRAFT"])
    def test_event_passed_ends_any_non_ended_status(self, make_task, status):
        task = make_task("T1", event_date=date(2024, 6, 9), status=status)
        assert task.status == status

        assert task.advance(TODAY) == TaskStatus.ENDED
        assert task.status == TaskStatus.ENDED

    def test_deadline_rule_ignores_domain_status(self, make_task):
        task = make_task(
            "T2",
            event_date=date(2024, 6, 20),
            application_deadline=date(2024, 6, 1),
            status="IN_PROGRESS",
        )
        assert task.advance(TODAY) is None
        assert task.status == "IN_PROGRESS"

    def test_known_status_string_becomes_enum(self, make_task):
        task = make_task("T3", status="APPLICATION_ENDED")
        assert task.status is TaskStatus.APPLICATION_ENDED

class TestSignupReminderFlag:
    def test_mark_reminder_sent_once(self, make_task, make_volunteer, make_signup):
        signup = make_signup("S1", make_task("T1"), make_volunteer("V1"))
        assert signup.reminder_status == ReminderStatus.PENDING

        at = datetime(2024, 6, 10, 8, 0, tzinfo=UTC)
        signup.mark_reminder_sent(at)
        assert signup.reminder_sent is True
        assert signup.reminder_sent_at == at
        assert signup.reminder_status == ReminderStatus.SENT

        with pytest.raises(ReminderAlreadySentError):
            signup.mark_reminder_sent(at)


class TestInvalidTransitionError:
    def test_message_contains_statuses(self):
        err = InvalidTransitionError(TaskStatus.ENDED, TaskStatus.AVAILABLE)
        assert "ENDED" in str(err)
        assert err.to_status == TaskStatus.AVAILABLE
