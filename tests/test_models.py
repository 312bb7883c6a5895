"""
提醒模型测试

1. 消息拆分
2. 输入校验
3. 日历推进
4. 序列化
"""

from datetime import datetime

import pytest

from reminder_bot.errors import (
    EmptyTitle,
    InvalidCategory,
    InvalidDate,
    InvalidFrequency,
    ValidationError,
    WrongFieldCount,
)
from reminder_bot.reminders import (
    Category,
    Frequency,
    Reminder,
    add_months,
    next_occurrence,
    parse_date,
    parse_reminder_input,
    split_reminder_message,
)

EXAMPLE = ["Pay Rent", "Monthly rent payment", "2024-04-01", "monthly", "bill"]


class TestSplitMessage:
    """测试消息拆分"""

    def test_five_fields_trimmed(self):
        fields = split_reminder_message("Pay Rent | Monthly rent payment |2024-04-01| monthly | bill ")
        assert fields == EXAMPLE

    def test_wrong_field_count_is_not_a_reminder(self):
        assert split_reminder_message("just chatting") is None
        assert split_reminder_message("a | b | c | d") is None
        assert split_reminder_message("a | b | c | d | e | f") is None
        assert split_reminder_message("") is None

    def test_empty_description_kept_as_field(self):
        assert split_reminder_message("Call mom || 2024-05-01 | once | task") == [
            "Call mom", "", "2024-05-01", "once", "task"
        ]


class TestParseReminderInput:
    """测试输入校验"""

    def test_accepts_example(self):
        reminder = parse_reminder_input(EXAMPLE, chat_id=42)

        assert reminder.title == "Pay Rent"
        assert reminder.description == "Monthly rent payment"
        assert reminder.date == datetime(2024, 4, 1)
        assert reminder.frequency is Frequency.MONTHLY
        assert reminder.category is Category.BILL
        assert reminder.chat_id == 42
        assert reminder.id

    def test_rejects_malformed_date(self):
        with pytest.raises(InvalidDate):
            parse_reminder_input(["Pay Rent", "", "not-a-date", "monthly", "bill"], chat_id=1)

    def test_rejects_impossible_date(self):
        with pytest.raises(InvalidDate):
            parse_reminder_input(["Pay Rent", "", "2024-02-30", "monthly", "bill"], chat_id=1)

    def test_rejects_unknown_frequency(self):
        with pytest.raises(InvalidFrequency):
            parse_reminder_input(["Pay Rent", "", "2024-04-01", "weekly", "bill"], chat_id=1)

    def test_frequency_is_case_sensitive(self):
        with pytest.raises(InvalidFrequency):
            parse_reminder_input(["Pay Rent", "", "2024-04-01", "Monthly", "bill"], chat_id=1)

    def test_rejects_unknown_category(self):
        with pytest.raises(InvalidCategory):
            parse_reminder_input(["Pay Rent", "", "2024-04-01", "monthly", "expense"], chat_id=1)

    def test_rejects_wrong_field_count(self):
        with pytest.raises(WrongFieldCount) as exc_info:
            parse_reminder_input(["Pay Rent", "2024-04-01", "monthly", "bill"], chat_id=1)
        assert exc_info.value.count == 4

    def test_rejects_empty_title(self):
        with pytest.raises(EmptyTitle):
            parse_reminder_input(["  ", "desc", "2024-04-01", "once", "task"], chat_id=1)

    def test_validation_errors_share_base_class(self):
        for exc in (InvalidDate, InvalidFrequency, InvalidCategory, WrongFieldCount, EmptyTitle):
            assert issubclass(exc, ValidationError)

    def test_empty_description(self):
        reminder = parse_reminder_input(["Call mom", "", "2024-05-01", "once", "task"], chat_id=1)
        assert reminder.description == ""
        assert reminder.frequency is Frequency.ONCE
        assert reminder.category is Category.TASK

    def test_fresh_ids(self):
        ids = {parse_reminder_input(EXAMPLE, chat_id=1).id for _ in range(100)}
        assert len(ids) == 100


class TestParseDate:
    """测试日期解析"""

    def test_date_only(self):
        assert parse_date("2024-04-01") == datetime(2024, 4, 1)

    def test_date_and_time(self):
        assert parse_date("2024-04-01 09:30") == datetime(2024, 4, 1, 9, 30)
        assert parse_date("2024-04-01T09:30:15") == datetime(2024, 4, 1, 9, 30, 15)

    def test_utc_timestamp_becomes_naive(self):
        result = parse_date("2024-04-01T00:00:00.000Z")
        assert result.tzinfo is None

    def test_blank(self):
        with pytest.raises(InvalidDate):
            parse_date("   ")


class TestRecurrence:
    """测试日历推进"""

    def test_month_end_clamped_in_leap_year(self):
        assert add_months(datetime(2024, 1, 31), 1) == datetime(2024, 2, 29)

    def test_month_end_clamped_in_common_year(self):
        assert add_months(datetime(2023, 1, 31), 1) == datetime(2023, 2, 28)

    def test_year_rollover(self):
        assert add_months(datetime(2024, 12, 15, 8, 45), 1) == datetime(2025, 1, 15, 8, 45)

    def test_monthly(self):
        assert next_occurrence(datetime(2024, 1, 15), Frequency.MONTHLY) == datetime(2024, 2, 15)

    def test_yearly(self):
        assert next_occurrence(datetime(2024, 4, 1), Frequency.YEARLY) == datetime(2025, 4, 1)

    def test_yearly_from_leap_day(self):
        assert next_occurrence(datetime(2024, 2, 29), Frequency.YEARLY) == datetime(2025, 2, 28)

    def test_once_has_no_next(self):
        assert next_occurrence(datetime(2024, 4, 1), Frequency.ONCE) is None


class TestSerialization:
    """测试持久化格式"""

    def test_to_dict(self, make_reminder):
        data = make_reminder(frequency=Frequency.MONTHLY).to_dict()

        assert data == {
            "id": "r1",
            "title": "Pay Rent",
            "description": "Monthly rent payment",
            "date": "2024-04-01T00:00:00",
            "frequency": "monthly",
            "chatId": 42,
            "category": "bill",
        }

    def test_from_legacy_record(self):
        reminder = Reminder.from_dict({
            "id": "abc",
            "title": "Insurance",
            "date": "2024-06-01T00:00:00.000Z",
            "frequency": "yearly",
            "chatId": 7,
            "category": "bill",
        })

        assert reminder.description == ""
        assert reminder.frequency is Frequency.YEARLY
        assert reminder.chat_id == 7
        assert reminder.date.tzinfo is None
