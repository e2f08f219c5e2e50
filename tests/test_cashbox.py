from datetime import date, datetime, timedelta, timezone

import pytest

from services.cashbox import can_confirm, cashbox_range, confirm_pending, summarize_cashbox
from factories import NOW, appointment, ok

BOGOTA = timezone(timedelta(hours=-5))


def test_daily_range_covers_the_whole_day():
    start, end = cashbox_range("daily", day=date(2026, 3, 10), tz=BOGOTA)
    assert start == datetime(2026, 3, 10, 0, 0, tzinfo=BOGOTA)
    assert end.date() == date(2026, 3, 10)
    assert (end.hour, end.minute, end.second) == (23, 59, 59)


def test_weekly_range_runs_monday_to_sunday():
    start, end = cashbox_range("weekly", now=NOW)
    assert start.date() == date(2026, 3, 16)
    assert end.date() == date(2026, 3, 22)


@pytest.mark.parametrize("today,first,last", [
    (datetime(2026, 3, 10, tzinfo=timezone.utc), 1, 15),
    (datetime(2026, 3, 15, tzinfo=timezone.utc), 1, 15),
    (datetime(2026, 3, 16, tzinfo=timezone.utc), 16, 31),
    (datetime(2026, 2, 20, tzinfo=timezone.utc), 16, 28),
])
def test_biweekly_halves(today, first, last):
    start, end = cashbox_range("biweekly", now=today)
    assert (start.day, end.day) == (first, last)


def test_monthly_range():
    start, end = cashbox_range("monthly", now=NOW)
    assert (start.date(), end.date()) == (date(2026, 3, 1), date(2026, 3, 31))


def test_custom_range_must_be_explicit():
    with pytest.raises(ValueError):
        cashbox_range("custom", now=NOW)


@pytest.mark.parametrize("status,expected", [
    (None, True),
    ("pending", True),
    ("confirmed", False),
    ("attended", False),
    ("no_show", False),
    ("cancelled_by_admin", False),
])
def test_can_confirm(status, expected):
    assert can_confirm(status) is expected


def test_summary_totals_and_flags():
    items = [
        appointment("a", start=NOW, customPrice=25000, client={"_id": "c1", "name": "Ana"}),
        appointment("b", start=NOW + timedelta(hours=1), additionalItems=[{"name": "Wax", "price": 5000}]),
        appointment("c", start=NOW + timedelta(hours=2), service={"_id": "svc-2", "name": "Beard", "price": 15000},
                    customPrice=15000, status="pending"),
        appointment("d", start=NOW + timedelta(hours=3), service="svc-x"),
    ]
    summary = summarize_cashbox(items, NOW, NOW + timedelta(days=1), currency="COP")

    assert summary.total_income == 25000 + 35000 + 15000 + 0
    assert summary.total_count == 4
    assert summary.average_ticket == pytest.approx(75000 / 4)
    assert summary.services_summary["Haircut"].count == 2
    assert summary.services_summary["Haircut"].total == 60000
    assert summary.services_summary["Other"].count == 1
    assert summary.service_options == ["Beard", "Haircut", "Other"]

    lines = {line.appointment_id: line for line in summary.lines}
    assert [line.appointment_id for line in summary.lines] == ["d", "c", "b", "a"]
    assert lines["a"].custom_price_applied is True
    assert lines["c"].custom_price_applied is False
    assert lines["b"].line_total == 35000
    assert lines["c"].can_confirm is True
    assert lines["a"].can_confirm is False


def test_summary_filtered_by_service_name():
    items = [
        appointment("a"),
        appointment("b", service={"_id": "svc-2", "name": "Beard", "price": 15000}),
    ]
    summary = summarize_cashbox(items, NOW, NOW, service_names=["Beard"])
    assert summary.total_income == 15000
    assert summary.service_options == ["Beard", "Haircut"]
    assert summary.currency == "COP"


async def test_confirm_pending_sends_only_confirmable_ids(mock_api, api):
    mock_api.add("PUT", "/appointments/batch-confirm", ok({
        "confirmed": ["a"], "alreadyConfirmed": [], "failed": ["c"],
    }))
    items = [
        appointment("a", status="pending"),
        appointment("b", status="confirmed"),
        appointment("c", status=None),
    ]
    result = await confirm_pending(api, items, "org-1")

    assert mock_api.json_bodies("PUT", "/appointments/batch-confirm") == [
        {"appointmentIds": ["a", "c"], "organizationId": "org-1"}
    ]
    assert result.failed == ["c"]
    notice = api.session.notices.drain()[-1]
    assert notice.color == "yellow"
    assert "1 confirmed." in notice.message


async def test_confirm_pending_with_nothing_to_do(mock_api, api):
    result = await confirm_pending(api, [appointment("a")], "org-1")
    assert result is None
    assert mock_api.requests == []
