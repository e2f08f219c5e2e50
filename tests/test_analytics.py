from datetime import date, datetime, timedelta, timezone

import pytest

from services.analytics import (
    build_dashboard,
    build_heatmap,
    build_time_buckets,
    compute_kpis,
    filter_appointments,
    inactive_clients,
    low_demand_services,
    month_end_projection,
    rollup_by_employee,
    rollup_by_service,
)
from factories import NOW, appointment, employee, service

CATALOG = [
    service("svc-1", name="Haircut", price=30000),
    service("svc-2", name="Beard", price=15000),
    service("svc-3", name="Color", price=80000),
]
STAFF = [employee("emp-1", "Laura"), employee("emp-2", "Mateo")]


def at(day, hour=10):
    return datetime(2026, 3, day, hour, 0, tzinfo=timezone.utc)


def test_filter_is_inclusive_on_both_days():
    items = [appointment("a", start=at(1, 0)), appointment("b", start=at(10, 23)), appointment("c", start=at(11))]
    result = filter_appointments(items, start=date(2026, 3, 1), end=date(2026, 3, 10))
    assert [a.id for a in result] == ["a", "b"]


def test_filter_by_employee_and_service():
    items = [
        appointment("a", employee="emp-1"),
        appointment("b", employee={"_id": "emp-2", "names": "Mateo"}),
        appointment("c", employee="emp-1", service="svc-2"),
    ]
    assert [a.id for a in filter_appointments(items, employee_id="emp-1")] == ["a", "c"]
    assert [a.id for a in filter_appointments(items, service_id="svc-2")] == ["c"]


def test_kpis_count_every_cancelled_status():
    items = [
        appointment("a", client="c1"),
        appointment("b", client="c1", customPrice=10000),
        appointment("c", client="c2", status="cancelled_by_customer"),
        appointment("d", client="c3", status="cancelled"),
    ]
    kpis = compute_kpis(items, CATALOG)
    assert kpis.total_appointments == 4
    assert kpis.total_customers == 3
    assert kpis.total_revenue == 100000
    assert kpis.average_ticket == 25000
    assert kpis.cancellation_rate == 50


def test_kpis_of_nothing_are_zero():
    kpis = compute_kpis([])
    assert kpis.average_ticket == 0
    assert kpis.cancellation_rate == 0


def test_daily_buckets_are_zero_filled():
    items = [appointment("a", start=at(2)), appointment("b", start=at(2, 15)), appointment("c", start=at(4))]
    buckets = build_time_buckets(items, "day", date(2026, 3, 1), date(2026, 3, 5), CATALOG)
    assert [b.key for b in buckets] == ["2026-03-01", "2026-03-02", "2026-03-03", "2026-03-04", "2026-03-05"]
    assert [b.appointments for b in buckets] == [0, 2, 0, 1, 0]
    assert buckets[1].revenue == 60000
    assert buckets[1].label == "02/03"


def test_weekly_buckets_use_iso_weeks():
    # 2026-03-01 is a Sunday, so the first bucket starts on Monday 2026-02-23
    items = [appointment("a", start=at(1)), appointment("b", start=at(2))]
    buckets = build_time_buckets(items, "week", date(2026, 3, 1), date(2026, 3, 8))
    assert [b.start for b in buckets] == [date(2026, 2, 23), date(2026, 3, 2)]
    assert [b.key for b in buckets] == ["2026-W09", "2026-W10"]
    assert [b.appointments for b in buckets] == [1, 1]


def test_monthly_buckets_span_the_range():
    buckets = build_time_buckets([], "month", date(2025, 11, 15), date(2026, 2, 1))
    assert [b.key for b in buckets] == ["2025-11", "2025-12", "2026-01", "2026-02"]


def test_buckets_without_range_follow_the_data():
    items = [appointment("a", start=at(3)), appointment("b", start=at(5))]
    assert len(build_time_buckets(items, "day")) == 3
    assert build_time_buckets([], "day") == []


def test_unknown_granularity_is_rejected():
    with pytest.raises(ValueError):
        build_time_buckets([], "year", date(2026, 1, 1), date(2026, 1, 2))


def test_rollups_only_include_known_entries():
    items = [
        appointment("a", employee="emp-1"),
        appointment("b", employee="emp-2", service={"_id": "svc-3", "name": "Color", "price": 80000}),
        appointment("c", employee="emp-2", service="svc-3"),
        appointment("d", employee="ghost", service="svc-ghost"),
    ]
    by_employee = rollup_by_employee(items, STAFF, CATALOG)
    assert [(r.name, r.appointments, r.revenue) for r in by_employee] == [("Mateo", 2, 160000), ("Laura", 1, 30000)]

    by_service = rollup_by_service(items, CATALOG)
    assert [(r.name, r.appointments) for r in by_service] == [("Color", 2), ("Haircut", 1)]


def test_heatmap_maps_weekday_and_business_hours():
    items = [
        appointment("a", start=at(16, 9)),   # Monday 09:00
        appointment("b", start=at(16, 9)),
        appointment("c", start=at(22, 19)),  # Sunday 19:00
        appointment("d", start=at(18, 21)),  # outside 08-19
    ]
    heatmap = build_heatmap(items)
    assert heatmap.days[0] == "Mon"
    assert heatmap.hours == list(range(8, 20))
    assert heatmap.raw[0][1] == 2
    assert heatmap.raw[6][11] == 1
    assert sum(map(sum, heatmap.raw)) == 3
    assert heatmap.normalized[0][1] == 1.0
    assert heatmap.normalized[6][11] == 0.5


def test_heatmap_uses_local_time():
    bogota = timezone(timedelta(hours=-5))
    heatmap = build_heatmap([appointment("a", start=at(16, 14))], tz=bogota)
    assert heatmap.raw[0][9 - 8] == 1


def test_inactive_clients_over_sixty_days():
    history = [
        appointment("a", start=NOW - timedelta(days=90), client={"_id": "c1", "name": "Old Friend"}),
        appointment("b", start=NOW - timedelta(days=61), client="c2"),
        appointment("c", start=NOW - timedelta(days=90), client="c3"),
        appointment("d", start=NOW - timedelta(days=5), client="c3"),
        appointment("e", start=NOW - timedelta(days=10), client="c4", status="cancelled"),
    ]
    assert inactive_clients(history, NOW) == ["Old Friend", "c2"]


def test_low_demand_includes_unbooked_active_services():
    items = [appointment(str(i)) for i in range(20)] + [appointment("x", service="svc-2")]
    inactive = service("svc-4", name="Retired", isActive=False)
    assert low_demand_services(items, CATALOG + [inactive]) == ["Beard", "Color"]


def test_month_end_projection_extrapolates_daily_average():
    # 18 days elapsed in a 31-day month with 180000 earned
    items = [appointment(str(i), start=at(1 + i)) for i in range(6)]
    projection = month_end_projection(items, NOW, CATALOG)
    assert projection == pytest.approx(180000 / 18 * 31)


def test_dashboard_assembles_every_section():
    items = [
        appointment("a", start=at(2), employee="emp-1"),
        appointment("b", start=at(3), employee="emp-2", service="svc-2"),
        appointment("c", start=at(20), employee="emp-2"),
    ]
    report = build_dashboard(
        items, STAFF, CATALOG,
        start=date(2026, 3, 1), end=date(2026, 3, 10),
        granularity="day", employee_id="emp-2", now=NOW,
    )
    assert report.kpis.total_appointments == 1
    assert len(report.time_series) == 10
    assert [r.name for r in report.by_employee] == ["Mateo"]
    assert [i.kind for i in report.insights][-1] == "month_end_projection"
