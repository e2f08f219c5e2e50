from services.analytics import compute_kpis
from services.cashbox import summarize_cashbox
from services.pricing import effective_price, line_total, service_price
from services.reservation_groups import visible_rows
from factories import NOW, appointment, reservation, service


CATALOG = [service("svc-1", price=30000), service("svc-2", name="Beard", price=15000)]


def test_custom_price_wins():
    item = reservation("r1", customPrice=25000, totalPrice=40000)
    assert effective_price(item, CATALOG) == 25000


def test_total_price_when_no_custom_price():
    item = reservation("r1", totalPrice=40000)
    assert effective_price(item, CATALOG) == 40000


def test_zero_custom_price_is_still_a_price():
    item = reservation("r1", customPrice=0, totalPrice=40000)
    assert effective_price(item, CATALOG) == 0


def test_falls_back_to_catalog_price_by_id():
    assert effective_price(reservation("r1", service_id="svc-2"), CATALOG) == 15000


def test_populated_service_price_is_used_without_catalog():
    item = reservation("r1", service_id={"_id": "svc-9", "name": "Color", "price": 80000})
    assert effective_price(item) == 80000


def test_unknown_service_costs_nothing():
    assert effective_price(reservation("r1", service_id="svc-404"), CATALOG) == 0
    assert effective_price(reservation("r1", service_id=None)) == 0


def test_same_rule_for_appointments():
    populated = appointment("a1", customPrice=10000)
    by_id = appointment("a2", service="svc-2")
    assert effective_price(populated) == 10000
    assert effective_price(by_id, CATALOG) == 15000
    assert service_price(populated) == 30000


def test_line_total_adds_additional_items():
    item = appointment("a1", additionalItems=[{"name": "Wax", "price": 5000}, {"name": "Mask", "price": 2500}])
    assert line_total(item) == 37500


def test_catalog_priced_items_agree_across_cashbox_analytics_and_rows():
    catalog = [service(price=30000)]
    by_id = appointment("a1", service="svc-1")

    cashbox = summarize_cashbox([by_id], NOW, NOW, catalog=catalog)
    kpis = compute_kpis([by_id], catalog)
    rows = visible_rows([reservation("r1", service_id="svc-1")], services=catalog)

    assert cashbox.total_income == kpis.total_revenue == rows[0].price == 30000
    assert cashbox.lines[0].base_price == 30000
    assert cashbox.lines[0].service_name == "Haircut"
    assert cashbox.lines[0].custom_price_applied is False
