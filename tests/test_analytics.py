"""Tests for sales analytics."""
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from storefront.models.order import Order
from storefront.services.analytics_service import get_sales_analytics

START = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


def _add(db, status, cents, created_at=START):
    db.session.add(
        Order(
            name="Ann", phone="555", address="1 Main St", color="Red",
            status=status, total_price_cents=cents, created_at=created_at,
        )
    )


def test_empty(db):
    data = get_sales_analytics()
    assert data["total_revenue"] == 0
    assert data["total_sold"] == 0
    assert data["total_orders"] == 0
    assert data["chart_data"] == []


def test_all_returned(db):
    _add(db, "returned", 1999)
    _add(db, "returned", 500)
    db.session.commit()

    data = get_sales_analytics()
    assert data["total_revenue"] == 0
    assert data["total_sold"] == 0
    assert data["total_orders"] == 2
    assert data["chart_data"] == []


def test_only_delivered_count_as_sold(db):
    for status in ["pending", "confirmed", "delivered", "delivered", "returned"]:
        _add(db, status, 1000)
    db.session.commit()

    data = get_sales_analytics()
    assert data["total_sold"] == 2
    assert data["total_revenue"] == Decimal("40.00")


def test_buckets_by_day(db):
    _add(db, "pending", 1000, START)
    _add(db, "delivered", 250, START + timedelta(hours=3))
    _add(db, "returned", 9999, START + timedelta(hours=4))
    _add(db, "confirmed", 500, START + timedelta(days=1))
    db.session.commit()

    chart = get_sales_analytics()["chart_data"]
    assert chart == [
        {"date": "01/01/2026", "revenue": Decimal("12.50"), "count": 2},
        {"date": "01/02/2026", "revenue": Decimal("5.00"), "count": 1},
    ]


def test_keeps_last_thirty_buckets_with_orders(db):
    # 35 order days spread over 70 calendar days
    for i in range(35):
        _add(db, "pending", 100, START + timedelta(days=2 * i))
    db.session.commit()

    chart = get_sales_analytics()["chart_data"]
    assert len(chart) == 30
    assert chart[0]["date"] == (START + timedelta(days=10)).strftime("%m/%d/%Y")
    assert chart[-1]["date"] == (START + timedelta(days=68)).strftime("%m/%d/%Y")
