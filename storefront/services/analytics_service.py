from decimal import Decimal

from flask import current_app

from storefront.models.order import Order

CHART_BUCKETS = 30


def get_sales_analytics():
    """Revenue, units sold and a per-day revenue series for the dashboard.

    Returned orders are left out of revenue and the chart; only delivered
    orders count as sold. The chart keeps the last 30 days that have orders,
    which is not the same as the last 30 calendar days.
    """
    orders = Order.query.order_by(Order.created_at.asc()).all()
    date_format = current_app.config["ANALYTICS_DATE_FORMAT"]

    total_revenue = Decimal("0.00")
    total_sold = 0
    buckets = {}
    for order in orders:
        if order.status == "delivered":
            total_sold += 1
        if order.status == "returned":
            continue

        total_revenue += order.total_price
        label = order.created_at.strftime(date_format)
        bucket = buckets.setdefault(label, {"date": label, "revenue": Decimal("0.00"), "count": 0})
        bucket["revenue"] += order.total_price
        bucket["count"] += 1

    chart_data = list(buckets.values())[-CHART_BUCKETS:]
    return {
        "total_revenue": total_revenue,
        "total_sold": total_sold,
        "total_orders": len(orders),
        "chart_data": chart_data,
    }
