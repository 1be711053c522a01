"""Admin dashboard page."""
from flask import render_template, request

from storefront.blueprints.admin import admin_bp
from storefront.blueprints.admin.auth import admin_required
from storefront.models.settings import DEFAULT_COVER, Settings
from storefront.services import analytics_service, order_service, product_service

TABS = ["analytics", "cover-photo", "add-product", "products", "orders"]


@admin_bp.route("/")
@admin_required
def dashboard(admin):
    tab = request.args.get("tab", "analytics")
    if tab not in TABS:
        tab = "analytics"

    cover = Settings.get_cover_photo_url()
    return render_template(
        "admin/dashboard.html",
        admin=admin,
        tab=tab,
        tabs=TABS,
        analytics=analytics_service.get_sales_analytics(),
        products=product_service.list_all_products(),
        orders=order_service.list_orders(),
        next_statuses=order_service.next_statuses,
        preset_colors=product_service.PRESET_COLORS,
        cover_photo_url="" if cover == DEFAULT_COVER else cover,
    )
