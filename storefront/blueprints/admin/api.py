"""JSON API used by the admin dashboard."""
import json
import logging

from flask import jsonify, request

from storefront.blueprints.admin import admin_bp
from storefront.blueprints.admin.auth import admin_required
from storefront.errors import InvalidRequest, NotFound, StorefrontError, ValidationError
from storefront.extensions import db
from storefront.models.audit_log import AuditLog
from storefront.models.product import Product
from storefront.models.settings import Settings
from storefront.services import (
    analytics_service,
    order_service,
    product_service,
    storage_service,
)

logger = logging.getLogger(__name__)


@admin_bp.errorhandler(StorefrontError)
def handle_storefront_error(error):
    if error.status_code >= 500:
        logger.error("Admin request failed: %s", error.message)
    return jsonify({"error": error.message}), error.status_code


def _submitted_files(key):
    return [f for f in request.files.getlist(key) if f and f.filename]


# ---------------------------------------------------------------------------
# Products
# ---------------------------------------------------------------------------

@admin_bp.route("/api/products", methods=["GET"])
@admin_required
def list_products(admin):
    products = product_service.list_all_products()
    return jsonify({"products": [p.to_dict() for p in products]})


@admin_bp.route("/api/products", methods=["POST"])
@admin_required
def create_product(admin):
    """Multipart form: title, description, price, variations (JSON list of
    {name, hex}) and the files of variation ``i`` under ``images-<i>``."""
    try:
        variations = json.loads(request.form.get("variations") or "[]")
    except json.JSONDecodeError:
        raise ValidationError("variations must be a JSON list")
    if not isinstance(variations, list) or not all(isinstance(v, dict) for v in variations):
        raise ValidationError("variations must be a JSON list")

    files_by_color = {}
    for i, variation in enumerate(variations):
        name = variation.get("name")
        if not isinstance(name, str):
            continue
        files_by_color[name.strip()] = _submitted_files(f"images-{i}")

    data = {
        "title": request.form.get("title"),
        "description": request.form.get("description"),
        "price": request.form.get("price"),
        "variations": variations,
    }
    product = product_service.create_product(data, files_by_color, admin)
    return jsonify({"success": True, "product": product.to_dict()}), 201


@admin_bp.route("/api/products/<product_id>", methods=["DELETE"])
@admin_required
def delete_product(product_id, admin):
    product_service.delete_product(product_id, admin)
    return jsonify({"success": True})


@admin_bp.route("/api/upload", methods=["POST"])
@admin_required
def upload(admin):
    """Store images for one color of an existing product."""
    files = _submitted_files("files")
    product_id = request.form.get("productId", "")
    color_name = request.form.get("colorName", "")

    if not files:
        raise InvalidRequest("No files provided")
    if not product_id or not color_name:
        raise InvalidRequest("Product ID and color name are required")
    if db.session.get(Product, product_id) is None:
        raise NotFound(f"Product {product_id} not found")

    try:
        results = storage_service.save_variation_images(product_id, color_name, files)
    except StorefrontError:
        raise
    except Exception:
        logger.exception("Upload error")
        return jsonify({"error": "Failed to upload files"}), 500

    paths = [r.path for r in results if r.accepted]
    db.session.add(
        AuditLog(
            admin_email=admin.email,
            action="UPLOAD_IMAGES",
            product_id=product_id,
            payload={"color": color_name, "count": len(paths)},
        )
    )
    db.session.commit()
    return jsonify({
        "success": True,
        "paths": paths,
        "results": [r.to_dict() for r in results],
        "message": f"{len(paths)} files uploaded successfully",
    })


# ---------------------------------------------------------------------------
# Orders & analytics
# ---------------------------------------------------------------------------

@admin_bp.route("/api/orders", methods=["GET"])
@admin_required
def list_orders(admin):
    orders = order_service.list_orders()
    return jsonify({
        "orders": [
            dict(o.to_dict(), next_statuses=order_service.next_statuses(o.status))
            for o in orders
        ]
    })


@admin_bp.route("/api/orders/<order_id>", methods=["PATCH"])
@admin_required
def update_order(order_id, admin):
    payload = request.get_json(silent=True) or {}
    status = payload.get("status")
    if not status:
        raise ValidationError("status is required")
    order = order_service.update_order_status(order_id, status, admin)
    return jsonify({"success": True, "order": order.to_dict()})


@admin_bp.route("/api/analytics", methods=["GET"])
@admin_required
def analytics(admin):
    data = analytics_service.get_sales_analytics()
    return jsonify({
        "total_revenue": float(data["total_revenue"]),
        "total_sold": data["total_sold"],
        "total_orders": data["total_orders"],
        "chart_data": [
            {"date": b["date"], "revenue": float(b["revenue"]), "count": b["count"]}
            for b in data["chart_data"]
        ],
    })


# ---------------------------------------------------------------------------
# Cover photo
# ---------------------------------------------------------------------------

@admin_bp.route("/api/cover-photo", methods=["GET"])
@admin_required
def get_cover_photo(admin):
    return jsonify({"cover_photo_url": Settings.get_cover_photo_url()})


@admin_bp.route("/api/cover-photo", methods=["PUT"])
@admin_required
def set_cover_photo(admin):
    payload = request.get_json(silent=True) or {}
    url = Settings.set_cover_photo_url(payload.get("url"))
    db.session.add(
        AuditLog(
            admin_email=admin.email,
            action="SET_COVER_PHOTO",
            payload={"url": url},
        )
    )
    db.session.commit()
    return jsonify({"success": True, "cover_photo_url": url})
