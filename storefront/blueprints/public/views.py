"""Public-facing catalog, product and checkout pages."""
import os

from flask import (
    abort,
    current_app,
    flash,
    redirect,
    render_template,
    request,
    send_from_directory,
    url_for,
)

from storefront.blueprints.public import public_bp
from storefront.errors import NotFound, UpstreamFailure, ValidationError
from storefront.models.settings import DEFAULT_COVER, Settings
from storefront.services import order_service, product_service


@public_bp.route("/")
def catalog():
    """Catalog page with the homepage cover."""
    products = product_service.list_products()
    cover = Settings.get_cover_photo_url()
    return render_template(
        "catalog.html",
        products=products,
        cover_photo_url=None if cover == DEFAULT_COVER else cover,
    )


@public_bp.route("/products/<product_id>")
def product_detail(product_id):
    try:
        product = product_service.get_product(product_id)
    except NotFound:
        abort(404)
    return render_template("product.html", product=product)


@public_bp.route("/products/<product_id>/order", methods=["POST"])
def place_order(product_id):
    try:
        order_service.create_order(
            product_id=product_id,
            color=request.form.get("color"),
            name=request.form.get("name"),
            phone=request.form.get("phone"),
            address=request.form.get("address"),
        )
    except NotFound:
        abort(404)
    except (ValidationError, UpstreamFailure) as e:
        current_app.logger.info("Order rejected for %s: %s", product_id, e.message)
        flash(
            e.message if isinstance(e, ValidationError)
            else "Failed to place order. Please try again."
        )
        product = product_service.get_product(product_id)
        return render_template("product.html", product=product, form=request.form), e.status_code
    return redirect(url_for("public.success"))


@public_bp.route("/success")
def success():
    return render_template("success.html")


@public_bp.route("/uploads/<path:filename>")
def media(filename):
    """Serve locally stored product images."""
    if current_app.config["MEDIA_BACKEND"] != "local":
        abort(404)
    root = os.path.abspath(current_app.config["MEDIA_ROOT"])
    return send_from_directory(root, filename, max_age=31536000)
