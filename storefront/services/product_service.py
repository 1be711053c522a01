import logging
import re
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import SQLAlchemyError

from storefront.errors import (
    CreateFailed,
    NotFound,
    UploadFailed,
    UpstreamFailure,
    ValidationError,
)
from storefront.extensions import db
from storefront.models.audit_log import AuditLog
from storefront.models.product import Product
from storefront.services import storage_service

logger = logging.getLogger(__name__)

PRESET_COLORS = [
    {"name": "Red", "hex": "#FF0000"},
    {"name": "Blue", "hex": "#0000FF"},
    {"name": "Green", "hex": "#00FF00"},
    {"name": "Yellow", "hex": "#FFFF00"},
    {"name": "Black", "hex": "#000000"},
    {"name": "White", "hex": "#FFFFFF"},
    {"name": "Gray", "hex": "#808080"},
    {"name": "Pink", "hex": "#FFC0CB"},
    {"name": "Purple", "hex": "#800080"},
    {"name": "Orange", "hex": "#FFA500"},
    {"name": "Brown", "hex": "#A52A2A"},
    {"name": "Navy", "hex": "#000080"},
    {"name": "Teal", "hex": "#008080"},
    {"name": "Maroon", "hex": "#800000"},
    {"name": "Gold", "hex": "#FFD700"},
    {"name": "Silver", "hex": "#C0C0C0"},
    {"name": "Beige", "hex": "#F5F5DC"},
]

HEX_RE = re.compile(r"^#[0-9A-Fa-f]{6}$")
# price_cents is a 32-bit integer column
MAX_PRICE_CENTS = 2**31 - 1


def parse_price(raw):
    """Parse a price string into integer cents.

    Raises ValidationError for anything that is not a non-negative amount
    with at most two decimals.
    """
    if raw is None or not str(raw).strip():
        raise ValidationError("Price is required")
    try:
        price = Decimal(str(raw).strip())
    except InvalidOperation:
        raise ValidationError(f"Invalid price: {raw}")
    if not price.is_finite() or price < 0:
        raise ValidationError("Price must be a non-negative number")
    try:
        quantized = price.quantize(Decimal("0.01"))
    except InvalidOperation:
        raise ValidationError(f"Invalid price: {raw}")
    if price != quantized:
        raise ValidationError("Price can have at most two decimals")
    cents = int(quantized * 100)
    if cents > MAX_PRICE_CENTS:
        raise ValidationError("Price is too large")
    return cents


def validate_product_input(data, files_by_color):
    """Check a product submission before anything is written.

    ``data`` holds ``title``, ``description``, ``price`` and ``variations``
    (a list of ``{"name", "hex"}``); ``files_by_color`` maps a variation
    name to its uploaded files.

    Returns the cleaned fields as a dict.
    """
    title = (data.get("title") or "").strip()
    description = (data.get("description") or "").strip()
    if not title:
        raise ValidationError("Title is required")
    if not description:
        raise ValidationError("Description is required")
    price_cents = parse_price(data.get("price"))

    variations = data.get("variations") or []
    if not variations:
        raise ValidationError("Please select at least one color")

    seen = set()
    cleaned = []
    for variation in variations:
        name = variation.get("name") or ""
        hex_value = variation.get("hex") or ""
        if not isinstance(name, str) or not isinstance(hex_value, str):
            raise ValidationError("Color name and value must be text")
        name = name.strip()
        hex_value = hex_value.strip()
        if not name:
            raise ValidationError("Every color needs a name")
        if not HEX_RE.match(hex_value):
            raise ValidationError(f"Invalid color value for {name}: {hex_value}")
        if name.lower() in seen:
            raise ValidationError(f"Duplicate color: {name}")
        seen.add(name.lower())
        if not files_by_color.get(name):
            raise ValidationError(f"Please upload at least one image for {name}")
        cleaned.append({"name": name, "hex": hex_value.upper()})

    return {
        "title": title,
        "description": description,
        "price_cents": price_cents,
        "variations": cleaned,
    }


def create_draft(fields, admin):
    """Insert a DRAFT product with no variations."""
    product = Product(
        title=fields["title"],
        description=fields["description"],
        price_cents=fields["price_cents"],
        variations=[],
        status="DRAFT",
    )
    try:
        db.session.add(product)
        db.session.flush()  # get product.id
        db.session.add(
            AuditLog(
                admin_email=admin.email,
                action="CREATE_DRAFT",
                product_id=product.id,
                payload={"title": product.title},
            )
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to create product draft")
        raise CreateFailed(f"Failed to create product: {e.__class__.__name__}") from e
    return product


def commit_variations(product, variations, admin):
    """Attach the assembled variations and publish in a single write."""
    try:
        product.variations = variations
        product.status = "PUBLISHED"
        db.session.add(
            AuditLog(
                admin_email=admin.email,
                action="PUBLISH",
                product_id=product.id,
                payload={"colors": [v["name"] for v in variations]},
            )
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to commit variations for %s", product.id)
        raise UpstreamFailure(f"Failed to update product {product.id}") from e
    return product


def create_product(data, files_by_color, admin):
    """Create a product with one image set per color variation.

    Steps: validate, create a draft, upload each color's images in order,
    then publish the assembled variations. A failure after the draft exists
    leaves the draft in place; drafts never show on the storefront and are
    removed with ``discard_draft`` or ``flask purge-drafts``.
    """
    fields = validate_product_input(data, files_by_color)
    product = create_draft(fields, admin)
    logger.info("Created draft %s (%s)", product.id, product.title)

    assembled = []
    for variation in fields["variations"]:
        name = variation["name"]
        results = storage_service.save_variation_images(
            product.id, name, files_by_color[name]
        )
        paths = [r.path for r in results if r.accepted]
        if not paths:
            reasons = "; ".join(r.reason for r in results if r.reason)
            logger.warning("No usable images for %s on %s: %s", name, product.id, reasons)
            raise UploadFailed(name, f"UploadFailed: {name} ({reasons})")
        assembled.append({"name": name, "hex": variation["hex"], "images": paths})

    commit_variations(product, assembled, admin)
    logger.info("Published product %s with %d colors", product.id, len(assembled))
    return product


def discard_draft(product_id, admin):
    """Delete a DRAFT product and its stored images."""
    product = db.session.get(Product, product_id)
    if not product or product.status != "DRAFT":
        return False

    try:
        db.session.add(
            AuditLog(
                admin_email=admin.email,
                action="DISCARD",
                product_id=product.id,
                payload={"title": product.title},
            )
        )
        db.session.delete(product)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to discard draft %s", product_id)
        raise UpstreamFailure(f"Failed to discard draft {product_id}") from e

    storage_service.delete_product_media(product_id)
    return True


def purge_stale_drafts(older_than_hours, admin):
    """Discard drafts created more than ``older_than_hours`` ago."""
    cutoff = datetime.now(timezone.utc) - timedelta(hours=older_than_hours)
    stale = Product.query.filter(
        Product.status == "DRAFT", Product.created_at < cutoff
    ).all()
    removed = 0
    for product in stale:
        if discard_draft(product.id, admin):
            removed += 1
    return removed


def delete_product(product_id, admin):
    """Delete a product. Orders keep their snapshot and lose the reference."""
    product = db.session.get(Product, product_id)
    if not product:
        raise NotFound(f"Product {product_id} not found")

    try:
        db.session.add(
            AuditLog(
                admin_email=admin.email,
                action="DELETE_PRODUCT",
                product_id=product.id,
                payload={"title": product.title},
            )
        )
        # Detach explicitly; SQLite ignores ON DELETE without the FK pragma.
        for order in product.orders:
            order.product_id = None
        db.session.delete(product)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to delete product %s", product_id)
        raise UpstreamFailure(f"Failed to delete product {product_id}") from e

    storage_service.delete_product_media(product_id)
    logger.info("Deleted product %s", product_id)


def list_products():
    """Published products, newest first."""
    return (
        Product.query.filter_by(status="PUBLISHED")
        .order_by(Product.created_at.desc())
        .all()
    )


def list_all_products():
    """Every product including drafts, for the admin inventory."""
    return Product.query.order_by(Product.created_at.desc()).all()


def get_product(product_id):
    """Get a published product or raise NotFound."""
    product = db.session.get(Product, product_id)
    if not product or not product.is_visible:
        raise NotFound(f"Product {product_id} not found")
    return product


def get_stats():
    """Product counts by status."""
    rows = (
        db.session.query(Product.status, db.func.count(Product.id))
        .group_by(Product.status)
        .all()
    )
    return dict(rows)
