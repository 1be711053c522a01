import logging

from sqlalchemy.exc import SQLAlchemyError

from storefront.errors import InvalidTransition, NotFound, UpstreamFailure, ValidationError
from storefront.extensions import db
from storefront.models.audit_log import AuditLog
from storefront.models.order import Order
from storefront.services.product_service import get_product

logger = logging.getLogger(__name__)

TERMINAL_STATES = {"delivered", "returned"}

ALLOWED_TRANSITIONS = {
    "pending": {"confirmed", "returned"},
    "confirmed": {"delivered", "returned"},
}


def can_transition(from_status, to_status):
    if from_status in TERMINAL_STATES:
        return False
    return to_status in ALLOWED_TRANSITIONS.get(from_status, set())


def next_statuses(status):
    """Statuses an admin may move an order to from ``status``."""
    return sorted(ALLOWED_TRANSITIONS.get(status, set()))


def create_order(product_id, color, name, phone, address):
    """Record a checkout for one color variation of a published product.

    The product's current price is copied onto the order.
    """
    product = get_product(product_id)

    contact = {
        "name": (name or "").strip(),
        "phone": (phone or "").strip(),
        "address": (address or "").strip(),
    }
    for field, value in contact.items():
        if not value:
            raise ValidationError(f"{field.capitalize()} is required")

    if not color or product.find_variation(color) is None:
        raise ValidationError(f"Color {color!r} is not available for this product")

    order = Order(
        product_id=product.id,
        color=color,
        status="pending",
        total_price_cents=product.price_cents,
        **contact,
    )
    try:
        db.session.add(order)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to create order for product %s", product_id)
        raise UpstreamFailure("Failed to place order") from e

    logger.info("Order %s placed for product %s (%s)", order.id, product.id, color)
    return order


def update_order_status(order_id, status, admin):
    """Move an order along pending → confirmed → delivered, or to returned."""
    order = db.session.get(Order, order_id)
    if not order:
        raise NotFound(f"Order {order_id} not found")
    if status not in Order.STATUSES:
        raise InvalidTransition(f"Unknown status: {status}")
    if not can_transition(order.status, status):
        raise InvalidTransition(
            f"Cannot change order from {order.status} to {status}"
        )

    old_status = order.status
    try:
        order.status = status
        db.session.add(
            AuditLog(
                admin_email=admin.email,
                action="UPDATE_ORDER_STATUS",
                product_id=order.product_id,
                order_id=order.id,
                payload={"from": old_status, "to": status},
            )
        )
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.exception("Failed to update order %s", order_id)
        raise UpstreamFailure(f"Failed to update order {order_id}") from e

    logger.info("Order %s: %s -> %s by %s", order.id, old_status, status, admin.email)
    return order


def list_orders():
    """All orders, newest first."""
    return Order.query.order_by(Order.created_at.desc()).all()
