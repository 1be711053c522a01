import uuid
from datetime import datetime, timezone
from decimal import Decimal
from storefront.extensions import db


class Order(db.Model):
    __tablename__ = "orders"

    id = db.Column(
        db.String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    product_id = db.Column(
        db.String(36),
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    name = db.Column(db.String(255), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    address = db.Column(db.Text, nullable=False)
    color = db.Column(db.String(100), nullable=False)  # variation name at order time
    status = db.Column(
        db.String(20), nullable=False, default="pending", index=True
    )
    total_price_cents = db.Column(db.Integer, nullable=False)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    STATUSES = {"pending", "confirmed", "delivered", "returned"}

    @property
    def total_price(self):
        return (Decimal(self.total_price_cents) / 100).quantize(Decimal("0.01"))

    @property
    def product_title(self):
        return self.product.title if self.product else "Unknown Product"

    def to_dict(self):
        return {
            "id": self.id,
            "product_id": self.product_id,
            "product_title": self.product_title,
            "name": self.name,
            "phone": self.phone,
            "address": self.address,
            "color": self.color,
            "status": self.status,
            "total_price": float(self.total_price),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f"<Order {self.id} [{self.status}]>"
