import uuid
from datetime import datetime, timezone
from decimal import Decimal
from storefront.extensions import db


def _new_id():
    return str(uuid.uuid4())


class Product(db.Model):
    __tablename__ = "products"

    id = db.Column(db.String(36), primary_key=True, default=_new_id)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, default="")
    price_cents = db.Column(db.Integer, nullable=False)
    # [{"name": "Red", "hex": "#FF0000", "images": ["/uploads/..."]}]
    variations = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(
        db.String(20), nullable=False, default="DRAFT", index=True
    )
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    orders = db.relationship(
        "Order", backref="product", lazy="dynamic", passive_deletes=True
    )

    VALID_STATUSES = {"DRAFT", "PUBLISHED"}

    @property
    def price(self):
        """Price as a Decimal with two places."""
        return (Decimal(self.price_cents) / 100).quantize(Decimal("0.01"))

    @property
    def is_visible(self):
        return self.status == "PUBLISHED"

    @property
    def color_names(self):
        return [v["name"] for v in self.variations or []]

    def find_variation(self, name):
        for variation in self.variations or []:
            if variation["name"] == name:
                return variation
        return None

    @property
    def cover_image(self):
        """First image of the first variation, used on catalog cards."""
        for variation in self.variations or []:
            if variation.get("images"):
                return variation["images"][0]
        return None

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "price": float(self.price),
            "variations": self.variations or [],
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<Product {self.id}: {self.title}>"
