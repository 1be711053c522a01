from datetime import datetime, timezone
from storefront.extensions import db


class AuditLog(db.Model):
    __tablename__ = "audit_log"

    id = db.Column(db.Integer, primary_key=True)
    admin_email = db.Column(db.String(255), nullable=False, index=True)
    action = db.Column(db.String(50), nullable=False)
    product_id = db.Column(
        db.String(36),
        db.ForeignKey("products.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    order_id = db.Column(
        db.String(36),
        db.ForeignKey("orders.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    payload = db.Column(db.JSON)
    created_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )

    ACTIONS = {
        "CREATE_DRAFT",
        "PUBLISH",
        "DISCARD",
        "DELETE_PRODUCT",
        "UPLOAD_IMAGES",
        "UPDATE_ORDER_STATUS",
        "SET_COVER_PHOTO",
    }

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.admin_email}>"
