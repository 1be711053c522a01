from storefront.models.product import Product
from storefront.models.order import Order
from storefront.models.settings import Settings
from storefront.models.audit_log import AuditLog

__all__ = ["Product", "Order", "Settings", "AuditLog"]
