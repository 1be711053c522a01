from flask import Blueprint

admin_bp = Blueprint(
    "admin",
    __name__,
    template_folder="../../templates",
)

from storefront.blueprints.admin import auth, views, api  # noqa: F401, E402
