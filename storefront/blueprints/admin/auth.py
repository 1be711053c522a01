"""Admin session login and the decorator that guards admin views."""
import hmac
import logging
from dataclasses import dataclass
from functools import wraps

from flask import (
    current_app,
    flash,
    jsonify,
    redirect,
    render_template,
    request,
    session,
    url_for,
)
from werkzeug.security import check_password_hash

from storefront.blueprints.admin import admin_bp

logger = logging.getLogger(__name__)

SESSION_KEY = "admin_email"


@dataclass(frozen=True)
class AdminContext:
    """The authenticated admin performing an operation."""

    email: str


def current_admin():
    email = session.get(SESSION_KEY)
    if not email or email != current_app.config["ADMIN_EMAIL"]:
        return None
    return AdminContext(email=email)


def admin_required(view):
    """Inject ``admin`` into the view, or send the caller to log in.

    JSON API paths answer 401; pages redirect to the login route.
    """

    @wraps(view)
    def wrapped(*args, **kwargs):
        admin = current_admin()
        if admin is None:
            if request.path.startswith(url_for("admin.dashboard") + "api/"):
                return jsonify({"error": "Authentication required"}), 401
            return redirect(url_for("admin.login", next=request.path))
        return view(*args, admin=admin, **kwargs)

    return wrapped


def verify_credentials(email, password):
    expected_email = current_app.config["ADMIN_EMAIL"]
    password_hash = current_app.config["ADMIN_PASSWORD_HASH"]
    if not expected_email or not password_hash:
        logger.warning("Admin login attempted but credentials are not configured")
        return False
    if not hmac.compare_digest(
        email.strip().lower().encode(), expected_email.lower().encode()
    ):
        return False
    return check_password_hash(password_hash, password)


@admin_bp.route("/login", methods=["GET", "POST"])
def login():
    if request.method == "POST":
        email = request.form.get("email", "")
        password = request.form.get("password", "")
        if verify_credentials(email, password):
            session.clear()
            session[SESSION_KEY] = current_app.config["ADMIN_EMAIL"]
            logger.info("Admin %s logged in", email)
            next_url = request.args.get("next", "")
            if not next_url.startswith("/admin") or next_url.startswith("//"):
                next_url = url_for("admin.dashboard")
            return redirect(next_url)
        logger.info("Failed admin login for %s", email)
        flash("Invalid email or password")
        return render_template("admin/login.html"), 401
    if current_admin():
        return redirect(url_for("admin.dashboard"))
    return render_template("admin/login.html")


@admin_bp.route("/logout", methods=["POST"])
def logout():
    session.pop(SESSION_KEY, None)
    return redirect(url_for("admin.login"))
