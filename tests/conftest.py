import io

import pytest
from PIL import Image as PILImage
from werkzeug.datastructures import FileStorage
from werkzeug.security import generate_password_hash

from storefront import create_app
from storefront.blueprints.admin.auth import AdminContext
from storefront.extensions import db as _db

ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "s3cret-pass"


@pytest.fixture
def app(tmp_path):
    """Create application for testing with a throwaway media root."""
    app = create_app("testing")
    app.config.update(
        MEDIA_ROOT=str(tmp_path / "uploads"),
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PASSWORD_HASH=generate_password_hash(
            ADMIN_PASSWORD, method="pbkdf2:sha256:1000"
        ),
    )
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


@pytest.fixture
def admin():
    return AdminContext(email=ADMIN_EMAIL)


@pytest.fixture
def admin_client(client):
    resp = client.post(
        "/admin/login", data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert resp.status_code == 302
    return client


def image_bytes(fmt="PNG", color="red"):
    buffer = io.BytesIO()
    PILImage.new("RGB", (8, 8), color).save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture
def make_upload():
    """Build a FileStorage the way werkzeug hands uploads to views."""

    def _make(filename="photo.png", mimetype="image/png", data=None):
        if data is None:
            data = image_bytes("JPEG" if "jpeg" in mimetype else "PNG")
        return FileStorage(
            stream=io.BytesIO(data), filename=filename, content_type=mimetype
        )

    return _make
