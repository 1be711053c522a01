"""Tests for the admin console and its JSON API."""
import io
import json

import pytest

from conftest import ADMIN_EMAIL, image_bytes
from storefront.models.order import Order
from storefront.models.product import Product
from storefront.models.settings import Settings


def _png(name="photo.png"):
    return (io.BytesIO(image_bytes()), name, "image/png")


@pytest.fixture
def product(db):
    p = Product(
        title="Test Shirt",
        description="Cotton",
        price_cents=1999,
        status="PUBLISHED",
        variations=[{"name": "Red", "hex": "#FF0000", "images": ["/uploads/r.png"]}],
    )
    db.session.add(p)
    db.session.commit()
    return p


def test_dashboard_redirects_to_login(client):
    resp = client.get("/admin/")
    assert resp.status_code == 302
    assert "/admin/login" in resp.headers["Location"]


def test_api_requires_session(client):
    resp = client.get("/admin/api/products")
    assert resp.status_code == 401
    assert resp.get_json()["error"] == "Authentication required"


def test_login_rejects_bad_password(client):
    resp = client.post("/admin/login", data={"email": ADMIN_EMAIL, "password": "wrong"})
    assert resp.status_code == 401
    assert client.get("/admin/api/products").status_code == 401


def test_login_and_logout(client, admin_client):
    resp = admin_client.get("/admin/")
    assert resp.status_code == 200
    assert b"Admin Dashboard" in resp.data

    admin_client.post("/admin/logout")
    assert client.get("/admin/api/products").status_code == 401


def test_login_ignores_external_next(client):
    from conftest import ADMIN_PASSWORD

    resp = client.post(
        "/admin/login?next=https://evil.example.com/",
        data={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD},
    )
    assert resp.status_code == 302
    assert resp.headers["Location"].endswith("/admin/")


@pytest.mark.parametrize("tab", ["analytics", "cover-photo", "add-product", "products", "orders"])
def test_dashboard_tabs(admin_client, product, tab):
    resp = admin_client.get(f"/admin/?tab={tab}")
    assert resp.status_code == 200


def test_create_product_via_api(admin_client, db):
    resp = admin_client.post(
        "/admin/api/products",
        data={
            "title": "Test Shirt",
            "description": "A very good shirt",
            "price": "19.99",
            "variations": json.dumps([{"name": "Red", "hex": "#FF0000"}]),
            "images-0": [_png("front.png")],
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 201
    body = resp.get_json()
    assert body["success"] is True
    created = body["product"]
    assert created["price"] == 19.99
    assert created["status"] == "PUBLISHED"
    assert len(created["variations"][0]["images"]) == 1

    listing = admin_client.get("/admin/api/products").get_json()["products"]
    assert [p["id"] for p in listing] == [created["id"]]

    page = admin_client.get(f"/products/{created['id']}")
    assert page.status_code == 200


def test_create_product_validation_error(admin_client, db):
    resp = admin_client.post(
        "/admin/api/products",
        data={
            "title": "Test Shirt",
            "description": "A very good shirt",
            "price": "19.99",
            "variations": json.dumps([{"name": "Red", "hex": "#FF0000"}]),
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert "at least one image for Red" in resp.get_json()["error"]
    assert Product.query.count() == 0


def test_create_product_bad_variations_payload(admin_client):
    resp = admin_client.post(
        "/admin/api/products",
        data={"title": "T", "description": "D", "price": "1", "variations": "{oops"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400


def test_create_product_non_text_color_name(admin_client):
    resp = admin_client.post(
        "/admin/api/products",
        data={
            "title": "T",
            "description": "D",
            "price": "1",
            "variations": json.dumps([{"name": 5, "hex": "#FF0000"}]),
            "images-0": [_png()],
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert "must be text" in resp.get_json()["error"]
    assert Product.query.count() == 0


def test_upload_endpoint(admin_client, product):
    resp = admin_client.post(
        "/admin/api/upload",
        data={
            "productId": product.id,
            "colorName": "Sky Blue",
            "files": [
                _png("a.png"),
                (io.BytesIO(b"plain text"), "notes.txt", "text/plain"),
            ],
        },
        content_type="multipart/form-data",
    )
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["success"] is True
    assert len(body["paths"]) == 1
    assert body["paths"][0].startswith(f"/uploads/products/{product.id}/sky-blue/")
    assert body["message"] == "1 files uploaded successfully"
    assert [r["accepted"] for r in body["results"]] == [True, False]
    assert body["results"][1]["reason"].startswith("Unsupported media type")

    assert admin_client.get(body["paths"][0]).status_code == 200


def test_upload_endpoint_validation(admin_client, product):
    resp = admin_client.post(
        "/admin/api/upload",
        data={"productId": product.id, "colorName": "Red"},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "No files provided"

    resp = admin_client.post(
        "/admin/api/upload",
        data={"productId": product.id, "files": [_png()]},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Product ID and color name are required"

    resp = admin_client.post(
        "/admin/api/upload",
        data={"productId": "missing", "colorName": "Red", "files": [_png()]},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 404


def test_upload_endpoint_unexpected_failure(admin_client, product, monkeypatch):
    from storefront.services import storage_service

    def boom(*args, **kwargs):
        raise RuntimeError("kaboom")

    monkeypatch.setattr(storage_service, "save_variation_images", boom)
    resp = admin_client.post(
        "/admin/api/upload",
        data={"productId": product.id, "colorName": "Red", "files": [_png()]},
        content_type="multipart/form-data",
    )
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Failed to upload files"}


def test_delete_product(admin_client, db, product):
    resp = admin_client.delete(f"/admin/api/products/{product.id}")
    assert resp.status_code == 200
    db.session.expire_all()
    assert Product.query.count() == 0

    resp = admin_client.delete(f"/admin/api/products/{product.id}")
    assert resp.status_code == 404


def _place(client, product):
    client.post(
        f"/products/{product.id}/order",
        data={"color": "Red", "name": "Ann", "phone": "555", "address": "1 Main St"},
    )
    return Order.query.one()


def test_order_status_flow(admin_client, db, product):
    order = _place(admin_client, product)

    orders = admin_client.get("/admin/api/orders").get_json()["orders"]
    assert orders[0]["product_title"] == "Test Shirt"
    assert orders[0]["next_statuses"] == ["confirmed", "returned"]

    resp = admin_client.patch(f"/admin/api/orders/{order.id}", json={"status": "confirmed"})
    assert resp.status_code == 200
    assert resp.get_json()["order"]["status"] == "confirmed"

    resp = admin_client.patch(f"/admin/api/orders/{order.id}", json={"status": "pending"})
    assert resp.status_code == 409

    resp = admin_client.patch(f"/admin/api/orders/{order.id}", json={})
    assert resp.status_code == 400

    resp = admin_client.patch("/admin/api/orders/missing", json={"status": "confirmed"})
    assert resp.status_code == 404


def test_analytics_api(admin_client, db, product):
    order = _place(admin_client, product)
    admin_client.patch(f"/admin/api/orders/{order.id}", json={"status": "confirmed"})
    admin_client.patch(f"/admin/api/orders/{order.id}", json={"status": "delivered"})

    data = admin_client.get("/admin/api/analytics").get_json()
    assert data["total_revenue"] == 19.99
    assert data["total_sold"] == 1
    assert data["total_orders"] == 1
    assert len(data["chart_data"]) == 1
    assert data["chart_data"][0]["count"] == 1


def test_cover_photo_api(admin_client, db):
    assert admin_client.get("/admin/api/cover-photo").get_json() == {"cover_photo_url": "default"}

    resp = admin_client.put("/admin/api/cover-photo", json={"url": "https://cdn.example.com/c.jpg"})
    assert resp.status_code == 200
    assert Settings.get_cover_photo_url() == "https://cdn.example.com/c.jpg"

    resp = admin_client.put("/admin/api/cover-photo", json={"url": "ftp://nope"})
    assert resp.status_code == 400

    resp = admin_client.put("/admin/api/cover-photo", json={"url": "default"})
    assert resp.get_json()["cover_photo_url"] == "default"
