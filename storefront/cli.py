"""Flask CLI commands for admin operations."""
import click
from flask import current_app


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables and seed default settings."""
        from storefront.extensions import db
        from storefront.models.settings import COVER_PHOTO_KEY, DEFAULT_COVER, Settings

        db.create_all()

        if not db.session.get(Settings, COVER_PHOTO_KEY):
            db.session.add(Settings(key=COVER_PHOTO_KEY, value=DEFAULT_COVER))
        db.session.commit()

        click.echo("Database initialized with default settings.")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed demo products (idempotent)."""
        from storefront.extensions import db
        from storefront.models.product import Product

        if Product.query.first():
            click.echo("Products already exist — skipping demo seed.")
            return

        demo_products = [
            ("Classic Tee", "Soft cotton crew neck.", 1999, [("Red", "#FF0000"), ("Black", "#000000")]),
            ("Everyday Hoodie", "Midweight fleece hoodie.", 4500, [("Navy", "#000080")]),
            ("Canvas Tote", "Heavy canvas shopping bag.", 1250, [("Beige", "#F5F5DC")]),
        ]
        for title, description, cents, colors in demo_products:
            db.session.add(
                Product(
                    title=title,
                    description=description,
                    price_cents=cents,
                    variations=[
                        {
                            "name": name,
                            "hex": hex_value,
                            "images": [
                                f"https://placehold.co/600x600/{hex_value[1:]}/white?text={name}"
                            ],
                        }
                        for name, hex_value in colors
                    ],
                    status="PUBLISHED",
                )
            )
        db.session.commit()
        click.echo(f"Seeded {len(demo_products)} demo products.")

    @app.cli.command("hash-password")
    @click.password_option()
    def hash_password(password):
        """Print a hash to put in ADMIN_PASSWORD_HASH."""
        from werkzeug.security import generate_password_hash

        click.echo(generate_password_hash(password))

    @app.cli.command("purge-drafts")
    @click.option("--older-than", default=24, type=int, help="Age in hours")
    def purge_drafts(older_than):
        """Delete drafts left behind by failed product creations."""
        from storefront.blueprints.admin.auth import AdminContext
        from storefront.services.product_service import purge_stale_drafts

        admin = AdminContext(email=current_app.config["ADMIN_EMAIL"] or "cli")
        removed = purge_stale_drafts(older_than, admin)
        click.echo(f"Removed {removed} stale drafts.")

    @app.cli.command("stats")
    def stats():
        """Show product and order statistics."""
        from storefront.services.analytics_service import get_sales_analytics
        from storefront.services.product_service import get_stats

        s = get_stats()
        click.echo(f"Total products: {sum(s.values())}")
        for status, count in sorted(s.items()):
            click.echo(f"  {status}: {count}")

        sales = get_sales_analytics()
        click.echo(f"Total orders: {sales['total_orders']}")
        click.echo(f"Delivered: {sales['total_sold']}")
        click.echo(f"Revenue: {sales['total_revenue']}")
