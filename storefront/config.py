import os

BASE_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))


class Config:
    """Base configuration. All values from env vars."""

    SECRET_KEY = os.environ.get("SECRET_KEY", "dev-secret-change-me")
    SQLALCHEMY_DATABASE_URI = os.environ.get("DATABASE_URL", "")
    # Fix Heroku/Railway postgres:// → postgresql://
    if SQLALCHEMY_DATABASE_URI.startswith("postgres://"):
        SQLALCHEMY_DATABASE_URI = SQLALCHEMY_DATABASE_URI.replace(
            "postgres://", "postgresql://", 1
        )
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ENGINE_OPTIONS = {
        "pool_size": 5,
        "max_overflow": 10,
        "pool_pre_ping": True,
    }

    # Admin console (single merchant account)
    ADMIN_EMAIL = os.environ.get("ADMIN_EMAIL", "")
    ADMIN_PASSWORD_HASH = os.environ.get("ADMIN_PASSWORD_HASH", "")

    # Media store
    MEDIA_BACKEND = os.environ.get("MEDIA_BACKEND", "local")  # local | s3
    MEDIA_ROOT = os.environ.get(
        "MEDIA_ROOT", os.path.join(BASE_DIR, "public", "uploads")
    )
    MEDIA_URL_PREFIX = os.environ.get("MEDIA_URL_PREFIX", "/uploads")
    MAX_UPLOAD_BYTES = int(os.environ.get("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))
    MAX_CONTENT_LENGTH = int(
        os.environ.get("MAX_CONTENT_LENGTH", 64 * 1024 * 1024)
    )

    # S3
    S3_ENDPOINT_URL = os.environ.get("S3_ENDPOINT_URL", "")
    S3_ACCESS_KEY = os.environ.get("S3_ACCESS_KEY", "")
    S3_SECRET_KEY = os.environ.get("S3_SECRET_KEY", "")
    S3_BUCKET_NAME = os.environ.get("S3_BUCKET_NAME", "storefront-media")
    S3_REGION = os.environ.get("S3_REGION", "auto")
    S3_PUBLIC_URL = os.environ.get("S3_PUBLIC_URL", "")

    # Dashboard
    ANALYTICS_DATE_FORMAT = os.environ.get("ANALYTICS_DATE_FORMAT", "%m/%d/%Y")
    STORE_NAME = os.environ.get("STORE_NAME", "Storefront")


class DevelopmentConfig(Config):
    DEBUG = True
    SQLALCHEMY_ECHO = False
    SQLALCHEMY_DATABASE_URI = os.environ.get(
        "DATABASE_URL", "sqlite:///storefront_dev.db"
    )
    SQLALCHEMY_ENGINE_OPTIONS = {}  # SQLite doesn't support pool_size


class ProductionConfig(Config):
    DEBUG = False
    SQLALCHEMY_ECHO = False
    PREFERRED_URL_SCHEME = "https"
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True

    @classmethod
    def init_app(cls, app):
        import logging
        import sys

        assert app.config["SECRET_KEY"] != "dev-secret-change-me", (
            "SECRET_KEY must be set in production"
        )
        assert app.config["SQLALCHEMY_DATABASE_URI"], (
            "DATABASE_URL must be set"
        )
        assert app.config["ADMIN_EMAIL"] and app.config["ADMIN_PASSWORD_HASH"], (
            "ADMIN_EMAIL and ADMIN_PASSWORD_HASH must be set"
        )

        # Stream logs to stdout
        handler = logging.StreamHandler(sys.stdout)
        handler.setLevel(logging.INFO)
        formatter = logging.Formatter(
            "[%(asctime)s] %(levelname)s in %(module)s: %(message)s"
        )
        handler.setFormatter(formatter)
        app.logger.addHandler(handler)
        app.logger.setLevel(logging.INFO)
        logging.getLogger("storefront").addHandler(handler)
        logging.getLogger("storefront").setLevel(logging.INFO)
        app.logger.info("%s starting in production mode", app.config["STORE_NAME"])


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    SQLALCHEMY_ENGINE_OPTIONS = {}
    ADMIN_EMAIL = "admin@example.com"
    MEDIA_BACKEND = "local"
    MEDIA_URL_PREFIX = "/uploads"
    STORE_NAME = "Test Storefront"


config_map = {
    "development": DevelopmentConfig,
    "production": ProductionConfig,
    "testing": TestingConfig,
}
