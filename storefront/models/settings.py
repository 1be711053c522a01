import logging
from datetime import datetime, timezone
from urllib.parse import urlsplit
from sqlalchemy.exc import SQLAlchemyError
from storefront.extensions import db
from storefront.errors import UpstreamFailure, ValidationError

logger = logging.getLogger(__name__)

COVER_PHOTO_KEY = "cover_photo_url"
DEFAULT_COVER = "default"


class Settings(db.Model):
    __tablename__ = "settings"

    key = db.Column(db.String(100), primary_key=True)
    value = db.Column(db.Text, nullable=False)
    updated_at = db.Column(
        db.DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    @staticmethod
    def get(key, default=None):
        row = db.session.get(Settings, key)
        return row.value if row else default

    @staticmethod
    def set(key, value):
        row = db.session.get(Settings, key)
        if row:
            row.value = str(value)
        else:
            row = Settings(key=key, value=str(value))
            db.session.add(row)
        db.session.commit()
        return row

    @staticmethod
    def get_cover_photo_url():
        """Homepage cover image, or the "default" sentinel.

        Lookup failures fall back to the sentinel; the cover is cosmetic.
        """
        try:
            return Settings.get(COVER_PHOTO_KEY) or DEFAULT_COVER
        except SQLAlchemyError:
            db.session.rollback()
            logger.warning("Cover photo lookup failed, using default", exc_info=True)
            return DEFAULT_COVER

    @staticmethod
    def _normalize_cover_photo_url(url):
        """Accept the sentinel, an http(s) URL or a site-relative path."""
        if not url or not isinstance(url, str) or not url.strip():
            raise ValidationError("Please enter a valid image URL")

        candidate = url.strip()
        if candidate == DEFAULT_COVER:
            return candidate
        if candidate.startswith("/") and not candidate.startswith("//"):
            return candidate

        parts = urlsplit(candidate)
        if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
            raise ValidationError("Cover photo must be an http(s) URL or a site path.")
        if parts.username or parts.password:
            raise ValidationError("Cover photo URL must not include credentials.")
        return candidate

    @staticmethod
    def set_cover_photo_url(url):
        url = Settings._normalize_cover_photo_url(url)
        try:
            Settings.set(COVER_PHOTO_KEY, url)
        except SQLAlchemyError:
            db.session.rollback()
            logger.exception("Failed to update cover photo")
            raise UpstreamFailure("Failed to update cover photo")
        return url

    def __repr__(self):
        return f"<Settings {self.key}={self.value}>"
