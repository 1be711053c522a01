import io
from PIL import Image as PILImage, UnidentifiedImageError


ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/webp"}


def check_upload(image_bytes, content_type, max_size):
    """Decide whether an uploaded file may be stored.

    - Checks the declared media type against the allow-list
    - Checks file size
    - Verifies it's a real image via Pillow

    Returns:
        None when the file is acceptable, otherwise a short rejection reason.
    """
    if (content_type or "").lower() not in ALLOWED_CONTENT_TYPES:
        return f"Unsupported media type: {content_type or 'unknown'}"

    if len(image_bytes) > max_size:
        return f"Image too large: {len(image_bytes)} bytes (max {max_size})"

    try:
        img = PILImage.open(io.BytesIO(image_bytes))
        img.verify()
    except (
        UnidentifiedImageError,
        PILImage.DecompressionBombError,
        OSError,
        SyntaxError,
        ValueError,
    ):
        return "Invalid image file"

    return None
