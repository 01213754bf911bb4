import secrets

from tubely.model import AspectRatio

# 32 random bytes, unpadded URL-safe base64
KEY_ENTROPY_BYTES = 32


def derive_object_key(aspect_ratio: AspectRatio, extension: str = "mp4") -> str:
    """``<aspect ratio>/<random>.<extension>``; file contents play no part."""
    return f"{aspect_ratio.value}/{secrets.token_urlsafe(KEY_ENTROPY_BYTES)}.{extension}"


def derive_thumbnail_key(extension: str) -> str:
    return f"thumbnails/{secrets.token_urlsafe(KEY_ENTROPY_BYTES)}.{extension}"
