import io
from pathlib import Path

from PIL import Image, UnidentifiedImageError


ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png"}
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/jpg", "image/png"}
ALLOWED_FORMATS = {"JPEG", "PNG"}


class InvalidImageError(ValueError):
    pass


def is_allowed_upload(filename: str | None, content_type: str | None) -> bool:
    if not filename or not content_type:
        return False
    return Path(filename).suffix.lower() in ALLOWED_EXTENSIONS and content_type.lower() in ALLOWED_CONTENT_TYPES


def profile_image_path(upload_dir: str | Path, user_id: int) -> Path:
    return Path(upload_dir) / f"{user_id}.webp"


def save_as_webp(data: bytes, destination: Path, quality: int, max_pixels: int) -> Path:
    """Decode an uploaded JPEG/PNG and write it to ``destination`` as WebP.

    Only the header is read before the format and dimensions are checked, so
    an oversized image is refused without allocating its pixel buffer.
    """
    try:
        image = Image.open(io.BytesIO(data))
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise InvalidImageError("Uploaded file is not a valid image") from exc

    if image.format not in ALLOWED_FORMATS:
        raise InvalidImageError("Only JPEG and PNG images are allowed")

    width, height = image.size
    if width * height > max_pixels:
        raise InvalidImageError("Image dimensions are too large")

    try:
        image.load()
    except (Image.DecompressionBombError, OSError) as exc:
        raise InvalidImageError("Uploaded file is not a valid image") from exc

    if image.mode not in ("RGB", "RGBA"):
        has_alpha = "A" in image.getbands() or "transparency" in image.info
        image = image.convert("RGBA" if has_alpha else "RGB")

    destination.parent.mkdir(parents=True, exist_ok=True)
    image.save(destination, format="WEBP", quality=quality)
    return destination
