import io
import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from fitting_room.exceptions import DecodeError, EncodeError, InvalidInput
from fitting_room.models import ImageAsset

logger = logging.getLogger(__name__)

CANONICAL_FORMAT = "PNG"
CANONICAL_MIME_TYPE = "image/png"

# Modes PNG stores natively; anything else is flattened first
_PNG_MODES = {"1", "L", "LA", "RGB", "RGBA"}


class ImageNormalizer:
    """
    Re-encodes uploaded images to a single canonical format (PNG).

    Whatever the user uploads (JPEG, WebP, palette GIF ...),
    only PNG is ever sent to the image model. Normalizing an already
    normalized image returns the same asset.
    """

    def _decode(self, image_bytes: bytes) -> Image.Image:
        """Decode bytes into a Pillow image, honouring EXIF orientation."""
        try:
            img = Image.open(io.BytesIO(image_bytes))
            img.load()
            # Only the first frame of animated formats is kept
            img = ImageOps.exif_transpose(img)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeError("The uploaded file could not be read as an image.") from e

        if img.mode not in _PNG_MODES:
            has_alpha = "A" in img.getbands() or "transparency" in img.info
            img = img.convert("RGBA" if has_alpha else "RGB")

        return img

    def _encode(self, img: Image.Image) -> bytes:
        buffer = io.BytesIO()
        try:
            img.save(buffer, format=CANONICAL_FORMAT)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeError("The image could not be converted to PNG.") from e
        return buffer.getvalue()

    def normalize(self, image_bytes: bytes, content_type: str | None) -> ImageAsset:
        """
        Convert an uploaded file into a canonical PNG ImageAsset.

        Args:
            image_bytes: Raw uploaded bytes (left untouched)
            content_type: MIME type declared by the client

        Raises:
            InvalidInput: declared type is not an image type
            DecodeError: bytes are not a decodable image
            EncodeError: PNG re-encoding failed
        """
        if not content_type or not content_type.startswith("image/"):
            raise InvalidInput("Uploaded file must be an image (JPEG, PNG, etc.)")

        img = self._decode(image_bytes)
        png_bytes = self._encode(img)

        logger.debug(
            f"[Normalizer] {content_type} {img.size[0]}x{img.size[1]} -> "
            f"{CANONICAL_MIME_TYPE} ({len(png_bytes)} bytes)"
        )
        return ImageAsset.from_bytes(png_bytes, CANONICAL_MIME_TYPE)


# Singleton instance
image_normalizer = ImageNormalizer()


def normalize_image(image_bytes: bytes, content_type: str | None) -> ImageAsset:
    return image_normalizer.normalize(image_bytes, content_type)
