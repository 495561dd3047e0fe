"""Image derivation pipeline.

Every mini owns two image files at a path derived from its id:

    {IMAGE_ROOT}/originals/{x}/{y}/{id}.webp   full quality, original size
    {IMAGE_ROOT}/{x}/{y}/{id}.webp             50x50 thumbnail on white

where ``x``/``y`` come from ``core.shard.shard_path``. Storing again for the
same id overwrites both files.
"""

import base64
import binascii
import io
import os
from pathlib import Path

from PIL import Image, ImageOps, UnidentifiedImageError

from minicatalog.config import Settings
from minicatalog.core.errors import ImageProcessingError
from minicatalog.core.logging import get_logger
from minicatalog.core.models import ImagePaths
from minicatalog.core.shard import SHARD_DIGITS, image_filename, shard_path

logger = get_logger(__name__)

THUMBNAIL_BACKGROUND = (255, 255, 255)

# Pillow format names by file extension
_PIL_FORMATS = {"webp": "WEBP", "jpg": "JPEG", "jpeg": "JPEG", "png": "PNG"}


class ImageService:
    def __init__(self, settings: Settings):
        self._root = Path(settings.IMAGE_ROOT)
        self._extension = settings.IMAGE_FORMAT.lower()
        self._pil_format = _PIL_FORMATS.get(self._extension, self._extension.upper())
        self._original_quality = settings.ORIGINAL_QUALITY
        self._thumbnail_size = (settings.THUMBNAIL_SIZE, settings.THUMBNAIL_SIZE)
        self._thumbnail_quality = settings.THUMBNAIL_QUALITY

    @property
    def originals_root(self) -> Path:
        return self._root / "originals"

    @property
    def thumbnails_root(self) -> Path:
        return self._root

    # === Layout ===

    def ensure_directories(self) -> None:
        """Create the 10x10 shard skeleton under both roots."""
        for root in (self.thumbnails_root, self.originals_root):
            for x in SHARD_DIGITS:
                for y in SHARD_DIGITS:
                    (root / x / y).mkdir(parents=True, exist_ok=True)
        logger.info("Image directories ready under %s", self._root)

    def paths_for(self, mini_id: int) -> ImagePaths:
        x, y = shard_path(mini_id)
        filename = image_filename(mini_id, self._extension)
        return ImagePaths(
            original_path=self.originals_root / x / y / filename,
            thumbnail_path=self.thumbnails_root / x / y / filename,
        )

    # === Payloads ===

    @staticmethod
    def decode_payload(payload: str) -> bytes:
        """Decode a base64 string or a ``data:image/...;base64,`` URL."""
        if not isinstance(payload, str) or not payload.strip():
            raise ImageProcessingError("Image payload is empty")
        data = payload.strip()
        if data.startswith("data:"):
            _, _, data = data.partition(",")
        try:
            return base64.b64decode(data, validate=True)
        except (binascii.Error, ValueError) as e:
            raise ImageProcessingError(f"Image payload is not valid base64: {e}") from e

    # === Derivation ===

    def store(self, mini_id: int, raw: bytes) -> ImagePaths:
        """Write the original and the thumbnail for ``mini_id``.

        Raises ImageProcessingError on any decode, encode or write failure.
        """
        paths = self.paths_for(mini_id)
        image = self._open(raw)

        try:
            original = self._encode(image, self._original_quality)
            thumbnail = self._encode(self._make_thumbnail(image), self._thumbnail_quality)
        except (OSError, ValueError) as e:
            raise ImageProcessingError(f"Failed to encode image: {e}") from e

        self._write(paths.original_path, original)
        self._write(paths.thumbnail_path, thumbnail)

        logger.debug(
            "Stored image for mini %d (%dx%d)", mini_id, image.width, image.height
        )
        return paths

    def remove(self, mini_id: int) -> None:
        """Delete both artifacts for ``mini_id`` if present."""
        paths = self.paths_for(mini_id)
        for path in (paths.original_path, paths.thumbnail_path):
            path.unlink(missing_ok=True)

    def _open(self, raw: bytes) -> Image.Image:
        if not raw:
            raise ImageProcessingError("Image payload is empty")
        try:
            image = Image.open(io.BytesIO(raw))
            if getattr(image, "n_frames", 1) > 1:
                raise ImageProcessingError("Animated images are not supported")
            image.load()
        except (
            UnidentifiedImageError,
            Image.DecompressionBombError,
            OSError,
            ValueError,
        ) as e:
            raise ImageProcessingError(f"Invalid image data: {e}") from e

        if image.mode not in ("RGB", "RGBA"):
            has_alpha = image.mode in ("LA", "PA") or "transparency" in image.info
            image = image.convert("RGBA" if has_alpha else "RGB")
        return image

    def _make_thumbnail(self, image: Image.Image) -> Image.Image:
        """Contain-fit into the thumbnail box, padded with opaque white."""
        fitted = ImageOps.contain(image, self._thumbnail_size, Image.Resampling.LANCZOS)
        canvas = Image.new("RGB", self._thumbnail_size, THUMBNAIL_BACKGROUND)
        offset = (
            (self._thumbnail_size[0] - fitted.width) // 2,
            (self._thumbnail_size[1] - fitted.height) // 2,
        )
        mask = fitted.getchannel("A") if fitted.mode == "RGBA" else None
        canvas.paste(fitted.convert("RGB"), offset, mask)
        return canvas

    def _encode(self, image: Image.Image, quality: int) -> bytes:
        buffer = io.BytesIO()
        image.save(buffer, format=self._pil_format, quality=quality)
        return buffer.getvalue()

    @staticmethod
    def _write(path: Path, content: bytes) -> None:
        tmp = path.with_name(path.name + ".tmp")
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            tmp.write_bytes(content)
            os.replace(tmp, path)
        except OSError as e:
            tmp.unlink(missing_ok=True)
            raise ImageProcessingError(f"Failed to write {path}: {e}") from e
