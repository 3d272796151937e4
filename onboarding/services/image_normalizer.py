"""Image normalization before upload.

Images are re-encoded to a profile's format, capped on their longest edge
and squeezed under a size budget. Anything that is not an image passes
through untouched, and a codec failure hands back the original file so the
submission carries on as if normalization were a no-op.
"""
import asyncio
import io
import logging
from dataclasses import dataclass

from PIL import Image, ImageOps

from onboarding.metrics import IMAGE_NORMALIZATION_RESULTS
from onboarding.models.draft import UploadedFile
from onboarding.utils.filenames import replace_extension

logger = logging.getLogger(__name__)

MIN_QUALITY = 0.4
QUALITY_STEP = 0.1
SHRINK_FACTOR = 0.85
MIN_EDGE = 256


@dataclass(frozen=True)
class NormalizationProfile:
    name: str
    max_bytes: int
    max_edge: int
    format: str         # Pillow format name
    extension: str
    content_type: str
    quality: float      # 0..1, mapped to the encoder's scale


LOGO_PROFILE = NormalizationProfile(
    name="logo",
    max_bytes=2 * 1024 * 1024,
    max_edge=1024,
    format="PNG",
    extension="png",
    content_type="image/png",
    quality=0.9,
)

GENERAL_PROFILE = NormalizationProfile(
    name="general",
    max_bytes=1 * 1024 * 1024,
    max_edge=2560,
    format="WEBP",
    extension="webp",
    content_type="image/webp",
    quality=0.82,
)

PROFILES = {p.name: p for p in (LOGO_PROFILE, GENERAL_PROFILE)}


def get_profile(name: str) -> NormalizationProfile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(f"unknown normalization profile: {name}") from None


class ImageNormalizer:
    """Resizes and recompresses images according to a named profile."""

    async def normalize(self, file: UploadedFile, profile: str = "general") -> UploadedFile:
        """Normalize an uploaded file for storage.

        Args:
            file: In-memory upload
            profile: "logo" or "general"

        Returns:
            The normalized file, or the original one when it is not an image
            or cannot be decoded/encoded.
        """
        spec = get_profile(profile)

        if not file.is_image:
            IMAGE_NORMALIZATION_RESULTS.labels(profile=spec.name, result="passthrough").inc()
            return file

        try:
            data = await asyncio.to_thread(self._encode, file.data, spec)
        except Exception as e:
            # Pillow raises a wide range of errors on corrupt input
            IMAGE_NORMALIZATION_RESULTS.labels(profile=spec.name, result="fallback").inc()
            logger.warning(
                f"[ImageNormalizer] Could not normalize {file.filename} ({spec.name}), "
                f"using original: {e}"
            )
            return file

        IMAGE_NORMALIZATION_RESULTS.labels(profile=spec.name, result="normalized").inc()
        logger.debug(
            f"[ImageNormalizer] {file.filename}: {file.size} -> {len(data)} bytes ({spec.format})"
        )
        return UploadedFile(
            filename=replace_extension(file.filename, spec.extension),
            content_type=spec.content_type,
            data=data,
        )

    def _encode(self, data: bytes, spec: NormalizationProfile) -> bytes:
        with Image.open(io.BytesIO(data)) as img:
            img = ImageOps.exif_transpose(img)
            img = _convert_mode(img)
            img.thumbnail((spec.max_edge, spec.max_edge), Image.Resampling.LANCZOS)

            quality = spec.quality
            output = _save(img, spec, quality)

            # First trade quality, then dimensions, until the budget is met
            while len(output) > spec.max_bytes and spec.format != "PNG" and quality - QUALITY_STEP >= MIN_QUALITY:
                quality = round(quality - QUALITY_STEP, 2)
                output = _save(img, spec, quality)

            while len(output) > spec.max_bytes and max(img.size) > MIN_EDGE:
                new_size = (
                    max(1, int(img.width * SHRINK_FACTOR)),
                    max(1, int(img.height * SHRINK_FACTOR)),
                )
                img = img.resize(new_size, Image.Resampling.LANCZOS)
                output = _save(img, spec, quality)

            return output


def _convert_mode(img: Image.Image) -> Image.Image:
    if img.mode in ("RGB", "RGBA"):
        return img
    has_alpha = img.mode in ("LA", "PA") or (img.mode == "P" and "transparency" in img.info)
    return img.convert("RGBA" if has_alpha else "RGB")


def _save(img: Image.Image, spec: NormalizationProfile, quality: float) -> bytes:
    buffer = io.BytesIO()
    if spec.format == "PNG":
        img.save(buffer, format="PNG", optimize=True)
    else:
        img.save(buffer, format=spec.format, quality=int(quality * 100), method=4)
    return buffer.getvalue()
