"""Batch photo optimizer.

Renames a folder of restaurant photos to SEO filenames, converts them to
WebP with the general normalization profile and writes a CSV manifest of
what was produced. Descriptions come from an operator CSV or, when a
caption client is configured, from captioning assist.
"""
import base64
import csv
import io
import logging
import mimetypes
from datetime import date
from pathlib import Path
from typing import Optional

import pandas as pd
from PIL import Image

from onboarding.api.openai_caption_client import CaptionError, OpenAICaptionClient
from onboarding.models.caption import BatchPhotoItem, BatchPhotoResult
from onboarding.models.draft import UploadedFile
from onboarding.services.image_normalizer import ImageNormalizer
from onboarding.utils.filenames import build_seo_filename, replace_extension, sanitize

logger = logging.getLogger(__name__)

IMAGE_SUFFIXES = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".bmp", ".tif", ".tiff", ".heic"}
MANIFEST_HEADERS = ["Original Filename", "SEO Filename", "Category", "Dish Name", "Description"]
INPUT_CSV_COLUMNS = ("filename", "category", "dish_name", "description")


class PhotoBatchService:
    """Processes a batch of images into SEO-named WebP files."""

    def __init__(
        self,
        normalizer: ImageNormalizer,
        brand_token: str,
        caption_client: Optional[OpenAICaptionClient] = None,
        caption_language: str = "en",
    ):
        self.normalizer = normalizer
        self.brand_token = brand_token
        self.caption_client = caption_client
        self.caption_language = caption_language

    @staticmethod
    def discover_images(source_dir: Path) -> list[Path]:
        return sorted(p for p in source_dir.iterdir() if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES)

    @staticmethod
    def load_items(source_dir: Path, descriptions_csv: Optional[Path] = None) -> list[BatchPhotoItem]:
        """One item per image in source_dir, described by the optional CSV.

        The CSV has the columns filename, category, dish_name, description.
        Images without a CSV row get an empty description.
        """
        rows: dict[str, dict] = {}
        if descriptions_csv is not None:
            df = pd.read_csv(descriptions_csv, dtype=str, keep_default_na=False, encoding="utf-8-sig")
            missing_columns = set(INPUT_CSV_COLUMNS) - set(df.columns)
            if missing_columns:
                raise ValueError(f"{descriptions_csv} is missing column(s): {sorted(missing_columns)}")
            for row in df.to_dict(orient="records"):
                name = (row.get("filename") or "").strip()
                if name:
                    rows[name] = row

        items = []
        for path in PhotoBatchService.discover_images(source_dir):
            row = rows.get(path.name, {})
            items.append(
                BatchPhotoItem(
                    source_path=str(path),
                    category=(row.get("category") or "").strip(),
                    dish_name=(row.get("dish_name") or "").strip(),
                    description=(row.get("description") or "").strip(),
                )
            )
        missing = set(rows) - {Path(i.source_path).name for i in items}
        if missing:
            logger.warning(f"[PhotoBatch] CSV rows without a matching image: {sorted(missing)}")
        return items

    async def process(self, items: list[BatchPhotoItem], output_dir: Path) -> list[BatchPhotoResult]:
        """Normalize and rename every valid item into output_dir.

        Invalid items (missing category, usable name or description after captioning)
        are reported with a skipped_reason and not written.
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        used_names: set[str] = set()
        results = []

        for item in items:
            source = Path(item.source_path)
            data = source.read_bytes()
            content_type = mimetypes.guess_type(source.name)[0] or "application/octet-stream"

            if not item.is_valid() and self.caption_client is not None:
                item = await self._fill_from_caption(item, data, content_type)

            if not item.is_valid():
                logger.warning(f"[PhotoBatch] Skipping {source.name}: missing category, usable name or description")
                results.append(
                    BatchPhotoResult(
                        original_filename=source.name,
                        category=item.category,
                        dish_name=item.dish_name,
                        description=item.description,
                        skipped_reason="missing category, usable name or description",
                    )
                )
                continue

            normalized = await self.normalizer.normalize(
                UploadedFile(filename=source.name, content_type=content_type, data=data),
                "general",
            )
            seo_filename = build_seo_filename(item.dish_name, item.category, self.brand_token)
            if normalized.content_type != "image/webp":
                # Normalization fell back to the original bytes
                seo_filename = replace_extension(seo_filename, source.suffix.lstrip(".").lower())
            seo_filename = _dedupe(seo_filename, used_names)

            output_path = output_dir / seo_filename
            output_path.write_bytes(normalized.data)
            width, height = _dimensions(normalized.data)

            results.append(
                BatchPhotoResult(
                    original_filename=source.name,
                    seo_filename=seo_filename,
                    category=item.category,
                    dish_name=item.dish_name,
                    description=item.description,
                    output_path=str(output_path),
                    width=width,
                    height=height,
                )
            )
            logger.info(f"[PhotoBatch] {source.name} -> {seo_filename} ({len(data)} -> {len(normalized.data)} bytes)")

        return results

    def write_manifest(
        self,
        results: list[BatchPhotoResult],
        output_dir: Path,
        on_date: Optional[date] = None,
    ) -> Path:
        """Write {brand}-image-manifest-YYYY-MM-DD.csv for the processed items."""
        on_date = on_date or date.today()
        path = output_dir / f"{self.brand_token}-image-manifest-{on_date.isoformat()}.csv"
        path.write_text(render_manifest(results), encoding="utf-8")
        logger.info(f"[PhotoBatch] Wrote manifest {path}")
        return path

    async def _fill_from_caption(self, item: BatchPhotoItem, data: bytes, content_type: str) -> BatchPhotoItem:
        category = item.category or "popular-dishes"
        try:
            suggestion = await self.caption_client.caption(
                base64.b64encode(data).decode("ascii"),
                category,
                language=self.caption_language,
                content_type=content_type,
            )
        except CaptionError as e:
            logger.warning(f"[PhotoBatch] Captioning failed for {item.source_path}: {e}")
            return item

        return item.model_copy(
            update={
                "category": item.category or suggestion.suggested_category or category,
                "dish_name": item.dish_name if sanitize(item.dish_name) else suggestion.dish_name,
                "description": item.description or suggestion.description,
            }
        )


def render_manifest(results: list[BatchPhotoResult]) -> str:
    """CSV text with every field quoted, skipped items excluded."""
    df = pd.DataFrame(
        [
            [r.original_filename, r.seo_filename, r.category, r.dish_name, r.description]
            for r in results
            if r.skipped_reason is None
        ],
        columns=MANIFEST_HEADERS,
    )
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


def _dedupe(filename: str, used: set[str]) -> str:
    candidate = filename
    base, dot, ext = filename.rpartition(".")
    n = 2
    while candidate in used:
        candidate = f"{base}-{n}{dot}{ext}"
        n += 1
    used.add(candidate)
    return candidate


def _dimensions(data: bytes) -> tuple[Optional[int], Optional[int]]:
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.width, img.height
    except OSError:
        return None, None
