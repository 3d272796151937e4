#!/usr/bin/env python3
"""
Batch photo optimizer.

Converts a folder of restaurant photos into SEO-named WebP files and writes
the image manifest CSV next to them.

Descriptions come from a CSV with the columns
    filename, category, dish_name, description
(category is one of popular-dishes, gallery, deals, menu). With --caption,
images missing a description are captioned with OpenAI vision instead;
this needs OPENAI_API_KEY (or openai_api_key in the JSON config).

Usage:
    python scripts/optimize_photos.py ./raw-photos ./optimized --descriptions photos.csv
    python scripts/optimize_photos.py ./raw-photos ./optimized --caption --language fr
"""
import argparse
import asyncio
import logging
import sys
from pathlib import Path

from onboarding.api.openai_caption_client import OpenAICaptionClient
from onboarding.config import Settings
from onboarding.services.image_normalizer import ImageNormalizer
from onboarding.services.photo_batch_service import PhotoBatchService

logger = logging.getLogger("optimize_photos")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Rename and convert restaurant photos for the website")
    parser.add_argument("source_dir", type=Path, help="Folder with the original images")
    parser.add_argument("output_dir", type=Path, help="Folder for the optimized images and manifest")
    parser.add_argument("--descriptions", type=Path, help="CSV describing each image")
    parser.add_argument("--caption", action="store_true", help="Caption undescribed images with OpenAI vision")
    parser.add_argument("--language", choices=["en", "fr"], default="en", help="Caption language")
    parser.add_argument("--brand", help="Brand token used in filenames (defaults to configured brand_token)")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, settings: Settings) -> int:
    caption_client = None
    if args.caption:
        if not settings.openai_api_key:
            logger.error("--caption needs an OpenAI API key")
            return 2
        caption_client = OpenAICaptionClient(
            api_key=settings.openai_api_key,
            brand_name=settings.brand_display_name,
            city=settings.brand_city,
            model=settings.openai_caption_model,
        )

    service = PhotoBatchService(
        normalizer=ImageNormalizer(),
        brand_token=args.brand or settings.brand_token,
        caption_client=caption_client,
        caption_language=args.language,
    )

    try:
        items = service.load_items(args.source_dir, args.descriptions)
        if not items:
            logger.warning(f"No images found in {args.source_dir}")
            return 1

        results = await service.process(items, args.output_dir)
        manifest = service.write_manifest(results, args.output_dir)
    finally:
        if caption_client is not None:
            await caption_client.close()

    skipped = [r for r in results if r.skipped_reason]
    logger.info(f"{len(results) - len(skipped)}/{len(results)} image(s) ready, manifest: {manifest}")
    for r in skipped:
        logger.warning(f"  skipped {r.original_filename}: {r.skipped_reason}")
    return 0 if not skipped else 1


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    args = parse_args(argv)
    if not args.source_dir.is_dir():
        logger.error(f"Not a directory: {args.source_dir}")
        return 2
    return asyncio.run(run(args, Settings()))


if __name__ == "__main__":
    sys.exit(main())
