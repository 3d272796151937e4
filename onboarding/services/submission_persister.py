"""Turns a completed wizard draft into a persisted submission.

Two phases:
1. Every attached file is normalized and uploaded, one at a time, and the
   resulting URLs are staged locally.
2. The parent row and all child rows are written in a single transaction.

If either phase fails, the objects uploaded so far are queued for deletion
(the orphan cleanup job removes them) and one SubmissionPersistError is
raised. Nothing is written to the store unless every upload succeeded.
"""
import json
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Optional

import redis
from botocore.exceptions import BotoCoreError, ClientError

from onboarding.api.s3_client import S3Client
from onboarding.dao.redis_submission_dao import RedisSubmissionDAO
from onboarding.metrics import (
    NOTIFICATION_EMAILS_TOTAL,
    ORPHAN_UPLOADS_ENQUEUED,
    SUBMISSION_FILES_UPLOADED,
    SUBMISSION_PERSIST_DURATION_SECONDS,
    SUBMISSIONS_TOTAL,
)
from onboarding.models.draft import Draft, UploadedFile
from onboarding.models.submission import (
    DISPLAY_ORDER_START,
    AboutSectionRecord,
    DealRow,
    DishRow,
    FaqRow,
    MenuRow,
    PhotoRow,
    Submission,
    SubmissionBundle,
    new_id,
)
from onboarding.services.image_normalizer import ImageNormalizer

logger = logging.getLogger(__name__)

USER_FAILURE_MESSAGE = "Submission failed. Please try again or contact support."

_EXTENSIONS = {
    "image/png": "png",
    "image/webp": "webp",
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "application/pdf": "pdf",
}


class SubmissionPersistError(Exception):
    """Raised when a draft could not be persisted. Safe to retry."""

    def __init__(self, stage: str, detail: str):
        super().__init__(f"{stage} failed: {detail}")
        self.stage = stage
        self.user_message = USER_FAILURE_MESSAGE


@dataclass
class StagedUrls:
    """URLs of files uploaded in phase 1, keyed by their draft position."""
    logo: Optional[str] = None
    hero: Optional[str] = None
    about: Optional[str] = None
    sections: dict[int, str] = field(default_factory=dict)
    menus: dict[int, str] = field(default_factory=dict)
    photos: list[str] = field(default_factory=list)
    dishes: dict[int, str] = field(default_factory=dict)
    deals: dict[int, str] = field(default_factory=dict)


class SubmissionPersister:
    """Uploads draft files and writes the submission record."""

    def __init__(
        self,
        s3_client: S3Client,
        submission_dao: RedisSubmissionDAO,
        normalizer: ImageNormalizer,
        notification_service=None,
        faq_legacy_comments_append: bool = False,
        clock: Callable[[], float] = time.time,
    ):
        self.s3_client = s3_client
        self.submission_dao = submission_dao
        self.normalizer = normalizer
        self.notification_service = notification_service
        self.faq_legacy_comments_append = faq_legacy_comments_append
        self._clock = clock

    async def persist(self, draft: Draft) -> str:
        """Persist a completed draft.

        Args:
            draft: The wizard draft; file fields hold in-memory uploads

        Returns:
            The new submission id

        Raises:
            SubmissionPersistError: If any upload or the store write fails
        """
        start_time = time.perf_counter()
        uploaded: list[tuple[str, str]] = []

        # Phase 1: stage uploads
        try:
            urls = await self._upload_files(draft, uploaded)
        except (ClientError, BotoCoreError) as e:
            logger.error(f"[SubmissionPersister] Upload failed after {len(uploaded)} file(s): {e}")
            self._abandon(uploaded)
            SUBMISSIONS_TOTAL.labels(result="upload_error").inc()
            raise SubmissionPersistError("upload", str(e)) from e

        # Phase 2: one transactional write
        bundle = self.build_bundle(draft, urls)
        try:
            self.submission_dao.create_submission(bundle)
        except redis.RedisError as e:
            logger.error(f"[SubmissionPersister] Store write failed for {bundle.submission.id}: {e}")
            self._abandon(uploaded)
            SUBMISSIONS_TOTAL.labels(result="write_error").inc()
            raise SubmissionPersistError("write", str(e)) from e

        duration = time.perf_counter() - start_time
        SUBMISSION_PERSIST_DURATION_SECONDS.observe(duration)
        SUBMISSIONS_TOTAL.labels(result="success").inc()
        logger.info(
            f"[SubmissionPersister] Persisted submission {bundle.submission.id} "
            f"'{bundle.submission.restaurant_name}' with {len(uploaded)} file(s) in {duration:.1f}s"
        )

        if self.notification_service is not None:
            # Already committed: a failed notification never fails the submit
            try:
                await self.notification_service.notify_submission(bundle.submission.id)
            except Exception as e:
                NOTIFICATION_EMAILS_TOTAL.labels(result="error").inc()
                logger.error(f"[SubmissionPersister] Notification for {bundle.submission.id} failed: {e}")

        return bundle.submission.id

    # -------------------------------------------------------------------------
    # Phase 1
    # -------------------------------------------------------------------------

    async def _upload_files(self, draft: Draft, uploaded: list[tuple[str, str]]) -> StagedUrls:
        urls = StagedUrls()
        business = draft.business_info
        about = draft.about

        if business.logo is not None:
            urls.logo = await self._upload(business.logo, "logos", "logo", uploaded, profile="logo")
        if business.hero_image is not None:
            urls.hero = await self._upload(business.hero_image, "hero", "hero", uploaded)
        if about.about_image is not None:
            urls.about = await self._upload(about.about_image, "about", "about", uploaded)

        for i, section in enumerate(about.custom_sections):
            if section.image is not None:
                urls.sections[i] = await self._upload(section.image, "about", f"section-{i}", uploaded)

        for i, menu in enumerate(draft.menus):
            if menu.file is not None:
                bucket = None if menu.file.is_image else self.s3_client.documents_bucket
                urls.menus[i] = await self._upload(menu.file, "menus", f"menu-{i}", uploaded, bucket=bucket)

        for i, photo in enumerate(draft.photos):
            urls.photos.append(await self._upload(photo, "photos", f"photo-{i}", uploaded))

        for i, dish in enumerate(draft.dishes):
            if dish.image is not None:
                urls.dishes[i] = await self._upload(dish.image, "dishes", f"dish-{i}", uploaded)

        for i, deal in enumerate(draft.deals):
            if deal.image is not None:
                urls.deals[i] = await self._upload(deal.image, "deals", f"deal-{i}", uploaded)

        return urls

    async def _upload(
        self,
        file: UploadedFile,
        category: str,
        label: str,
        uploaded: list[tuple[str, str]],
        profile: str = "general",
        bucket: Optional[str] = None,
    ) -> str:
        normalized = await self.normalizer.normalize(file, profile)
        bucket = bucket or self.s3_client.images_bucket
        key = f"{category}/{int(self._clock() * 1000)}-{label}.{_extension(normalized)}"

        url = await self.s3_client.upload_bytes(bucket, key, normalized.data, normalized.content_type)
        uploaded.append((bucket, key))
        SUBMISSION_FILES_UPLOADED.labels(category=category).inc()
        return url

    def _abandon(self, uploaded: list[tuple[str, str]]) -> None:
        if not uploaded:
            return
        try:
            self.submission_dao.enqueue_orphans(uploaded)
            ORPHAN_UPLOADS_ENQUEUED.inc(len(uploaded))
        except redis.RedisError as e:
            logger.error(
                f"[SubmissionPersister] Could not queue {len(uploaded)} orphan upload(s) "
                f"for deletion: {e}. Keys: {uploaded}"
            )

    # -------------------------------------------------------------------------
    # Phase 2
    # -------------------------------------------------------------------------

    def build_bundle(self, draft: Draft, urls: StagedUrls) -> SubmissionBundle:
        """Map draft + staged URLs onto parent and child rows."""
        business = draft.business_info
        about = draft.about
        submission_id = new_id()

        first_menu_url = next((urls.menus[i] for i in sorted(urls.menus)), None)

        submission = Submission(
            id=submission_id,
            restaurant_name=business.name,
            address=business.address,
            email=business.email,
            phone=business.phone,
            website=business.website,
            online_ordering_url=business.online_ordering_url,
            logo_url=urls.logo,
            hero_image_url=urls.hero,
            founded_year=about.founded_year,
            story=about.story,
            owner_quote=about.owner_quote,
            about_image_url=urls.about,
            about_sections=[
                AboutSectionRecord(
                    title=section.title,
                    description=section.description,
                    image_url=urls.sections.get(i),
                    position=section.position,
                )
                for i, section in enumerate(about.custom_sections)
            ],
            menu_pdf_url=first_menu_url,
            hours=draft.delivery_hours.hours,
            delivery_areas=draft.delivery_hours.delivery_areas,
            delivery_instructions=draft.delivery_hours.instructions,
            instagram=draft.social.instagram,
            facebook=draft.social.facebook,
            twitter=draft.social.twitter,
            comments=self._comments(draft),
            title_font=draft.fonts.title_font,
            paragraph_font=draft.fonts.paragraph_font,
        )

        return SubmissionBundle(
            submission=submission,
            dishes=[
                DishRow(
                    submission_id=submission_id,
                    name=dish.name,
                    description=dish.description,
                    image_url=urls.dishes.get(i),
                    display_order=DISPLAY_ORDER_START + i,
                )
                for i, dish in enumerate(draft.dishes)
            ],
            deals=[
                DealRow(
                    submission_id=submission_id,
                    title=deal.title,
                    description=deal.description,
                    image_url=urls.deals.get(i),
                    display_order=DISPLAY_ORDER_START + i,
                )
                for i, deal in enumerate(draft.deals)
            ],
            photos=[
                PhotoRow(submission_id=submission_id, image_url=url, display_order=DISPLAY_ORDER_START + i)
                for i, url in enumerate(urls.photos)
            ],
            menus=[
                MenuRow(
                    submission_id=submission_id,
                    category=menu.category,
                    custom_category_name=menu.custom_category_name,
                    name=menu.name,
                    file_url=urls.menus.get(i),
                    content_type=menu.file.content_type if menu.file else "",
                    display_order=DISPLAY_ORDER_START + i,
                )
                for i, menu in enumerate(draft.menus)
            ],
            faqs=[
                FaqRow(
                    submission_id=submission_id,
                    question=faq.question,
                    answer=faq.answer,
                    display_order=DISPLAY_ORDER_START + i,
                )
                for i, faq in enumerate(draft.faqs)
            ],
        )

    def _comments(self, draft: Draft) -> str:
        comments = draft.social.comments
        if not (self.faq_legacy_comments_append and draft.faqs):
            return comments
        faqs_json = json.dumps([faq.model_dump() for faq in draft.faqs], separators=(",", ":"))
        return comments + ("\n\nFAQs:\n" if comments else "FAQs:\n") + faqs_json


def _extension(file: UploadedFile) -> str:
    _, dot, ext = file.filename.rpartition(".")
    if dot and ext:
        return ext.lower()
    return _EXTENSIONS.get(file.content_type, "bin")
