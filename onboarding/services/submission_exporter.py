"""Versioned JSON export of a persisted submission."""
import json
import logging
from datetime import datetime
from typing import Callable

from onboarding.dao.redis_submission_dao import RedisSubmissionDAO
from onboarding.models.export import (
    EXPORT_VERSION,
    ExportAboutSection,
    ExportDeal,
    ExportDish,
    ExportDocument,
    ExportFaq,
    ExportMenu,
    ExportMetadata,
    ExportOperations,
    ExportPhoto,
    ExportRestaurant,
    ExportSocialMedia,
)
from onboarding.models.submission import SubmissionBundle, utcnow
from onboarding.utils.filenames import export_filename

logger = logging.getLogger(__name__)


class SubmissionExporter:
    """Builds export documents from fresh store reads, never from an edit buffer."""

    def __init__(self, submission_dao: RedisSubmissionDAO, clock: Callable[[], datetime] = utcnow):
        self.submission_dao = submission_dao
        self._clock = clock

    def export(self, submission_id: str) -> dict:
        """Export a submission as a JSON-safe dict.

        Two exports of an unchanged submission differ only in
        export_metadata.exported_at.

        Raises:
            SubmissionNotFoundError: If the id does not exist
        """
        bundle = self.submission_dao.get_bundle(submission_id)
        document = self.build_document(bundle)
        logger.info(
            f"[SubmissionExporter] Exported {submission_id} "
            f"({len(document.popular_dishes)} dishes, {len(document.deals)} deals, {len(document.photos)} photos)"
        )
        return document.model_dump(mode="json")

    def export_json(self, submission_id: str) -> tuple[str, bytes]:
        """Export as a downloadable file.

        Returns:
            (filename, pretty-printed UTF-8 JSON)
        """
        return self.to_json_file(self.export(submission_id))

    @staticmethod
    def to_json_file(document: dict) -> tuple[str, bytes]:
        """Serialize an already exported document for download or attachment."""
        filename = export_filename(document["restaurant"]["name"])
        return filename, json.dumps(document, indent=2, ensure_ascii=False).encode("utf-8")

    def build_document(self, bundle: SubmissionBundle) -> ExportDocument:
        s = bundle.submission
        return ExportDocument(
            restaurant=ExportRestaurant(
                id=s.id,
                name=s.restaurant_name,
                address=s.address,
                email=s.email,
                phone=s.phone,
                website=s.website,
                online_ordering_url=s.online_ordering_url,
                logo_url=s.logo_url,
                hero_image_url=s.hero_image_url,
                founded_year=s.founded_year,
                story=s.story,
                owner_quote=s.owner_quote,
                about_image_url=s.about_image_url,
                menu_pdf_url=s.menu_pdf_url,
                title_font=s.title_font,
                paragraph_font=s.paragraph_font,
                status=s.status.value,
                created_at=s.created_at,
                updated_at=s.updated_at,
            ),
            operations=ExportOperations(
                hours=s.hours,
                delivery_areas=s.delivery_areas,
                delivery_instructions=s.delivery_instructions,
            ),
            social_media=ExportSocialMedia(instagram=s.instagram, facebook=s.facebook, twitter=s.twitter),
            popular_dishes=[
                ExportDish(
                    id=d.id,
                    name=d.name,
                    description=d.description,
                    image_url=d.image_url,
                    display_order=d.display_order,
                )
                for d in bundle.dishes
            ],
            deals=[
                ExportDeal(
                    id=d.id,
                    title=d.title,
                    description=d.description,
                    image_url=d.image_url,
                    display_order=d.display_order,
                )
                for d in bundle.deals
            ],
            photos=[ExportPhoto(id=p.id, image_url=p.image_url, display_order=p.display_order) for p in bundle.photos],
            menus=[
                ExportMenu(
                    id=m.id,
                    category=m.category,
                    custom_category_name=m.custom_category_name,
                    name=m.name,
                    file_url=m.file_url,
                    display_order=m.display_order,
                )
                for m in bundle.menus
            ],
            faqs=[ExportFaq(question=f.question, answer=f.answer, display_order=f.display_order) for f in bundle.faqs],
            about_sections=[
                ExportAboutSection(
                    title=a.title,
                    description=a.description,
                    image_url=a.image_url,
                    position=a.position,
                )
                for a in sorted(s.about_sections, key=lambda a: a.position)
            ],
            additional_comments=s.comments,
            export_metadata=ExportMetadata(exported_at=self._clock(), export_version=EXPORT_VERSION),
        )
