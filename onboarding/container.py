"""Dependency injection container for application components."""
import logging

from onboarding.config import Settings
from onboarding.db import RedisStore
from onboarding.dao import RedisSubmissionDAO
from onboarding.api import S3Client, OpenAICaptionClient, ResendClient
from onboarding.services import (
    ImageNormalizer,
    NotificationService,
    OrphanCleanupService,
    SubmissionEditor,
    SubmissionExporter,
    SubmissionPersister,
    WizardSessionRegistry,
)
from onboarding.handlers import WizardHandler, SubmissionHandler, ToolsHandler

logger = logging.getLogger(__name__)


class Container:
    """Dependency injection container.

    Initializes and wires up all application dependencies. Captioning and
    notification e-mail are optional and only built when enabled and keyed.
    """

    def __init__(self, settings: Settings):
        """Initialize container with all dependencies.

        Args:
            settings: Application settings
        """
        logger.info("[Container] Initializing container")
        self.settings = settings

        # Submission store
        logger.info(f"[Container] Connecting to Redis at {settings.redis_address}")
        self.redis_store = RedisStore.from_settings(
            host=settings.redis_host,
            port=settings.redis_port,
            password=settings.redis_password,
            db=settings.redis_db,
        )
        self.submission_dao = RedisSubmissionDAO(self.redis_store)

        # Object storage
        self.s3_client = S3Client(
            images_bucket=settings.s3_images_bucket,
            documents_bucket=settings.s3_documents_bucket,
            region=settings.s3_region,
            access_key_id=settings.s3_access_key_id,
            secret_access_key=settings.s3_secret_access_key,
            public_base_url=settings.s3_public_base_url,
        )
        logger.info(
            f"[Container] S3 client initialized (images={settings.s3_images_bucket}, "
            f"documents={settings.s3_documents_bucket})"
        )

        self.image_normalizer = ImageNormalizer()
        self.submission_exporter = SubmissionExporter(self.submission_dao)
        self.submission_editor = SubmissionEditor(self.submission_dao)
        self.orphan_cleanup_service = OrphanCleanupService(
            self.submission_dao,
            self.s3_client,
            batch_size=settings.upload_cleanup_batch_size,
        )

        # Captioning assist (optional)
        self.caption_client = None
        if settings.caption_enabled and settings.openai_api_key:
            self.caption_client = OpenAICaptionClient(
                api_key=settings.openai_api_key,
                brand_name=settings.brand_display_name,
                city=settings.brand_city,
                model=settings.openai_caption_model,
            )
            logger.info(f"[Container] Caption client initialized (model={settings.openai_caption_model})")
        else:
            logger.info("[Container] Captioning assist disabled (caption_enabled=false or missing OpenAI API key)")

        # Notification e-mail (optional)
        self.resend_client = None
        self.notification_service = None
        if settings.notification_enabled and settings.resend_api_key:
            self.resend_client = ResendClient(
                api_key=settings.resend_api_key,
                base_url=settings.resend_api_base,
            )
            self.notification_service = NotificationService(
                resend_client=self.resend_client,
                exporter=self.submission_exporter,
                sender=settings.notification_from,
                recipients=[a.strip() for a in settings.notification_to.split(",") if a.strip()],
                admin_base_url=settings.admin_base_url,
                timezone=settings.business_timezone,
            )
            logger.info(f"[Container] Notification e-mail enabled (to={settings.notification_to})")
        else:
            logger.warning(
                "[Container] Notification e-mail disabled "
                "(notification_enabled=false or missing Resend API key)"
            )

        self.submission_persister = SubmissionPersister(
            s3_client=self.s3_client,
            submission_dao=self.submission_dao,
            normalizer=self.image_normalizer,
            notification_service=self.notification_service,
            faq_legacy_comments_append=settings.faq_legacy_comments_append,
        )

        self.wizard_registry = WizardSessionRegistry(
            submit=self.submission_persister.persist,
            ttl_seconds=settings.wizard_session_ttl_minutes * 60,
        )

        # Handlers
        self.wizard_handler = WizardHandler(self.wizard_registry)
        self.submission_handler = SubmissionHandler(self.submission_editor, self.submission_exporter)
        self.tools_handler = ToolsHandler(settings.brand_token, self.caption_client)

        logger.info("[Container] Container initialized successfully")

    async def shutdown(self):
        """Clean up resources on shutdown."""
        logger.info("[Container] Shutting down container")

        if self.caption_client:
            try:
                await self.caption_client.close()
                logger.info("[Container] Caption client closed")
            except Exception as e:
                logger.error(f"[Container] Error closing caption client: {e}")

        if self.resend_client:
            try:
                await self.resend_client.close()
                logger.info("[Container] Resend client closed")
            except Exception as e:
                logger.error(f"[Container] Error closing Resend client: {e}")

        try:
            await self.s3_client.close()
            self.redis_store.close()
            logger.info("[Container] Storage clients closed")
        except Exception as e:
            logger.error(f"[Container] Error closing storage clients: {e}")

        logger.info("[Container] Container shut down")
