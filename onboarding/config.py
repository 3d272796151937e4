"""Configuration management using Pydantic BaseSettings with JSON file support."""
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


def flatten_json_config(config: dict[str, Any]) -> dict[str, Any]:
    """Flatten nested JSON config into flat key-value pairs.

    Supports nested structures like:
    {
        "redis": {"redis_host": "localhost", "redis_port": 6379},
        "s3": {"s3_images_bucket": "restaurant-images"}
    }

    Becomes:
    {"redis_host": "localhost", "redis_port": 6379, "s3_images_bucket": "restaurant-images"}

    Keys starting with "_" (like "_comment") are skipped.
    """
    result = {}

    for key, value in config.items():
        # Skip comment keys
        if key.startswith("_"):
            continue

        if isinstance(value, dict):
            result.update(flatten_json_config(value))
        else:
            result[key] = value

    return result


def load_json_config(config_file: Optional[str] = None) -> dict[str, Any]:
    """Load configuration from a JSON file.

    Supports both flat and nested JSON structures. Nested structures are
    automatically flattened. Keys starting with "_" are treated as comments
    and ignored.

    Args:
        config_file: Path to JSON config file. If None, checks CONFIG_FILE env var.

    Returns:
        Dictionary of configuration values (flattened), or empty dict if no file found.
    """
    file_path = config_file or os.getenv("CONFIG_FILE")

    if not file_path:
        return {}

    path = Path(file_path)
    if not path.exists():
        logger.warning(f"Config file not found: {file_path}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            config = json.load(f)
            logger.info(f"Loaded configuration from: {file_path}")
            return flatten_json_config(config)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in config file {file_path}: {e}")
        return {}
    except OSError as e:
        logger.error(f"Error reading config file {file_path}: {e}")
        return {}


class Settings(BaseSettings):
    """Application configuration with JSON file and environment variable support.

    Configuration priority (highest to lowest):
    1. Environment variables
    2. JSON config file (specified via CONFIG_FILE env var)
    3. Default values
    """

    # Redis Configuration (relational store for submissions)
    redis_host: str = "redis"
    redis_port: int = 6379
    redis_password: str = ""
    redis_db: int = 0

    # Object storage (S3). Two logical buckets: images and documents (PDF menus)
    s3_region: str = "us-east-1"
    s3_access_key_id: str = ""
    s3_secret_access_key: str = ""
    s3_images_bucket: str = "restaurant-images"
    s3_documents_bucket: str = "restaurant-pdfs"
    # Optional CDN/public base; when empty the virtual-hosted S3 URL is used
    s3_public_base_url: str = ""

    # Captioning assist (OpenAI vision)
    openai_api_key: str = ""
    openai_caption_model: str = "gpt-4o"
    caption_enabled: bool = False

    # Notification e-mail (Resend)
    resend_api_key: str = ""
    resend_api_base: str = "https://api.resend.com"
    notification_enabled: bool = False
    notification_from: str = "Restaurant Submissions <onboarding@resend.dev>"
    notification_to: str = "operator@example.com"
    admin_base_url: str = "http://localhost:8080/admin"

    # Branding used in SEO filenames and caption prompts
    brand_token: str = "milano"
    brand_display_name: str = "Milano Pizza Gatineau"
    brand_city: str = "Gatineau"
    business_timezone: str = "America/Toronto"

    # Submission behaviour
    # If True, FAQs are also appended to the comments field as JSON text
    # (the format read by consumers of export version 1.0)
    faq_legacy_comments_append: bool = False

    # Background jobs
    upload_cleanup_minutes: int = 15
    upload_cleanup_batch_size: int = 50
    wizard_session_ttl_minutes: int = 240

    # Server Configuration
    server_port: int = 8080
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def __init__(self, **kwargs):
        """Initialize settings from JSON file and environment variables.

        Priority: env vars > JSON config > defaults
        """
        json_config = load_json_config()

        # Merge: kwargs override JSON config
        merged_kwargs = {**json_config, **kwargs}

        super().__init__(**merged_kwargs)

    @property
    def redis_address(self) -> str:
        """Get Redis connection address in host:port format."""
        return f"{self.redis_host}:{self.redis_port}"


# Global settings instance
settings = Settings()
