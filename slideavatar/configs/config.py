"""
Configuration module for SlideAvatar (configs).
"""

import os
from functools import lru_cache
from pathlib import Path

from dotenv import load_dotenv

from slideavatar.storage import StorageConfig, StorageProvider, create_storage_provider

load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    def __init__(self) -> None:
        # Logging / runtime
        self.log_level = os.getenv("LOG_LEVEL", "INFO").upper()
        self.log_file = os.getenv("LOG_FILE")
        self.log_dir = os.getenv("LOG_DIR", "logs")
        self.server_host = os.getenv("SERVER_HOST", "0.0.0.0")
        self.server_port = int(os.getenv("SERVER_PORT", "8000"))

        # OpenAI
        self.openai_api_key = os.getenv("OPENAI_API_KEY")
        self.openai_base_url = os.getenv("OPENAI_BASE_URL") or None
        self.openai_timeout = float(os.getenv("OPENAI_TIMEOUT", "60"))
        self.openai_retries = int(os.getenv("OPENAI_RETRIES", "3"))
        self.openai_backoff = float(os.getenv("OPENAI_BACKOFF", "0.5"))

        # Narration
        self.narration_model = os.getenv("NARRATION_MODEL", "gpt-4o")
        self.narration_temperature = float(os.getenv("NARRATION_TEMPERATURE", "0.7"))
        self.narration_max_tokens = int(os.getenv("NARRATION_MAX_TOKENS", "80"))
        # 1 keeps per-slide generation sequential
        self.narration_concurrency = int(os.getenv("NARRATION_CONCURRENCY", "1"))

        # Gamma document generation
        self.gamma_api_key = os.getenv("GAMMA_API_KEY")
        self.gamma_base_url = os.getenv(
            "GAMMA_BASE_URL", "https://public-api.gamma.app"
        )
        self.gamma_theme_id = os.getenv("GAMMA_THEME_ID") or None
        self.gamma_tone = os.getenv("GAMMA_TONE") or None
        self.gamma_poll_interval = float(os.getenv("GAMMA_POLL_INTERVAL", "5"))
        self.gamma_timeout = float(os.getenv("GAMMA_TIMEOUT", "600"))
        self.gamma_request_timeout = float(os.getenv("GAMMA_REQUEST_TIMEOUT", "30"))
        self.document_exact_slides = _env_flag("DOCUMENT_EXACT_SLIDES", "true")

        # HeyGen templated video generation
        self.heygen_api_key = os.getenv("HEYGEN_API_KEY")
        self.heygen_base_url = os.getenv("HEYGEN_BASE_URL", "https://api.heygen.com")
        self.heygen_template_id = os.getenv(
            "HEYGEN_TEMPLATE_ID", "2c01158bec1149c49d35effb4bd79791"
        )
        self.heygen_template_layout = os.getenv("HEYGEN_TEMPLATE_LAYOUT", "generic")
        self.heygen_template_slide_count = int(
            os.getenv("HEYGEN_TEMPLATE_SLIDE_COUNT", "5")
        )
        self.heygen_avatar_id = os.getenv("HEYGEN_AVATAR_ID") or None
        self.heygen_default_voice_id = os.getenv(
            "HEYGEN_DEFAULT_VOICE_ID", "77a8b81df32f482f851684c5e2ebb0d2"
        )
        self.heygen_voices_path = os.getenv("HEYGEN_VOICES_PATH") or None
        self.heygen_request_timeout = float(os.getenv("HEYGEN_REQUEST_TIMEOUT", "60"))
        self.heygen_captions = _env_flag("HEYGEN_CAPTIONS", "true")
        self.video_title = os.getenv("VIDEO_TITLE", "Slide Presentation")

        # Slide rendering
        self.soffice_binary = os.getenv("SOFFICE_BINARY") or None
        self.pdftoppm_binary = os.getenv("PDFTOPPM_BINARY") or None
        self.slide_image_width = int(os.getenv("SLIDE_IMAGE_WIDTH", "1920"))
        self.slide_image_height = int(os.getenv("SLIDE_IMAGE_HEIGHT", "1080"))
        self.render_timeout = float(os.getenv("RENDER_TIMEOUT", "180"))
        self.require_full_rendering = _env_flag("REQUIRE_FULL_RENDERING", "true")

        # Pipeline limits
        self.max_slides = int(os.getenv("MAX_SLIDES", "9"))
        self.narration_word_limit = int(os.getenv("NARRATION_WORD_LIMIT", "40"))
        self.scene_seconds = float(os.getenv("SCENE_SECONDS", "30"))
        self.words_per_minute = float(os.getenv("WORDS_PER_MINUTE", "150"))
        self.max_total_seconds = float(os.getenv("MAX_TOTAL_SECONDS", "160"))
        self.step_timeout = float(os.getenv("STEP_TIMEOUT", "900"))
        self.download_timeout = float(os.getenv("DOWNLOAD_TIMEOUT", "120"))

        # Storage
        self.storage_provider = os.getenv("STORAGE_PROVIDER", "local")
        self.storage_namespace = os.getenv("STORAGE_NAMESPACE", "heygen")
        self.local_storage_base_url = os.getenv(
            "LOCAL_STORAGE_BASE_URL", "http://localhost:8000/files"
        )

        self.output_dir = Path(
            os.getenv("OUTPUT_DIR") or Path(__file__).resolve().parents[2] / "output"
        ).resolve()
        self.cors_origins = _split_csv(os.getenv("CORS_ORIGINS", "")) or [
            "http://localhost:3000"
        ]

    def ensure_directories_exist(self) -> None:
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def storage_settings(self) -> StorageConfig:
        """Constructor arguments for the active storage backend."""
        if self.storage_provider == "local":
            return StorageConfig(
                "local",
                base_path=str(self.output_dir),
                base_url=self.local_storage_base_url,
            )
        if self.storage_provider == "s3":
            return StorageConfig(
                "s3",
                bucket_name=os.getenv("AWS_S3_BUCKET_NAME", ""),
                region_name=os.getenv("AWS_REGION", "us-east-1"),
                aws_access_key_id=os.getenv("AWS_ACCESS_KEY_ID") or None,
                aws_secret_access_key=os.getenv("AWS_SECRET_ACCESS_KEY") or None,
                endpoint_url=os.getenv("AWS_S3_ENDPOINT_URL") or None,
                public_base_url=os.getenv("AWS_S3_PUBLIC_BASE_URL") or None,
                url_expires_in=int(os.getenv("AWS_S3_URL_EXPIRES", "86400")),
            )
        raise ValueError(f"Unsupported storage provider: {self.storage_provider}")


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


config = Config()


@lru_cache(maxsize=1)
def get_storage_provider() -> StorageProvider:
    """Storage backend shared by every job in this process."""
    return create_storage_provider(config.storage_settings())
