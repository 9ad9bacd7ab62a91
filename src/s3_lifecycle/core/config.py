"""Configuration management for s3-lifecycle."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support."""

    log_level: str = "INFO"
    log_format: str = "json"
    otel_enabled: bool = False
    otel_service_name: str = "s3-lifecycle"
    otel_exporter_endpoint: str = "http://localhost:4317"

    region_name: str = "us-west-2"
    max_attempts: int = 4
    backoff_base_delay: float = 0.1
    backoff_max_delay: float = 20.0
    listing_page_size: int = 1000
    properties_file: str = "S3Client.properties"

    model_config = {
        "env_prefix": "S3_LIFECYCLE_",
        "case_sensitive": False,
    }


settings = Settings()
