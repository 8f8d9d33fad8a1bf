from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/storefront"
    log_level: str = "INFO"

    # Object storage
    storage_backend: str = "local"  # local | s3
    media_dir: str = "media"
    media_base_url: str = "/media"
    s3_bucket: str = ""
    s3_endpoint: str | None = None
    s3_region: str | None = None
    s3_access_key: str | None = None
    s3_secret_key: str | None = None
    s3_url_expiry: int = 3600

    # Storage layout
    menu_root: str = "Menu"
    media_root: str = "Media"
    news_document: str = "News/news.json"
    news_images_root: str = "News/newsImages"
    image_extensions: list[str] = [".jpg", ".jpeg", ".png", ".webp", ".gif"]

    # Skip failing categories instead of aborting the whole catalog
    catalog_partial: bool = False

    # Least recently used carts are dropped past this many sessions
    cart_max_sessions: int = 10_000

    # Observability
    service_name: str = "storefront"
    service_version: str = "1.0.0"
    environment: str = "development"
    tracing_enabled: bool = True
    tracing_sample_ratio: float = 1.0
    otlp_endpoint: str = "http://jaeger:4318/v1/traces"

    model_config = {"env_file": ".env"}


settings = Settings()
