from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    env: str = "local"
    log_level: str = "INFO"
    log_format: str = "plain"

    database_url: str = "sqlite:///./storefront.db"
    database_echo: bool = False

    # HTTP Basic for /admin
    admin_username: str = "admin"
    hashed_admin_password: str = ""

    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_webhook_secret: str = ""
    currency: str = "USD"

    brevo_api_key: str = ""
    mail_from: str = "support@example.com"
    store_name: str = "Storefront"

    base_url: str = "http://localhost:8000"

    products_dir: str = "products"
    public_dir: str = "public"

    download_link_ttl_hours: int = 24
    cache_ttl_seconds: int = 60 * 60 * 24

    cors_origins: List[str] = [
        "http://localhost:5173",
        "http://localhost:3000",
    ]

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "allow"


settings = Settings()
