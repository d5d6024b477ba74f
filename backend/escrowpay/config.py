"""
Escrow Payments Configuration Module

Loads environment variables for gateway credentials, webhook secret and storage.
"""
from pydantic_settings import BaseSettings
from typing import Literal


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Notes:
    - Razorpay key secret and webhook secret are environment-based, never returned to clients
    - razorpay_key_id is public and is handed to the checkout widget
    - Demo mode swaps the Razorpay HTTP client for the in-process fake gateway
    """

    # Razorpay Configuration
    razorpay_key_id: str = "rzp_test_demo_key"
    razorpay_key_secret: str = "razorpay_secret_demo_only_change_me"
    razorpay_webhook_secret: str = ""  # Empty means webhooks are rejected with 400
    razorpay_api_base_url: str = "https://api.razorpay.com/v1"
    gateway_timeout_seconds: float = 10.0

    # Payments
    default_currency: str = "INR"

    # Identity tokens issued by the auth layer (HMAC-SHA256)
    identity_token_secret: str = "identity_secret_key_demo_only_change_me"

    # Demo Configuration
    demo_mode: bool = True
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Database
    database_path: str = "./escrow.db"
    store_timeout_seconds: float = 30.0

    # Server
    host: str = "0.0.0.0"
    port: int = 8000

    class Config:
        env_file = ".env"
        case_sensitive = False


# Global settings instance
settings = Settings()
