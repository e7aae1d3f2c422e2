from typing import Literal

from dotenv import load_dotenv
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

# Load .env file automatically
load_dotenv()


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # PayPal IPN verification
    PAYPAL_IPN_SANDBOX: bool = False
    PAYPAL_IPN_SSL: bool = False
    PAYPAL_IPN_STRICT: bool = False
    PAYPAL_IPN_TIMEOUT: float = 30.0
    PAYPAL_IPN_USER_AGENT: str = "paypal-ipn-verifier/1.0"

    # App settings
    APP_NAME: str = "PayPal IPN Verifier"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "test", "production"] = "development"

    # Metrics (Optional)
    METRICS_ENABLED: bool = True

    model_config = ConfigDict(env_file=".env", case_sensitive=True)
