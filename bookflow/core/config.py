from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    BOOKING_API_BASE_URL: str | None = None
    HTTP_TIMEOUT_SECONDS: float = 10.0

    ADMIN_ACCESS_HEADER: str = "x-admin-access"
    ADMIN_ACCESS_TOKEN: str | None = None

    # Where the hosted checkout page sends clients back to
    PUBLIC_BASE_URL: str = "http://localhost:8000"
    ADMIN_RETURN_BASE_URL: str | None = None
    CHECKOUT_REDIRECT_BASE_URL: str = "https://checkout.stripe.com/c/pay"

    BUSINESS_TIMEZONE: str = "America/Chicago"
    BOOKING_WINDOW_DAYS: int = 90
    DEFAULT_PRACTITIONER_NAME: str = "Your Practitioner"

    # Idle activations are dropped from the wizard store after this long
    WIZARD_TTL_SECONDS: float = 86400.0


settings = Settings()
