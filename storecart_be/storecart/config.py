import os
from functools import lru_cache

# Prefer loading environment variables from a .env file if python-dotenv is available
try:
    from dotenv import load_dotenv, find_dotenv
    _env_path = find_dotenv(usecwd=True)
    if _env_path:
        load_dotenv(_env_path, override=False)
except ImportError:
    pass


class Settings:
    DATABASE_URL: str = os.getenv("DATABASE_URL")
    SECRET_KEY: str = os.getenv("SECRET_KEY", "change_me_secret")
    ALGORITHM: str = os.getenv("ALGORITHM", "HS256")
    # Default to 7 days so users stay logged in for a week
    ACCESS_TOKEN_EXPIRE_MINUTES: int = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
    # Primary admin email; ADMIN_EMAILS is an optional comma separated list of extra admins
    ADMIN_EMAIL: str = os.getenv("ADMIN_EMAIL", "admin@example.com")
    ADMIN_EMAILS: str = os.getenv("ADMIN_EMAILS", "")
    CORS_ORIGINS: str = os.getenv("CORS_ORIGINS", "*")
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()
    # Shown for cart lines whose product has no image at all
    PLACEHOLDER_IMAGE_URL: str = os.getenv(
        "PLACEHOLDER_IMAGE_URL", "https://placehold.co/100x100?text=No+Image"
    )

    @property
    def admin_emails(self) -> set:
        emails = {e.strip().lower() for e in (self.ADMIN_EMAILS or "").split(",") if e.strip()}
        if self.ADMIN_EMAIL:
            emails.add(self.ADMIN_EMAIL.strip().lower())
        return emails

    @property
    def cors_origins(self) -> list:
        return [o.strip() for o in (self.CORS_ORIGINS or "*").split(",") if o.strip()]


@lru_cache
def get_settings():
    return Settings()
