import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./premier_realty.db")

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    import warnings

    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# Fernet key for OAuth tokens at rest (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")
# Falls back to a key derived from SECRET_KEY when unset
TOKEN_ENCRYPTION_KEY = os.getenv("TOKEN_ENCRYPTION_KEY")

# Public site
SITE_URL = os.getenv("SITE_URL", "http://localhost:3000")
BRAND_NAME = os.getenv("BRAND_NAME", "Premier Realty")

# Business rules - every booking is expressed in this timezone
BUSINESS_TIMEZONE = os.getenv("BUSINESS_TIMEZONE", "Europe/Istanbul")
MEETING_DURATION_MINUTES = int(os.getenv("MEETING_DURATION_MINUTES", "60"))

# Hosted platform (auth + object storage)
SUPABASE_URL = os.getenv("SUPABASE_URL")
SUPABASE_JWT_SECRET = os.getenv("SUPABASE_JWT_SECRET")
SUPABASE_JWT_AUDIENCE = os.getenv("SUPABASE_JWT_AUDIENCE", "authenticated")

# S3-compatible storage endpoint exposed by the platform
STORAGE_ENDPOINT_URL = os.getenv(
    "STORAGE_ENDPOINT_URL", f"{SUPABASE_URL}/storage/v1/s3" if SUPABASE_URL else None
)
STORAGE_ACCESS_KEY_ID = os.getenv("STORAGE_ACCESS_KEY_ID")
STORAGE_SECRET_ACCESS_KEY = os.getenv("STORAGE_SECRET_ACCESS_KEY")
STORAGE_REGION = os.getenv("STORAGE_REGION", "us-east-1")
STORAGE_BUCKET_NAME = os.getenv("STORAGE_BUCKET_NAME", "images")
STORAGE_PUBLIC_URL = os.getenv(
    "STORAGE_PUBLIC_URL",
    f"{SUPABASE_URL}/storage/v1/object/public/{STORAGE_BUCKET_NAME}" if SUPABASE_URL else "",
)

# Resend Email Configuration
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
EMAIL_FROM_ADDRESS = os.getenv("EMAIL_FROM_ADDRESS", "Premier Realty <onboarding@resend.dev>")
# Operator inbox for booking notifications, contact messages and the daily digest
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")

# Bearer secret expected by the cron-triggered daily reminder endpoint
CRON_SECRET = os.getenv("CRON_SECRET")

# Google Calendar OAuth Configuration
# GOOGLE_REDIRECT_URI points at this API's /google-calendar/callback
GOOGLE_CLIENT_ID = os.getenv("GOOGLE_CLIENT_ID")
GOOGLE_CLIENT_SECRET = os.getenv("GOOGLE_CLIENT_SECRET")
GOOGLE_REDIRECT_URI = os.getenv("GOOGLE_REDIRECT_URI")
# Optional bootstrap refresh token, adopted into the database on first use
GOOGLE_REFRESH_TOKEN = os.getenv("GOOGLE_REFRESH_TOKEN")
GOOGLE_CALENDAR_ID = os.getenv("GOOGLE_CALENDAR_ID", "primary")
