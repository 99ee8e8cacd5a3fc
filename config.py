import os

BASE_DIR = os.path.abspath(os.path.dirname(__file__))


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


class Config:
    # Secrets
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-only-change-me")

    # SQLite database file stored next to the app as venuemap.db
    SQLALCHEMY_DATABASE_URI = os.getenv(
        "DATABASE_URL",
        "sqlite:///" + os.path.join(BASE_DIR, "venuemap.db")
    )
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session cookie name for our auth token
    AUTH_COOKIE_NAME = "venuemap_session"

    # 24 hours session lifetime
    SESSION_LIFETIME_SECONDS = 24 * 60 * 60

    # Idle timeout: 2 hours
    IDLE_TIMEOUT_SECONDS = 2 * 60 * 60

    # Session/cookie security defaults
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_SECURE = _env_bool("SESSION_COOKIE_SECURE", "false")

    # Registration policy
    USERNAME_MIN_LEN = 3
    PASSWORD_MIN_LEN = 6
    PASSWORD_MAX_LEN = 128
    DISPOSABLE_EMAIL_DOMAINS = [
        "10minutemail.com", "guerrillamail.com", "tempmail.org", "mailinator.com",
        "yopmail.com", "throwaway.email", "temp-mail.org", "fakeinbox.com",
        "sharklasers.com", "getairmail.com", "mailnesia.com", "maildrop.cc",
        "tempr.email", "tmpmail.org", "tmpeml.com", "tmpbox.net", "tmpmail.net",
        "tmpeml.net", "tmpbox.org", "tmpmail.com", "tmpeml.org", "tmpbox.com",
    ]

    # Venue images (local blob store)
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", os.path.join(BASE_DIR, "uploads", "venue-images"))
    UPLOAD_URL_PREFIX = "/uploads/venue-images"
    MAX_IMAGE_BYTES = 5 * 1024 * 1024
    # transport limit; the 5 MiB image limit is enforced per file
    MAX_CONTENT_LENGTH = 6 * 1024 * 1024

    # Reverse geocoding (Nominatim)
    GEOCODER_URL = os.getenv("GEOCODER_URL", "https://nominatim.openstreetmap.org/reverse")
    GEOCODER_USER_AGENT = os.getenv("GEOCODER_USER_AGENT", "VenueMap/1.0")
    GEOCODER_LANGUAGE = os.getenv("GEOCODER_LANGUAGE", "it")
    GEOCODER_TIMEOUT_SECONDS = float(os.getenv("GEOCODER_TIMEOUT_SECONDS", "5"))

    # Email (SMTP)
    SMTP_HOST = os.getenv("SMTP_HOST")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USERNAME = os.getenv("SMTP_USERNAME")
    SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
    SMTP_FROM_EMAIL = os.getenv("SMTP_FROM_EMAIL")
    SMTP_USE_TLS = _env_bool("SMTP_USE_TLS", "true")
    SMTP_TIMEOUT_SECONDS = int(os.getenv("SMTP_TIMEOUT_SECONDS", "10"))

    # Report notifications go to this mailbox; sent from a background thread
    REPORT_NOTIFY_EMAIL = os.getenv("REPORT_NOTIFY_EMAIL")
    NOTIFY_ASYNC = _env_bool("NOTIFY_ASYNC", "true")

    # Authorization switches (defaults keep the current behaviour)
    VENUE_EDIT_OWNER_ONLY = _env_bool("VENUE_EDIT_OWNER_ONLY", "false")
    IMAGE_DELETE_ADMIN_OVERRIDE = _env_bool("IMAGE_DELETE_ADMIN_OVERRIDE", "false")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # Basic app settings
    DEBUG = False
