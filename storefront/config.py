import os
import secrets

from dotenv import load_dotenv

from storefront.providers.razorpay import DEFAULT_BASE_URL

load_dotenv()

DEFAULT_CORS_ORIGINS = "https://dazzlevastra.com,http://localhost:3000"
DEFAULT_IMAGE_EXTENSIONS = "png,jpg,jpeg,gif,webp"


def _csv(value):
    return [v.strip() for v in value.split(",") if v.strip()]


DERIVED_FROM_DATA_DIR = {
    "PRODUCTS_FILE": "products.json",
    "ORDERS_FILE": "orders.json",
    "LOG_DIR": "logs",
}


def load(overrides=None):
    """Environment settings with ``overrides`` applied.

    Paths under ``DATA_DIR`` are filled in last, so overriding ``DATA_DIR``
    alone moves the data files and logs with it.
    """
    settings = from_env()
    settings.update(overrides or {})
    for key, name in DERIVED_FROM_DATA_DIR.items():
        if not settings.get(key):
            settings[key] = os.path.join(settings["DATA_DIR"], name)
    return settings


def from_env():
    return {
        "PORT": int(os.getenv("PORT", "3000")),
        "DATA_DIR": os.getenv("DATA_DIR", "data"),
        "PRODUCTS_FILE": os.getenv("PRODUCTS_FILE", ""),
        "ORDERS_FILE": os.getenv("ORDERS_FILE", ""),
        "UPLOAD_DIR": os.getenv("UPLOAD_DIR", "uploads"),
        "LOG_DIR": os.getenv("LOG_DIR", ""),
        "MAX_CONTENT_LENGTH": int(os.getenv("MAX_CONTENT_LENGTH", str(10 * 1024 * 1024))),
        "ALLOWED_IMAGE_EXTENSIONS": set(_csv(os.getenv("ALLOWED_IMAGE_EXTENSIONS", DEFAULT_IMAGE_EXTENSIONS))),
        "CORS_ORIGINS": _csv(os.getenv("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)),
        "RAZORPAY_KEY_ID": os.getenv("RAZORPAY_KEY_ID", ""),
        "RAZORPAY_KEY_SECRET": os.getenv("RAZORPAY_KEY_SECRET", ""),
        "RAZORPAY_BASE_URL": os.getenv("RAZORPAY_BASE_URL", DEFAULT_BASE_URL),
        "PAYMENT_CURRENCY": os.getenv("PAYMENT_CURRENCY", "INR"),
        "GATEWAY_TIMEOUT": float(os.getenv("GATEWAY_TIMEOUT", "10")),
        # tokens do not survive a restart unless SECRET_KEY is set
        "SECRET_KEY": os.getenv("SECRET_KEY") or secrets.token_hex(32),
        "ADMIN_USERNAME": os.getenv("ADMIN_USERNAME", "admin"),
        "ADMIN_PASSWORD": os.getenv("ADMIN_PASSWORD", ""),
        "ADMIN_PASSWORD_HASH": os.getenv("ADMIN_PASSWORD_HASH", ""),
        "ADMIN_TOKEN_TTL_HOURS": float(os.getenv("ADMIN_TOKEN_TTL_HOURS", "24")),
    }
