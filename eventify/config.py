# eventify.config
from pathlib import Path
import os
from dotenv import load_dotenv

# Resolve the project root, then load .env explicitly from there
BASE_DIR = Path(__file__).resolve().parent.parent
ENV_PATH = BASE_DIR / ".env"
load_dotenv(dotenv_path=ENV_PATH, override=True)

"""
Central configuration.

- Loads the .env file at the project root (BASE_DIR/.env)
- Normalises and exposes URLs/keys (Go backend, media proxy, Paystack, Vercel Blob)
- Exposes upload limits, verification polling policy and orphan queue location
"""

def _clean_env(v: str) -> str:
    """
    Cleans an environment value:
    - strips spaces, single/double quotes and backticks
    - always returns a string (never None)
    """
    return (v or "").strip().strip("'").strip('"').strip("`")

def _normalize_url(url: str, default: str) -> str:
    url = _clean_env(url) or default
    if not url.startswith("http"):
        url = "http://" + url
    return url.rstrip("/")

def _csv(v: str) -> list:
    return [x.strip() for x in (v or "").split(",") if x.strip()]

# Go backend (orders, payments verification, vendors, events, feedback)
BACKEND_API_URL = _normalize_url(
    os.getenv("BACKEND_API_URL") or os.getenv("NEXT_PUBLIC_API_URL") or "",
    "http://localhost:8081",
)
BACKEND_TIMEOUT_SECONDS = float(os.getenv("BACKEND_TIMEOUT_SECONDS", "10"))

# Base URL of this service (media proxy routes /api/*-image)
FRONTEND_BASE_URL = _normalize_url(os.getenv("FRONTEND_BASE_URL") or "", "http://localhost:8000")
UPLOAD_TIMEOUT_SECONDS = float(os.getenv("UPLOAD_TIMEOUT_SECONDS", "60"))

# Paystack: only the public key is ever held client-side
PAYSTACK_PUBLIC_KEY = _clean_env(os.getenv("PAYSTACK_PUBLIC_KEY") or os.getenv("NEXT_PUBLIC_PAYSTACK_PUBLIC_KEY") or "")
PAYMENT_CURRENCY = _clean_env(os.getenv("PAYMENT_CURRENCY") or "NGN")

# Vercel Blob
BLOB_READ_WRITE_TOKEN = _clean_env(os.getenv("BLOB_READ_WRITE_TOKEN") or "")
BLOB_API_URL = _normalize_url(os.getenv("BLOB_API_URL") or "", "https://blob.vercel-storage.com")
BLOB_HOST_SUFFIX = _clean_env(os.getenv("BLOB_HOST_SUFFIX") or "blob.vercel-storage.com")

# Uploads: 5MB and the image allow-list
MAX_UPLOAD_SIZE = int(os.getenv("MAX_UPLOAD_SIZE", str(5 * 1024 * 1024)))
ALLOWED_IMAGE_TYPES = _csv(os.getenv("ALLOWED_IMAGE_TYPES") or "image/jpeg,image/png,image/webp,image/gif")

# Payment verification polling: bounded attempts, fixed delay
VERIFY_MAX_ATTEMPTS = int(os.getenv("VERIFY_MAX_ATTEMPTS", "3"))
VERIFY_RETRY_DELAY_SECONDS = float(os.getenv("VERIFY_RETRY_DELAY_SECONDS", "3.0"))
SUCCESS_REDIRECT_DELAY_SECONDS = float(os.getenv("SUCCESS_REDIRECT_DELAY_SECONDS", "1.5"))
TICKETS_PATH = os.getenv("TICKETS_PATH", "/tickets")

# Orphaned assets queue (durable, local) and sweep pacing
ORPHAN_QUEUE_PATH = Path(os.getenv("ORPHAN_QUEUE_PATH") or BASE_DIR / ".eventify" / "orphaned_images.json")
ORPHAN_SWEEP_DELAY_SECONDS = float(os.getenv("ORPHAN_SWEEP_DELAY_SECONDS", "0.1"))

# CORS / hosts
CORS_ORIGINS = _csv(os.getenv("CORS_ORIGINS", "*"))
ALLOWED_HOSTS = _csv(os.getenv("ALLOWED_HOSTS", "localhost,127.0.0.1,testserver"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "info")
