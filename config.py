"""
Runtime settings for the Portfolio API.

Everything is read from the environment (optionally via a .env file).
"""

import os

from dotenv import load_dotenv

load_dotenv()

# Database
DATABASE_URL = os.getenv("DATABASE_URL")
DATABASE_NAME = os.getenv("DATABASE_NAME", "portfolio")

# Auth
SECRET_KEY = os.getenv("JWT_SECRET", "super-secret-key-change")
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("JWT_EXPIRE_MINUTES", 60 * 24 * 7))

# Seed admin credentials via env (used only while the users collection is empty)
ADMIN_EMAIL = os.getenv("ADMIN_EMAIL")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD")
ADMIN_NAME = os.getenv("ADMIN_NAME", "Admin")

# HTTP
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
PUBLIC_BASE_URL = (os.getenv("PUBLIC_BASE_URL") or "").rstrip("/")

# Uploads
MAX_UPLOAD_BYTES = int(os.getenv("MAX_UPLOAD_BYTES", 10 * 1024 * 1024))
UPLOAD_BUCKET = "uploads"
ALLOWED_IMAGE_EXTENSIONS = {"jpeg", "jpg", "png", "gif", "webp", "svg"}
ALLOWED_DOC_EXTENSIONS = {"pdf", "doc", "docx"}

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
