import base64
import hashlib
import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development").lower()
IS_PRODUCTION = ENVIRONMENT == "production"
IS_DEVELOPMENT = ENVIRONMENT == "development"

DATABASE_URL = os.getenv("DATABASE_URL")
if not DATABASE_URL:
    warnings.warn(
        "DATABASE_URL not set! Falling back to a local SQLite file", RuntimeWarning, stacklevel=2
    )
    DATABASE_URL = "sqlite:///./homecare.db"

# Security - CRITICAL: No default secret key in production
SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn(
        "SECRET_KEY not set! Using insecure default - DO NOT USE IN PRODUCTION", RuntimeWarning, stacklevel=2
    )
    SECRET_KEY = "INSECURE-DEV-KEY-CHANGE-IN-PRODUCTION"  # noqa: S105 - Dev fallback only

# SSN Encryption Key (generate with: python -c "from cryptography.fernet import Fernet; print(Fernet.generate_key().decode())")
# Falls back to a key derived from SECRET_KEY so existing deployments keep decrypting
SSN_ENCRYPTION_KEY = os.getenv("SSN_ENCRYPTION_KEY") or base64.urlsafe_b64encode(
    hashlib.sha256(SECRET_KEY.encode()).digest()
).decode()

# bcrypt work factor for new password hashes
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

# Session tokens live 5 days unless overridden (milliseconds)
TOKEN_LIFETIME_MS = int(os.getenv("TOKEN_LIFETIME_MS", "432000000"))

# CORS - the mobile and web clients are served from many origins
ALLOWED_ORIGINS = [o.strip() for o in os.getenv("ALLOWED_ORIGINS", "*").split(",") if o.strip()]

SECURITY_HEADERS_ENABLED = os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() == "true"

# Fill missing address coordinates from the ZIP code centroid
ZIP_GEOCODE_ENABLED = os.getenv("ZIP_GEOCODE_ENABLED", "true").lower() == "true"

API_NAME = "Maxmila Homecare Rest API"
API_VERSION = "1.0.0"
API_COPYRIGHT = "Maxmila Homecare LLC & Trinketronix LLC ®️Copyright "
