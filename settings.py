# settings.py
from pathlib import Path

from database.envLoader import build_environment

# Read the project .env once at import; the process environment wins
ENV_FILE = Path(__file__).resolve().parent / ".env"
_ENV = build_environment(ENV_FILE)


def _env_int(name: str, default: int) -> int:
    raw = _ENV.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer number of bytes, got {raw!r}") from exc


# Site
BASE_URL = _ENV.get("BASE_URL", "http://localhost/ecommerce-mvc/")

# Uploads
UPLOAD_PATH = _ENV.get("UPLOAD_PATH", "assets/uploads/")
MAX_FILE_SIZE = _env_int("MAX_FILE_SIZE", 5 * 1024 * 1024)  # 5MB

# Contact channels shown on the storefront
WHATSAPP_NUMBER = _ENV.get("WHATSAPP_NUMBER", "+33123456789")
FACEBOOK_PAGE = _ENV.get("FACEBOOK_PAGE", "votre-page-facebook")
