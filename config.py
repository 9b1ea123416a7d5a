import os
from dotenv import load_dotenv

load_dotenv()

PORT = int(os.environ.get("PORT", 5001))
DEBUG = os.environ.get("RENDER") is None  # debug only when running locally
SECRET_KEY = os.environ.get("SECRET_KEY", "dev-re-screening-key")

GEMINI_MODEL = os.environ.get("GEMINI_MODEL", "gemini-2.0-flash")
GEMINI_TIMEOUT = int(os.environ.get("GEMINI_TIMEOUT", 30))

MAX_UPLOAD_MB = 10

# Variable names used by earlier deployments, most specific first
API_KEY_VARS = ("GEMINI_API_KEY", "GOOGLE_API_KEY", "VITE_GEMINI_API_KEY")


def resolve_api_key() -> str | None:
    """Return the configured generative-language API key, or None."""
    for name in API_KEY_VARS:
        value = os.environ.get(name, "").strip()
        if not value:
            continue
        if value.startswith("your_") and value.endswith("_here"):
            continue
        return value
    return None
