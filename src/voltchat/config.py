"""Configuration loaded from environment variables."""

from __future__ import annotations

import os

from dotenv import load_dotenv

load_dotenv()


# API keys
GEMINI_API_KEY: str = os.getenv("GEMINI_API_KEY", "")

# Models
GEMINI_MODEL: str = os.getenv("GEMINI_MODEL", "gemini-2.5-flash")
IMAGE_MODEL: str = os.getenv("IMAGE_MODEL", "imagen-3.0-generate-002")

# Language used for conversational replies (diagram/image JSON is language-neutral)
RESPONSE_LANGUAGE: str = os.getenv("RESPONSE_LANGUAGE", "Arabic")

# Server
HOST: str = os.getenv("HOST", "0.0.0.0")
PORT: int = int(os.getenv("PORT", "8000"))
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()


def require_api_key() -> str:
    """Return the Gemini API key, raising if it is not configured."""
    if not GEMINI_API_KEY:
        raise RuntimeError("Required environment variable GEMINI_API_KEY is not set")
    return GEMINI_API_KEY
