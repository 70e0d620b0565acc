"""
Pain Safety Service - Configuration
===================================
Centralised settings for logging, CORS, report output and the live-preview
client. Loads overrides from the project-level .env file.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# ── Paths ───────────────────────────────────────────────────────────────
PROJECT_ROOT = Path(__file__).resolve().parent.parent          # repo root
PACKAGE_DIR = Path(__file__).resolve().parent                  # pain_safety/

# ── Load .env ───────────────────────────────────────────────────────────
load_dotenv(PROJECT_ROOT / ".env")


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


# ── Logging ─────────────────────────────────────────────────────────────
LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE: str = os.getenv("LOG_FILE", "")                      # empty = console only

# ── HTTP service ────────────────────────────────────────────────────────
API_VERSION = "1.0.0"
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
REPORTS_DIR: str = os.getenv("REPORTS_DIR", str(PROJECT_ROOT / "reports"))

# ── Live-preview client ─────────────────────────────────────────────────
PAIN_API_BASE_URL: str = os.getenv("PAIN_API_BASE_URL", "http://localhost:8000/api")
LIVE_MME_DEBOUNCE_S = _float_env("LIVE_MME_DEBOUNCE_S", 0.4)
LIVE_SAFETY_DEBOUNCE_S = _float_env("LIVE_SAFETY_DEBOUNCE_S", 0.6)
CLIENT_TIMEOUT_S = _float_env("CLIENT_TIMEOUT_S", 10.0)
