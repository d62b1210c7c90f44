"""Runtime configuration from environment variables.

Values are read once at import time. The API entrypoint loads a .env file
before importing anything that depends on this module.
"""

import os
from pathlib import Path

# Pricing is an external, system-wide switch. When disabled the checklist's
# pricing flag starts (and stays) satisfied.
ENABLE_PRICING = os.getenv("ENABLE_PRICING", "false").lower() == "true"

# Base URL used to build public links for stored assets
PUBLIC_BASE_URL = os.getenv("PUBLIC_BASE_URL", "http://localhost:8000").rstrip("/")

# Remote image rendering endpoint (prompt is appended as a path segment)
IMAGE_GENERATION_BASE_URL = os.getenv(
    "IMAGE_GENERATION_BASE_URL", "https://image.pollinations.ai/prompt"
).rstrip("/")

# Where the file download boundary writes artifacts
DOWNLOADS_DIR = Path(os.getenv("DOWNLOADS_DIR", "/tmp/product_studio/downloads"))

# Print view temp files are removed after this many seconds, printed or not
PRINT_HANDLE_TTL_SECONDS = float(os.getenv("PRINT_HANDLE_TTL_SECONDS", "60"))

# Upload limits
MAX_ASSET_FILE_SIZE = int(os.getenv("MAX_ASSET_FILE_SIZE", str(25 * 1024 * 1024)))  # 25MB


def pricing_enabled() -> bool:
    """Whether pricing is enabled system-wide."""
    return ENABLE_PRICING
