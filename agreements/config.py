"""Environment-driven settings for the rendered agreement document."""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()

PAGE_SIZES = ("LETTER", "A4")


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    document_author: str = "Property Doc Generator"
    page_size: str = "LETTER"
    page_margin: float = 50.0


@lru_cache()
def get_settings() -> Settings:
    """Build settings once from the environment (``.env`` is loaded on import)."""
    page_size = (os.getenv("AGREEMENT_PAGE_SIZE") or "LETTER").strip().upper()
    if page_size not in PAGE_SIZES:
        page_size = "LETTER"
    return Settings(
        document_author=os.getenv("AGREEMENT_AUTHOR") or "Property Doc Generator",
        page_size=page_size,
        page_margin=_env_float("AGREEMENT_PAGE_MARGIN", 50.0),
    )
