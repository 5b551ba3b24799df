from __future__ import annotations

import os
from typing import Optional, List


def getenv_str(name: str, default: Optional[str] = None) -> str:
    v = os.getenv(name)
    return v if v is not None else default


def getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    try:
        return int(v) if v is not None else default
    except Exception:
        return default


def getenv_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None:
        return default
    return v.strip().lower() in {"1", "true", "yes", "on"}


def getenv_csv(name: str, default: Optional[str] = None) -> List[str]:
    v = os.getenv(name)
    raw = v if v is not None else (default or "")
    return [item.strip() for item in raw.split(",") if item.strip()]


# Text extraction backend: "content_stream", "pdfplumber" or "auto"
PDF_TEXT_BACKEND = getenv_str("FF_PDF_TEXT_BACKEND", "auto")

# Security limits for the pdfplumber path
MAX_PAGES = getenv_int("FF_MAX_PAGES", 200)

# Statement layout markers
DEBIT_MARKERS = set(getenv_csv("FF_DEBIT_MARKERS", "DB"))
CREDIT_MARKERS = set(getenv_csv("FF_CREDIT_MARKERS", "CR"))

# Emit one JSON log line per processed document
LOG_DOCUMENT_SUMMARY = getenv_bool("FF_LOG_DOCUMENT_SUMMARY", True)
