from __future__ import annotations

import logging
import re
from io import BytesIO
from typing import List, Optional

import pdfplumber

from statements import config

logger = logging.getLogger(__name__)

BACKEND_CONTENT_STREAM = "content_stream"
BACKEND_PDFPLUMBER = "pdfplumber"
BACKEND_AUTO = "auto"
BACKENDS = {BACKEND_CONTENT_STREAM, BACKEND_PDFPLUMBER, BACKEND_AUTO}

TEXT_BLOCK_RE = re.compile(rb"BT\s+(.+?)\s+ET", re.DOTALL)
STRING_OPERAND_RE = re.compile(rb"\(([^)]+)\)")


def extract_text_from_content_streams(content: bytes) -> str:
    """
    Scan raw PDF bytes for text-show blocks (BT ... ET) and join the literal
    string operands found in each block, one output line per block.

    Only reliable for uncompressed, simply-encoded content streams: Flate
    streams, font encodings and column layout are not handled. Never raises;
    returns whatever text it finds, possibly the empty string.
    """
    if not content:
        return ""
    lines: List[str] = []
    for block in TEXT_BLOCK_RE.finditer(content):
        parts = [m.group(1).decode("latin-1") for m in STRING_OPERAND_RE.finditer(block.group(1))]
        lines.append("".join(p + " " for p in parts))
    return "".join(line + "\n" for line in lines)


def extract_text_with_pdfplumber(content: bytes, max_pages: Optional[int] = None) -> str:
    """Extract page text with pdfplumber, one page after another."""
    limit = max_pages or config.MAX_PAGES
    page_texts: List[str] = []
    with pdfplumber.open(BytesIO(content)) as pdf:
        for page in pdf.pages[:limit]:
            page_texts.append(page.extract_text() or "")
    return "\n".join(page_texts)


def extract_text(content: bytes, backend: Optional[str] = None) -> str:
    """
    Render PDF bytes to line-oriented text.

    `auto` prefers pdfplumber, which handles compressed streams, and falls back
    to the content-stream scan when pdfplumber fails or finds no text.
    """
    backend = (backend or config.PDF_TEXT_BACKEND or BACKEND_AUTO).strip().lower()
    if backend not in BACKENDS:
        raise ValueError(f"Unknown PDF text backend: {backend}")

    if backend == BACKEND_CONTENT_STREAM:
        return extract_text_from_content_streams(content)

    if backend == BACKEND_PDFPLUMBER:
        return extract_text_with_pdfplumber(content)

    try:
        text = extract_text_with_pdfplumber(content)
    except Exception as e:
        logger.warning(f"pdfplumber could not read document, using content-stream scan: {e}")
        return extract_text_from_content_streams(content)
    if text.strip():
        return text
    logger.info("pdfplumber found no text, using content-stream scan")
    return extract_text_from_content_streams(content)
