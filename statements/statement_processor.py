from __future__ import annotations

import dataclasses
import hashlib
import time
from typing import Dict, Optional

from statements import config
from statements.errors import StatementExtractionError
from statements.json_logger import get_json_logger
from statements.models import ParseResult
from statements.statement_parsers import BcaStatementParser, ParserRegistry, StatementParser
from statements.text_extraction import extract_text

NO_TRANSACTIONS_MESSAGE = "No transactions found in PDF. Please check if this is a valid BCA statement."

ANCHORS = {
    "period": "PERIODE",
    "account_number": "REKENING",
    "opening_balance": "SALDO AWAL",
    "closing_balance": "SALDO AKHIR",
}


def fingerprint_text(text: str) -> Dict[str, object]:
    """Cheap layout fingerprint used to pick a parser."""
    upper = (text or "").upper()
    anchors = {key: (needle in upper) for key, needle in ANCHORS.items()}
    bank = "BCA" if ("BCA" in upper or all(anchors.values())) else None
    return {"bank": bank, "anchors": anchors}


class PdfStatementProcessor:
    """
    Turns one uploaded statement into a ParseResult.

    Stages: extract text -> fingerprint -> select parser -> parse -> check
    that at least one transaction came out. Parsing is pure: the same bytes
    always give the same result.
    """

    def __init__(
        self,
        registry: Optional[ParserRegistry] = None,
        text_backend: Optional[str] = None,
    ) -> None:
        default_parser = BcaStatementParser()
        self.parser_registry = registry or ParserRegistry(parsers=[default_parser], default=default_parser)
        self.text_backend = text_backend or config.PDF_TEXT_BACKEND
        self.logger = get_json_logger("statement_processor")

    def select_parser(self, text: str) -> StatementParser:
        parser = self.parser_registry.select(fingerprint_text(text))
        if parser is None:
            raise StatementExtractionError("No parser available for this statement layout")
        return parser

    def process_text(
        self,
        text: str,
        currency: str = "",
        fallback_year: Optional[int] = None,
        document_id: str = "",
    ) -> ParseResult:
        parser = self.select_parser(text)
        result = parser.parse(text, currency=currency, fallback_year=fallback_year)
        if document_id:
            result = dataclasses.replace(result, document_id=document_id)
        if result.transaction_count == 0:
            self.logger.warning(
                "no transactions parsed",
                extra={"fields": {"document_id": document_id, "parser": parser.name, "skipped_lines": result.skipped_lines}},
            )
            raise StatementExtractionError(NO_TRANSACTIONS_MESSAGE)
        return result

    def process_pdf(
        self,
        content: bytes,
        filename: Optional[str] = None,
        currency: str = "",
        fallback_year: Optional[int] = None,
    ) -> ParseResult:
        document_id = hashlib.sha256(content or b"").hexdigest()
        t0 = time.perf_counter()
        text = extract_text(content, backend=self.text_backend)
        t_extract = time.perf_counter() - t0

        result = self.process_text(text, currency=currency, fallback_year=fallback_year, document_id=document_id)

        if config.LOG_DOCUMENT_SUMMARY:
            self.logger.info(
                "statement parsed",
                extra={
                    "fields": {
                        "document_id": document_id,
                        "filename": filename,
                        "parser": result.parser,
                        "period": result.metadata.period,
                        "transactions": result.transaction_count,
                        "skipped_lines": result.skipped_lines,
                        "balance_check_passed": result.balance_check_passed(),
                        "extract_ms": round(t_extract * 1000, 2),
                        "total_ms": round((time.perf_counter() - t0) * 1000, 2),
                    }
                },
            )
        return result
