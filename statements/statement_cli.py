from __future__ import annotations

import argparse
import json
import os
from typing import Any, Dict, List, Optional

from statements.errors import StatementError
from statements.statement_processor import PdfStatementProcessor
from statements.text_extraction import BACKENDS


def summarize(path: str, processor: PdfStatementProcessor, currency: str = "", fallback_year: Optional[int] = None) -> Dict[str, Any]:
    if not os.path.exists(path):
        return {"file": path, "error": "not_found"}
    with open(path, "rb") as f:
        content = f.read()
    try:
        result = processor.process_pdf(content, filename=os.path.basename(path), currency=currency, fallback_year=fallback_year)
    except StatementError as e:
        return {"file": path, "error": str(e)}
    m = result.metadata
    return {
        "file": path,
        "document_id": result.document_id,
        "parser": result.parser,
        "period": m.period,
        "start_date": m.start_date.isoformat() if m.start_date else None,
        "end_date": m.end_date.isoformat() if m.end_date else None,
        "opening_balance": str(m.opening_balance),
        "closing_balance": str(m.closing_balance),
        "total_debits": str(result.total_debits),
        "total_credits": str(result.total_credits),
        "transactions": result.transaction_count,
        "skipped_lines": result.skipped_lines,
        "balance_check_passed": result.balance_check_passed(),
    }


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Parse PDF bank statements and print a summary per file")
    parser.add_argument("paths", nargs="+", help="PDF file paths")
    parser.add_argument("--backend", choices=sorted(BACKENDS), default=None, help="Text extraction backend")
    parser.add_argument("--currency", default="", help="Currency tag for the parsed statement")
    parser.add_argument("--year", type=int, default=None, help="Year to use when the statement period is missing")
    args = parser.parse_args(argv)

    processor = PdfStatementProcessor(text_backend=args.backend)
    failures = 0
    for path in args.paths:
        summary = summarize(path, processor, currency=args.currency, fallback_year=args.year)
        if "error" in summary:
            failures += 1
        print(json.dumps(summary))
    return 1 if failures else 0


if __name__ == "__main__":
    raise SystemExit(main())
