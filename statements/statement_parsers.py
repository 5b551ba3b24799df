from __future__ import annotations

import calendar
import logging
import re
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Dict, List, Optional, Tuple

from statements import config
from statements.models import ParseResult, StatementMetadata, Transaction, ZERO

logger = logging.getLogger(__name__)

DATE_PREFIX_RE = re.compile(r"^(\d{2})/(\d{2})")
AMOUNT_TOKEN_RE = re.compile(r"^[\d,.]+$")
BRANCH_CODE_RE = re.compile(r"^\d{4}$")
PERIOD_RE = re.compile(r":\s*([A-Z]+)\s+(\d{4})")
ACCOUNT_NUMBER_RE = re.compile(r":\s*([\dX*]+)")
METADATA_SPLIT_RE = re.compile(r"[\s:]+")

MONTHS: Dict[str, int] = {
    "JANUARY": 1, "FEBRUARY": 2, "MARCH": 3, "APRIL": 4,
    "MAY": 5, "JUNE": 6, "JULY": 7, "AUGUST": 8,
    "SEPTEMBER": 9, "OCTOBER": 10, "NOVEMBER": 11, "DECEMBER": 12,
    # Indonesian spellings printed on local statements
    "JANUARI": 1, "FEBRUARI": 2, "PEBRUARI": 2, "MARET": 3,
    "MEI": 5, "JUNI": 6, "JULI": 7, "AGUSTUS": 8,
    "OKTOBER": 10, "NOPEMBER": 11, "DESEMBER": 12,
}


def is_amount_token(token: str) -> bool:
    """Digits with comma/dot punctuation only."""
    return bool(AMOUNT_TOKEN_RE.match(token or ""))


def parse_amount(token: str) -> Optional[Decimal]:
    """
    Parse an amount token by stripping grouping punctuation first.

    Commas are always grouping. When more than one dot remains the dots are
    grouping as well, so "1.234.567" is 1234567 and never 1.234567.
    """
    if not is_amount_token(token):
        return None
    cleaned = token.replace(",", "")
    if cleaned.count(".") > 1:
        cleaned = cleaned.replace(".", "")
    if not cleaned.strip("."):
        return None
    try:
        return Decimal(cleaned)
    except InvalidOperation:
        return None


def resolve_period(label: str) -> Tuple[Optional[date], Optional[date]]:
    """
    Turn a "<MONTH> <YYYY>" label into the first and last day of that month.
    Returns (None, None) when the label cannot be resolved.
    """
    parts = (label or "").upper().split()
    if len(parts) != 2 or not parts[1].isdigit():
        return None, None
    month = MONTHS.get(parts[0])
    if month is None:
        return None, None
    year = int(parts[1])
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def _period_year(label: str) -> Optional[int]:
    parts = (label or "").split()
    if len(parts) == 2 and parts[1].isdigit() and len(parts[1]) == 4:
        return int(parts[1])
    return None


def _first_amount(line: str) -> Optional[Decimal]:
    for token in METADATA_SPLIT_RE.split(line):
        value = parse_amount(token)
        if value is not None:
            return value
    return None


class StatementParser(ABC):
    """Base interface for bank-specific statement parsers."""

    name: str = "BASE"
    version: str = "0.1.0"

    @abstractmethod
    def supports(self, fingerprint: Dict[str, object]) -> bool:
        """Return True if this parser should handle the document."""
        raise NotImplementedError

    @abstractmethod
    def parse(self, text: str, currency: str = "", fallback_year: Optional[int] = None) -> ParseResult:
        """Return the parsed statement. Must not raise for malformed lines."""
        raise NotImplementedError


class ParserRegistry:
    def __init__(self, parsers: Optional[List[StatementParser]] = None, default: Optional[StatementParser] = None) -> None:
        self.parsers = parsers or []
        self.default = default

    def select(self, fingerprint: Dict[str, object]) -> Optional[StatementParser]:
        for p in self.parsers:
            try:
                if p.supports(fingerprint):
                    return p
            except Exception:
                logger.exception(f"Parser {p.name} failed while checking support")
                continue
        return self.default


class BcaStatementParser(StatementParser):
    """
    Tabular BCA account statement, one transaction per text line:

        DD/MM  DESCRIPTION...  [BRANCH]  AMOUNT  [DB]  [BALANCE]

    Header lines carry PERIODE, NO. REKENING, SALDO AWAL and SALDO AKHIR.
    Wrapped description lines do not start with a date and are dropped.
    """

    name = "BCA"
    version = "1.0.0"

    PERIOD_ANCHOR = "PERIODE"
    ACCOUNT_ANCHORS = ("NO. REKENING", "NO.REKENING")
    OPENING_ANCHOR = "SALDO AWAL"
    CLOSING_ANCHOR = "SALDO AKHIR"

    def __init__(self, debit_markers: Optional[set] = None, credit_markers: Optional[set] = None) -> None:
        self.debit_markers = debit_markers if debit_markers is not None else config.DEBIT_MARKERS
        self.credit_markers = credit_markers if credit_markers is not None else config.CREDIT_MARKERS

    def supports(self, fingerprint: Dict[str, object]) -> bool:
        bank = (fingerprint or {}).get("bank")
        if isinstance(bank, str) and bank.upper() == self.name:
            return True
        anchors = (fingerprint or {}).get("anchors") or {}
        return bool(anchors.get("period") and (anchors.get("opening_balance") or anchors.get("closing_balance")))

    def parse(self, text: str, currency: str = "", fallback_year: Optional[int] = None) -> ParseResult:
        lines = (text or "").split("\n")
        metadata = self.parse_metadata(lines, currency=currency)
        year = _period_year(metadata.period) or fallback_year

        transactions: List[Transaction] = []
        skipped = 0
        for line in lines:
            txn = self.parse_line(line, year)
            if txn is None:
                if DATE_PREFIX_RE.match(line.strip()):
                    skipped += 1
                continue
            transactions.append(txn)

        if skipped:
            logger.info(f"{self.name}: {skipped} dated line(s) did not yield a transaction")
        return ParseResult(
            metadata=metadata,
            transactions=tuple(transactions),
            skipped_lines=skipped,
            parser=self.name,
        )

    def parse_metadata(self, lines: List[str], currency: str = "") -> StatementMetadata:
        period = ""
        account_number = ""
        opening = ZERO
        closing = ZERO
        for raw in lines:
            line = raw.upper()
            if self.PERIOD_ANCHOR in line:
                m = PERIOD_RE.search(line)
                if m:
                    period = f"{m.group(1)} {m.group(2)}"
            if any(anchor in line for anchor in self.ACCOUNT_ANCHORS):
                m = ACCOUNT_NUMBER_RE.search(line)
                if m:
                    account_number = m.group(1)
            if self.OPENING_ANCHOR in line:
                value = _first_amount(line)
                if value is not None:
                    opening = value
            if self.CLOSING_ANCHOR in line:
                value = _first_amount(line)
                if value is not None:
                    closing = value

        start_date, end_date = resolve_period(period) if period else (None, None)
        return StatementMetadata(
            period=period,
            start_date=start_date,
            end_date=end_date,
            opening_balance=opening,
            closing_balance=closing,
            currency=currency,
            account_number=account_number,
        )

    def parse_line(self, line: str, year: Optional[int]) -> Optional[Transaction]:
        """Parse one dated line; None when the line is not a usable transaction."""
        stripped = line.strip()
        m = DATE_PREFIX_RE.match(stripped)
        if not m or year is None:
            return None
        day, month = int(m.group(1)), int(m.group(2))
        try:
            txn_date = date(year, month, day)
        except ValueError:
            return None

        tokens = stripped.split()
        i = 1
        description: List[str] = []
        branch_code = ""
        while i < len(tokens):
            token = tokens[i]
            if BRANCH_CODE_RE.match(token):
                branch_code = token
                i += 1
                break
            if is_amount_token(token):
                break
            description.append(token)
            i += 1

        amount: Optional[Decimal] = None
        if i < len(tokens) and is_amount_token(tokens[i]):
            amount = parse_amount(tokens[i])
            i += 1

        is_debit = False
        if i < len(tokens) and tokens[i] in self.debit_markers:
            is_debit = True
            i += 1
        elif i < len(tokens) and tokens[i] in self.credit_markers:
            i += 1

        balance: Optional[Decimal] = None
        if i < len(tokens) and is_amount_token(tokens[i]):
            balance = parse_amount(tokens[i])

        if amount is None or amount <= ZERO:
            return None

        return Transaction(
            date=txn_date,
            description=" ".join(description).strip(),
            branch_code=branch_code,
            debit_amount=amount if is_debit else ZERO,
            credit_amount=ZERO if is_debit else amount,
            running_balance=balance,
        )
