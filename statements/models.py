from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional, Tuple


ZERO = Decimal("0")


@dataclass(frozen=True)
class StatementMetadata:
    """
    Header facts of one parsed statement document.

    - period: label as printed, e.g. "NOVEMBER 2025" (empty when not found)
    - start_date / end_date: first and last calendar day of the period month
    - opening_balance / closing_balance: as printed, not recomputed
    - currency: tag supplied by the caller, never read from the document
    - account_number: masked or raw number from the header, empty when absent
    """

    period: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    opening_balance: Decimal = ZERO
    closing_balance: Decimal = ZERO
    currency: str = ""
    account_number: str = ""


@dataclass(frozen=True)
class Transaction:
    date: date
    description: str
    branch_code: str = ""
    debit_amount: Decimal = ZERO
    credit_amount: Decimal = ZERO
    running_balance: Optional[Decimal] = None


@dataclass(frozen=True)
class ParseResult:
    """
    Metadata plus transactions in document order.

    Totals are derived from the transactions and are independent of the
    printed opening/closing balances; reconciling the two is up to the caller.
    """

    metadata: StatementMetadata
    transactions: Tuple[Transaction, ...] = field(default_factory=tuple)
    skipped_lines: int = 0
    document_id: str = ""
    parser: str = ""

    @property
    def total_debits(self) -> Decimal:
        return sum((t.debit_amount for t in self.transactions), ZERO)

    @property
    def total_credits(self) -> Decimal:
        return sum((t.credit_amount for t in self.transactions), ZERO)

    @property
    def transaction_count(self) -> int:
        return len(self.transactions)

    @property
    def net_movement(self) -> Decimal:
        return self.total_credits - self.total_debits

    def balance_check_passed(self) -> bool:
        """True when opening + credits - debits matches the printed closing balance."""
        m = self.metadata
        return m.opening_balance + self.net_movement == m.closing_balance
