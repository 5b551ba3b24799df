from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from statements.models import ParseResult, Transaction


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class StatementMetadataOut(CamelModel):
    period: str
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    opening_balance: Decimal
    closing_balance: Decimal
    total_debits: Decimal
    total_credits: Decimal
    transaction_count: int
    account_number: str = ""
    currency: str = ""
    skipped_lines: int = 0


class TransactionOut(CamelModel):
    transaction_date: date = Field(alias="date")
    description: str
    branch_code: str = ""
    debit_amount: Decimal
    credit_amount: Decimal
    running_balance: Optional[Decimal] = None

    @classmethod
    def from_transaction(cls, txn: Transaction) -> "TransactionOut":
        return cls(
            transaction_date=txn.date,
            description=txn.description,
            branch_code=txn.branch_code,
            debit_amount=txn.debit_amount,
            credit_amount=txn.credit_amount,
            running_balance=txn.running_balance,
        )


class ParseResultOut(CamelModel):
    metadata: StatementMetadataOut
    transactions: List[TransactionOut] = Field(default_factory=list)

    @classmethod
    def from_result(cls, result: ParseResult) -> "ParseResultOut":
        m = result.metadata
        return cls(
            metadata=StatementMetadataOut(
                period=m.period,
                start_date=m.start_date,
                end_date=m.end_date,
                opening_balance=m.opening_balance,
                closing_balance=m.closing_balance,
                total_debits=result.total_debits,
                total_credits=result.total_credits,
                transaction_count=result.transaction_count,
                account_number=m.account_number,
                currency=m.currency,
                skipped_lines=result.skipped_lines,
            ),
            transactions=[TransactionOut.from_transaction(t) for t in result.transactions],
        )


class UploadSummaryOut(CamelModel):
    success: bool = True
    upload_id: uuid.UUID
    transaction_count: int
    period: str
    opening_balance: Decimal
    closing_balance: Decimal
    skipped_lines: int = 0


class StatementUploadOut(CamelModel):
    id: uuid.UUID
    bank_account_id: uuid.UUID
    upload_date: Optional[datetime] = None
    statement_period: str
    statement_start_date: Optional[date] = None
    statement_end_date: Optional[date] = None
    currency: str
    opening_balance: Decimal
    closing_balance: Decimal
    total_credits: Decimal
    total_debits: Decimal
    transaction_count: int
    file_url: Optional[str] = None
    status: str
    error_message: Optional[str] = None


class StatementLineOut(CamelModel):
    id: uuid.UUID
    upload_id: uuid.UUID
    transaction_date: date
    description: Optional[str] = None
    branch_code: Optional[str] = None
    debit_amount: Decimal
    credit_amount: Decimal
    running_balance: Optional[Decimal] = None
    currency: str
    reconciliation_status: str
