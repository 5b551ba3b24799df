from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import insert, select
from sqlalchemy.ext.asyncio import AsyncSession

from db.models import BankAccount, BankStatementLine, BankStatementUpload
from statements.models import ParseResult


class StatementRepositoryPg:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_bank_account(self, bank_account_id: uuid.UUID) -> Optional[BankAccount]:
        return await self._session.get(BankAccount, bank_account_id)

    async def create_upload(
        self,
        bank_account_id: uuid.UUID,
        result: ParseResult,
        currency: str,
        file_url: Optional[str],
        uploaded_by: Optional[uuid.UUID],
        status: str = "completed",
    ) -> BankStatementUpload:
        m = result.metadata
        upload = BankStatementUpload(
            bank_account_id=bank_account_id,
            statement_period=m.period,
            statement_start_date=m.start_date,
            statement_end_date=m.end_date,
            currency=currency,
            opening_balance=m.opening_balance,
            closing_balance=m.closing_balance,
            total_credits=result.total_credits,
            total_debits=result.total_debits,
            transaction_count=result.transaction_count,
            file_url=file_url,
            uploaded_by=uploaded_by,
            status=status,
        )
        self._session.add(upload)
        await self._session.flush()
        return upload

    async def create_lines(
        self,
        upload_id: uuid.UUID,
        bank_account_id: uuid.UUID,
        result: ParseResult,
        currency: str,
        created_by: Optional[uuid.UUID],
    ) -> int:
        """Insert one unmatched line per parsed transaction, keeping document order."""
        rows = [
            {
                "upload_id": upload_id,
                "bank_account_id": bank_account_id,
                "line_number": idx,
                "transaction_date": txn.date,
                "description": txn.description,
                "reference": "",
                "branch_code": txn.branch_code,
                "debit_amount": txn.debit_amount,
                "credit_amount": txn.credit_amount,
                "running_balance": txn.running_balance,
                "currency": currency,
                "reconciliation_status": "unmatched",
                "created_by": created_by,
            }
            for idx, txn in enumerate(result.transactions, start=1)
        ]
        if rows:
            await self._session.execute(insert(BankStatementLine), rows)
        return len(rows)

    async def get_upload(self, upload_id: uuid.UUID) -> Optional[BankStatementUpload]:
        return await self._session.get(BankStatementUpload, upload_id)

    async def list_lines(self, upload_id: uuid.UUID, limit: int = 1000) -> list[BankStatementLine]:
        stmt = (
            select(BankStatementLine)
            .where(BankStatementLine.upload_id == upload_id)
            .order_by(BankStatementLine.line_number)
            .limit(limit)
        )
        res = await self._session.execute(stmt)
        return list(res.scalars().all())

    async def commit(self) -> None:
        await self._session.commit()

    async def rollback(self) -> None:
        await self._session.rollback()
