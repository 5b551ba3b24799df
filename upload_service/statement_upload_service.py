from __future__ import annotations

import logging
import os
import uuid
from typing import Any, Dict, Optional

from fastapi.concurrency import run_in_threadpool

from repositories.statement_repo_pg import StatementRepositoryPg
from settings.config import settings
from statements.errors import StatementPersistenceError, StatementValidationError
from statements.models import ParseResult
from statements.statement_processor import PdfStatementProcessor
from storage.statement_files import StatementFileStore, statement_file_key

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPES = {"application/pdf", "application/x-pdf"}


def check_upload_size(size: Optional[int]) -> None:
    """Reject a file whose declared size is over the upload limit."""
    if size is not None and size > settings.MAX_UPLOAD_BYTES:
        raise StatementValidationError(f"File exceeds the {settings.MAX_UPLOAD_BYTES} byte upload limit")


def check_pdf_upload(content: Optional[bytes], filename: Optional[str], content_type: Optional[str]) -> None:
    """Structural checks on the uploaded file; raises StatementValidationError."""
    if not content:
        raise StatementValidationError("Missing file or bankAccountId")
    check_upload_size(len(content))
    ctype = (content_type or "").split(";")[0].strip().lower()
    _, ext = os.path.splitext(filename or "")
    if ctype not in PDF_CONTENT_TYPES and ext.lower() != ".pdf":
        raise StatementValidationError(f"Only PDF files are supported: {content_type} / {ext}")


def parse_bank_account_id(raw: Optional[str]) -> uuid.UUID:
    if not raw or not str(raw).strip():
        raise StatementValidationError("Missing file or bankAccountId")
    try:
        return uuid.UUID(str(raw).strip())
    except ValueError:
        raise StatementValidationError(f"Invalid bankAccountId: {raw}")


class StatementUploadService:
    """
    Upload flow for one statement PDF:
    validate -> resolve bank account -> parse -> store file -> write the upload
    record and one unmatched line per transaction -> commit.
    """

    def __init__(
        self,
        repo: StatementRepositoryPg,
        file_store: StatementFileStore,
        processor: Optional[PdfStatementProcessor] = None,
    ) -> None:
        self.repo = repo
        self.file_store = file_store
        self.processor = processor or PdfStatementProcessor()

    async def parse_only(self, content: bytes, filename: Optional[str], content_type: Optional[str], currency: str = "") -> ParseResult:
        check_pdf_upload(content, filename, content_type)
        return await run_in_threadpool(self.processor.process_pdf, content, filename, currency)

    async def upload_statement(
        self,
        content: Optional[bytes],
        filename: Optional[str],
        content_type: Optional[str],
        bank_account_id: Optional[str],
        user_id: Optional[uuid.UUID],
    ) -> Dict[str, Any]:
        account_id = parse_bank_account_id(bank_account_id)
        check_pdf_upload(content, filename, content_type)

        account = await self.repo.get_bank_account(account_id)
        if account is None:
            raise StatementValidationError("Bank account not found")
        currency = account.currency
        if currency not in settings.SUPPORTED_CURRENCIES:
            raise StatementValidationError(f"Unsupported bank account currency: {currency}")

        result = await run_in_threadpool(self.processor.process_pdf, content, filename, currency)
        if result.metadata.account_number and account.account_number:
            printed = result.metadata.account_number.lstrip("X*")
            if printed and not account.account_number.endswith(printed):
                logger.warning(
                    f"Statement account {result.metadata.account_number} does not match bank account {account_id}"
                )

        key = statement_file_key(str(account_id), filename or "statement.pdf")
        try:
            file_url = await self.file_store.save(key, content, content_type="application/pdf")
        except Exception as e:
            logger.error(f"Storage upload error for {key}: {e}")
            raise StatementPersistenceError("Failed to upload PDF") from e

        try:
            upload = await self.repo.create_upload(
                bank_account_id=account_id,
                result=result,
                currency=currency,
                file_url=file_url,
                uploaded_by=user_id,
            )
        except Exception as e:
            logger.error(f"Upload insert error: {e}")
            await self.repo.rollback()
            raise StatementPersistenceError("Failed to create upload record") from e

        try:
            await self.repo.create_lines(
                upload_id=upload.id,
                bank_account_id=account_id,
                result=result,
                currency=currency,
                created_by=user_id,
            )
            await self.repo.commit()
        except Exception as e:
            logger.error(f"Lines insert error: {e}")
            await self.repo.rollback()
            raise StatementPersistenceError("Failed to insert transactions") from e

        logger.info(
            f"Stored statement upload {upload.id} for account {account_id}: "
            f"{result.transaction_count} transactions, period {result.metadata.period}"
        )
        return {
            "success": True,
            "upload_id": upload.id,
            "transaction_count": result.transaction_count,
            "period": result.metadata.period,
            "opening_balance": result.metadata.opening_balance,
            "closing_balance": result.metadata.closing_balance,
            "skipped_lines": result.skipped_lines,
        }
