import os
import sys

# Keep uploads written by tests out of the real storage dir
os.environ.setdefault("STATEMENT_STORAGE_BACKEND", "local")
os.environ.setdefault("FF_LOG_DOCUMENT_SUMMARY", "false")


def pytest_sessionstart(session):
    # Ensure project root is on sys.path so `statements` and `upload_service` resolve
    project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
    if project_root not in sys.path:
        sys.path.insert(0, project_root)


import uuid
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest


NOVEMBER_STATEMENT = "\n".join(
    [
        "REKENING TAHAPAN",
        "NO. REKENING : 1234567890",
        "PERIODE : NOVEMBER 2025",
        "MATA UANG : IDR",
        "SALDO AWAL : 1,000,000.00",
        "05/11 TRSF E-BANKING DB 0123 250,000.00 DB 750,000.00",
        "SALDO AKHIR : 750,000.00",
    ]
)

FEBRUARY_STATEMENT = "\n".join(
    [
        "NO. REKENING : XXXXXX7890",
        "PERIODE : FEBRUARY 2024",
        "SALDO AWAL : 5,000,000.00",
        "TANGGAL KETERANGAN CBG MUTASI SALDO",
        "02/02 SETORAN TUNAI 1,500,000.00 6,500,000.00",
        "  KE REKENING 0987",
        "10/02 BIAYA ADM 0998 15,000.00 DB 6,485,000.00",
        "15/02 TRSF KR OTOMATIS 2,000,000.00 CR 8,485,000.00",
        "20/02 KOREKSI 0.00 8,485,000.00",
        "31/02 TANGGAL SALAH 100.00 DB",
        "SALDO AKHIR : 8,485,000.00",
    ]
)


def make_pdf_bytes(text: str) -> bytes:
    """Minimal uncompressed PDF with one BT/ET block per text line."""
    body = b"".join(
        b"BT /F1 9 Tf 40 " + str(800 - 12 * i).encode() + b" Td (" + line.encode("latin-1") + b") Tj ET\n"
        for i, line in enumerate(text.split("\n"))
        if line.strip()
    )
    return (
        b"%PDF-1.4\n1 0 obj\n<< /Length " + str(len(body)).encode() + b" >>\nstream\n"
        + body
        + b"endstream\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"
    )


@pytest.fixture
def november_text() -> str:
    return NOVEMBER_STATEMENT


@pytest.fixture
def february_text() -> str:
    return FEBRUARY_STATEMENT


@pytest.fixture
def november_pdf() -> bytes:
    return make_pdf_bytes(NOVEMBER_STATEMENT)


# --- Test utilities: in-memory repository and file store ---


class FakeStatementRepo:
    def __init__(self) -> None:
        self.accounts = {}
        self.uploads = {}
        self.lines = []
        self.committed = False
        self.rolled_back = False
        self.fail_lines = False

    def add_account(self, currency: str = "IDR", account_number: str = "1234567890") -> uuid.UUID:
        account_id = uuid.uuid4()
        self.accounts[account_id] = SimpleNamespace(
            id=account_id, bank_name="BCA", account_number=account_number, currency=currency
        )
        return account_id

    async def get_bank_account(self, bank_account_id):
        return self.accounts.get(bank_account_id)

    async def create_upload(self, bank_account_id, result, currency, file_url, uploaded_by, status="completed"):
        m = result.metadata
        upload = SimpleNamespace(
            id=uuid.uuid4(),
            bank_account_id=bank_account_id,
            upload_date=datetime.now(timezone.utc),
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
            error_message=None,
        )
        self.uploads[upload.id] = upload
        return upload

    async def create_lines(self, upload_id, bank_account_id, result, currency, created_by):
        if self.fail_lines:
            raise RuntimeError("insert failed")
        for idx, txn in enumerate(result.transactions, start=1):
            self.lines.append(
                SimpleNamespace(
                    id=uuid.uuid4(),
                    upload_id=upload_id,
                    bank_account_id=bank_account_id,
                    line_number=idx,
                    transaction_date=txn.date,
                    description=txn.description,
                    branch_code=txn.branch_code,
                    debit_amount=txn.debit_amount,
                    credit_amount=txn.credit_amount,
                    running_balance=txn.running_balance,
                    currency=currency,
                    reconciliation_status="unmatched",
                    created_by=created_by,
                )
            )
        return len(result.transactions)

    async def get_upload(self, upload_id):
        return self.uploads.get(upload_id)

    async def list_lines(self, upload_id, limit: int = 1000):
        return [line for line in self.lines if line.upload_id == upload_id][:limit]

    async def commit(self):
        self.committed = True

    async def rollback(self):
        self.rolled_back = True
        self.uploads.clear()
        self.lines.clear()


class FakeFileStore:
    def __init__(self) -> None:
        self.saved = {}

    async def save(self, key: str, data: bytes, content_type: str = "application/pdf") -> str:
        self.saved[key] = data
        return f"https://files.test/{key}"


@pytest.fixture
def fake_repo():
    return FakeStatementRepo()


@pytest.fixture
def fake_store():
    return FakeFileStore()


@pytest.fixture
def upload_service(fake_repo, fake_store):
    from statements.statement_processor import PdfStatementProcessor
    from upload_service.statement_upload_service import StatementUploadService

    return StatementUploadService(
        repo=fake_repo,
        file_store=fake_store,
        processor=PdfStatementProcessor(text_backend="content_stream"),
    )
