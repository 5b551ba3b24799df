import uuid
from decimal import Decimal

import pytest

from statements.errors import StatementExtractionError, StatementPersistenceError, StatementValidationError
from conftest import make_pdf_bytes


@pytest.mark.asyncio
async def test_upload_creates_one_upload_and_one_line_per_transaction(upload_service, fake_repo, fake_store, february_text):
    account_id = fake_repo.add_account(currency="IDR")
    user_id = uuid.uuid4()

    summary = await upload_service.upload_statement(
        content=make_pdf_bytes(february_text),
        filename="feb 2024.pdf",
        content_type="application/pdf",
        bank_account_id=str(account_id),
        user_id=user_id,
    )

    assert summary["success"] is True
    assert summary["transaction_count"] == 3
    assert summary["period"] == "FEBRUARY 2024"
    assert summary["opening_balance"] == Decimal("5000000")
    assert summary["closing_balance"] == Decimal("8485000")
    assert summary["skipped_lines"] == 2

    assert len(fake_repo.uploads) == 1
    upload = fake_repo.uploads[summary["upload_id"]]
    assert upload.status == "completed"
    assert upload.currency == "IDR"
    assert upload.uploaded_by == user_id
    assert upload.total_debits == Decimal("15000")
    assert upload.file_url.startswith(f"https://files.test/{account_id}/")

    assert len(fake_repo.lines) == 3
    assert [line.line_number for line in fake_repo.lines] == [1, 2, 3]
    assert {line.reconciliation_status for line in fake_repo.lines} == {"unmatched"}
    assert {line.currency for line in fake_repo.lines} == {"IDR"}
    assert fake_repo.committed is True

    (key,) = fake_store.saved.keys()
    assert key.startswith(f"{account_id}/")
    assert key.endswith("_feb_2024.pdf")


@pytest.mark.asyncio
@pytest.mark.parametrize("bank_account_id", [None, "", "not-a-uuid"])
async def test_missing_or_invalid_bank_account_id(upload_service, november_pdf, bank_account_id):
    with pytest.raises(StatementValidationError):
        await upload_service.upload_statement(november_pdf, "nov.pdf", "application/pdf", bank_account_id, None)


@pytest.mark.asyncio
async def test_missing_file(upload_service, fake_repo):
    account_id = fake_repo.add_account()
    with pytest.raises(StatementValidationError, match="Missing file"):
        await upload_service.upload_statement(None, None, None, str(account_id), None)


@pytest.mark.asyncio
async def test_non_pdf_rejected(upload_service, fake_repo):
    account_id = fake_repo.add_account()
    with pytest.raises(StatementValidationError, match="Only PDF"):
        await upload_service.upload_statement(b"a,b,c", "rows.csv", "text/csv", str(account_id), None)


@pytest.mark.asyncio
async def test_unknown_bank_account(upload_service, november_pdf):
    with pytest.raises(StatementValidationError, match="Bank account not found"):
        await upload_service.upload_statement(november_pdf, "nov.pdf", "application/pdf", str(uuid.uuid4()), None)


@pytest.mark.asyncio
async def test_unsupported_currency(upload_service, fake_repo, november_pdf):
    account_id = fake_repo.add_account(currency="EUR")
    with pytest.raises(StatementValidationError, match="currency"):
        await upload_service.upload_statement(november_pdf, "nov.pdf", "application/pdf", str(account_id), None)


@pytest.mark.asyncio
async def test_extraction_failure_stores_nothing(upload_service, fake_repo, fake_store):
    account_id = fake_repo.add_account()
    pdf = make_pdf_bytes("PERIODE : NOVEMBER 2025\nSALDO AWAL : 1.00")
    with pytest.raises(StatementExtractionError):
        await upload_service.upload_statement(pdf, "nov.pdf", "application/pdf", str(account_id), None)
    assert fake_store.saved == {}
    assert fake_repo.uploads == {}


@pytest.mark.asyncio
async def test_line_insert_failure_rolls_back(upload_service, fake_repo, november_pdf):
    account_id = fake_repo.add_account()
    fake_repo.fail_lines = True
    with pytest.raises(StatementPersistenceError, match="Failed to insert transactions"):
        await upload_service.upload_statement(november_pdf, "nov.pdf", "application/pdf", str(account_id), None)
    assert fake_repo.rolled_back is True
    assert fake_repo.committed is False
    assert fake_repo.uploads == {}


@pytest.mark.asyncio
async def test_storage_failure_reported(upload_service, fake_repo, fake_store, november_pdf, monkeypatch):
    async def broken_save(key, data, content_type="application/pdf"):
        raise OSError("bucket unavailable")

    monkeypatch.setattr(fake_store, "save", broken_save)
    account_id = fake_repo.add_account()
    with pytest.raises(StatementPersistenceError, match="Failed to upload PDF"):
        await upload_service.upload_statement(november_pdf, "nov.pdf", "application/pdf", str(account_id), None)
    assert fake_repo.uploads == {}


@pytest.mark.asyncio
async def test_parse_only_does_not_persist(upload_service, fake_repo, fake_store, november_pdf):
    result = await upload_service.parse_only(november_pdf, "nov.pdf", "application/pdf", currency="USD")
    assert result.transaction_count == 1
    assert result.metadata.currency == "USD"
    assert fake_store.saved == {}
    assert fake_repo.uploads == {}
