from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from db.postgres import get_async_session
from repositories.statement_repo_pg import StatementRepositoryPg
from schemas.statement import ParseResultOut, StatementLineOut, StatementUploadOut, UploadSummaryOut
from settings.deps import get_current_user_id
from statements.errors import StatementError
from storage.statement_files import get_statement_file_store
from upload_service.statement_upload_service import StatementUploadService, check_upload_size

router = APIRouter(prefix="/bank-statements", tags=["bank-statements"])


async def read_upload(file: Optional[UploadFile]) -> Optional[bytes]:
    """Read the upload body, refusing files whose declared size is over the limit."""
    if file is None:
        return None
    check_upload_size(file.size)
    return await file.read()


async def get_statement_repo(session: AsyncSession = Depends(get_async_session)) -> StatementRepositoryPg:
    return StatementRepositoryPg(session)


async def get_upload_service(repo: StatementRepositoryPg = Depends(get_statement_repo)) -> StatementUploadService:
    return StatementUploadService(repo=repo, file_store=get_statement_file_store())


@router.post("/upload", response_model=UploadSummaryOut)
async def upload_statement(
    file: Optional[UploadFile] = File(default=None),
    bank_account_id: Optional[str] = Form(default=None, alias="bankAccountId"),
    user_id: uuid.UUID = Depends(get_current_user_id),
    service: StatementUploadService = Depends(get_upload_service),
):
    try:
        content = await read_upload(file)
        summary = await service.upload_statement(
            content=content,
            filename=file.filename if file is not None else None,
            content_type=file.content_type if file is not None else None,
            bank_account_id=bank_account_id,
            user_id=user_id,
        )
    except StatementError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return UploadSummaryOut(**summary)


@router.post("/parse", response_model=ParseResultOut)
async def parse_statement(
    file: UploadFile = File(...),
    currency: str = Form(default=""),
    service: StatementUploadService = Depends(get_upload_service),
):
    try:
        content = await read_upload(file)
        result = await service.parse_only(content, file.filename, file.content_type, currency=currency)
    except StatementError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return ParseResultOut.from_result(result)


@router.get("/uploads/{upload_id}", response_model=StatementUploadOut)
async def get_upload(upload_id: uuid.UUID, repo: StatementRepositoryPg = Depends(get_statement_repo)):
    upload = await repo.get_upload(upload_id)
    if upload is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Upload not found")
    return StatementUploadOut.model_validate(upload)


@router.get("/uploads/{upload_id}/lines", response_model=List[StatementLineOut])
async def list_upload_lines(upload_id: uuid.UUID, repo: StatementRepositoryPg = Depends(get_statement_repo)):
    upload = await repo.get_upload(upload_id)
    if upload is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Upload not found")
    lines = await repo.list_lines(upload_id)
    return [StatementLineOut.model_validate(line) for line in lines]
