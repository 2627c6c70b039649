# auth_code_api/app/api/endpoints/admin.py
from fastapi import APIRouter, Depends, Path
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.session import get_db
from app.crud import crud_auth_code
from app.core.exceptions import AuthCodeError
from app.schemas.auth_code import (
    GenerateCodesRequest, GenerateCodesResponse,
    ListCodesResponse, AuthCodeInfo,
    DeleteCodeResponse, CodeStatsResponse,
)

router = APIRouter()


@router.post("/generate", response_model=GenerateCodesResponse)
async def generate_codes(
    body: GenerateCodesRequest,
    db: AsyncSession = Depends(get_db),
) -> GenerateCodesResponse:
    """
    Generates a batch of pending codes.

    `codes` lists only the codes actually stored; when some could not be
    stored the response is still successful and `message` says how many.
    """
    try:
        codes = await crud_auth_code.create_batch(db, count=body.count, notes=body.notes)
    except AuthCodeError as e:
        logger.warning(f"Code generation failed (count={body.count}): {e.message}")
        return GenerateCodesResponse(success=False, codes=[], message=e.message)

    message = None
    if len(codes) < body.count:
        message = f"Only {len(codes)} of {body.count} codes could be stored"
    return GenerateCodesResponse(success=True, codes=codes, message=message)


@router.get("/codes", response_model=ListCodesResponse)
async def list_codes(db: AsyncSession = Depends(get_db)) -> ListCodesResponse:
    try:
        rows = await crud_auth_code.list_all(db)
    except AuthCodeError as e:
        return ListCodesResponse(success=False, codes=[], message=e.message)

    return ListCodesResponse(
        success=True,
        codes=[AuthCodeInfo.model_validate(row) for row in rows],
    )


@router.delete("/codes/{code}", response_model=DeleteCodeResponse)
async def delete_code(
    code: str = Path(..., description="Authorization code to remove"),
    db: AsyncSession = Depends(get_db),
) -> DeleteCodeResponse:
    """Idempotent: deleting an absent code is still a success."""
    try:
        deleted = await crud_auth_code.delete_code(db, code=code)
    except AuthCodeError as e:
        return DeleteCodeResponse(success=False, message=e.message, deleted=False)

    message = "Deleted successfully" if deleted else "Authorization code not present"
    return DeleteCodeResponse(success=True, message=message, deleted=deleted)


@router.get("/stats", response_model=CodeStatsResponse)
async def code_stats(db: AsyncSession = Depends(get_db)) -> CodeStatsResponse:
    try:
        total = await crud_auth_code.count_codes(db)
        used = await crud_auth_code.count_codes(db, is_used=True)
    except AuthCodeError as e:
        return CodeStatsResponse(success=False, message=e.message)

    return CodeStatsResponse(success=True, total=total, used=used, unused=total - used)
