# auth_code_api/app/api/endpoints/codes.py
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from loguru import logger

from app.db.session import get_db
from app.crud import crud_auth_code
from app.core.exceptions import AuthCodeError
from app.schemas.auth_code import DeviceCodeRequest, ActivateResponse, VerifyResponse

router = APIRouter()


@router.post("/activate", response_model=ActivateResponse)
async def activate_code(
    body: DeviceCodeRequest,
    db: AsyncSession = Depends(get_db),
) -> ActivateResponse:
    """Redeems a code once, binding it to the calling device."""
    try:
        await crud_auth_code.activate(db, device_id=body.device_id, code=body.auth_code)
    except AuthCodeError as e:
        logger.info(f"Activation refused for code {body.auth_code!r}: {e.message}")
        return ActivateResponse(success=False, message=e.message)

    return ActivateResponse(success=True, message="Authorization successful")


@router.post("/verify", response_model=VerifyResponse)
async def verify_code(
    body: DeviceCodeRequest,
    db: AsyncSession = Depends(get_db),
) -> VerifyResponse:
    # Called on every app launch; never says why a pair is invalid
    valid = await crud_auth_code.verify(db, device_id=body.device_id, code=body.auth_code)
    return VerifyResponse(valid=valid)
