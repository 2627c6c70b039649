# auth_code_api/app/crud/crud_auth_code.py
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import delete, update, func, Result
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.models.auth_code import AuthCode, utcnow_naive
from app.core.codes import generate_auth_code, is_well_formed_code
from app.core.config import settings
from app.core.exceptions import (
    InvalidInputError,
    CodeNotFoundError,
    CodeAlreadyUsedError,
    StorageFailureError,
)
from loguru import logger


async def get_by_code(db: AsyncSession, *, code: str) -> Optional[AuthCode]:
    """Looks a code up by value, always re-reading the row from the database."""
    stmt = (
        select(AuthCode)
        .where(AuthCode.code == code)
        .execution_options(populate_existing=True)
    )
    result = await db.execute(stmt)
    return result.scalars().first()


async def _insert_one(db: AsyncSession, *, notes: Optional[str], attempts: int) -> Optional[str]:
    """
    Inserts a single pending code, regenerating it on a UNIQUE collision.
    Returns None when the code could not be persisted.
    """
    for attempt in range(1, attempts + 1):
        code = generate_auth_code()
        db.add(AuthCode(code=code, notes=notes, is_used=False, created_at=utcnow_naive()))
        try:
            await db.commit()
            return code
        except IntegrityError as e:
            await db.rollback()
            logger.warning(f"Collision on generated code (attempt {attempt}/{attempts}): {e.orig}")
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(f"Error inserting authorization code: {e}")
            return None

    logger.error(f"Giving up on one code after {attempts} collisions")
    return None


async def create_batch(db: AsyncSession, *, count: int, notes: Optional[str] = "") -> List[str]:
    """
    Generates `count` pending codes, each inserted and committed on its own.

    Codes that cannot be persisted are left out of the result, which always
    lists exactly the rows that exist in the database.
    """
    if count < 1:
        raise InvalidInputError("count must be at least 1")
    if count > settings.MAX_BATCH_SIZE:
        raise InvalidInputError(f"count must not exceed {settings.MAX_BATCH_SIZE}")

    attempts = max(settings.CODE_INSERT_ATTEMPTS, 1)
    codes: List[str] = []
    for _ in range(count):
        code = await _insert_one(db, notes=notes, attempts=attempts)
        if code is not None:
            codes.append(code)

    if not codes:
        raise StorageFailureError("No authorization code could be stored")

    if len(codes) < count:
        logger.warning(f"Batch partially stored: {len(codes)}/{count} codes (notes={notes!r})")
    else:
        logger.info(f"Generated {len(codes)} authorization codes (notes={notes!r})")
    return codes


async def activate(db: AsyncSession, *, device_id: Optional[str], code: Optional[str]) -> AuthCode:
    """
    Binds a pending code to a device.

    The state change is one conditional UPDATE guarded by is_used = 0, so of
    several concurrent activations only the one that affects the row wins.
    """
    if not device_id or not code:
        raise InvalidInputError()

    now = utcnow_naive()
    stmt = (
        update(AuthCode)
        .where(AuthCode.code == code, AuthCode.is_used == False)  # noqa: E712
        .values(device_id=device_id, is_used=True, activated_at=now)
        .execution_options(synchronize_session=False)
    )
    try:
        result: Result = await db.execute(stmt)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error activating authorization code {code}: {e}")
        raise StorageFailureError("Activation failed") from e

    if result.rowcount != 1:
        try:
            db_code = await get_by_code(db, code=code)
        except SQLAlchemyError as e:
            logger.error(f"Error reading authorization code {code}: {e}")
            raise StorageFailureError() from e
        if db_code is None:
            if not is_well_formed_code(code):
                logger.warning(f"Activation attempted with malformed code {code!r}")
            raise CodeNotFoundError(code)
        raise CodeAlreadyUsedError(code)

    logger.info(f"Authorization code {code} activated for device {device_id}")

    # The activation is committed; a failed read-back must not turn it into an error
    try:
        db_code = await get_by_code(db, code=code)
    except SQLAlchemyError as e:
        logger.warning(f"Activated code {code} could not be read back: {e}")
        db_code = None
    if db_code is None:
        db_code = AuthCode(code=code, device_id=device_id, is_used=True, activated_at=now)
    return db_code


async def verify(db: AsyncSession, *, device_id: Optional[str], code: Optional[str]) -> bool:
    """Read-only: True only for an activated code bound to this device."""
    if not device_id or not code:
        return False

    stmt = select(AuthCode.id).where(
        AuthCode.code == code,
        AuthCode.device_id == device_id,
        AuthCode.is_used == True,  # noqa: E712
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        logger.error(f"Error verifying authorization code {code}: {e}")
        return False

    valid = result.scalars().first() is not None
    logger.debug(f"Verify code={code} device={device_id}: {valid}")
    return valid


async def list_all(db: AsyncSession) -> List[AuthCode]:
    """Every code, newest first (ties broken by id, also descending)."""
    stmt = (
        select(AuthCode)
        .order_by(AuthCode.created_at.desc(), AuthCode.id.desc())
        .execution_options(populate_existing=True)
    )
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        logger.error(f"Error listing authorization codes: {e}")
        raise StorageFailureError("Query failed") from e
    return list(result.scalars().all())


async def delete_code(db: AsyncSession, *, code: str) -> bool:
    """Removes a code in any state. Idempotent; returns whether a row was removed."""
    stmt = delete(AuthCode).where(AuthCode.code == code)
    try:
        result: Result = await db.execute(stmt)
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Error deleting authorization code {code}: {e}")
        raise StorageFailureError("Delete failed") from e

    deleted = result.rowcount > 0
    if deleted:
        logger.info(f"Authorization code {code} deleted")
    return deleted


async def count_codes(db: AsyncSession, *, is_used: Optional[bool] = None) -> int:
    stmt = select(func.count()).select_from(AuthCode)
    if is_used is not None:
        stmt = stmt.where(AuthCode.is_used == is_used)
    try:
        result = await db.execute(stmt)
    except SQLAlchemyError as e:
        logger.error(f"Error counting authorization codes: {e}")
        raise StorageFailureError("Query failed") from e
    return result.scalar() or 0
