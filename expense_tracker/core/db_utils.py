"""
Database utilities for transaction management and error classification
"""
import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .errors import AppError, BadRequestError, ConflictError, InternalError

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


def integrity_error_code(exc: IntegrityError) -> Optional[str]:
    """
    Return the SQLSTATE of a constraint violation.

    asyncpg exposes ``sqlstate`` and psycopg ``pgcode``; SQLite only gives a
    message, so fall back to matching it.
    """
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return str(code)
    message = str(orig or exc).lower()
    if "unique constraint" in message:
        return UNIQUE_VIOLATION
    if "foreign key constraint" in message:
        return FOREIGN_KEY_VIOLATION
    return None


def is_unique_violation(exc: IntegrityError) -> bool:
    return integrity_error_code(exc) == UNIQUE_VIOLATION


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    return integrity_error_code(exc) == FOREIGN_KEY_VIOLATION


@asynccontextmanager
async def transaction(
    db: AsyncSession,
    action: str,
    conflict_message: str = "Duplicate entry",
) -> AsyncIterator[AsyncSession]:
    """
    Run a unit of work: commit on success, roll back on any failure.

    The rollback always happens before the error propagates. ``AppError``
    passes through unchanged, unique violations become ``ConflictError`` and
    every other database failure becomes ``InternalError(action)``.
    """
    try:
        yield db
        await db.commit()
    except AppError:
        await db.rollback()
        raise
    except IntegrityError as e:
        await db.rollback()
        if is_unique_violation(e):
            logger.warning(f"{action}: unique constraint violated ({e.orig})")
            raise ConflictError(conflict_message) from e
        logger.error(f"{action}: integrity error ({e.orig})")
        raise InternalError(action) from e
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"{action}: database error: {str(e)}")
        raise InternalError(action) from e
    except Exception:
        await db.rollback()
        raise


def parse_uuid(value, field: str = "id") -> uuid.UUID:
    """Parse a client supplied identifier, failing with BadRequest when malformed."""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise BadRequestError(f"Invalid {field}: {value}", fields=[field])
