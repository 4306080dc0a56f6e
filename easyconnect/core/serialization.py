"""
Decoding boundary between Supabase rows and the pydantic schemas.

Every row read from the backend passes through here once. A row that does not
match its schema is a decode failure, reported as 502 so callers can tell it
apart from a transport error.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Type, TypeVar
from fastapi import HTTPException
from pydantic import BaseModel, ValidationError
import logging

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def decode_row(model: Type[ModelT], row: Dict[str, Any]) -> ModelT:
    """Validate a single row against its schema"""
    try:
        return model.model_validate(row)
    except ValidationError as e:
        logger.error(f"Failed to decode {model.__name__}: {e}")
        raise HTTPException(
            status_code=502,
            detail=f"Unexpected {model.__name__} data returned by backend"
        )


def decode_rows(model: Type[ModelT], rows: Iterable[Dict[str, Any]]) -> List[ModelT]:
    """Validate a list of rows; a missing payload decodes to an empty list"""
    return [decode_row(model, row) for row in (rows or [])]


def utc_now_iso() -> str:
    """Current time as an ISO-8601 string, the format the backend stores"""
    return datetime.now(timezone.utc).isoformat()
