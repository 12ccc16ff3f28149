import logging
from fastapi import HTTPException
from postgrest.exceptions import APIError
from typing import Optional

logger = logging.getLogger(__name__)

# SQLSTATE class 23: integrity constraint violation
UNIQUE_VIOLATION = "23505"


def is_constraint_violation(error: APIError) -> bool:
    return bool(error.code) and str(error.code).startswith("23")


def backend_error(error: Exception, action: str, conflict_detail: Optional[str] = None) -> HTTPException:
    """Translate a Supabase/PostgREST failure into the HTTPException the route should raise."""
    if isinstance(error, APIError):
        if conflict_detail and error.code == UNIQUE_VIOLATION:
            return HTTPException(status_code=400, detail=conflict_detail)
        if is_constraint_violation(error):
            logger.warning(f"{action}: constraint violation {error.code}: {error.message}")
            return HTTPException(status_code=400, detail=error.message or "Constraint violation")
        logger.error(f"{action}: backend error {error.code}: {error.message}")
        return HTTPException(status_code=500, detail=error.message or str(error))
    logger.error(f"{action}: {error}")
    return HTTPException(status_code=500, detail=str(error))
