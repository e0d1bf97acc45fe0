"""Translate service errors into HTTP responses."""

from __future__ import annotations

import logging

from fastapi import HTTPException, status

from ..errors import PersistenceError, RecordNotFoundError, WriteConflictError


def http_error(exc: Exception, action: str) -> HTTPException:
    if isinstance(exc, HTTPException):
        return exc
    if isinstance(exc, RecordNotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, ValueError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    if isinstance(exc, WriteConflictError):
        logging.warning(f"Write conflict while {action}: {exc}")
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, PersistenceError):
        logging.error(f"Storage unavailable while {action}: {exc}")
        return HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Storage unavailable: {exc}. Please retry the operation.",
        )
    logging.exception(f"Error {action}: {exc}")
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=f"Unexpected error while {action}. Check server logs for details.",
    )
