"""
app/api/dependencies.py

Shared FastAPI dependencies for request validation and session lookup.
"""

from __future__ import annotations

from pathlib import PurePath

from fastapi import Depends, File, HTTPException, UploadFile, status

from app.config import UploadSettings, get_upload_settings
from app.parsers.workbook_reader import CSV_SUFFIXES, EXCEL_SUFFIXES
from app.services.analytics_session import (
    AnalyticsSession,
    SessionNotFoundError,
    SessionStore,
    get_session_store,
)

SPREADSHEET_SUFFIXES = EXCEL_SUFFIXES | CSV_SUFFIXES


def _upload_suffix(file: UploadFile) -> str:
    return PurePath((file.filename or "").strip().lower()).suffix


def get_spreadsheet_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is an Excel workbook or CSV by extension.
    """

    if _upload_suffix(file) not in SPREADSHEET_SUFFIXES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Unsupported file type. Allowed: {', '.join(sorted(SPREADSHEET_SUFFIXES))}.",
        )
    return file


def get_workbook_upload(file: UploadFile = File(...)) -> UploadFile:
    """
    Validate that the uploaded file is an Excel workbook by extension.
    """

    if _upload_suffix(file) not in EXCEL_SUFFIXES:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Only Excel workbooks are allowed ({', '.join(sorted(EXCEL_SUFFIXES))}).",
        )
    return file


def read_upload_bytes(file: UploadFile, settings: UploadSettings | None = None) -> bytes:
    """
    Read an upload fully, enforcing the configured size limit.
    """

    limit = (settings or get_upload_settings()).max_bytes
    content = file.file.read(limit + 1)
    if len(content) > limit:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds the {limit} byte upload limit.",
        )
    return content


def get_analytics_session(
    session_id: str,
    store: SessionStore = Depends(get_session_store),
) -> AnalyticsSession:
    """
    Resolve the ``session_id`` path parameter to a live session.
    """

    try:
        return store.get(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
