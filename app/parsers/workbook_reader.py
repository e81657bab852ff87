"""
app/parsers/workbook_reader.py

Uploaded-file decoding for the ledger parsers.

Turns raw upload bytes into plain Python rows: header-keyed dicts for the
policy ledger, positional grids per sheet for the shipment workbook. NaN
cells come back as ``None``.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import PurePath
from typing import Any

import pandas as pd
from openpyxl.utils.exceptions import InvalidFileException

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv"}

_READ_ERRORS = (ValueError, KeyError, OSError, zipfile.BadZipFile, InvalidFileException)


class WorkbookReadError(ValueError):
    """
    Raised when an uploaded file cannot be decoded as a ledger.
    """

    def __init__(self, message: str, *, filename: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.filename = filename

    def to_dict(self) -> dict[str, Any]:
        return {"message": self.message, "filename": self.filename}


def _suffix(filename: str | None) -> str:
    if not filename:
        return ""
    return PurePath(filename).suffix.lower()


def _frame_to_records(frame: pd.DataFrame) -> list[dict[str, Any]]:
    frame = frame.rename(columns=lambda column: str(column).strip())
    cleaned = frame.astype(object).where(pd.notna(frame), None)
    return cleaned.to_dict(orient="records")


def _frame_to_grid(frame: pd.DataFrame) -> list[list[Any]]:
    cleaned = frame.astype(object).where(pd.notna(frame), None)
    return cleaned.values.tolist()


def read_policy_rows(content: bytes, filename: str | None = None) -> list[dict[str, Any]]:
    """
    Decode a policy ledger (first worksheet, or CSV) into header-keyed rows.
    """

    if not content:
        raise WorkbookReadError("Uploaded policy file is empty.", filename=filename)

    suffix = _suffix(filename)
    if suffix and suffix not in EXCEL_SUFFIXES | CSV_SUFFIXES:
        raise WorkbookReadError(f"Unsupported policy file type: {suffix}", filename=filename)

    try:
        if suffix in CSV_SUFFIXES:
            frame = pd.read_csv(io.BytesIO(content), encoding="utf-8-sig", dtype=object)
        else:
            frame = pd.read_excel(io.BytesIO(content), sheet_name=0, dtype=object, engine="openpyxl")
    except _READ_ERRORS as exc:
        logger.warning("Policy file could not be read filename=%s error=%s", filename, exc)
        raise WorkbookReadError(f"Could not read policy file: {exc}", filename=filename) from exc

    return _frame_to_records(frame)


def read_shipment_sheets(content: bytes, filename: str | None = None) -> dict[str, list[list[Any]]]:
    """
    Decode every worksheet of a shipment workbook into a headerless grid.
    """

    if not content:
        raise WorkbookReadError("Uploaded shipment workbook is empty.", filename=filename)

    suffix = _suffix(filename)
    if suffix and suffix not in EXCEL_SUFFIXES:
        raise WorkbookReadError(f"Unsupported shipment file type: {suffix}", filename=filename)

    try:
        frames = pd.read_excel(io.BytesIO(content), sheet_name=None, header=None, engine="openpyxl")
    except _READ_ERRORS as exc:
        logger.warning("Shipment workbook could not be read filename=%s error=%s", filename, exc)
        raise WorkbookReadError(f"Could not read shipment workbook: {exc}", filename=filename) from exc

    return {str(name): _frame_to_grid(frame) for name, frame in frames.items()}
