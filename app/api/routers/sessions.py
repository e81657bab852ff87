"""
app/api/routers/sessions.py

Analytics session HTTP endpoints: lifecycle, ledger uploads and country
mapping review.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, UploadFile, status

from app.api.dependencies import (
    get_analytics_session,
    get_spreadsheet_upload,
    get_workbook_upload,
    read_upload_bytes,
)
from app.domain.records import ParseResult
from app.parsers.workbook_reader import WorkbookReadError, read_policy_rows, read_shipment_sheets
from app.schemas.sessions import (
    CountryMappingRequest,
    CountryMappingResponse,
    FilterOptionsResponse,
    ParseSummaryResponse,
    SessionResponse,
    UnmatchedCountriesResponse,
)
from app.services.analytics_session import (
    AnalyticsSession,
    SessionLimitError,
    SessionNotFoundError,
    SessionStore,
    get_session_store,
)

router = APIRouter(prefix="/sessions", tags=["sessions"])


def _summary_response(session: AnalyticsSession, result: ParseResult) -> ParseSummaryResponse:
    return ParseSummaryResponse(
        records=len(result.records),
        rows_read=result.rows_read,
        rows_skipped=result.rows_skipped,
        sheets_parsed=list(result.sheets_parsed),
        sheets_skipped=list(result.sheets_skipped),
        unmatched_countries=session.unmatched_countries(),
        revision=session.revision,
    )


def _require_records(result: ParseResult, ledger: str) -> None:
    if not result.records:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"No valid {ledger} records found in the uploaded file.",
        )


@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def create_session(store: SessionStore = Depends(get_session_store)) -> SessionResponse:
    try:
        session = store.create()
    except SessionLimitError as exc:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=str(exc),
        ) from exc
    return SessionResponse(session_id=session.session_id, created_at=session.created_at)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_session(session_id: str, store: SessionStore = Depends(get_session_store)) -> Response:
    try:
        store.delete(session_id)
    except SessionNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(exc),
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{session_id}/policies", response_model=ParseSummaryResponse)
def upload_policies(
    file: UploadFile = Depends(get_spreadsheet_upload),
    session: AnalyticsSession = Depends(get_analytics_session),
) -> ParseSummaryResponse:
    """
    Replace the session's policy ledger with the uploaded workbook or CSV.
    """

    try:
        rows = read_policy_rows(read_upload_bytes(file), filename=file.filename)
    except WorkbookReadError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    finally:
        file.file.close()

    result = session.load_policies(rows)
    _require_records(result, "policy")
    return _summary_response(session, result)


@router.post("/{session_id}/shipments", response_model=ParseSummaryResponse)
def upload_shipments(
    file: UploadFile = Depends(get_workbook_upload),
    session: AnalyticsSession = Depends(get_analytics_session),
) -> ParseSummaryResponse:
    """
    Replace the session's shipment ledger with the uploaded volume workbook.
    """

    try:
        sheets = read_shipment_sheets(read_upload_bytes(file), filename=file.filename)
    except WorkbookReadError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=exc.to_dict(),
        ) from exc
    finally:
        file.file.close()

    result = session.load_shipments(sheets)
    _require_records(result, "shipment")
    return _summary_response(session, result)


@router.get("/{session_id}/unmatched-countries", response_model=UnmatchedCountriesResponse)
def list_unmatched_countries(
    session: AnalyticsSession = Depends(get_analytics_session),
) -> UnmatchedCountriesResponse:
    return UnmatchedCountriesResponse(
        unmatched_countries=session.unmatched_countries(),
        user_mappings=session.country_mapper.user_mappings(),
    )


@router.post("/{session_id}/country-mappings", response_model=CountryMappingResponse)
def apply_country_mappings(
    payload: CountryMappingRequest,
    session: AnalyticsSession = Depends(get_analytics_session),
) -> CountryMappingResponse:
    """
    Add user country mappings and re-derive both ledgers.
    """

    try:
        update = session.apply_country_mappings(payload.mappings)
    except ValueError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return CountryMappingResponse(
        applied=update.applied,
        unmatched_countries=list(update.unmatched),
        revision=update.revision,
        policy_records=len(update.policy_summary.records) if update.policy_summary else None,
        shipment_records=len(update.shipment_summary.records) if update.shipment_summary else None,
    )


@router.get("/{session_id}/filter-options", response_model=FilterOptionsResponse)
def get_filter_options(
    session: AnalyticsSession = Depends(get_analytics_session),
) -> FilterOptionsResponse:
    options = session.filter_options()
    return FilterOptionsResponse(
        regions=list(options.regions),
        business_units=list(options.business_units),
        countries=list(options.countries),
    )
