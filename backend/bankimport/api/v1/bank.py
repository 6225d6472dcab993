"""
Bank Statement Import API Endpoints

Endpoints for:
- Statement parse preview (CSV dialects, MT940, CAMT.053)
- Supported bank format listing
"""
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile

from bankimport.core.config import Settings, get_settings
from bankimport.schemas.bank import BankFormatListResponse, BankParseResponse
from bankimport.services.bank.ingestion import BankStatementIngestionService
from bankimport.services.bank.parsers import BankFormat

router = APIRouter()


def get_ingestion_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> BankStatementIngestionService:
    return BankStatementIngestionService(settings)


@router.get("/bank/formats", response_model=BankFormatListResponse)
async def list_bank_formats():
    """List the CSV dialects that can be passed as a format hint."""
    return BankFormatListResponse.build()


@router.post("/bank/parse", response_model=BankParseResponse)
async def parse_bank_file(
    file: Annotated[UploadFile, File(..., description="Kontoauszug als CSV, MT940 oder CAMT.053")],
    settings: Annotated[Settings, Depends(get_settings)],
    service: Annotated[BankStatementIngestionService, Depends(get_ingestion_service)],
    format: Optional[BankFormat] = Form(None, description="Bankformat, falls nicht erkennbar"),
):
    """
    Parse a bank statement file and return the canonical transactions.
    
    The file kind and the CSV dialect are detected automatically. The
    format hint is only used when the CSV header matches no known bank.
    Nothing is stored; malformed rows are skipped and reported as warnings.
    """
    file_bytes = await file.read()
    if not file_bytes:
        raise HTTPException(status_code=400, detail="Die hochgeladene Datei ist leer.")
    if len(file_bytes) > settings.MAX_UPLOAD_SIZE:
        raise HTTPException(
            status_code=413,
            detail=f"Datei zu groß (maximal {settings.MAX_UPLOAD_SIZE // (1024 * 1024)} MB).",
        )
    
    result = service.parse_file(file_bytes, file.filename, format_hint=format)
    return BankParseResponse.from_result(result, settings.MAX_WARNINGS_IN_RESPONSE)
