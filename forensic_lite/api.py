"""
Forensic Analysis API
=====================

FastAPI endpoints over the analysis core and the per-case custody ledgers.

Endpoints:
- GET    /health                           - Health check
- POST   /analyze                          - Run the full pipeline for a case
- POST   /cases/{case_id}/custody          - Append a custody entry
- GET    /cases/{case_id}/custody          - List custody entries + head hash
- GET    /cases/{case_id}/custody/verify   - Verify the custody chain
- DELETE /cases/{case_id}/custody          - Reset the case ledger

Run with:
    uvicorn forensic_lite.api:app --host 0.0.0.0 --port 8000
"""

import logging
import uuid
from datetime import datetime

from fastapi import FastAPI, HTTPException, Request, Depends
from fastapi.responses import JSONResponse

from .config import get_settings
from .custody import LedgerRegistry, verify_custody_chain
from .engine import EvidenceDocument, ForensicAnalyzer
from .errors import ForensicError
from .schemas import (
    AnalyzeRequest,
    AnalysisResponse,
    AnalysisMetadata,
    CustodyEntryOutput,
    CustodyEntryRequest,
    CustodyLogResponse,
    CustodyVerifyResponse,
    ErrorDetail,
    ErrorResponse,
    HealthResponse,
)

logging.basicConfig(level=getattr(logging, get_settings().log_level.upper(), logging.INFO))
logger = logging.getLogger(__name__)


app = FastAPI(
    title="Forensic Analysis Service",
    description="Contradiction, behavioural pattern and liability analysis with a tamper-evident custody ledger",
    version=get_settings().service_version,
    docs_url="/docs",
    redoc_url="/redoc",
)
app.state.ledgers = LedgerRegistry(get_settings())


def get_ledgers(request: Request) -> LedgerRegistry:
    return request.app.state.ledgers


def _error_code_for_status(status_code: int) -> str:
    return {
        400: "bad_request",
        404: "not_found",
        422: "validation_error",
    }.get(status_code, "internal_error")


# =============================================================================
# Error handlers
# =============================================================================

@app.exception_handler(HTTPException)
async def structured_http_exception_handler(request: Request, exc: HTTPException):
    """Structured errors for all endpoints"""
    body = ErrorResponse(error=ErrorDetail(
        code=_error_code_for_status(exc.status_code),
        message=str(exc.detail),
    ))
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


@app.exception_handler(ForensicError)
async def forensic_error_handler(request: Request, exc: ForensicError):
    logger.error(f"{exc.code} on {request.url.path}: {exc}")
    body = ErrorResponse(error=ErrorDetail(code=exc.code, message=str(exc)))
    return JSONResponse(status_code=500, content=body.model_dump())


# =============================================================================
# Health
# =============================================================================

@app.get("/health", response_model=HealthResponse, tags=["Health"])
async def health_check():
    """Health check endpoint"""
    settings = get_settings()
    return HealthResponse(
        status="healthy",
        version=settings.service_version,
        timestamp=datetime.now()
    )


# =============================================================================
# Analysis
# =============================================================================

@app.post(
    "/analyze",
    response_model=AnalysisResponse,
    tags=["Analysis"],
    summary="Analyze a case's evidence",
    responses={
        200: {"description": "Successful analysis"},
        400: {"model": ErrorResponse, "description": "Invalid input"},
        500: {"model": ErrorResponse, "description": "Internal error"},
    }
)
def analyze(request: AnalyzeRequest, ledgers: LedgerRegistry = Depends(get_ledgers)):
    """
    Run the full forensic pipeline.

    Every step is recorded in the case's custody ledger; a case id is
    generated when none is given.
    """
    if not request.documents:
        raise HTTPException(status_code=400, detail="Documents list cannot be empty")

    start_time = datetime.now()
    case_id = request.case_id or f"case_{uuid.uuid4().hex[:12]}"
    ledger = ledgers.get(case_id)

    documents = [EvidenceDocument.from_dict(doc.model_dump()) for doc in request.documents]
    analysis = ForensicAnalyzer(get_settings()).analyze(
        documents,
        ledger=ledger,
        user_id=request.user_id,
        device_id=request.device_id,
        case_id=case_id,
    )

    duration_ms = (datetime.now() - start_time).total_seconds() * 1000
    return AnalysisResponse(
        **analysis.to_dict(),
        custody_head_hash=ledger.head_hash,
        metadata=AnalysisMetadata(
            duration_ms=round(duration_ms, 2),
            documents=len(documents),
            statements=len(analysis.statements),
            entities=len(analysis.entities),
            contradictions=len(analysis.contradictions),
            behavioral_patterns=len(analysis.behavioral_patterns),
            custody_entries=len(ledger),
        ),
    )


# =============================================================================
# Custody
# =============================================================================

@app.post(
    "/cases/{case_id}/custody",
    response_model=CustodyEntryOutput,
    tags=["Custody"],
    summary="Append a custody entry",
)
def append_custody(case_id: str, request: CustodyEntryRequest, ledgers: LedgerRegistry = Depends(get_ledgers)):
    entry = ledgers.get(case_id).append(
        request.action,
        request.target_hash,
        user_id=request.user_id,
        device_id=request.device_id,
        details=request.details,
    )
    return CustodyEntryOutput(**entry.to_dict())


@app.get("/cases/{case_id}/custody", response_model=CustodyLogResponse, tags=["Custody"])
def list_custody(case_id: str, ledgers: LedgerRegistry = Depends(get_ledgers)):
    ledger = ledgers.get(case_id)
    return CustodyLogResponse(
        case_id=case_id,
        head_hash=ledger.head_hash,
        entries=[CustodyEntryOutput(**record) for record in ledger.to_records()],
    )


@app.get("/cases/{case_id}/custody/verify", response_model=CustodyVerifyResponse, tags=["Custody"])
def verify_custody(case_id: str, ledgers: LedgerRegistry = Depends(get_ledgers)):
    """
    Integrity failures are reported in the body, never as HTTP errors.

    A failed check is itself recorded as TAMPERING_DETECTED.
    """
    ledger = ledgers.get(case_id)
    status = verify_custody_chain(ledger)
    return CustodyVerifyResponse(
        case_id=case_id,
        integrity_status=status,
        entries=len(ledger),
        head_hash=ledger.head_hash,
    )


@app.delete("/cases/{case_id}/custody", response_model=CustodyLogResponse, tags=["Custody"])
def reset_custody(case_id: str, ledgers: LedgerRegistry = Depends(get_ledgers)):
    ledger = ledgers.reset(case_id)
    return CustodyLogResponse(case_id=case_id, head_hash=ledger.head_hash, entries=[])
