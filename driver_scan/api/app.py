"""FastAPI application for the label driver scanner.

Provides REST endpoints for scanning label photos, matching recognized
text, inspecting and reloading the rule table, and health checks.
"""

import shutil
import time
from functools import lru_cache
from typing import Annotated

from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from driver_scan.exceptions import RecognitionError, ScanInProgressError
from driver_scan.scanner import ScanResult, ScanService, build_service
from driver_scan.utils.config import load_config
from driver_scan.utils.logger import get_logger

from .schemas import (
    HealthResponse,
    MatchRequest,
    RuleResponse,
    RulesResponse,
    ScanResponse,
    StateResponse,
)

logger = get_logger(__name__)

VERSION = "1.0.0"

app = FastAPI(
    title="Driver Scan API",
    description="Read a parcel label photo and find the assigned driver",
    version=VERSION,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_ALLOWED_CONTENT_TYPES = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/bmp",
    "image/webp",
    "application/octet-stream",
}


@lru_cache(maxsize=1)
def _get_scanner() -> ScanService:
    """Build the shared scan service on first use.

    Returns:
        Scan service with its rule table loaded.
    """
    return build_service(load_config())


def _tesseract_available(tesseract_cmd: str | None) -> bool:
    """Check that the configured (or default) Tesseract executable exists."""
    return shutil.which(tesseract_cmd or "tesseract") is not None


def _to_response(result: ScanResult, start_time: float) -> ScanResponse:
    return ScanResponse(
        status=result.status.value,
        assignee=result.assignee,
        keyword=result.rule.keyword if result.rule else None,
        method=result.method.value if result.method else None,
        recognized_text=result.recognized_text,
        focus_text=result.focus_text,
        confidence=result.confidence,
        table_warning=result.table_warning,
        processing_time_ms=(time.time() - start_time) * 1000,
    )


@app.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Return system health status."""
    scanner = _get_scanner()
    return HealthResponse(
        status="healthy" if scanner.table_warning is None else "degraded",
        version=VERSION,
        tesseract_available=_tesseract_available(scanner.config.ocr.tesseract_cmd),
        rules_loaded=len(scanner.table),
        table_warning=scanner.table_warning,
    )


@app.get("/rules", response_model=RulesResponse)
async def list_rules() -> RulesResponse:
    """List the rules currently in use, in matching order."""
    scanner = _get_scanner()
    return RulesResponse(
        count=len(scanner.table),
        rules=[
            RuleResponse(keyword=r.keyword, assignee=r.assignee)
            for r in scanner.table
        ],
        table_warning=scanner.table_warning,
    )


@app.post("/rules/reload", response_model=RulesResponse)
async def reload_rules() -> RulesResponse:
    """Reload the rule table from the configured file."""
    scanner = _get_scanner()
    scanner.reload_rules()
    return await list_rules()


@app.post("/scan", response_model=ScanResponse)
async def scan_label(file: Annotated[UploadFile, File(...)]) -> ScanResponse:
    """Recognize an uploaded label photo and return the assigned driver.

    Args:
        file: Uploaded image (PNG, JPEG, TIFF, BMP or WebP).

    Returns:
        Scan outcome with the driver name when matched.
    """
    start_time = time.time()

    if file.content_type and file.content_type not in _ALLOWED_CONTENT_TYPES:
        raise HTTPException(
            status_code=400,
            detail=f"Unsupported file type: {file.content_type}",
        )

    scanner = _get_scanner()
    try:
        content = await file.read()
        result = await scanner.scan(content, file.filename or "label")
    except ScanInProgressError as exc:
        raise HTTPException(status_code=409, detail=str(exc)) from exc
    except RecognitionError as exc:
        logger.warning("Recognition failed: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    except Exception as exc:
        logger.error("Scan failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return _to_response(result, start_time)


@app.post("/match", response_model=ScanResponse)
async def match_text(request: MatchRequest) -> ScanResponse:
    """Match already-recognized text against the rule table."""
    start_time = time.time()
    result = _get_scanner().match_text(request.text)
    return _to_response(result, start_time)


@app.get("/state", response_model=StateResponse)
async def get_state() -> StateResponse:
    """Return the current scan state."""
    scanner = _get_scanner()
    return StateResponse(state=scanner.state.value, busy=scanner.busy)


@app.post("/reset", response_model=StateResponse)
async def reset_scanner() -> StateResponse:
    """Clear the last result and return to idle."""
    scanner = _get_scanner()
    scanner.reset()
    return StateResponse(state=scanner.state.value, busy=scanner.busy)
