"""
Activity Receipt Print Server
=============================

FastAPI entry point for the local receipt print server.

The web UI posts an activity (plus optional route and photos); the
server composes an ESC/POS receipt and sends it to the thermal printer
through the OS print queue.

Endpoints:
    GET     /status - Liveness probe, never touches the printer
    POST    /print  - Compose and print a receipt
    OPTIONS *       - CORS preflight, answered immediately

Every response carries permissive CORS headers: the UI runs on a
different origin (the dev server) than this local service.
"""

import logging
import time
from contextlib import asynccontextmanager
from json import JSONDecodeError
from typing import AsyncIterator, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from activity_receipt import __version__
from activity_receipt.config import settings
from activity_receipt.errors import RequestValidationError, friendly_message
from activity_receipt.models.request import (
    ErrorResponse,
    PrintRequest,
    PrintResponse,
    StatusResponse,
)
from activity_receipt.service import PrintService, create_print_service


logger = logging.getLogger(__name__)


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS, GET",
    "Access-Control-Allow-Headers": "Content-Type",
}


# =============================================================================
# Global State
# =============================================================================

_print_service: Optional[PrintService] = None
_startup_time: float = 0.0
_jobs_printed: int = 0
_jobs_failed: int = 0


# =============================================================================
# Getters
# =============================================================================

def get_print_service() -> Optional[PrintService]:
    return _print_service

def set_print_service(service: Optional[PrintService]) -> None:
    """Install a print service (used by tests and embedding scripts)."""
    global _print_service
    _print_service = service


# =============================================================================
# Lifespan Management
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the print service on startup, drain and close it on shutdown."""
    global _print_service, _startup_time

    _startup_time = time.time()
    logger.info(f"Starting activity receipt print server {__version__}")

    if _print_service is None:
        _print_service = create_print_service(settings)

    logger.info(f"Print server listening on port {settings.server.port}")
    logger.info(f"Slow print mode: {settings.printer.pacing}")

    yield

    logger.info("Shutting down print server...")
    if _print_service is not None:
        await _print_service.aclose()
    logger.info(f"Shutdown complete (printed={_jobs_printed}, failed={_jobs_failed})")


# =============================================================================
# FastAPI Application
# =============================================================================

app = FastAPI(
    title="Activity Receipt Print Server",
    description="Prints fitness activity receipts on ESC/POS thermal printers",
    version=__version__,
    lifespan=lifespan,
)


@app.middleware("http")
async def cors_headers(request: Request, call_next) -> Response:
    """Answer preflight requests and add CORS headers to every response."""
    if request.method == "OPTIONS":
        return Response(status_code=200, headers=CORS_HEADERS)

    response = await call_next(request)
    response.headers.update(CORS_HEADERS)
    return response


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes and methods answer 404 {"error": "Not found"}."""
    if exc.status_code in (404, 405):
        return JSONResponse(ErrorResponse(error="Not found").model_dump(), status_code=404)
    return JSONResponse(ErrorResponse(error=str(exc.detail)).model_dump(), status_code=exc.status_code)


# =============================================================================
# HTTP Endpoints
# =============================================================================

@app.get("/status")
async def status() -> JSONResponse:
    """
    Liveness probe.

    Always returns 200 while the process is running. Does not probe the
    printer.
    """
    return JSONResponse(StatusResponse(port=settings.server.port).model_dump())


@app.post("/print")
async def print_receipt(request: Request) -> JSONResponse:
    """
    Compose and print an activity receipt.

    Returns:
        200 {"success": true, "message": "Print job sent"}
        400 {"error": ...} for a missing/invalid activity or a non-JSON body
        500 {"error": ...} for any other failure
    """
    global _jobs_printed, _jobs_failed

    try:
        payload = await request.json()
    except (JSONDecodeError, UnicodeDecodeError):
        return JSONResponse(ErrorResponse(error="Invalid JSON body").model_dump(), status_code=400)

    try:
        print_request = PrintRequest.from_payload(payload)
    except RequestValidationError as e:
        logger.warning(f"Rejected print request: {e}")
        return JSONResponse(ErrorResponse(error=str(e)).model_dump(), status_code=400)

    service = get_print_service()
    if service is None:
        return JSONResponse(
            ErrorResponse(error="Print service not initialized").model_dump(),
            status_code=500,
        )

    try:
        await service.print_activity(print_request)
    except Exception as e:
        _jobs_failed += 1
        logger.error(f"Print job failed: {e}")
        return JSONResponse(ErrorResponse(error=friendly_message(e)).model_dump(), status_code=500)

    _jobs_printed += 1
    return JSONResponse(PrintResponse().model_dump())


# =============================================================================
# Main Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "activity_receipt.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=False,
    )
