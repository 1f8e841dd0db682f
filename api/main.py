"""
FastAPI Application
Arabic Memo Export Backend

Extracts text from uploaded PDFs through the extraction webhook and renders
it as a structured memorandum (PDF / DOCX).
"""

import logging
from contextlib import asynccontextmanager
from urllib.parse import quote

from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from api.config import settings
from api.extraction_client import (
    EXTRACTION_FAILED_MESSAGE, ExtractionClient, ExtractionError,
)
from api.models import (
    DocumentResponse, ErrorResponse, ExtractionResponse, OutputFormat, RenderRequest,
)
from block_classify import ClassifierOptions
from document_model import parse_document
from document_pipeline import MEDIA_TYPES, RAW_FILENAMES, render_document

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

# Global instances
extractor = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown."""
    global extractor

    # Startup
    logger.info("🚀 Starting Arabic Memo Export API...")
    extractor = ExtractionClient(settings.webhook_url, timeout=settings.http_timeout)
    logger.info(f"✓ Extraction webhook: {settings.webhook_url}")

    yield

    logger.info("✓ Shutdown complete")


# Create FastAPI app
app = FastAPI(
    title="Arabic Memo Export API",
    description="Extract Arabic memorandum text from PDFs and export it as structured PDF / DOCX",
    version="1.0.0",
    lifespan=lifespan
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify allowed origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _get_extractor() -> ExtractionClient:
    return extractor or ExtractionClient(settings.webhook_url, timeout=settings.http_timeout)


def _download_name(fmt: str, raw: bool) -> str:
    if raw:
        return RAW_FILENAMES[fmt]
    return settings.pdf_filename if fmt == "pdf" else settings.docx_filename


def _file_response(data: bytes, fmt: str, raw: bool = False) -> Response:
    filename = _download_name(fmt, raw)
    return Response(
        content=data,
        media_type=MEDIA_TYPES[fmt],
        headers={
            "Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"
        },
    )


async def _read_pdf(file: UploadFile) -> bytes:
    if file.content_type != "application/pdf":
        raise HTTPException(status_code=400, detail="يرجى رفع ملفات PDF فقط")
    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="الملف المرفوع فارغ")
    return content


async def _extract(content: bytes, filename: str) -> str:
    try:
        return await run_in_threadpool(_get_extractor().extract, content, filename)
    except ExtractionError:
        raise HTTPException(status_code=502, detail=EXTRACTION_FAILED_MESSAGE)


async def _render(text: str, fmt: OutputFormat, raw: bool = False) -> Response:
    try:
        data = await run_in_threadpool(
            render_document,
            text,
            fmt.value,
            font_path=settings.font_path,
            bidi_mode=settings.bidi_mode,
            stray_contacts=settings.stray_contacts,
            raw=raw,
            title=settings.document_title,
        )
    except ValueError as e:
        logger.error(f"Validation error: {e}")
        raise HTTPException(
            status_code=400,
            detail=f"خطأ في البيانات المدخلة: {str(e)}"
        )
    return _file_response(data, fmt.value, raw)


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "Arabic Memo Export API",
        "version": "1.0.0",
        "endpoints": {
            "extract": "/extract (POST)",
            "parse": "/parse (POST)",
            "render": "/render (POST)",
            "convert": "/convert (POST)",
            "docs": "/docs",
            "openapi": "/openapi.json"
        }
    }


@app.get("/health")
async def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "extractor": "ready" if extractor else "not initialized",
        "bidi_mode": settings.bidi_mode,
    }


@app.post("/extract", response_model=ExtractionResponse, responses=ERROR_RESPONSES)
async def extract_text(file: UploadFile = File(...)):
    """
    Upload a PDF and return the text extracted by the webhook.

    **Response:**
    ```json
    {
        "text": "# المقدمة\\n- البند الأول",
        "filename": "memo.pdf"
    }
    ```
    """
    content = await _read_pdf(file)
    logger.info(f"Received PDF: {file.filename}")
    text = await _extract(content, file.filename or "document.pdf")
    return ExtractionResponse(text=text, filename=file.filename)


@app.post("/parse", response_model=DocumentResponse)
async def parse_text(request: RenderRequest):
    """Parse extracted text into the structured document model."""
    model = parse_document(
        request.text, ClassifierOptions(stray_contacts=settings.stray_contacts)
    )
    return DocumentResponse(**model.to_dict())


@app.post("/render", responses=ERROR_RESPONSES)
async def render_text(request: RenderRequest):
    """
    Render extracted text as a downloadable file.

    **Request Body:**
    ```json
    {
        "text": "# المقدمة\\n- البند الأول",
        "format": "pdf"
    }
    ```
    """
    if not request.text.strip():
        raise HTTPException(status_code=400, detail="لا يوجد نص للتصدير")
    return await _render(request.text, request.format, request.raw)


@app.post("/convert", responses=ERROR_RESPONSES)
async def convert_pdf(
    file: UploadFile = File(...),
    format: OutputFormat = Form(OutputFormat.PDF),
    raw: bool = Form(False),
):
    """Extract a PDF through the webhook and render the result in one call."""
    content = await _read_pdf(file)
    text = await _extract(content, file.filename or "document.pdf")
    if not text.strip():
        raise HTTPException(status_code=400, detail="لا يوجد نص للتصدير")
    return await _render(text, format, raw)


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Custom exception handler for HTTP exceptions."""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": "http_error",
            "message": exc.detail,
            "status_code": exc.status_code
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Custom exception handler for general exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "error": "internal_error",
            "message": "حدث خطأ داخلي. الرجاء المحاولة مرة أخرى.",
            "detail": str(exc) if app.debug else None
        }
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.api_debug,
        log_level="info"
    )
