"""
Main FastAPI application for the Haki legal-aid backend.
Handles CORS, request logging middleware, lifespan events, and router registration.
"""
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.database import close_db, init_db
from app.routers import ai, auth, cases, constitution, forum, health, legal_aid, legal_documents, templates
from app.services.storage import InvalidFieldValue
from app.utils.helpers import utcnow

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Startup / shutdown helpers
# ---------------------------------------------------------------------------

async def _check_database() -> bool:
    """Initialise DB tables and verify the connection.  Returns True on success."""
    try:
        await init_db()
        logger.info("✓ Database connection OK")
        return True
    except Exception as exc:
        logger.error("✗ Database connection failed: %s", exc)
        raise


def _check_llm() -> bool:
    """Report whether LLM features can work.  Never raises."""
    if settings.llm_configured:
        logger.info("✓ LLM endpoint: %s (model %s)", settings.LLM_BASE_URL, settings.LLM_MODEL)
        return True
    logger.warning(
        "⚠ LLM_API_KEY is not set — summaries and document drafting will return 502, "
        "question analysis will use the default answer"
    )
    return False


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown event handler."""
    logger.info("=" * 60)
    logger.info("  Starting Haki backend …")
    logger.info("=" * 60)

    # 1. Database (required; raises on failure)
    await _check_database()

    # 2. LLM (optional; logs a warning but continues)
    _check_llm()

    logger.info("=" * 60)
    logger.info("  Haki backend ready on http://%s:%d", settings.HOST, settings.PORT)
    logger.info("  Swagger UI : http://%s:%d/docs", settings.HOST, settings.PORT)
    logger.info("  Health     : http://%s:%d/api/health", settings.HOST, settings.PORT)
    logger.info("=" * 60)

    yield  # ← server is running

    logger.info("Shutting down Haki backend …")
    await close_db()
    logger.info("✓ Shutdown complete.")


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Haki API",
    description=(
        "**Haki** — legal information and legal-aid platform for Kenya.\n\n"
        "Browse legal documents, ask the community forum, manage lawyer case "
        "files, fill document templates and apply for legal aid.\n\n"
        "Key endpoints:\n"
        "- `GET  /api/legal-documents` — searchable legal library\n"
        "- `GET  /api/forum/questions` — community Q&A\n"
        "- `GET  /api/cases` — a lawyer's case files\n"
        "- `POST /api/generate-document` — fill a document template\n"
        "- `POST /api/legal-aid/applications` — apply for legal aid\n"
        "- `POST /api/ai/legal-summary` — plain-language summary\n"
    ),
    version="1.0.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Request / response logging middleware
# ---------------------------------------------------------------------------

@app.middleware("http")
async def log_requests(request: Request, call_next):
    """
    Log every request with method, path, status code, and elapsed time.
    Attaches an ``X-Process-Time`` header (milliseconds) to every response.
    """
    t0 = time.monotonic()
    response = await call_next(request)
    elapsed_ms = round((time.monotonic() - t0) * 1000, 2)

    # Skip noisy health-check polling from the frontend
    if request.url.path not in ("/api/health/", "/"):
        logger.info(
            "%s %s → %d  (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )

    response.headers["X-Process-Time"] = f"{elapsed_ms}ms"
    return response


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------

@app.exception_handler(InvalidFieldValue)
async def invalid_field_value_handler(request: Request, exc: InvalidFieldValue):
    """Enum labels and fields the database cannot hold → 422."""
    logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "detail": str(exc),
            "field": exc.field,
            "allowed": exc.allowed,
        },
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Return a structured JSON error for any unhandled exception."""
    logger.error(
        "Unhandled exception on %s %s: %s",
        request.method,
        request.url.path,
        exc,
        exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "detail": "Internal server error",
            "error": str(exc),
            "path": str(request.url.path),
            "timestamp": utcnow().isoformat(),
        },
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------

app.include_router(health.router,          prefix="/api/health",          tags=["Health"])
app.include_router(auth.router,            prefix="/api/auth",            tags=["Auth"])
app.include_router(legal_documents.router, prefix="/api/legal-documents", tags=["Legal Documents"])
app.include_router(forum.router,           prefix="/api/forum",           tags=["Forum"])
app.include_router(cases.router,           prefix="/api/cases",           tags=["Cases"])
app.include_router(templates.router,       prefix="/api",                 tags=["Templates"])
app.include_router(legal_aid.router,       prefix="/api/legal-aid",       tags=["Legal Aid"])
app.include_router(ai.router,              prefix="/api/ai",              tags=["AI"])
app.include_router(constitution.router,    prefix="/api/constitution",    tags=["Constitution"])


# ---------------------------------------------------------------------------
# Root
# ---------------------------------------------------------------------------

@app.get("/", tags=["Root"], include_in_schema=False)
async def root():
    """API root — returns basic service info."""
    return {
        "name": "Haki API",
        "version": "1.0.0",
        "description": "Legal Aid Platform Backend",
        "docs": "/docs",
        "health": "/api/health",
        "endpoints": {
            "legal_documents": "/api/legal-documents",
            "forum": "/api/forum/questions",
            "cases": "/api/cases",
            "templates": "/api/document-templates",
            "legal_aid": "/api/legal-aid/applications",
            "ai": "/api/ai",
            "constitution": "/api/constitution/search",
        },
    }


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=True,
        log_level="info",
    )
