# expense_tracker/main.py
import uvicorn
import os
import time
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from starlette.exceptions import HTTPException as StarletteHTTPException

from expense_tracker.core.config import settings
from expense_tracker.core.database import engine, Base
from expense_tracker.core.errors import AppError
from expense_tracker.api.v1.api import api_router
# Model modules register their tables on Base.metadata
from expense_tracker.models import user, household, category, expense  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create all tables on startup (local runs; deployments use Alembic migrations)
async def create_db_and_tables():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    openapi_tags=[
        {"name": "User Management", "description": "Registration and profile of the authenticated user"},
        {"name": "Households", "description": "Households, invitations and membership"},
        {"name": "categories", "description": "Household expense categories"},
        {"name": "subcategories", "description": "Subcategories nested under a category"},
        {"name": "expenses", "description": "Household expenses, including AI-assisted uploads"},
    ],
)

# CORS Configuration
origins = list(dict.fromkeys([settings.FRONTEND_URL, *settings.CORS_ORIGINS]))

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------------------------------------------
# REQUEST LOGGING
# ------------------------------------------------------------
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - start) * 1000
    logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response

# ------------------------------------------------------------
# ERROR HANDLERS
# Every failure is rendered as {"status": "error", "message": ...}
# ------------------------------------------------------------
def error_response(status_code: int, message: str, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
        headers=headers,
    )

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path} rejected ({exc.status_code}): {exc.message}")
    return error_response(exc.status_code, exc.message)

@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return error_response(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))

@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Missing or malformed request data is a 400 naming the offending fields"""
    fields = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in ("body", "query", "path", "header")]
        fields.append(".".join(location) or "request")
    message = "Invalid request: " + ", ".join(dict.fromkeys(fields))
    logger.warning(f"{request.method} {request.url.path} validation failed: {exc.errors()}")
    return error_response(400, message)

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Anything unexpected is logged with its traceback and hidden from the client"""
    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return error_response(500, "Internal server error")

# ------------------------------------------------------------
# ROOT ENDPOINT
# ------------------------------------------------------------
@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information"""
    return {
        "message": f"{settings.APP_NAME} is running!",
        "version": settings.VERSION,
    }

# ------------------------------------------------------------
# HEALTH CHECK ENDPOINT
# ------------------------------------------------------------
@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint, including database connectivity"""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
    except Exception as e:
        logger.error(f"Health check failed: {str(e)}")
        raise HTTPException(status_code=503, detail="Service unhealthy: database unreachable")
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
    }

# ------------------------------------------------------------
# BUSINESS LOGIC ROUTES
# ------------------------------------------------------------
app.include_router(api_router, prefix="/api")

# ------------------------------------------------------------
# STARTUP EVENT
# ------------------------------------------------------------
@app.on_event("startup")
async def on_startup():
    """Startup event to create database tables"""
    try:
        await create_db_and_tables()
        logger.info("✅ Database tables ready")
        logger.info(f"✅ Frontend URL: {settings.FRONTEND_URL}")
        if settings.OPENAI_API_KEY:
            logger.info("✅ AI API key configured for expense uploads")
        else:
            logger.warning("⚠️ AI API key not configured - expense uploads will fail")
    except Exception as e:
        logger.error(f"❌ Startup error: {str(e)}")
        raise

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("expense_tracker.main:app", host="0.0.0.0", port=port, reload=False)
