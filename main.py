"""
AI Schoolmate API

Main FastAPI application for the AI Schoolmate backend.
Provides the natural-language agent plus direct record access.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import settings
from database import init_db
from agent import InvalidArgumentError, ServiceUnavailableError
from tools import NotFoundError, ValidationError
from api import (
    agent_router,
    students_router,
    grades_router,
    events_router,
    recommendations_router,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


# --------------- Lifespan ---------------

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler – initialise DB on startup."""
    logger.info("Initializing database...")
    init_db()
    if not settings.openai_api_key:
        logger.warning("OPENAI_API_KEY is not set. AI features will be unavailable.")
    if not settings.auth_secret_key:
        logger.warning("AUTH_SECRET_KEY is not set. All authenticated requests will be rejected.")
    yield


# --------------- FastAPI app ---------------

app = FastAPI(
    title="AI Schoolmate API",
    description="""
API for student records with an AI agent interface.

## Features

### Agent Interface
- Natural-language questions about grades, weak topics and upcoming olympiads
- The reasoning engine picks capabilities; the backend runs them safely
- Partial failures are reported in the answer instead of failing the request

### Identity Scoping
- When a request names a student, every capability runs for exactly that student
- Student ids proposed by the model are never trusted over the caller's

### Records
- Students, grades and events CRUD
- Performance analytics and class comparison
- Personalized study advice
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
)


# Exception handlers
@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": exc.message, "type": type(exc).__name__})


@app.exception_handler(ValidationError)
async def validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=400, content={"detail": exc.message, "type": type(exc).__name__})


@app.exception_handler(InvalidArgumentError)
async def invalid_argument_handler(request: Request, exc: InvalidArgumentError):
    return JSONResponse(status_code=400, content={"detail": exc.message, "type": type(exc).__name__})


@app.exception_handler(ServiceUnavailableError)
async def service_unavailable_handler(request: Request, exc: ServiceUnavailableError):
    logger.error("Reasoning engine unavailable: %s", exc.message)
    return JSONResponse(status_code=503, content={"detail": exc.message, "type": type(exc).__name__})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": str(exc), "type": type(exc).__name__}
    )


# Include routers
app.include_router(agent_router)
app.include_router(students_router)
app.include_router(grades_router)
app.include_router(events_router)
app.include_router(recommendations_router)


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint - API health check."""
    return {
        "status": "online",
        "service": "AI Schoolmate API",
        "version": "1.0.0"
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
