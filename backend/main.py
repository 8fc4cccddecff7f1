"""
FastAPI application entry point for the Agent Marketplace.
"""
import logging
import multiprocessing
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from app.config import settings
from app.logging_config import setup_logging
from app.routers import auth, agents, agent_teams, subscriptions, workflow_requests
from app.services.exceptions import SubscriptionError
from app.services.scheduler import start_scheduler, stop_scheduler

# Get logger for request logging
logger = logging.getLogger(__name__)

# Configure logging
setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    logger.info("Starting up Agent Marketplace API...")

    # Only run the expiry sweep on the master worker when started with several workers
    current_process_name = multiprocessing.current_process().name
    is_master = current_process_name in ("MainProcess", "SpawnProcess-1")

    if is_master:
        start_scheduler()
    else:
        logger.info(f"Skipping scheduler on {current_process_name}")

    yield
    # Shutdown
    logger.info("Shutting down Agent Marketplace API...")
    if is_master:
        stop_scheduler()


app = FastAPI(
    title="Agent Marketplace API",
    description="Backend API for the AI agent marketplace",
    version="0.1.0",
    lifespan=lifespan
)

# Configure rate limiter
limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(SubscriptionError)
async def subscription_error_handler(request: Request, exc: SubscriptionError):
    """Render checkout workflow errors as ``{"message": ...}`` with their status code."""
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc!r}")
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


# Parse CORS origins from config
# In development mode, allow all origins for easier local development
if settings.ENVIRONMENT == "development" or settings.DEBUG:
    cors_origins = ["*"]
else:
    cors_origins = (
        ["*"] if settings.CORS_ORIGINS == "*"
        else [origin.strip() for origin in settings.CORS_ORIGINS.split(",")]
    )

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests with method, path and response status."""
    logger.info(f"Request: {request.method} {request.url.path}")

    response = await call_next(request)

    logger.info(f"Response: {request.method} {request.url.path} | Status: {response.status_code}")
    return response

# Security headers middleware
@app.middleware("http")
async def add_security_headers(request: Request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    return response

# Register routers
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(agents.router, tags=["agents"])
app.include_router(agent_teams.router, tags=["agent-teams"])
app.include_router(subscriptions.router, tags=["subscriptions"])
app.include_router(workflow_requests.router, tags=["workflow-requests"])


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
