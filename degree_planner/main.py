"""FastAPI application for degree roadmaps and the Flight Deck."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from degree_planner.api.v1.flight_deck import router as flight_deck_router
from degree_planner.api.v1.roadmap import router as roadmap_router
from degree_planner.core.config import get_settings
from degree_planner.core.exceptions import (
    CreditBoundsViolationError,
    FlightDeckValidationError,
    NotFoundError,
    PolicyUnsatisfiableError,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting up %s...", settings.PROJECT_NAME)
    yield
    logger.info("Shutting down %s...", settings.PROJECT_NAME)


app = FastAPI(title=settings.PROJECT_NAME, version="1.0.0", lifespan=lifespan)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Do NOT call Base.metadata.create_all(bind=engine) with async engine.
# Use migrations (Alembic) instead.


@app.exception_handler(NotFoundError)
async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": exc.message})


@app.exception_handler(PolicyUnsatisfiableError)
async def policy_handler(request: Request, exc: PolicyUnsatisfiableError):
    return JSONResponse(
        status_code=422,
        content={
            "error": "Failed to generate plan",
            "detail": exc.message,
            "upper_level_shortfall": exc.upper_level_shortfall,
            "residency_shortfall": exc.residency_shortfall,
        },
    )


@app.exception_handler(CreditBoundsViolationError)
async def credit_bounds_handler(request: Request, exc: CreditBoundsViolationError):
    logger.error("Credit bounds violated: %s", exc.message)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Failed to generate plan", "detail": exc.message},
    )


@app.exception_handler(FlightDeckValidationError)
async def flight_deck_validation_handler(request: Request, exc: FlightDeckValidationError):
    return JSONResponse(
        status_code=422,
        content={"detail": exc.message, "errors": exc.errors},
    )


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


app.include_router(roadmap_router, prefix="/api/v1")
app.include_router(flight_deck_router, prefix="/api/v1")


@app.get("/health")
async def health_check():
    return {"status": "ok"}
