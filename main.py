"""
FastAPI main application for branch revenue and weekly bonus management.
Provides daily revenue intake, weekly bonus calculation and the bonus
approval workflow.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app_config.settings import ALLOWED_ORIGINS, ENVIRONMENT, LOG_LEVEL
from services.exceptions import BonusError, BonusNotFoundError, BonusStateError, BonusValidationError

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app
app = FastAPI(
    title="Branch Revenue & Bonus API",
    description="Daily revenue intake and weekly employee bonus workflow",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
    allow_headers=["*"],
)


# Service errors -> HTTP status
ERROR_STATUS_CODES = {
    BonusValidationError: 400,
    BonusNotFoundError: 404,
    BonusStateError: 409,
}


@app.exception_handler(BonusError)
async def bonus_error_handler(request: Request, exc: BonusError):
    status_code = ERROR_STATUS_CODES.get(type(exc), 400)
    logger.info("%s %s -> %d: %s", request.method, request.url.path, status_code, exc.message)
    return JSONResponse(status_code=status_code, content={"detail": exc.message})


# Health check endpoint
@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "Branch Revenue & Bonus API",
        "version": "1.0.0",
        "environment": ENVIRONMENT,
    }


@app.get("/health")
async def health_check():
    """Detailed health check with database status"""
    from database import engine
    try:
        # Test database connection
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        db_status = "connected"
    except Exception as e:
        logger.error("Health check database error: %s", e)
        db_status = f"error: {str(e)}"

    return {
        "status": "healthy" if db_status == "connected" else "unhealthy",
        "database": db_status,
        "environment": ENVIRONMENT,
    }


from routers import bonuses, employee_requests, revenue

# Register routers
app.include_router(revenue.router, prefix="/api", tags=["revenue"])
app.include_router(bonuses.router, prefix="/api", tags=["bonuses"])
app.include_router(employee_requests.router, prefix="/api", tags=["employee-requests"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Auto-reload on code changes (development only)
    )
