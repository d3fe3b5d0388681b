#gestepi_api/main.py
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gestepi import __version__
from gestepi.config import get_settings
from gestepi.database import get_db, init_db
from gestepi.errors import GestEPIError
from gestepi.logging_config import setup_logging
from gestepi_api.alerts import router as alerts_router
from gestepi_api.equipments import router as equipment_router
from gestepi_api.inspections import router as inspection_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.LOG_LEVEL)
    logger.info("Starting %s (%s)", settings.APP_NAME, settings.ENVIRONMENT)

    conn = get_db(settings.DATABASE_PATH)
    try:
        init_db(conn)
    finally:
        conn.close()
    logger.info("Using database %s", settings.DATABASE_PATH)

    yield

    logger.info("Shutting down %s", settings.APP_NAME)


app = FastAPI(title="GestEPI API", version=__version__, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(GestEPIError)
async def gestepi_error_handler(request: Request, exc: GestEPIError):
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.error_code, exc.message)
    else:
        logger.info("%s %s rejected: %s", request.method, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "error_code": exc.error_code},
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# Register routers
app.include_router(equipment_router, prefix="/equipments", tags=["Equipments"])
app.include_router(inspection_router, prefix="/inspections", tags=["Inspections"])
app.include_router(alerts_router, prefix="/alerts", tags=["Alerts"])


@app.get("/", tags=["Root"])
def root():
    return {
        "message": "GestEPI API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health",
    }


@app.get("/health", tags=["Monitoring"])
def health_check():
    settings = get_settings()
    try:
        conn = get_db(settings.DATABASE_PATH)
        try:
            conn.execute("SELECT 1").fetchone()
        finally:
            conn.close()
        database = True
    except Exception:
        logger.exception("Database health check failed")
        database = False

    return {
        "status": "healthy" if database else "degraded",
        "database": database,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
