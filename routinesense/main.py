from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager
import logging

from routinesense.core.config import settings, validate_production_settings
from routinesense.database import connect_to_mongo, close_mongo_connection
from routinesense.core.cache import get_redis, close_redis
from routinesense.api.v1 import routines

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    logger.info("Starting RoutineSense backend...")
    validate_production_settings()
    connect_to_mongo()
    get_redis()
    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Closing database connections...")
    close_mongo_connection()
    close_redis()
    logger.info("Application shutdown complete")

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="RoutineSense - routine sync, streaks and insights API",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(routines.router, prefix="/api/v1/routines", tags=["routines"])

@app.get("/health")
async def health_check():
    return {"status": "healthy", "version": settings.APP_VERSION}
