from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tripplanner.core.config import settings
from tripplanner.core.exceptions import TripPlannerError, trip_planner_error_handler
from tripplanner.core.init_db import init_db
from tripplanner.core.logger import logger
from tripplanner.core.maps_client import close_maps_client
from tripplanner.core.redis_lifecyle import close_redis, init_redis_client
from tripplanner.routes import api_router

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.PROJECT_VERSION,
    description=settings.PROJECT_DESCRIPTION,
    openapi_url=f"/openapi.json"
)

# Set all CORS enabled origins; the middleware also answers OPTIONS preflights
app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=settings.CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_exception_handler(TripPlannerError, trip_planner_error_handler)

# Include all API routes
app.include_router(api_router)


@app.get("/")
async def root():
    return {"message": "Welcome to TripPlanner API"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.on_event("startup")
async def startup_event():
    if settings.CREATE_TABLES_ON_STARTUP:
        await init_db()
    await init_redis_client()
    logger.info("TripPlanner API started")


@app.on_event("shutdown")
async def shutdown_event():
    await close_redis()
    await close_maps_client()
