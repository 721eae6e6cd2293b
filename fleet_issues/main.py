import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from fleet_issues.api.v1.api import api_router
from fleet_issues.core.config import settings
from fleet_issues.core.database import init_models
from fleet_issues.core.exceptions import register_exception_handlers

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("🚀 Starting Vessel Issue Reporting API...")
    await init_models()
    yield


app = FastAPI(title=settings.PROJECT_NAME, lifespan=lifespan)

# --- CORS (frontend sends the session cookie) ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Register Routes
app.include_router(api_router, prefix=settings.API_V1_STR)


@app.get("/")
async def root():
    return {"message": "Vessel Issue Reporting API is Online 🟢"}
