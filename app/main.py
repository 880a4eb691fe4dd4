import os
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api import financial
from app.utils.config import config
from app.utils.logger import logger, setup_logging

# -----------------------------------------------------------------------------
# Set up logging
# -----------------------------------------------------------------------------
setup_logging(config.get("logging", {}))

# -----------------------------------------------------------------------------
# Initialize FastAPI
# -----------------------------------------------------------------------------
app_cfg = config.get("app", {})
app = FastAPI(
    title=app_cfg.get("name", "Zorgscan"),
    version=app_cfg.get("version", "0.1.0")
)

# -----------------------------------------------------------------------------
# CORS
# -----------------------------------------------------------------------------
allowed_origins = os.getenv("ALLOWED_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------------------------------------------------------
# Routes
# -----------------------------------------------------------------------------
app.include_router(
    financial.router,
    prefix="/api",
    tags=["Financial Analysis"],
)

# -----------------------------------------------------------------------------
# Root
# -----------------------------------------------------------------------------
@app.get("/")
async def root():
    return {"message": f"Welcome to {app_cfg.get('name', 'the API')}!"}

# -----------------------------------------------------------------------------
# Startup log
# -----------------------------------------------------------------------------
logger.info(f"✅ {app_cfg.get('name', 'API')} is starting up!")
