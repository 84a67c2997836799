"""
CleanCity API Server
FastAPI backend for citizen occurrence reports, photo attachments and sharing.
"""
import logging
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from cleancity_api.auth import get_optional_identity
from cleancity_api.config import settings
from cleancity_api.database import init_db
from cleancity_api.errors import register_exception_handlers
from cleancity_api.routers import auth, occurrences, photos, realtime, shares
from cleancity_api.storage import get_file_store

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    get_file_store()
    logger.info("CleanCity API Server started successfully")
    yield


app = FastAPI(
    title="CleanCity API",
    description="Citizen reporting of geolocated environmental occurrences",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGIN.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Every HTTP route sees the caller's identity when a valid token is sent;
# routes that need one also depend on get_current_identity.
optional_auth = [Depends(get_optional_identity)]
app.include_router(auth.router, dependencies=optional_auth)
app.include_router(occurrences.router, dependencies=optional_auth)
app.include_router(shares.router, dependencies=optional_auth)
app.include_router(photos.router, dependencies=optional_auth)
app.include_router(realtime.router)


@app.get("/health")
async def health_check():
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}


def run():
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)


if __name__ == "__main__":
    run()
