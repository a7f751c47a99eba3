from dotenv import load_dotenv
load_dotenv()

from contextlib import asynccontextmanager
from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.deps import get_store
from app.api.routes import generation
from app.api.routes import itineraries
from app.api.routes import subscriptions
from app.api.routes import users
from app.config import get_settings, validate_settings
from core.billing import BillingService
from core.completion import CompletionClient
from core.identity import IdentityVerifier
from db.trek_store import TrekStore

import logging

settings = get_settings()
logging.basicConfig(level=settings.log_level.upper(), force=True)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    validate_settings(settings)

    store = TrekStore(settings.database_url)
    try:
        await store.db_init()
    except Exception as e:
        # serve generation without persistence rather than refuse to start
        logger.error(f"Database connection error: {e}", exc_info=True)
        logger.warning("Starting server without a database connection")

    app.state.settings = settings
    app.state.store = store
    app.state.identity = IdentityVerifier.from_settings(settings)
    app.state.completion = CompletionClient(settings)
    app.state.billing = BillingService(settings, store)
    logger.info("Trek itinerary API ready!")

    yield

    logger.info("Shutting down...")
    await app.state.completion.close()
    await store.close()

app = FastAPI(
    title="Trek Itinerary API",
    lifespan=lifespan,
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

app.include_router(generation.router, prefix="/api", tags=["Generation"])
app.include_router(itineraries.router, prefix="/api/itineraries", tags=["Itineraries"])
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(subscriptions.router, prefix="/api/subscriptions", tags=["Subscriptions"])


@app.get("/")
def root():
    return {"message": "Trek itinerary API is running"}


@app.get("/api/health")
async def health(store: TrekStore = Depends(get_store)):
    if await store.ping():
        return {"status": "ok", "dbState": "connected"}
    return JSONResponse(
        status_code=503,
        content={"status": "error", "message": "Database connection issue", "dbState": "disconnected"},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
