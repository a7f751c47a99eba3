import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from app.api.deps import (
    current_user,
    get_completion,
    get_settings_dep,
    get_store,
    optional_identity,
)
from app.config import Settings
from core.completion import CompletionClient
from core.errors import CompletionError
from core.identity import VerifiedIdentity
from core.normalization.normalizer import normalizer
from db.trek_store import TrekStore
from models.dtos import FinalizeRequest, StartRequest
from models.records import User, utcnow


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/start")
async def start_conversation(
    body: StartRequest,
    user: User = Depends(current_user),
    completion: CompletionClient = Depends(get_completion),
):
    try:
        reply = await completion.start_conversation(body.location)
    except CompletionError as e:
        logger.error(f"Error in /api/start: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate intro response.")
    return {"reply": reply, "userId": str(user.id)}


async def _load_user(store: TrekStore, identity: VerifiedIdentity) -> User | None:
    if not store.available:
        return None
    try:
        return await store.upsert_user(identity)
    except SQLAlchemyError as e:
        logger.error(f"Could not load user {identity.uid}: {e}")
        return None


async def _claim_generation(store: TrekStore, user: User, settings: Settings) -> str | None:
    """
    Take one generation from a free user's monthly allowance.

    Returns the claimed period, or None when nothing was claimed (premium
    users, or a store failure, which lets the request through).
    """
    if user.is_premium:
        return None

    period = utcnow().strftime("%Y-%m")
    try:
        claimed = await store.claim_generation(user.id, period, settings.free_monthly_generations)
    except SQLAlchemyError as e:
        logger.error(f"Could not claim a generation for {user.id}: {e}")
        return None

    if not claimed:
        raise HTTPException(
            status_code=403,
            detail=f"Subscription required - free plan allows {settings.free_monthly_generations} itineraries per month",
        )
    return period


@router.post("/finalize")
async def finalize_itinerary(
    body: FinalizeRequest,
    identity: VerifiedIdentity | None = Depends(optional_identity),
    store: TrekStore = Depends(get_store),
    completion: CompletionClient = Depends(get_completion),
    settings: Settings = Depends(get_settings_dep),
):
    """
    Generate, normalize and (for signed-in users) save an itinerary.

    A failed save never fails the request: the reply is returned with an
    error and message describing what happened to the save.
    """
    user = await _load_user(store, identity) if identity else None
    period = await _claim_generation(store, user, settings) if user else None

    try:
        raw = await completion.generate_itinerary(body)
    except CompletionError as e:
        logger.error(f"Error in /api/finalize: {e}")
        if period:
            try:
                await store.release_generation(user.id, period)
            except SQLAlchemyError as release_error:
                logger.error(f"Could not release generation for {user.id}: {release_error}")
        raise HTTPException(status_code=500, detail="Failed to generate itinerary")

    reply = normalizer.normalize(raw)

    if identity is None:
        return {
            "reply": reply,
            "isAuthenticated": False,
            "message": "Itinerary generated but not saved (user not authenticated)",
        }

    if user is None:
        return {
            "reply": reply,
            "error": "Database unavailable",
            "message": "Generated itinerary but database is unavailable for saving",
        }

    try:
        itinerary = await store.create_itinerary(
            user_id=user.id,
            title=body.title or f"{body.location} Trek",
            location=body.location,
            content=reply,
            filters=body.filters.model_dump(exclude_none=True),
            comments=body.comments,
        )
    except SQLAlchemyError as e:
        logger.error(f"Error saving to database: {e}", exc_info=True)
        return {
            "reply": reply,
            "error": "Failed to save to database",
            "message": "Generated itinerary but failed to save to database",
        }

    return {
        "reply": reply,
        "itineraryId": str(itinerary.id),
        "message": "Itinerary saved to database",
    }
