import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import current_user, get_store
from db.trek_store import TrekStore
from models.dtos import ItineraryCreate, ItineraryOut, ItineraryUpdate
from models.records import User


logger = logging.getLogger(__name__)
router = APIRouter()

# Every route is scoped to the caller: other users' itineraries are reported
# as not found.


@router.get("/", response_model=list[ItineraryOut])
async def list_itineraries(user: User = Depends(current_user), store: TrekStore = Depends(get_store)):
    try:
        return await store.list_itineraries(user.id)
    except Exception as e:
        logger.error(f"Error fetching itineraries: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.post("/", response_model=ItineraryOut, status_code=201)
async def create_itinerary(
    body: ItineraryCreate,
    user: User = Depends(current_user),
    store: TrekStore = Depends(get_store),
):
    try:
        return await store.create_itinerary(
            user_id=user.id,
            title=body.title,
            location=body.location,
            content=body.content,
            filters=body.filters.model_dump(exclude_none=True),
            comments=body.comments,
        )
    except Exception as e:
        logger.error(f"Error saving itinerary: {e}")
        raise HTTPException(status_code=500, detail="Server error")


@router.get("/{itinerary_id}", response_model=ItineraryOut)
async def get_itinerary(
    itinerary_id: uuid.UUID,
    user: User = Depends(current_user),
    store: TrekStore = Depends(get_store),
):
    try:
        itinerary = await store.get_itinerary(itinerary_id, user.id)
    except Exception as e:
        logger.error(f"Error fetching itinerary: {e}")
        raise HTTPException(status_code=500, detail="Server error")

    if itinerary is None:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return itinerary


@router.put("/{itinerary_id}", response_model=ItineraryOut)
async def update_itinerary(
    itinerary_id: uuid.UUID,
    body: ItineraryUpdate,
    user: User = Depends(current_user),
    store: TrekStore = Depends(get_store),
):
    updates = body.model_dump(exclude_unset=True)
    if body.filters is not None:
        updates["filters"] = body.filters.model_dump(exclude_none=True)

    try:
        itinerary = await store.update_itinerary(itinerary_id, user.id, **updates)
    except Exception as e:
        logger.error(f"Error updating itinerary: {e}")
        raise HTTPException(status_code=500, detail="Server error")

    if itinerary is None:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return itinerary


@router.delete("/{itinerary_id}")
async def delete_itinerary(
    itinerary_id: uuid.UUID,
    user: User = Depends(current_user),
    store: TrekStore = Depends(get_store),
):
    try:
        deleted = await store.delete_itinerary(itinerary_id, user.id)
    except Exception as e:
        logger.error(f"Error deleting itinerary: {e}")
        raise HTTPException(status_code=500, detail="Server error")

    if not deleted:
        raise HTTPException(status_code=404, detail="Itinerary not found")
    return {"message": "Itinerary deleted successfully"}
