import logging

from fastapi import APIRouter, Depends, HTTPException
from firebase_admin.exceptions import FirebaseError
from starlette.concurrency import run_in_threadpool

from app.api.deps import current_user, get_identity, get_store
from core.identity import IdentityVerifier
from db.trek_store import TrekStore
from models.dtos import ProfileUpdate, UserOut
from models.records import User


logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/profile", response_model=UserOut)
async def get_profile(user: User = Depends(current_user)):
    return user


@router.put("/profile", response_model=UserOut)
async def update_profile(
    body: ProfileUpdate,
    user: User = Depends(current_user),
    store: TrekStore = Depends(get_store),
    identity: IdentityVerifier = Depends(get_identity),
):
    fields = {}
    if body.first_name:
        fields["first_name"] = body.first_name
    if body.last_name:
        fields["last_name"] = body.last_name
    if body.preferences:
        fields["preferences"] = body.preferences.model_dump()

    try:
        updated = await store.update_user(user.id, **fields)
    except Exception as e:
        logger.error(f"Error updating user profile: {e}")
        raise HTTPException(status_code=500, detail="Server error")

    if updated is None:
        raise HTTPException(status_code=404, detail="User not found")

    if (body.first_name or body.last_name) and updated.display_name:
        try:
            await run_in_threadpool(identity.update_display_name, updated.firebase_uid, updated.display_name)
        except FirebaseError as e:
            # local profile is already saved
            logger.error(f"Could not sync display name to Firebase: {e}")

    return updated


@router.get("/subscription")
async def get_subscription(user: User = Depends(current_user)):
    return {
        "status": user.subscription_status,
        "startDate": user.subscription_start,
        "endDate": user.subscription_end,
    }


@router.delete("/account")
async def delete_account(
    user: User = Depends(current_user),
    store: TrekStore = Depends(get_store),
    identity: IdentityVerifier = Depends(get_identity),
):
    try:
        deleted = await store.delete_user(user.id)
    except Exception as e:
        logger.error(f"Error deleting account: {e}")
        raise HTTPException(status_code=500, detail="Server error")

    if deleted is None:
        raise HTTPException(status_code=404, detail="User not found")

    try:
        await run_in_threadpool(identity.delete_account, deleted.firebase_uid)
    except FirebaseError as e:
        logger.error(f"Error deleting Firebase account {deleted.firebase_uid}: {e}")
        raise HTTPException(status_code=500, detail="Server error")

    return {"message": "Account deleted successfully"}
