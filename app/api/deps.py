import logging

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from core.billing import BillingService
from core.completion import CompletionClient
from core.errors import IdentityError
from core.identity import IdentityVerifier, VerifiedIdentity, bearer_token
from db.trek_store import TrekStore
from models.records import User

logger = logging.getLogger(__name__)


# Services are built once in the lifespan and parked on app.state.

def get_settings_dep(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> TrekStore:
    return request.app.state.store


def get_completion(request: Request) -> CompletionClient:
    return request.app.state.completion


def get_identity(request: Request) -> IdentityVerifier:
    return request.app.state.identity


def get_billing(request: Request) -> BillingService:
    return request.app.state.billing


async def verified_identity(
    authorization: str | None = Header(default=None),
    identity: IdentityVerifier = Depends(get_identity),
) -> VerifiedIdentity:
    try:
        token = bearer_token(authorization)
        return await run_in_threadpool(identity.verify, token)
    except IdentityError as e:
        raise HTTPException(status_code=401, detail=str(e))


async def optional_identity(
    authorization: str | None = Header(default=None),
    identity: IdentityVerifier = Depends(get_identity),
) -> VerifiedIdentity | None:
    """Like verified_identity, but a missing or bad token means anonymous."""
    if not authorization:
        return None
    try:
        return await run_in_threadpool(identity.verify, bearer_token(authorization))
    except IdentityError:
        logger.info("Invalid token on optional-auth route, continuing as anonymous")
        return None


async def current_user(
    verified: VerifiedIdentity = Depends(verified_identity),
    store: TrekStore = Depends(get_store),
) -> User:
    try:
        return await store.upsert_user(verified)
    except SQLAlchemyError as e:
        logger.error(f"Could not load user {verified.uid}: {e}", exc_info=True)
        raise HTTPException(status_code=503, detail="Database unavailable")
