import logging
from dataclasses import dataclass

import firebase_admin
from firebase_admin import auth, credentials
from firebase_admin.exceptions import FirebaseError

from app.config import Settings
from core.errors import ConfigurationError, IdentityError

logger = logging.getLogger(__name__)

APP_NAME = "trek-itinerary"


@dataclass(frozen=True)
class VerifiedIdentity:
    uid: str
    email: str | None = None
    display_name: str | None = None


def bearer_token(authorization: str | None) -> str:
    if not authorization or not authorization.startswith("Bearer "):
        raise IdentityError("Unauthorized - No token provided")
    token = authorization[len("Bearer "):].strip()
    if not token:
        raise IdentityError("Unauthorized - No token provided")
    return token


def build_credential(settings: Settings) -> credentials.Certificate:
    if settings.firebase_credentials_file:
        return credentials.Certificate(settings.firebase_credentials_file)

    if not (settings.firebase_project_id and settings.firebase_client_email and settings.firebase_private_key):
        raise ConfigurationError("Firebase credentials are not configured")

    # env vars usually carry the PEM with escaped newlines
    private_key = settings.firebase_private_key.strip().strip("\"'").replace("\\n", "\n")
    return credentials.Certificate({
        "type": "service_account",
        "project_id": settings.firebase_project_id,
        "client_email": settings.firebase_client_email,
        "private_key": private_key,
        "token_uri": "https://oauth2.googleapis.com/token",
    })


class IdentityVerifier:

    def __init__(self, app: firebase_admin.App) -> None:
        self.app = app

    @classmethod
    def from_settings(cls, settings: Settings) -> "IdentityVerifier":
        try:
            app = firebase_admin.get_app(APP_NAME)
        except ValueError:
            options = {"projectId": settings.firebase_project_id} if settings.firebase_project_id else None
            app = firebase_admin.initialize_app(build_credential(settings), options, name=APP_NAME)
            logger.info(f"Firebase Admin initialized for project {app.project_id}")
        return cls(app)

    def verify(self, token: str) -> VerifiedIdentity:
        try:
            decoded = auth.verify_id_token(token, app=self.app)
        except (ValueError, FirebaseError) as e:
            logger.info(f"Token verification failed: {e}")
            raise IdentityError("Unauthorized - Token verification failed") from e

        display_name = decoded.get("name")
        if display_name is None:
            try:
                display_name = auth.get_user(decoded["uid"], app=self.app).display_name
            except FirebaseError as e:
                logger.warning(f"Could not load Firebase profile for {decoded['uid']}: {e}")

        return VerifiedIdentity(
            uid=decoded["uid"],
            email=decoded.get("email"),
            display_name=display_name,
        )

    def update_display_name(self, uid: str, display_name: str) -> None:
        auth.update_user(uid, display_name=display_name, app=self.app)

    def delete_account(self, uid: str) -> None:
        auth.delete_user(uid, app=self.app)
