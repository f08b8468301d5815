"""
Firebase authentication for FastAPI.

Verifies Firebase ID tokens and resolves them to an account, signing the
account up (with its profile) the first time an identity is seen.
"""

import os
from pathlib import Path
import firebase_admin
from firebase_admin import auth, credentials, exceptions as firebase_exceptions
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import get_settings
from app.context import AuthenticatedUser
from app.database import get_session
from app.exceptions import IdentityProviderError
from app.logging_config import get_logger
from app.services.accounts import get_or_create_account

logger = get_logger(__name__)

security = HTTPBearer()


def _credential_paths() -> list[Path]:
    # __file__ = backend/app/auth.py → .parent.parent = backend/
    backend_dir = Path(__file__).parent.parent
    settings = get_settings()

    paths: list[Path] = []
    if settings.firebase_credentials_path:
        paths.append(Path(settings.firebase_credentials_path))
    paths.extend([
        backend_dir / "serviceAccountKey.json",
        backend_dir / "firebase-service-account.json",
    ])
    # Firebase's default naming pattern: *-firebase-adminsdk-*.json
    paths.extend(backend_dir.glob("*-firebase-adminsdk-*.json"))

    env_path = os.environ.get("GOOGLE_APPLICATION_CREDENTIALS", "")
    if env_path:
        paths.append(Path(env_path))
    return paths


def init_firebase() -> firebase_admin.App:
    """Initialise the Firebase Admin SDK once, on first use."""
    try:
        return firebase_admin.get_app()
    except ValueError:
        pass  # Need to initialize

    options = {}
    project_id = get_settings().firebase_project_id
    if project_id:
        options["projectId"] = project_id

    for key_path in _credential_paths():
        if key_path.exists() and key_path.is_file():
            cred = credentials.Certificate(str(key_path))
            logger.info(f"Firebase Admin SDK initialized with: {key_path.name}")
            return firebase_admin.initialize_app(cred, options or None)

    logger.warning("No Firebase service account key found! Token verification may fail.")
    logger.warning("Download from: Firebase Console > Project Settings > Service Accounts")
    return firebase_admin.initialize_app(options=options or None)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def verify_token(token: str) -> dict:
    """
    Verify a Firebase ID token.

    Raises:
        HTTPException: 401 if the token is expired, revoked or malformed.
        IdentityProviderError: If Firebase could not be consulted.
    """
    init_firebase()
    try:
        return auth.verify_id_token(token)
    except auth.ExpiredIdTokenError:
        logger.warning("Expired Firebase token")
        raise _unauthorized("Token has expired")
    except auth.RevokedIdTokenError:
        logger.warning("Revoked Firebase token")
        raise _unauthorized("Token has been revoked")
    except (auth.InvalidIdTokenError, ValueError):
        logger.warning("Invalid Firebase token")
        raise _unauthorized("Invalid authentication token")
    except auth.CertificateFetchError as e:
        logger.error(f"Could not fetch Firebase certificates: {e}")
        raise IdentityProviderError("Could not fetch identity provider certificates")
    except firebase_exceptions.FirebaseError as e:
        logger.error(f"Identity provider error: {e}")
        raise IdentityProviderError()


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    session: AsyncSession = Depends(get_session),
) -> AuthenticatedUser:
    """
    Verify the bearer token and return the calling account.

    Unknown identities are signed up on the spot; their profile is created
    in the same transaction.
    """
    decoded_token = verify_token(credentials.credentials)

    uid = decoded_token["uid"]
    email = decoded_token.get("email")
    name = decoded_token.get("name")

    account = await get_or_create_account(session, provider_uid=uid, email=email, name=name)

    logger.debug(f"Authenticated user: {uid} ({email}) account={account.id}")

    return AuthenticatedUser(id=account.id, uid=uid, email=email, name=name)
