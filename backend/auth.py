import logging

from fastapi import Depends, Header, Request

from backend.config import Settings
from backend.database import Database
from backend.errors import NotFound, Unauthenticated
from backend.security import InvalidToken, decode_access_token
from backend.user_store import get_public_user

logger = logging.getLogger(__name__)


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def extract_bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    token = authorization.strip()
    if token[:7].lower() == "bearer ":
        token = token[7:].strip()
    return token or None


def get_current_user(
    authorization: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    db: Database = Depends(get_database),
) -> dict:
    token = extract_bearer_token(authorization)
    if token is None:
        raise Unauthenticated("No token provided")
    try:
        user_id = decode_access_token(token, settings.jwt_secret, settings.jwt_algorithm)
    except InvalidToken as exc:
        logger.debug("Rejected bearer token: %s", exc)
        raise Unauthenticated("Invalid token") from exc

    user = get_public_user(db, user_id)
    if not user:
        raise NotFound("User not found")
    return user
