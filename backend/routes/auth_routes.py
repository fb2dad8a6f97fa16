import logging
from datetime import timedelta

from fastapi import APIRouter, Depends

from backend.auth import get_database, get_settings
from backend.config import Settings
from backend.database import Database
from backend.errors import Conflict, Unauthenticated, ValidationFailed, translate_store_errors
from backend.schemas import AuthResponse, LoginPayload, RegisterPayload, UserResponse
from backend.security import create_access_token, hash_password, verify_password
from backend.user_store import EmailTaken, create_user, get_user_by_email

logger = logging.getLogger(__name__)

router = APIRouter()


def issue_token(user: dict, settings: Settings) -> AuthResponse:
    token = create_access_token(
        user["id"],
        settings.jwt_secret,
        settings.jwt_algorithm,
        expires_in=timedelta(minutes=settings.token_expire_minutes),
    )
    return AuthResponse(
        token=token,
        user=UserResponse(
            id=user["id"],
            email=user["email"],
            name=user.get("name"),
            created_at=user.get("created_at"),
        ),
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
def register(
    payload: RegisterPayload,
    settings: Settings = Depends(get_settings),
    db: Database = Depends(get_database),
) -> AuthResponse:
    email = payload.email.strip().lower()
    if not email or not payload.password:
        raise ValidationFailed("Email and password required.")
    name = payload.name.strip() if payload.name else None

    try:
        with translate_store_errors("Registration failed"):
            user = create_user(db, email, hash_password(payload.password), name=name)
    except EmailTaken as exc:
        raise Conflict("Email already exists.") from exc

    logger.info("Registered user %s", user["id"])
    return issue_token(user, settings)


@router.post("/login", response_model=AuthResponse)
def login(
    payload: LoginPayload,
    settings: Settings = Depends(get_settings),
    db: Database = Depends(get_database),
) -> AuthResponse:
    email = payload.email.strip().lower()
    with translate_store_errors("Login failed"):
        user = get_user_by_email(db, email)

    if not user or not verify_password(payload.password, user["hashed_password"]):
        raise Unauthenticated("Invalid credentials")
    return issue_token(user, settings)
